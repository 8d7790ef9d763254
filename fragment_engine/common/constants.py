"""런타임 기본값"""

# 에셋 로딩 재시도
MAX_RETRIES = 3
BACKOFF_BASE = 0.2  # 초
BACKOFF_MAX = 5.0  # 초

# 타임아웃 (초)
FETCH_TIMEOUT = 10.0
LOAD_TIMEOUT = 60.0  # 기본 재시도 예산(41.4초)보다 길게
SESSION_JOIN_TIMEOUT = 1.0

# Connecting 상태에서 보관할 수 있는 최대 envelope 수
GATE_CAPACITY = 256

# 스레드 풀 크기
NETWORK_WORKERS = 4
CHAIN_WORKERS = 2  # content 체인 + link 체인

LOG_LEVEL = "INFO"

# 탭 마크업 규약
ACTIVE_CLASS = "active"
SHOW_CLASS = "show"
TAB_PANE_CLASS = "tab-pane"
LINK_TARGET_ATTR = "data-target"

ENV_PREFIX = "FRAGMENT_ENGINE_"
