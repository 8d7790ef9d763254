"""
RuntimeConfig - 런타임 설정

기본값은 constants 모듈에서 가져오고, 환경 변수(FRAGMENT_ENGINE_*)나
.env 파일로 덮어쓸 수 있습니다.
"""
import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv

from . import constants

logger = logging.getLogger(__name__)


@dataclass
class RuntimeConfig:
    """세션/로더/게이트가 공유하는 설정 값"""

    max_retries: int = constants.MAX_RETRIES
    backoff_base: float = constants.BACKOFF_BASE
    backoff_max: float = constants.BACKOFF_MAX
    fetch_timeout: float = constants.FETCH_TIMEOUT
    load_timeout: float = constants.LOAD_TIMEOUT
    gate_capacity: int = constants.GATE_CAPACITY
    network_workers: int = constants.NETWORK_WORKERS
    chain_workers: int = constants.CHAIN_WORKERS
    log_level: str = constants.LOG_LEVEL
    trace_file: Optional[str] = None

    def backoff(self, attempt: int) -> float:
        """attempt번째 재시도 전 대기 시간 (지수 백오프)"""
        return min(self.backoff_base * (2 ** attempt), self.backoff_max)

    def retry_budget(self) -> float:
        """URL 하나의 재시도를 모두 소진하는 데 걸리는 최대 시간"""
        backoffs = sum(self.backoff(attempt) for attempt in range(self.max_retries))
        return (self.max_retries + 1) * self.fetch_timeout + backoffs

    @classmethod
    def from_env(cls, environ=None, dotenv_path=None) -> "RuntimeConfig":
        """환경 변수에서 설정 로드 (.env 파일 포함)"""
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ

        config = cls()
        for f in fields(cls):
            key = constants.ENV_PREFIX + f.name.upper()
            raw = environ.get(key)
            if raw is None or raw == "":
                continue

            if f.name == "trace_file" or f.name == "log_level":
                setattr(config, f.name, raw)
                continue

            caster = int if isinstance(getattr(config, f.name), int) else float
            try:
                setattr(config, f.name, caster(raw))
            except ValueError:
                logger.warning("Ignoring invalid value for %s: %r", key, raw)
        return config
