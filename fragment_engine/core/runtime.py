"""
Runtime - 세션 관리자

모든 세션이 하나의 NetworkThread를 공유하고, 세션마다
독립된 SessionThread(소비자)를 가집니다.
"""
import logging
from typing import Callable, Dict, Optional

from ..common.config import RuntimeConfig
from ..common.log import configure_logging
from ..networking import NetworkThread
from ..profiling import Tracer, set_thread_name
from ..session import Session

logger = logging.getLogger(__name__)


class Runtime:
    def __init__(self, config: Optional[RuntimeConfig] = None,
                 fetch: Optional[Callable] = None, setup_logging: bool = False):
        self.config = config or RuntimeConfig()
        if setup_logging:
            configure_logging(self.config.log_level)
        if self.config.trace_file:
            Tracer.get().configure(self.config.trace_file)
            set_thread_name("RuntimeThread")

        # 세션 -> 네트워크 (모든 세션이 공유)
        self.network = NetworkThread(
            max_workers=self.config.network_workers,
            fetch=fetch,
            timeout=self.config.fetch_timeout,
        )
        self.network.start()

        self.sessions: Dict[str, Session] = {}

    def new_session(self, document_html: str, base_url: Optional[str] = None,
                    start: bool = True) -> Session:
        """새 세션 생성 (start=False면 run_until_idle()로 직접 처리)"""
        session = Session(document_html, self.network, config=self.config, base_url=base_url)
        self.sessions[session.session_id] = session
        if start:
            session.start()
        logger.info("Created %s (threaded=%s)", session.session_id, start)
        return session

    def close_session(self, session_id: str):
        session = self.sessions.pop(session_id, None)
        if session is None:
            logger.warning("Unknown session %s", session_id)
            return
        session.close()

    def shutdown(self):
        """모든 세션 종료 후 네트워크 스레드 정지"""
        for session_id in list(self.sessions):
            self.close_session(session_id)
        self.network.stop()
        logger.info("Runtime shut down")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()
