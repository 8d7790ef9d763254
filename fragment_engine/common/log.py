"""로깅 설정 헬퍼"""
import logging

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"


def configure_logging(level="INFO", fmt: str = DEFAULT_FORMAT) -> None:
    """fragment_engine 로거에 스트림 핸들러를 한 번만 설치"""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("fragment_engine")
    logger.setLevel(level)
    if not any(getattr(h, "_fragment_engine", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler._fragment_engine = True
        logger.addHandler(handler)
