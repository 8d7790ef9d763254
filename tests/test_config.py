import logging
import os

import pytest

from fragment_engine.common import RuntimeConfig, configure_logging
from fragment_engine.common import constants


def test_defaults():
    config = RuntimeConfig()

    assert config.max_retries == constants.MAX_RETRIES
    assert config.gate_capacity == constants.GATE_CAPACITY
    assert config.trace_file is None


def test_from_env_casts_by_field_type():
    config = RuntimeConfig.from_env({
        "FRAGMENT_ENGINE_MAX_RETRIES": "5",
        "FRAGMENT_ENGINE_BACKOFF_BASE": "0.5",
        "FRAGMENT_ENGINE_LOG_LEVEL": "DEBUG",
        "FRAGMENT_ENGINE_TRACE_FILE": "trace.json",
        "UNRELATED": "x",
    })

    assert config.max_retries == 5
    assert config.backoff_base == 0.5
    assert config.log_level == "DEBUG"
    assert config.trace_file == "trace.json"


def test_from_env_ignores_invalid_values(caplog):
    with caplog.at_level(logging.WARNING):
        config = RuntimeConfig.from_env({"FRAGMENT_ENGINE_GATE_CAPACITY": "lots"})

    assert config.gate_capacity == constants.GATE_CAPACITY
    assert "FRAGMENT_ENGINE_GATE_CAPACITY" in caplog.text


def test_from_dotenv_file(tmp_path, monkeypatch):
    monkeypatch.delenv("FRAGMENT_ENGINE_CHAIN_WORKERS", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("FRAGMENT_ENGINE_CHAIN_WORKERS=7\n")

    try:
        config = RuntimeConfig.from_env(dotenv_path=env_file)
    finally:
        # load_dotenv가 os.environ에 쓴 값 정리
        os.environ.pop("FRAGMENT_ENGINE_CHAIN_WORKERS", None)

    assert config.chain_workers == 7


def test_configure_logging_installs_one_handler():
    logger = logging.getLogger("fragment_engine")
    before = list(logger.handlers)
    try:
        configure_logging("debug")
        configure_logging("debug")
        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        assert logger.level == logging.DEBUG
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_retry_budget_covers_every_attempt():
    config = RuntimeConfig(max_retries=3, fetch_timeout=10.0, backoff_base=0.2, backoff_max=5.0)

    assert config.retry_budget() == pytest.approx(4 * 10.0 + 0.2 + 0.4 + 0.8)
    # 기본값으로도 로드 대기가 재시도보다 먼저 끝나지 않음
    assert RuntimeConfig().load_timeout >= RuntimeConfig().retry_budget()
