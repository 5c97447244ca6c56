import json
import logging

import pytest
import structlog

from eventdriver.config import EventBusConfig
from eventdriver.logging_config import configure_from_config, configure_logging, get_logger


@pytest.fixture
def restore_logging():
    yield
    structlog.reset_defaults()
    for handler in logging.getLogger().handlers:
        handler.close()
    logging.basicConfig(level=logging.WARNING, force=True)


def test_json_logs_to_file(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "bus.log"
    configure_logging(level="DEBUG", json_output=True, log_file=log_file)

    get_logger("eventdriver.tests.json").info("event_triggered", key="ping", listeners=2)
    logging.getLogger().handlers[0].flush()

    record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert record["event"] == "event_triggered"
    assert record["key"] == "ping"
    assert record["listeners"] == 2
    assert record["level"] == "info"
    assert record["logger"] == "eventdriver.tests.json"


def test_configure_from_config_debug_forces_debug_level(tmp_path, restore_logging):
    configure_from_config(EventBusConfig(debug=True, json_logs=True), log_dir=tmp_path)

    assert logging.getLogger().level == logging.DEBUG
    get_logger("eventdriver.tests.debug").debug("event_subscribed", key="k")
    logging.getLogger().handlers[0].flush()

    content = (tmp_path / "eventdriver.log").read_text(encoding="utf-8")
    assert "event_subscribed" in content


def test_reconfiguring_closes_previous_log_file(tmp_path, restore_logging):
    configure_logging(log_file=tmp_path / "first.log")
    first = logging.getLogger().handlers[0]
    assert isinstance(first, logging.FileHandler)

    configure_logging(log_file=tmp_path / "second.log")

    assert first.stream is None
    assert logging.getLogger().handlers[0].baseFilename == str(tmp_path / "second.log")
