"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from planwise.config import BaseConfig
from planwise.logging_config import JSONFormatter, get_logger, setup_logging


def _record(**kwargs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=kwargs.pop("level", logging.INFO),
        pathname="test.py",
        lineno=42,
        msg=kwargs.pop("msg", "Test message"),
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )
    record.module = "test_module"
    record.funcName = "test_function"
    for key, value in kwargs.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception_and_extra():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(
            _record(level=logging.ERROR, msg="Error occurred", exc_info=exc_info, strategy="hybrid")
        )
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None
    assert log_data["extra"] == {"strategy": "hybrid"}


def test_setup_logging(tmp_path):
    config = BaseConfig()
    config.DATA_DIR = tmp_path

    logger = setup_logging(config)

    assert logger.name == "planwise"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    log_file = tmp_path / "logs" / "planwise.log"
    assert log_file.exists()

    get_logger("services.debts").warning("Payoff projection stalled")

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    entries = [json.loads(line) for line in lines]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["logger"] == "planwise.services.debts"
    assert entries[-1]["level"] == "WARNING"


def test_get_logger():
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")

    assert logger1.name == "planwise.module1"
    assert logger2.name == "planwise.module2"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(tmp_path, dev_mode):
    config = BaseConfig()
    config.DATA_DIR = tmp_path
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    expected = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected
