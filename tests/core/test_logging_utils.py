"""Tests for structured logging helpers."""

import json
import logging
import sys

import pytest
from loguru import logger as loguru_logger

from app.core.logging_utils import (
    EnhancedJsonFormatter,
    ExecutionIdFilter,
    InterceptHandler,
    setup_json_logging,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    loguru_logger.remove()
    loguru_logger.add(sys.stderr)


def test_filter_stamps_current_execution_id():
    record = _record()

    assert ExecutionIdFilter(lambda: "exec-1").filter(record) is True
    assert record.execution_id == "exec-1"


def test_filter_keeps_explicit_execution_id():
    record = _record(execution_id="explicit")

    ExecutionIdFilter(lambda: "ambient").filter(record)

    assert record.execution_id == "explicit"


def test_filter_tolerates_failing_provider():
    def provider():
        raise RuntimeError("no context")

    record = _record()

    assert ExecutionIdFilter(provider).filter(record) is True
    assert record.execution_id is None


def test_json_formatter_groups_fields():
    record = _record(
        "cron_job_slow_execution", execution_id="abc", duration_ms=12.5, job_id="job"
    )

    payload = json.loads(EnhancedJsonFormatter().format(record))

    assert payload["message"] == "cron_job_slow_execution"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "app.test"
    assert payload["execution_id"] == "abc"
    assert payload["performance"] == {"duration_ms": 12.5}
    assert payload["extra"] == {"job_id": "job"}


def test_json_formatter_without_location():
    payload = json.loads(EnhancedJsonFormatter(include_location=False).format(_record()))

    assert "line" not in payload
    assert payload["execution_id"] is None


def test_intercept_handler_forwards_extras_to_loguru(restore_root_logging):
    captured = []
    loguru_logger.remove()
    loguru_logger.add(lambda message: captured.append(message.record), level="DEBUG")

    InterceptHandler().emit(_record("scheduler_started", execution_id="abc", job_id="job"))

    assert len(captured) == 1
    assert captured[0]["message"] == "scheduler_started"
    assert captured[0]["level"].name == "INFO"
    assert captured[0]["extra"]["execution_id"] == "abc"
    assert captured[0]["extra"]["job_id"] == "job"
    assert captured[0]["extra"]["logger_name"] == "app.test"


def test_setup_stdlib_json_logging_stamps_records(restore_root_logging, capsys):
    setup_json_logging("DEBUG", execution_id_provider=lambda: "exec-9", use_loguru=False)

    logging.getLogger("app.test").info("request_done")

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert lines[-1]["message"] == "request_done"
    assert lines[-1]["execution_id"] == "exec-9"
    assert logging.getLogger("apscheduler").level == logging.WARNING
