from __future__ import annotations

import datetime as dt
import json
import logging
import sys
from collections.abc import Callable
from typing import Any

from loguru import logger as loguru_logger

UTC = dt.UTC

# Standard LogRecord attributes that are never treated as structured extras
_STANDARD_FIELDS = {
    "args",
    "msg",
    "name",
    "levelno",
    "levelname",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
    "message",
}

_NOISY_LOGGERS = (
    "apscheduler",
    "apscheduler.scheduler",
    "apscheduler.executors.default",
    "uvicorn.access",
)


class ExecutionIdFilter(logging.Filter):
    """Stamp every record with the execution ID of the task that emitted it.

    Records that already carry an ``execution_id`` extra keep their own value.
    """

    def __init__(self, provider: Callable[[], str | None]) -> None:
        super().__init__()
        self._provider = provider

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "execution_id", None) is None:
            try:
                record.execution_id = self._provider()
            except Exception:
                record.execution_id = None
        return True


class EnhancedJsonFormatter(logging.Formatter):
    """One JSON object per record for the plain stdlib logging path.

    ``execution_id`` is always a top-level key (``null`` outside any context);
    timing extras are grouped under ``performance`` and the rest under ``extra``.
    """

    _PERFORMANCE_FIELDS = frozenset({"duration_ms", "threshold_ms", "latency_ms"})

    def __init__(self, include_location: bool = True, include_process_info: bool = True):
        super().__init__()
        self.include_location = include_location
        self.include_process_info = include_process_info

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": dt.datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "execution_id": getattr(record, "execution_id", None),
        }
        if self.include_location:
            payload["location"] = f"{record.module}:{record.funcName}:{record.lineno}"
            payload["line"] = record.lineno
        if self.include_process_info:
            payload["pid"] = record.process
            payload["thread"] = record.threadName
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_FIELDS and key not in payload
        }
        performance = {k: extras.pop(k) for k in list(extras) if k in self._PERFORMANCE_FIELDS}
        if performance:
            payload["performance"] = performance
        if extras:
            payload["extra"] = extras

        return json.dumps(payload, ensure_ascii=False, default=str, separators=(",", ":"))


class InterceptHandler(logging.Handler):
    """Bridge stdlib log records into loguru, keeping structured extras."""

    def emit(self, record: logging.LogRecord) -> None:
        level_to_use: int | str
        try:
            level_to_use = loguru_logger.level(record.levelname).name
        except ValueError:
            level_to_use = record.levelno

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if not key.startswith("_") and key not in _STANDARD_FIELDS
        }

        loguru_logger.bind(logger_name=record.name, **extra).opt(
            depth=6, exception=record.exc_info
        ).log(level_to_use, record.getMessage())


def setup_json_logging(
    level: str = "INFO",
    *,
    json_format: bool = True,
    execution_id_provider: Callable[[], str | None] | None = None,
    include_location: bool = True,
    include_process_info: bool = True,
    use_loguru: bool = True,
) -> None:
    """Configure structured logging for the service.

    Args:
        level: Log level name (case-insensitive)
        json_format: Emit JSON lines; otherwise a human-readable text format
        execution_id_provider: Callable returning the current execution ID, used
            to stamp every record
        include_location: Include module/function/line in stdlib JSON output
        include_process_info: Include process/thread info in stdlib JSON output
        use_loguru: Route stdlib records through loguru sinks
    """
    lvl = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(lvl)

    if use_loguru:
        loguru_logger.remove()
        if json_format:
            loguru_logger.add(
                sys.stdout,
                level=level.upper(),
                serialize=True,
                enqueue=True,
                backtrace=True,
                diagnose=False,
            )
        else:
            loguru_logger.add(
                sys.stdout,
                level=level.upper(),
                format=(
                    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                    "{extra[execution_id]} | <cyan>{extra[logger_name]}</cyan> - {message}"
                ),
                enqueue=True,
                backtrace=True,
                diagnose=False,
            )
        loguru_logger.configure(extra={"execution_id": None, "logger_name": "root"})
        handler: logging.Handler = InterceptHandler()
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            EnhancedJsonFormatter(
                include_location=include_location, include_process_info=include_process_info
            )
        )

    if execution_id_provider is not None:
        handler.addFilter(ExecutionIdFilter(execution_id_provider))
    root.addHandler(handler)

    for noisy_logger in _NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(max(lvl, logging.WARNING))

    logging.getLogger(__name__).info(
        "logging_configured",
        extra={
            "setup_config": {
                "level": level,
                "json_format": json_format,
                "use_loguru": use_loguru,
            }
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance by name.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance for the given name
    """
    return logging.getLogger(name)


__all__ = [
    "EnhancedJsonFormatter",
    "ExecutionIdFilter",
    "InterceptHandler",
    "get_logger",
    "setup_json_logging",
]
