"""
Logging setup for the lesson engine.

Records are correlated per request: RequestIdMiddleware puts the id in
``request_id_var`` and both formatters read it from there, so nothing has
to be attached to the record itself. Production emits one JSON object per
line; development prints ``key=value`` extras after the message.

Usage:
    from lessoncore.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Lesson scored", extra={"lesson_id": str(lesson_id)})
"""

import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Tuple

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Everything a bare record carries; whatever else shows up came from extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

# Loggers that are chatty at INFO and only matter when something breaks
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def _extras(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    for key, value in record.__dict__.items():
        if key not in _RECORD_ATTRS and value is not None:
            yield key, value


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extras flattened into the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            payload["request_id"] = request_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in _extras(record):
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            payload[key] = value

        return json.dumps(payload)


class ConsoleFormatter(logging.Formatter):
    """Single-line format for local runs: ``12:00:01 INFO  [name] req=... message k=v``."""

    def __init__(self) -> None:
        # asctime is only filled in when the format string mentions it
        super().__init__("%(asctime)s %(message)s", datefmt="%H:%M:%S")

    def formatMessage(self, record: logging.LogRecord) -> str:
        request_id = request_id_var.get() or "-"
        line = f"{record.asctime} {record.levelname:<5} [{record.name}] req={request_id} {record.message}"
        pairs = " ".join(f"{key}={value}" for key, value in _extras(record))
        return f"{line} {pairs}" if pairs else line


def build_logging_config(level: str, *, json_output: bool) -> Dict[str, Any]:
    """Build a ``dictConfig`` mapping for the given level and output style."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"()": JsonFormatter if json_output else ConsoleFormatter},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "default",
            },
        },
        "root": {"level": level, "handlers": ["stderr"]},
        "loggers": {name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
    }


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Install the process-wide logging configuration.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        environment: 'production' switches to JSON output
        debug: Forces DEBUG regardless of log_level
    """
    level = "DEBUG" if debug else log_level.upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    logging.config.dictConfig(build_logging_config(level, json_output=environment == "production"))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
