"""Structured logging configuration.

JSON or text log lines carrying the request correlation ID and, once the
bearer token has been validated, the authenticated username.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

# Request-scoped context, set by middleware and the auth dependency
correlation_id_ctx: ContextVar[str | None] = ContextVar("correlation_id", default=None)
principal_ctx: ContextVar[str | None] = ContextVar("principal", default=None)

_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "slowapi")


class _ServiceFormatter(logging.Formatter):
    """Base formatter that knows which service it is logging for."""

    def __init__(self, service_name: str = "dashboard-api"):
        super().__init__()
        self.service_name = service_name

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)


class JsonFormatter(_ServiceFormatter):
    """Render each record as a single JSON object.

    Keys: timestamp, level, service, message, logger, plus correlation_id
    and principal when known, any ``extra_fields`` passed through
    StructuredLogger, the formatted exception, and the source location for
    ERROR and above.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self._now().isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "message": record.getMessage(),
            "logger": record.name,
        }

        correlation_id = correlation_id_ctx.get()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        principal = principal_ctx.get()
        if principal:
            log_data["principal"] = principal

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.ERROR:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class TextFormatter(_ServiceFormatter):
    """Human-readable formatter for local development.

    Format: timestamp - service - level - [correlation_id] - message key=value...
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self._now().strftime("%Y-%m-%d %H:%M:%S")
        correlation_id = correlation_id_ctx.get() or "-"

        line = (
            f"{timestamp} - {self.service_name} - {record.levelname} - "
            f"[{correlation_id}] - {record.getMessage()}"
        )

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            pairs = " ".join(f"{key}={value}" for key, value in extra_fields.items())
            line = f"{line} {pairs}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        return line


def setup_logging(
    log_format: str = "json",
    log_level: str = "INFO",
    service_name: str = "dashboard-api",
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        log_format: 'json' for structured logging, 'text' for human-readable
        log_level: Logging level name; unknown names fall back to INFO
        service_name: Service name to include in every line
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if log_format.lower() == "json":
        handler.setFormatter(JsonFormatter(service_name=service_name))
    else:
        handler.setFormatter(TextFormatter(service_name=service_name))
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class StructuredLogger:
    """Logger wrapper that turns keyword arguments into structured fields."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, msg: str, fields: dict[str, Any]) -> None:
        extra = {"extra_fields": fields} if fields else {}
        self._logger.log(level, msg, extra=extra)

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, fields)

    def exception(self, msg: str, **fields: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        extra = {"extra_fields": fields} if fields else {}
        self._logger.exception(msg, extra=extra)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger, typically ``get_logger(__name__)``."""
    return StructuredLogger(name)
