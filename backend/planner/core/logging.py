"""Logging configuration with text/JSON formatters and request-id context."""

from __future__ import annotations

import json
import logging
import sys
import time
from contextvars import ContextVar
from datetime import UTC, datetime

from planner.core.config import settings

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_ROOT_LOGGER_NAME = "planner"
_HANDLER_MARKER = "_planner_handler"

# Attributes present on every LogRecord; anything else came from `extra=`.
_RESERVED_RECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
        "request_id",
    },
)


def _record_extras(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
    }


class RequestIdFilter(logging.Filter):
    """Attach the active request id (if any) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends structured extras as key=value pairs."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        if use_utc:
            self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = _record_extras(record)
        request_id = getattr(record, "request_id", None)
        if request_id:
            extras["request_id"] = request_id
        if not extras:
            return base
        rendered = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return f"{base} {rendered}"


class JsonFormatter(logging.Formatter):
    """One JSON object per line, suitable for log shippers."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__()
        self._use_utc = use_utc

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        if not self._use_utc:
            created = created.astimezone()
        payload: dict[str, object] = {
            "ts": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            payload["request_id"] = request_id
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _build_formatter() -> logging.Formatter:
    if settings.log_format.strip().lower() == "json":
        return JsonFormatter(use_utc=settings.log_use_utc)
    return TextFormatter(use_utc=settings.log_use_utc)


def configure_logging() -> None:
    """Install the planner stream handler once; safe to call repeatedly."""
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(settings.log_level.upper())
    if any(getattr(handler, _HANDLER_MARKER, False) for handler in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    handler.addFilter(RequestIdFilter())
    setattr(handler, _HANDLER_MARKER, True)
    root.addHandler(handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the planner root logger."""
    if name == _ROOT_LOGGER_NAME or name.startswith(f"{_ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")
