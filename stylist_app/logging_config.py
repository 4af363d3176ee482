"""Structured JSON logging, correlation ids and PII scrubbing for the stylist."""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Mapping

SERVICE_NAME = "wardrobe-stylist"
CORRELATION_ID: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)

# Attributes every LogRecord carries; anything else on a record came from ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

# Values under these keys never reach the log stream.
SENSITIVE_KEYS = frozenset({"user_id", "uid", "email", "image_url", "imageUrl", "wardrobe", "message"})

_EMAIL = re.compile(r"[\w.\-]+@[\w.\-]+")
_URL_PREFIXES = ("http://", "https://")
_HANDLER_NAME = "stylist-json"


def _scrub_text(value: str) -> str:
    if _EMAIL.search(value):
        return _EMAIL.sub("[redacted-email]", value)
    if value.lower().startswith(_URL_PREFIXES):
        return "[redacted-url]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Return a log-safe copy of ``payload``.

    Sensitive keys are masked at any depth, e-mail addresses and URLs inside
    strings are replaced, and unknown objects are stringified.
    """

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _scrub_text(payload)
    if isinstance(payload, Mapping):
        return {
            key: "[redacted]" if key in SENSITIVE_KEYS else redact_for_log(value) for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set)):
        return [redact_for_log(value) for value in payload]
    return str(payload)


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object with correlation metadata."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": message,
            "event": getattr(record, "event", record.getMessage()),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS and key not in payload}
        payload.update(redact_for_log(extras))
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Install the JSON handler on the root logger once; later calls only adjust the level."""

    root = logging.getLogger()
    root.setLevel(level or os.getenv("LOG_LEVEL", "INFO"))
    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id`` if given, else reuse the current one or mint a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    existing = CORRELATION_ID.get()
    if existing:
        return existing
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block, restoring the previous one after."""

    token = CORRELATION_ID.set(correlation_id or CORRELATION_ID.get() or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with ``fields`` as structured, redacted extras."""

    exc_info = fields.pop("exc_info", None)
    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    extra = {key: value for key, value in redact_for_log(fields).items() if key not in _RECORD_ATTRS}
    extra.update(event=event, correlation_id=correlation_id)
    logger.log(level, event, exc_info=exc_info, extra=extra)


@contextlib.contextmanager
def operation_context(name: str, **attributes: Any) -> Iterator[str]:
    """Scope one application operation under a single correlation id."""

    with correlation_context(attributes.get("correlation_id")) as correlation_id:
        logging.getLogger(__name__).debug("operation %s started", name)
        yield correlation_id


__all__ = [
    "SENSITIVE_KEYS",
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "redact_for_log",
    "operation_context",
]
