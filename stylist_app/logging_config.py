"""Structured JSON logging for the outfit stylist.

Every record carries a correlation id and, inside a turn, the conversation id,
both read from context variables so agents and backends do not have to thread
them through their signatures. Shopper identifiers, credentials, product links
and raw model text are masked before they reach a handler.
"""

from __future__ import annotations

import contextlib
import contextvars
import functools
import importlib
import importlib.util
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator, Optional

CORRELATION_ID = contextvars.ContextVar("correlation_id", default=None)
CONVERSATION_ID = contextvars.ContextVar("conversation_id", default=None)

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

REDACTED_KEYS = frozenset(
    {
        "user_id",
        "email",
        "api_key",
        "google_api_key",
        "image_url",
        "product_url",
        "price",
        "retailer",
        "prompt",
        "raw_text",
    }
)
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "event": getattr(record, "event", message),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
            "conversation_id": getattr(record, "conversation_id", None) or CONVERSATION_ID.get(),
        }
        extras = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES}
        for key, value in extras.items():
            payload.setdefault(key, redact_for_log(value))
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Install the JSON handler on the root logger, replacing any others."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"), handlers=[handler], force=True)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def _redact_string(value: str) -> str:
    if _EMAIL_PATTERN.search(value):
        return _EMAIL_PATTERN.sub("[redacted-email]", value)
    if value.lower().startswith("http"):
        return "[redacted-url]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Recursively mask credentials, product links and shopper identifiers."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _redact_string(payload)
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in REDACTED_KEYS else redact_for_log(value) for key, value in payload.items()
        }
    if isinstance(payload, (list, tuple, set, frozenset)):
        return [redact_for_log(item) for item in payload]
    return str(payload)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Bind ``correlation_id`` if given, otherwise reuse or mint one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    minted = uuid.uuid4().hex
    CORRELATION_ID.set(minted)
    return minted


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or ensure_correlation_id())
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


@functools.lru_cache(maxsize=1)
def _tracer() -> Optional[object]:
    try:
        found = importlib.util.find_spec("google.generativeai.tracing")
    except (ModuleNotFoundError, ValueError):
        return None
    return importlib.import_module("google.generativeai.tracing") if found else None


@contextlib.contextmanager
def tracing_span(name: str, **attributes: Any) -> Iterator[object | None]:
    """Open a span when the installed Gemini SDK exposes tracing, else no-op."""

    tracer = _tracer()
    if tracer is not None and hasattr(tracer, "Span"):
        with tracer.Span(name=name, attributes=attributes) as span:  # type: ignore[attr-defined]
            yield span
        return
    yield None


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with redacted structured fields and the active correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, conversation_id: str | None = None, **attributes: Any) -> Iterator[str]:
    """Scope a correlation id, the conversation id and a tracing span to one operation."""

    conversation_token = CONVERSATION_ID.set(conversation_id or CONVERSATION_ID.get())
    try:
        with correlation_context(ensure_correlation_id(attributes.get("correlation_id"))) as scoped_id:
            with tracing_span(name, conversation_id=conversation_id, **attributes):
                yield scoped_id
    finally:
        CONVERSATION_ID.reset(conversation_token)


__all__ = [
    "CONVERSATION_ID",
    "CORRELATION_ID",
    "JsonFormatter",
    "REDACTED_KEYS",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
    "tracing_span",
]
