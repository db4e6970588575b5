"""Structured logging and tracing helpers for the stylist service."""

from __future__ import annotations

import contextlib
import contextvars
import importlib
import importlib.util
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator

CORRELATION_ID = contextvars.ContextVar("correlation_id", default=None)
_RECORD_ATTRIBUTES = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}
_REDACT_KEYS = {
    "user_id",
    "email",
    "image_ref",
    "image_url",
    "product_url",
    "message",
    "user_message",
}
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")

_TRACING_MODULE: object | bool | None = None


class JsonFormatter(logging.Formatter):
    """One JSON object per record, carrying the correlation id and extras."""

    def format(self, record: logging.LogRecord) -> str:
        rendered = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "message": rendered,
            "event": getattr(record, "event", rendered),
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRIBUTES or key in payload:
                continue
            payload[key] = redact_for_log({key: value})[key]
        return json.dumps(payload, default=str)


def configure_logging(level: int | str | None = None) -> None:
    """Install a single JSON handler on the root logger."""

    desired_level = level or os.getenv("LOG_LEVEL", "INFO")
    logging.root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=desired_level, handlers=[handler])


def _redact_string(value: str) -> str:
    if _EMAIL_PATTERN.search(value):
        return _EMAIL_PATTERN.sub("[redacted-email]", value)
    if value.lower().startswith("http"):
        return "[redacted-url]"
    return value


def redact_for_log(payload: Any) -> Any:
    """Scrub e-mails, URLs and user-supplied text before it reaches the logs."""

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _redact_string(payload)
    if isinstance(payload, (list, tuple)):
        return [redact_for_log(item) for item in payload]
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in _REDACT_KEYS else redact_for_log(value)
            for key, value in payload.items()
        }
    return str(payload)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Return the active correlation id, assigning one when needed."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    new_id = uuid.uuid4().hex
    CORRELATION_ID.set(new_id)
    return new_id


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or uuid.uuid4().hex)
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


def _load_tracing_module() -> object | None:
    global _TRACING_MODULE
    if _TRACING_MODULE is None:
        try:
            module_spec = importlib.util.find_spec("google.generativeai.tracing")
        except (ModuleNotFoundError, AttributeError, ValueError):
            module_spec = None
        _TRACING_MODULE = importlib.import_module("google.generativeai.tracing") if module_spec else False
    return _TRACING_MODULE or None


@contextlib.contextmanager
def tracing_span(name: str, **attributes: Any) -> Iterator[object | None]:
    """Open a span when the SDK ships tracing support; otherwise a no-op."""

    tracer = _load_tracing_module()
    if tracer is None or not hasattr(tracer, "start_span"):
        yield None
        return
    span = tracer.start_span(name=name, attributes=attributes)  # type: ignore[attr-defined]
    try:
        yield span
    finally:
        if hasattr(span, "end"):
            span.end()


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Emit ``event`` with redacted structured fields and the correlation id."""

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    logger.log(
        level,
        event,
        exc_info=exc_info,
        extra={"event": event, "correlation_id": correlation_id, **redact_for_log(fields)},
    )


@contextlib.contextmanager
def operation_context(name: str, correlation_id: str | None = None, **attributes: Any) -> Iterator[str]:
    """Scope a correlation id and a tracing span around one operation."""

    with correlation_context(correlation_id or CORRELATION_ID.get()) as scoped_id:
        with tracing_span(name, correlation_id=scoped_id, **attributes):
            yield scoped_id


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "redact_for_log",
    "tracing_span",
]
