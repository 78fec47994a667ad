from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

REDACTED = "[REDACTED]"
_TRUNCATED = "[TRUNCATED]"
_MAX_DEPTH = 6

_correlation_ctx: ContextVar[dict[str, str] | None] = ContextVar("correlation_ctx", default=None)

# Free-form text can carry HMAC digests and card-like numbers.
_SECRET_PATTERNS = (
    re.compile(r"\b[0-9a-fA-F]{64}\b"),
    re.compile(r"\b\d{12,19}\b"),
)
_SENSITIVE_KEYS = frozenset(
    {
        "x-signature",
        "signature",
        "authorization",
        "access_token",
        "mercadopago_access_token",
        "webhook_secret",
        "mercadopago_webhook_secret",
        "api_auth_token",
        "card_number",
        "payer_email",
    }
)


def redact_text(value: str) -> str:
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(REDACTED, value)
    return value


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Header snapshot that is safe to log: names lowercased, credentials masked."""
    snapshot: dict[str, str] = {}
    for name, value in headers.items():
        key = name.lower()
        snapshot[key] = REDACTED if key in _SENSITIVE_KEYS else value
    return snapshot


def scrub(value: Any, depth: int = 0) -> Any:
    if depth >= _MAX_DEPTH:
        return _TRUNCATED
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if str(key).lower() in _SENSITIVE_KEYS else scrub(item, depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [scrub(item, depth + 1) for item in value]
    if isinstance(value, str):
        return redact_text(value)
    if isinstance(value, bytes | bytearray):
        # Signed webhook bodies are never echoed, only their size.
        return f"<{len(value)} bytes>"
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class JsonFormatter(logging.Formatter):
    def __init__(self, service_name: str | None = None) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self._service_name:
            entry["service"] = self._service_name
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(get_correlation_context())
        entry.update(getattr(record, "extra_fields", None) or {})
        return json.dumps(scrub(entry), default=str)


def configure_logging(level: str = "INFO", *, service_name: str | None = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(service_name))
    root.addHandler(handler)
    root.setLevel(level)


def set_correlation_context(values: Mapping[str, str]) -> None:
    _correlation_ctx.set(dict(values))


def update_correlation_context(values: Mapping[str, str]) -> None:
    _correlation_ctx.set({**get_correlation_context(), **values})


def get_correlation_context() -> dict[str, str]:
    return dict(_correlation_ctx.get() or {})


def clear_correlation_context() -> None:
    _correlation_ctx.set({})


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
