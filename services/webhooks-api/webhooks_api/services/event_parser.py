from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from shared.contracts import UnparsedWebhookShell, WebhookEvent, WebhookEventType
from shared.utils import normalize_identifier, utc_now
from webhooks_api.core.errors import MalformedJsonError, MissingIdError, UnknownEventTypeError


def _decode(raw_body: bytes) -> dict[str, Any]:
    if not raw_body or not raw_body.strip():
        raise MalformedJsonError("empty body")
    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedJsonError() from exc
    if not isinstance(payload, dict):
        raise MalformedJsonError("body must be a JSON object")
    return payload


def _salvage_id(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    try:
        return normalize_identifier(data.get("id"), field_name="data.id")
    except ValueError:
        return None


def parse(raw_body: bytes, *, received_at: datetime | None = None) -> WebhookEvent:
    received_at = received_at or utc_now()
    payload = _decode(raw_body)
    raw_type = payload.get("type")
    data = payload.get("data")

    try:
        event_type = WebhookEventType(raw_type)
    except ValueError:
        shell = UnparsedWebhookShell(
            type=raw_type if isinstance(raw_type, str) else None,
            external_id=_salvage_id(data),
            received_at=received_at,
        )
        raise UnknownEventTypeError(shell) from None

    if not isinstance(data, dict):
        raise MissingIdError()
    try:
        external_id = normalize_identifier(data.get("id"), field_name="data.id")
    except ValueError as exc:
        raise MissingIdError(str(exc)) from exc

    timestamp = payload.get("timestamp")
    return WebhookEvent(
        type=event_type,
        external_id=external_id,
        raw_body=raw_body,
        received_at=received_at,
        data=data,
        timestamp=timestamp if isinstance(timestamp, str) else None,
    )
