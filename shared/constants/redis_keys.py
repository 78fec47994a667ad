from __future__ import annotations

from shared.contracts import WebhookEventType

SEEN_EVENT_KEY_PREFIX = "webhook:seen"


def seen_event_key(provider: str, event_type: WebhookEventType, external_id: str) -> str:
    return f"{SEEN_EVENT_KEY_PREFIX}:{provider}:{event_type.value}:{external_id}"
