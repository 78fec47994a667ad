from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from shared.contracts.enums import WebhookEventType


class WebhookEvent(BaseModel):
    type: WebhookEventType
    external_id: str
    raw_body: bytes
    received_at: datetime
    data: dict[str, Any]
    timestamp: str | None = None

    model_config = ConfigDict(frozen=True)


class UnparsedWebhookShell(BaseModel):
    """What could be salvaged from a payload whose type is not recognized."""

    type: str | None = None
    external_id: str | None = None
    received_at: datetime
