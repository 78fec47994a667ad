from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.contracts.enums import OrderStatus


class WebhookAckResponse(BaseModel):
    success: bool = True
    processed: bool = True
    duplicate: bool | None = None


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatus

    model_config = ConfigDict(extra="forbid")


class OrderResponse(BaseModel):
    id: int
    tenant_id: int | None = None
    status: OrderStatus
    payment_id: str | None = None
    total: Decimal
    currency: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MercadoPagoPaymentDetails(BaseModel):
    """Subset of the MercadoPago `/v1/payments/{id}` resource used for order updates."""

    id: str
    status: str
    external_reference: str | None = None
    transaction_amount: Decimal | None = Field(default=None, ge=0)
    currency_id: str | None = Field(default=None, min_length=3, max_length=3)

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", "external_reference", mode="before")
    @classmethod
    def stringify_identifiers(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("currency_id")
    @classmethod
    def normalize_currency(cls, value: str | None) -> str | None:
        return value.upper() if value else value
