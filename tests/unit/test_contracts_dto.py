from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from shared.contracts import (
    MercadoPagoPaymentDetails,
    OrderORM,
    OrderResponse,
    OrderStatus,
    OrderStatusUpdateRequest,
    ProcessedWebhookEventORM,
    WebhookAckResponse,
)


def test_payment_details_normalize_identifiers_and_currency() -> None:
    details = MercadoPagoPaymentDetails.model_validate(
        {
            "id": 987654321,
            "status": "approved",
            "external_reference": 42,
            "transaction_amount": "10.50",
            "currency_id": "ars",
            "date_approved": "2026-01-01T00:00:00Z",
        }
    )

    assert details.id == "987654321"
    assert details.external_reference == "42"
    assert details.transaction_amount == Decimal("10.50")
    assert details.currency_id == "ARS"


def test_payment_details_reject_negative_amounts() -> None:
    with pytest.raises(ValidationError):
        MercadoPagoPaymentDetails(id="1", status="approved", transaction_amount=Decimal("-1"))


@pytest.mark.parametrize("currency", ["AR", "PESOS", ""])
def test_payment_details_require_three_character_currency(currency: str) -> None:
    with pytest.raises(ValidationError):
        MercadoPagoPaymentDetails(id="1", status="approved", currency_id=currency)


def test_ack_response_omits_duplicate_flag_unless_set() -> None:
    assert WebhookAckResponse().model_dump(exclude_none=True) == {
        "success": True,
        "processed": True,
    }
    assert WebhookAckResponse(duplicate=True).model_dump()["duplicate"] is True


def test_status_update_request_accepts_lowercase_values_only() -> None:
    assert OrderStatusUpdateRequest(status="ready").status == OrderStatus.READY
    with pytest.raises(ValidationError):
        OrderStatusUpdateRequest(status="READY")


def test_order_response_reads_orm_attributes() -> None:
    order = OrderORM(id=3, status=OrderStatus.PAID, total=Decimal("9.99"), currency="USD")

    response = OrderResponse.model_validate(order)

    assert response.id == 3
    assert response.status == OrderStatus.PAID
    assert response.payment_id is None


def test_order_statuses_are_stored_by_value() -> None:
    status_type = OrderORM.__table__.c.status.type

    assert status_type.enums == ["pending", "paid", "preparing", "ready", "delivered", "cancelled"]
    assert status_type.native_enum is False


def test_processed_event_log_is_unique_per_id_and_type() -> None:
    constraint_columns = {
        tuple(column.name for column in constraint.columns)
        for constraint in ProcessedWebhookEventORM.__table__.constraints
        if constraint.name == "uq_processed_webhook_event"
    }

    assert constraint_columns == {("external_id", "event_type")}
