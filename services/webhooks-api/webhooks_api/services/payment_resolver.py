from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from pydantic import ValidationError

from shared.constants import map_provider_payment_status
from shared.contracts import MercadoPagoPaymentDetails, PaymentStatus, WebhookEvent
from shared.logging import PAYMENT_ID, get_logger
from shared.utils import parse_order_reference

logger = get_logger(__name__)

_INLINE_FIELDS = ("status", "external_reference")


class PaymentLookup(Protocol):
    async def get_payment(self, payment_id: str) -> MercadoPagoPaymentDetails | None: ...


@dataclass(frozen=True)
class ResolvedPayment:
    payment_id: str
    order_id: int | None
    status: PaymentStatus
    provider_status: str
    amount: Decimal | None = None
    currency: str | None = None


class PaymentDetailsResolver:
    """Turns a `payment` notification into the payment status and the order it belongs to.

    Notifications that already carry `status` and `external_reference` in `data` are used
    as-is. Otherwise the payment resource is read from the provider; without a configured
    lookup, or when the provider does not know the payment, the event stays unresolved.
    Lookup errors propagate so the delivery fails and the provider retries it.
    """

    def __init__(self, lookup: PaymentLookup | None) -> None:
        self._lookup = lookup

    async def resolve(self, event: WebhookEvent) -> ResolvedPayment | None:
        details = self._inline_details(event)
        if details is None and self._lookup is not None:
            details = await self._lookup.get_payment(event.external_id)
        if details is None:
            logger.info(
                "payment_details_unresolved",
                extra={"extra_fields": {PAYMENT_ID: event.external_id}},
            )
            return None
        return ResolvedPayment(
            payment_id=event.external_id,
            order_id=parse_order_reference(details.external_reference),
            status=map_provider_payment_status(details.status),
            provider_status=details.status,
            amount=details.transaction_amount,
            currency=details.currency_id,
        )

    def _inline_details(self, event: WebhookEvent) -> MercadoPagoPaymentDetails | None:
        if not all(event.data.get(field) for field in _INLINE_FIELDS):
            return None
        try:
            return MercadoPagoPaymentDetails.model_validate(event.data)
        except ValidationError:
            logger.warning(
                "inline_payment_details_invalid",
                extra={"extra_fields": {PAYMENT_ID: event.external_id}},
            )
            return None
