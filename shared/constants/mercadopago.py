from __future__ import annotations

from shared.contracts import PaymentStatus

PROVIDER_NAME = "mercadopago"
SIGNATURE_HEADER = "x-signature"
REQUEST_ID_HEADER = "x-request-id"
PAYMENT_RESOURCE_PATH = "/v1/payments/{payment_id}"

_PROVIDER_PAYMENT_STATUSES = {
    "approved": PaymentStatus.APPROVED,
    "pending": PaymentStatus.PENDING,
    "in_process": PaymentStatus.PENDING,
    "authorized": PaymentStatus.PENDING,
    "in_mediation": PaymentStatus.PENDING,
    "rejected": PaymentStatus.REJECTED,
    "cancelled": PaymentStatus.REJECTED,
    "refunded": PaymentStatus.REFUNDED,
    "charged_back": PaymentStatus.REFUNDED,
}


def map_provider_payment_status(raw_status: str | None) -> PaymentStatus:
    if not raw_status:
        return PaymentStatus.PENDING
    return _PROVIDER_PAYMENT_STATUSES.get(raw_status.strip().lower(), PaymentStatus.PENDING)


def payment_resource_path(payment_id: str) -> str:
    return PAYMENT_RESOURCE_PATH.format(payment_id=payment_id)
