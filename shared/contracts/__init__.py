from shared.contracts.dto import (
    MercadoPagoPaymentDetails,
    OrderResponse,
    OrderStatusUpdateRequest,
    WebhookAckResponse,
)
from shared.contracts.enums import (
    ClaimResult,
    ErrorCategory,
    OrderStatus,
    PaymentStatus,
    ProcessingOutcome,
    SignatureScheme,
    TransitionKind,
    WebhookEventType,
)
from shared.contracts.events import UnparsedWebhookShell, WebhookEvent
from shared.contracts.persistence import (
    Base,
    OrderORM,
    PaymentORM,
    ProcessedWebhookEventORM,
)

__all__ = [
    "Base",
    "ClaimResult",
    "ErrorCategory",
    "MercadoPagoPaymentDetails",
    "OrderORM",
    "OrderResponse",
    "OrderStatus",
    "OrderStatusUpdateRequest",
    "PaymentORM",
    "PaymentStatus",
    "ProcessedWebhookEventORM",
    "ProcessingOutcome",
    "SignatureScheme",
    "TransitionKind",
    "UnparsedWebhookShell",
    "WebhookAckResponse",
    "WebhookEvent",
    "WebhookEventType",
]
