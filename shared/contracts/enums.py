from __future__ import annotations

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REFUNDED = "refunded"


class WebhookEventType(str, Enum):
    PAYMENT = "payment"
    ORDER = "order"


class ClaimResult(str, Enum):
    CLAIMED = "claimed"
    ALREADY_PROCESSED = "already_processed"


class TransitionKind(str, Enum):
    APPLY = "apply"
    NOOP = "noop"
    INVALID = "invalid"


class ProcessingOutcome(str, Enum):
    APPLIED = "applied"
    NOOP = "noop"
    INVALID_TRANSITION = "invalid_transition"
    ORDER_NOT_FOUND = "order_not_found"
    UNRESOLVED = "unresolved"
    ACKNOWLEDGED = "acknowledged"


class SignatureScheme(str, Enum):
    HEX = "hex"
    MANIFEST = "manifest"


class ErrorCategory(str, Enum):
    SIGNATURE_INVALID = "signature_invalid"
    MALFORMED_JSON = "malformed_json"
    MISSING_ID = "missing_id"
    UNKNOWN_TYPE = "unknown_type"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    INVALID_TRANSITION = "invalid_transition"
    ORDER_NOT_FOUND = "order_not_found"
    CONCURRENT_UPDATE = "concurrent_update"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    PROVIDER_TIMEOUT = "provider_timeout"
    PROVIDER_5XX = "provider_5xx"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NOT_CONFIGURED = "not_configured"
    UNAUTHORIZED = "unauthorized"
