from __future__ import annotations

from dataclasses import dataclass

from shared.contracts import OrderStatus, UnparsedWebhookShell
from shared.contracts.enums import ErrorCategory


@dataclass
class AppError(Exception):
    category: ErrorCategory
    message: str
    http_status: int = 400


class SignatureInvalidError(AppError):
    def __init__(self, message: str = "invalid signature") -> None:
        super().__init__(ErrorCategory.SIGNATURE_INVALID, message, http_status=403)


class PayloadTooLargeError(AppError):
    def __init__(self, message: str = "payload too large") -> None:
        super().__init__(ErrorCategory.PAYLOAD_TOO_LARGE, message, http_status=413)


class ParseError(AppError):
    pass


class MalformedJsonError(ParseError):
    def __init__(self, message: str = "malformed JSON body") -> None:
        super().__init__(ErrorCategory.MALFORMED_JSON, message, http_status=400)


class MissingIdError(ParseError):
    def __init__(self, message: str = "missing data.id") -> None:
        super().__init__(ErrorCategory.MISSING_ID, message, http_status=400)


class UnknownEventTypeError(ParseError):
    def __init__(self, shell: UnparsedWebhookShell, message: str = "unknown event type") -> None:
        self.shell = shell
        super().__init__(ErrorCategory.UNKNOWN_TYPE, message, http_status=400)


class InvalidTransitionError(AppError):
    def __init__(self, current: OrderStatus, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            ErrorCategory.INVALID_TRANSITION,
            f"Cannot move order from {current.value} on {requested}",
            http_status=409,
        )


class OrderNotFoundError(AppError):
    def __init__(self, message: str = "Order not found") -> None:
        super().__init__(ErrorCategory.ORDER_NOT_FOUND, message, http_status=404)


class StorageUnavailableError(AppError):
    def __init__(self, message: str = "storage unavailable") -> None:
        super().__init__(ErrorCategory.STORAGE_UNAVAILABLE, message, http_status=500)


class WebhookNotConfiguredError(AppError):
    def __init__(self, message: str = "webhook secret not configured") -> None:
        super().__init__(ErrorCategory.NOT_CONFIGURED, message, http_status=500)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(ErrorCategory.UNAUTHORIZED, message, http_status=401)


class PaymentLookupError(AppError):
    def __init__(self, category: ErrorCategory, message: str) -> None:
        super().__init__(category, message, http_status=502)


class PaymentLookupTimeoutError(PaymentLookupError):
    def __init__(self, message: str = "payment lookup timed out") -> None:
        super().__init__(ErrorCategory.PROVIDER_TIMEOUT, message)


class PaymentLookup5xxError(PaymentLookupError):
    def __init__(self, message: str = "payment provider error") -> None:
        super().__init__(ErrorCategory.PROVIDER_5XX, message)


class PaymentLookupUnavailableError(PaymentLookupError):
    def __init__(self, message: str = "payment provider unavailable") -> None:
        super().__init__(ErrorCategory.PROVIDER_UNAVAILABLE, message)


class ConcurrentUpdateError(AppError):
    def __init__(self, message: str = "Order was updated concurrently, retry later") -> None:
        super().__init__(ErrorCategory.CONCURRENT_UPDATE, message, http_status=409)
