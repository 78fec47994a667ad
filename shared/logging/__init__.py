from shared.logging.fields import (
    ERROR_CATEGORY,
    EVENT_ID,
    EVENT_TYPE,
    ORDER_ID,
    OUTCOME,
    PAYMENT_ID,
    PREVIOUS_STATUS,
    REQUEST_ID,
    STATUS,
    TRACE_ID,
)
from shared.logging.logger import (
    clear_correlation_context,
    configure_logging,
    get_correlation_context,
    get_logger,
    redact_headers,
    set_correlation_context,
    update_correlation_context,
)
from shared.logging.middleware import CorrelationMiddleware

__all__ = [
    "CorrelationMiddleware",
    "ERROR_CATEGORY",
    "EVENT_ID",
    "EVENT_TYPE",
    "ORDER_ID",
    "OUTCOME",
    "PAYMENT_ID",
    "PREVIOUS_STATUS",
    "REQUEST_ID",
    "STATUS",
    "TRACE_ID",
    "clear_correlation_context",
    "configure_logging",
    "get_correlation_context",
    "get_logger",
    "redact_headers",
    "set_correlation_context",
    "update_correlation_context",
]
