from shared.observability.attributes import (
    EVENT_ID,
    EVENT_TYPE,
    ORDER_ID,
    ORDER_STATUS,
    OUTCOME,
    PAYMENT_ID,
)
from shared.observability.otel import configure_otel
from shared.observability.propagation import (
    current_trace_id,
    extract_context_from_headers,
    inject_headers,
)

__all__ = [
    "EVENT_ID",
    "EVENT_TYPE",
    "ORDER_ID",
    "ORDER_STATUS",
    "OUTCOME",
    "PAYMENT_ID",
    "configure_otel",
    "current_trace_id",
    "extract_context_from_headers",
    "inject_headers",
]
