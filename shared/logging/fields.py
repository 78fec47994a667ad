from __future__ import annotations

TRACE_ID = "trace_id"
REQUEST_ID = "request_id"
EVENT_ID = "event_id"
EVENT_TYPE = "event_type"
ORDER_ID = "order_id"
PAYMENT_ID = "payment_id"
STATUS = "status"
PREVIOUS_STATUS = "previous_status"
OUTCOME = "outcome"
ERROR_CATEGORY = "error_category"
