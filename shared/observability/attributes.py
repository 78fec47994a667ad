from __future__ import annotations

EVENT_ID = "webhook.event_id"
EVENT_TYPE = "webhook.event_type"
ORDER_ID = "order.id"
ORDER_STATUS = "order.status"
PAYMENT_ID = "payment.id"
OUTCOME = "webhook.outcome"
