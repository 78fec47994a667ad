from __future__ import annotations

from opentelemetry import metrics

meter = metrics.get_meter("webhooks-api")
request_counter = meter.create_counter("webhooks_api_request_total", description="Total requests")
error_counter = meter.create_counter(
    "webhooks_api_error_total", description="Total error responses"
)
latency_histogram = meter.create_histogram(
    "webhooks_api_request_latency_ms", description="Request latency in ms"
)

webhook_received_total = meter.create_counter(
    "webhook_received_total", description="Webhook deliveries that passed signature checks"
)
webhook_signature_rejected_total = meter.create_counter(
    "webhook_signature_rejected_total", description="Webhook deliveries with bad signatures"
)
webhook_duplicate_total = meter.create_counter(
    "webhook_duplicate_total", description="Redelivered webhook events short-circuited"
)
webhook_invalid_transition_total = meter.create_counter(
    "webhook_invalid_transition_total", description="Webhook events rejected by the order graph"
)
order_transition_total = meter.create_counter(
    "order_transition_total", description="Applied order status transitions"
)
payment_lookup_duration = meter.create_histogram(
    "payment_lookup_duration_ms", description="MercadoPago payment lookup latency in ms"
)
processed_events_purged_total = meter.create_counter(
    "processed_events_purged_total", description="Processed webhook log rows purged"
)
