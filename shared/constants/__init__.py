from shared.constants.mercadopago import (
    PROVIDER_NAME,
    REQUEST_ID_HEADER,
    SIGNATURE_HEADER,
    map_provider_payment_status,
    payment_resource_path,
)
from shared.constants.redis_keys import SEEN_EVENT_KEY_PREFIX, seen_event_key

__all__ = [
    "PROVIDER_NAME",
    "REQUEST_ID_HEADER",
    "SEEN_EVENT_KEY_PREFIX",
    "SIGNATURE_HEADER",
    "map_provider_payment_status",
    "payment_resource_path",
    "seen_event_key",
]
