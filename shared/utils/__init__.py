from shared.utils.http_security import SECURITY_HEADERS, apply_security_headers
from shared.utils.time import retention_cutoff, utc_now
from shared.utils.validation import normalize_identifier, parse_order_reference

__all__ = [
    "SECURITY_HEADERS",
    "apply_security_headers",
    "normalize_identifier",
    "parse_order_reference",
    "retention_cutoff",
    "utc_now",
]
