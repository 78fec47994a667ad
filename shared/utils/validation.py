from __future__ import annotations

from typing import Any

_MAX_IDENTIFIER_LENGTH = 128


def normalize_identifier(value: Any, *, field_name: str) -> str:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Missing required {field_name}")
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid {field_name}")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"Missing required {field_name}")
    if len(normalized) > _MAX_IDENTIFIER_LENGTH:
        raise ValueError(f"{field_name} too long")
    return normalized


def parse_order_reference(value: Any) -> int | None:
    """Order ids travel as `external_reference` strings; anything non-numeric is unusable."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text.isdigit():
        return None
    order_id = int(text)
    return order_id if order_id > 0 else None
