from __future__ import annotations

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    return datetime.now(UTC)


def retention_cutoff(retention_days: int, *, now: datetime | None = None) -> datetime:
    return (now or utc_now()) - timedelta(days=retention_days)
