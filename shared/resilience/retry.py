from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")


def exponential_backoff(
    attempt: int, base_seconds: float = 0.05, cap_seconds: float = 0.5, jitter: float = 0.25
) -> float:
    raw = min(cap_seconds, base_seconds * (2 ** max(0, attempt - 1)))
    spread = raw * jitter
    return max(0.0, raw + random.uniform(-spread, spread))


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    should_retry: Callable[[Exception], bool],
    max_attempts: int = 3,
    base_seconds: float = 0.05,
    on_retry: Callable[[int, Exception], None] | None = None,
) -> T:
    """Run `operation` until it succeeds, a non-retryable error occurs or attempts run out.

    Webhook handlers answer within the provider's delivery timeout, so the backoff is
    capped well below a second.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:  # noqa: BLE001
            if not should_retry(exc) or attempt == max_attempts:
                raise
            if on_retry is not None:
                on_retry(attempt, exc)
            await asyncio.sleep(exponential_backoff(attempt, base_seconds=base_seconds))
    raise RuntimeError("retry_async requires max_attempts >= 1")
