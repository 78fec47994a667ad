from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from shared.logging import get_logger

logger = get_logger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpenError(RuntimeError):
    def __init__(self, name: str, retry_after_seconds: float) -> None:
        super().__init__(f"Circuit '{name}' is open")
        self.name = name
        self.retry_after_seconds = retry_after_seconds


@dataclass(frozen=True)
class CircuitBreakerConfig:
    failure_threshold: int = 5
    recovery_timeout_seconds: float = 30.0


class CircuitBreaker:
    """Process-local breaker for one outbound dependency.

    After `failure_threshold` consecutive failures calls are refused until the recovery
    timeout passes; the next call is then let through as a trial. A failed trial re-opens
    the circuit immediately.
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at = 0.0

    @property
    def state(self) -> str:
        if self._state is CircuitState.OPEN and self.cooldown_remaining() == 0:
            return CircuitState.HALF_OPEN.value
        return self._state.value

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def cooldown_remaining(self) -> float:
        if self._state is not CircuitState.OPEN:
            return 0.0
        elapsed = self._clock() - self._opened_at
        return max(self._config.recovery_timeout_seconds - elapsed, 0.0)

    def allow_call(self) -> None:
        if self._state is not CircuitState.OPEN:
            return
        remaining = self.cooldown_remaining()
        if remaining > 0:
            raise CircuitBreakerOpenError(self.name, remaining)
        self._state = CircuitState.HALF_OPEN

    def on_success(self) -> None:
        if self._state is not CircuitState.CLOSED:
            logger.info("circuit_closed", extra={"extra_fields": {"circuit": self.name}})
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0

    def on_failure(self) -> None:
        self._consecutive_failures += 1
        trial_failed = self._state is CircuitState.HALF_OPEN
        if trial_failed or self._consecutive_failures >= self._config.failure_threshold:
            self._open()

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        logger.warning(
            "circuit_opened",
            extra={
                "extra_fields": {
                    "circuit": self.name,
                    "consecutive_failures": self._consecutive_failures,
                    "cooldown_seconds": self._config.recovery_timeout_seconds,
                }
            },
        )
