from __future__ import annotations

import time

import httpx

from shared.constants import payment_resource_path
from shared.contracts import MercadoPagoPaymentDetails
from shared.logging import PAYMENT_ID, get_logger
from shared.observability import inject_headers
from shared.resilience import CircuitBreaker, CircuitBreakerOpenError, retry_async
from webhooks_api.core.errors import (
    PaymentLookup5xxError,
    PaymentLookupTimeoutError,
    PaymentLookupUnavailableError,
)
from webhooks_api.core.metrics import payment_lookup_duration

logger = get_logger(__name__)


def _is_transient(exc: Exception) -> bool:
    return isinstance(exc, PaymentLookupTimeoutError | PaymentLookup5xxError)


class MercadoPagoPaymentsClient:
    """Reads payment resources so webhook notifications can be tied back to orders."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        breaker: CircuitBreaker,
        *,
        max_attempts: int = 2,
    ) -> None:
        self._http_client = http_client
        self._breaker = breaker
        self._max_attempts = max_attempts

    async def get_payment(self, payment_id: str) -> MercadoPagoPaymentDetails | None:
        try:
            self._breaker.allow_call()
        except CircuitBreakerOpenError as exc:
            logger.warning(
                "payment_lookup_short_circuited",
                extra={
                    "extra_fields": {
                        PAYMENT_ID: payment_id,
                        "retry_after_seconds": round(exc.retry_after_seconds, 1),
                    }
                },
            )
            raise PaymentLookupUnavailableError() from exc

        start = time.perf_counter()
        try:
            details = await retry_async(
                lambda: self._fetch(payment_id),
                should_retry=_is_transient,
                max_attempts=self._max_attempts,
                on_retry=lambda attempt, exc: logger.warning(
                    "payment_lookup_retry",
                    extra={
                        "extra_fields": {
                            PAYMENT_ID: payment_id,
                            "attempt": attempt,
                            "error_type": type(exc).__name__,
                        }
                    },
                ),
            )
        except (PaymentLookupTimeoutError, PaymentLookup5xxError):
            self._breaker.on_failure()
            raise
        finally:
            payment_lookup_duration.record((time.perf_counter() - start) * 1000)

        self._breaker.on_success()
        return details

    async def _fetch(self, payment_id: str) -> MercadoPagoPaymentDetails | None:
        headers = inject_headers({"Accept": "application/json"})
        try:
            response = await self._http_client.get(
                payment_resource_path(payment_id), headers=headers
            )
        except httpx.TimeoutException as exc:
            raise PaymentLookupTimeoutError() from exc

        if response.status_code == 404:
            return None
        if response.status_code >= 500:
            raise PaymentLookup5xxError(f"Payment provider returned {response.status_code}")
        response.raise_for_status()
        try:
            return MercadoPagoPaymentDetails.model_validate(response.json())
        except ValueError as exc:
            # Malformed JSON or fields the order tables cannot hold.
            logger.warning(
                "payment_details_unusable",
                extra={"extra_fields": {PAYMENT_ID: payment_id, "error_type": type(exc).__name__}},
            )
            return None

    async def close(self) -> None:
        await self._http_client.aclose()


def build_http_client(
    base_url: str, access_token: str, timeout_seconds: float
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout_seconds,
        headers={"Authorization": f"Bearer {access_token}"},
    )
