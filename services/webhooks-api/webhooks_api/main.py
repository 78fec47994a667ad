from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from opentelemetry import trace
from redis.asyncio import from_url as redis_from_url
from starlette.responses import Response

from shared.logging import CorrelationMiddleware, configure_logging, get_logger
from shared.observability import configure_otel, current_trace_id, extract_context_from_headers
from shared.resilience import CircuitBreaker, CircuitBreakerConfig
from shared.utils import apply_security_headers
from webhooks_api.api.routes_orders import router as orders_router
from webhooks_api.api.routes_webhooks import router as webhooks_router
from webhooks_api.core.config import Settings, get_settings
from webhooks_api.core.error_handlers import register_error_handlers
from webhooks_api.core.metrics import error_counter, latency_histogram, request_counter
from webhooks_api.db.session import build_engine, build_session_factory, init_db
from webhooks_api.providers.mercadopago import MercadoPagoPaymentsClient, build_http_client

logger = get_logger(__name__)


def build_payment_lookup(settings: Settings) -> MercadoPagoPaymentsClient | None:
    if not settings.payment_lookup_enabled or settings.mercadopago_access_token is None:
        return None
    breaker = CircuitBreaker(
        "mercadopago",
        CircuitBreakerConfig(
            failure_threshold=settings.mercadopago_breaker_failure_threshold,
            recovery_timeout_seconds=settings.mercadopago_breaker_recovery_seconds,
        ),
    )
    http_client = build_http_client(
        settings.mercadopago_api_base_url,
        settings.mercadopago_access_token,
        settings.mercadopago_timeout_seconds,
    )
    return MercadoPagoPaymentsClient(
        http_client, breaker, max_attempts=settings.mercadopago_max_attempts
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level, service_name=settings.service_name)
    configure_otel(settings.service_name, settings.app_env)

    engine = build_engine(settings.postgres_dsn)
    session_factory = build_session_factory(engine)
    redis_client = redis_from_url(settings.redis_url, decode_responses=True)
    payment_lookup = build_payment_lookup(settings)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.redis_client = redis_client
    app.state.payment_lookup = payment_lookup

    if not settings.mercadopago_webhook_secret:
        logger.warning("webhook_secret_missing")
    if payment_lookup is None:
        logger.warning("payment_lookup_disabled")

    if settings.app_env == "local":
        await init_db(engine)

    yield

    if payment_lookup is not None:
        await payment_lookup.close()
    await redis_client.close()
    await engine.dispose()


app = FastAPI(title="webhooks-api", version="0.1.0", lifespan=lifespan)
app.add_middleware(CorrelationMiddleware)
register_error_handlers(app)
app.include_router(webhooks_router)
app.include_router(orders_router)


@app.middleware("http")
async def telemetry_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    tracer = trace.get_tracer("webhooks-api")
    start = time.perf_counter()
    request_counter.add(1, {"path": request.url.path, "method": request.method})

    with tracer.start_as_current_span(
        f"{request.method} {request.url.path}",
        context=extract_context_from_headers(request.headers),
    ):
        response = await call_next(request)

    duration_ms = (time.perf_counter() - start) * 1000
    latency_histogram.record(duration_ms, {"path": request.url.path, "method": request.method})
    if response.status_code >= 400:
        error_counter.add(
            1,
            {
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
            },
        )

    response.headers["X-Trace-Id"] = current_trace_id()
    apply_security_headers(response)
    return response


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
