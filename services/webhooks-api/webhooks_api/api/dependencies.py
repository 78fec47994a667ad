from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends, Header, Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from webhooks_api.core.config import Settings
from webhooks_api.core.errors import UnauthorizedError
from webhooks_api.services.idempotency_service import SeenEventCache
from webhooks_api.services.payment_resolver import PaymentDetailsResolver, PaymentLookup
from webhooks_api.use_cases.get_order import GetOrderUseCase
from webhooks_api.use_cases.process_webhook import ProcessWebhookUseCase
from webhooks_api.use_cases.update_order_status import UpdateOrderStatusUseCase

_BEARER_PREFIX = "bearer "


def get_settings_dependency(request: Request) -> Settings:
    return request.app.state.settings


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


def get_redis_client(request: Request) -> Redis:
    return request.app.state.redis_client


def get_payment_lookup(request: Request) -> PaymentLookup | None:
    return request.app.state.payment_lookup


def enforce_api_auth(
    settings: Annotated[Settings, Depends(get_settings_dependency)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    if not settings.api_auth_enabled:
        return
    expected = settings.api_auth_token
    if not expected or not authorization:
        raise UnauthorizedError()
    if not authorization.lower().startswith(_BEARER_PREFIX):
        raise UnauthorizedError()
    token = authorization[len(_BEARER_PREFIX) :].strip()
    if not hmac.compare_digest(token.encode(), expected.encode()):
        raise UnauthorizedError()


def get_process_webhook_use_case(
    settings: Annotated[Settings, Depends(get_settings_dependency)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    redis_client: Annotated[Redis, Depends(get_redis_client)],
    payment_lookup: Annotated[PaymentLookup | None, Depends(get_payment_lookup)],
) -> ProcessWebhookUseCase:
    seen_cache = SeenEventCache(redis_client, settings.seen_event_cache_ttl_seconds)
    return ProcessWebhookUseCase(
        session_factory,
        seen_cache,
        PaymentDetailsResolver(payment_lookup),
        settings,
    )


def get_get_order_use_case(
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> GetOrderUseCase:
    return GetOrderUseCase(session_factory)


def get_update_order_status_use_case(
    settings: Annotated[Settings, Depends(get_settings_dependency)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> UpdateOrderStatusUseCase:
    return UpdateOrderStatusUseCase(
        session_factory, max_attempts=settings.order_update_max_attempts
    )
