from __future__ import annotations

import asyncio
from collections.abc import Iterator
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from webhooks_api.db.session import build_engine, build_session_factory
from webhooks_api.services.idempotency_service import SeenEventCache
from webhooks_api.services.payment_resolver import PaymentDetailsResolver
from webhooks_api.use_cases.process_webhook import ProcessWebhookUseCase

from shared.contracts import (
    Base,
    OrderORM,
    OrderStatus,
    PaymentORM,
    ProcessedWebhookEventORM,
    ProcessingOutcome,
)
from tests.helpers import (
    FakePaymentLookup,
    FakeRedis,
    make_payment_details,
    make_settings,
    make_webhook_body,
    sign,
)


@pytest.fixture(scope="module")
def postgres_dsn() -> Iterator[str]:
    postgres_module = pytest.importorskip("testcontainers.postgres")
    try:
        container = postgres_module.PostgresContainer("postgres:16-alpine", driver="asyncpg")
        container.start()
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"Docker runtime unavailable for integration test: {exc}")
    try:
        yield container.get_connection_url()
    finally:
        container.stop()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_concurrent_deliveries_mutate_order_once(postgres_dsn: str) -> None:
    engine = build_engine(postgres_dsn)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        session_factory = build_session_factory(engine)
        async with session_factory() as session:
            session.add(OrderORM(id=1, status=OrderStatus.PENDING, total=Decimal("150.00")))
            await session.commit()

        use_case = ProcessWebhookUseCase(
            session_factory,
            SeenEventCache(FakeRedis(), ttl_seconds=3600),  # type: ignore[arg-type]
            PaymentDetailsResolver(FakePaymentLookup(make_payment_details())),
            make_settings(),
        )
        raw_body = make_webhook_body("mp-1")

        results = await asyncio.gather(
            *[use_case.execute(raw_body, sign(raw_body)) for _ in range(8)]
        )

        assert sum(1 for result in results if not result.duplicate) == 1
        async with session_factory() as session:
            order = await session.get(OrderORM, 1)
            assert order is not None
            assert order.status == OrderStatus.PAID
            assert order.payment_id == "mp-1"
            payment = await session.get(PaymentORM, "mp-1")
            assert payment is not None
            assert payment.amount == Decimal("150.00")
            log_rows = (await session.execute(select(ProcessedWebhookEventORM))).scalars().all()
            assert [row.outcome for row in log_rows] == [ProcessingOutcome.APPLIED]
            payment_count = await session.scalar(select(func.count()).select_from(PaymentORM))
            assert payment_count == 1
    finally:
        await engine.dispose()
