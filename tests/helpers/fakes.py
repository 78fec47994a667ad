from __future__ import annotations

import asyncio
from collections.abc import Callable
from decimal import Decimal
from types import SimpleNamespace
from typing import Any

from sqlalchemy.exc import IntegrityError
from webhooks_api.repositories.payment_repository import PaymentUpsertData
from webhooks_api.use_cases.process_webhook import RepositoryBundle

from shared.contracts import (
    MercadoPagoPaymentDetails,
    OrderResponse,
    OrderStatus,
    ProcessedWebhookEventORM,
    ProcessingOutcome,
    WebhookEventType,
)

ClaimKey = tuple[str, WebhookEventType]


class FakeRedis:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.values: dict[str, str] = {}
        self.expirations: dict[str, int | None] = {}
        self.closed = False
        self._error = error

    async def exists(self, key: str) -> int:
        if self._error is not None:
            raise self._error
        return int(key in self.values)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        if self._error is not None:
            raise self._error
        self.values[key] = value
        self.expirations[key] = ex
        return True

    async def close(self) -> None:
        self.closed = True


class FakePaymentLookup:
    def __init__(
        self,
        details: MercadoPagoPaymentDetails | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self._details = details
        self._error = error
        self.calls: list[str] = []

    async def get_payment(self, payment_id: str) -> MercadoPagoPaymentDetails | None:
        self.calls.append(payment_id)
        if self._error is not None:
            raise self._error
        return self._details


class InMemoryStore:
    """Orders, payments and the processed-event log shared by every fake session."""

    def __init__(self) -> None:
        self.orders: dict[int, SimpleNamespace] = {}
        self.payments: dict[str, PaymentUpsertData] = {}
        self.claims: dict[ClaimKey, ProcessedWebhookEventORM] = {}
        self.status_updates: list[tuple[int, OrderStatus, OrderStatus]] = []

    def add_order(
        self,
        order_id: int = 1,
        *,
        status: OrderStatus = OrderStatus.PENDING,
        total: str = "150.00",
        currency: str = "ARS",
    ) -> SimpleNamespace:
        order = SimpleNamespace(
            id=order_id,
            tenant_id=7,
            status=status,
            payment_id=None,
            total=Decimal(total),
            currency=currency,
            created_at=None,
            updated_at=None,
        )
        self.orders[order_id] = order
        return order

    def outcome_of(self, external_id: str, event_type: WebhookEventType) -> ProcessingOutcome:
        return self.claims[(external_id, event_type)].outcome


class FakeSession:
    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()
        self.commits = 0
        self.rollbacks = 0
        self.pending_claims: list[ClaimKey] = []

    async def commit(self) -> None:
        self.commits += 1
        self.pending_claims.clear()

    async def rollback(self) -> None:
        self.rollbacks += 1
        for key in self.pending_claims:
            self.store.claims.pop(key, None)
        self.pending_claims.clear()


class FakeSessionFactory:
    """Hands out one session per `async with`, discarding uncommitted claims on exit."""

    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()
        self.sessions: list[FakeSession] = []

    def __call__(self) -> _FakeSessionContext:
        session = FakeSession(self.store)
        self.sessions.append(session)
        return _FakeSessionContext(session)


class _FakeSessionContext:
    def __init__(self, session: FakeSession) -> None:
        self._session = session

    async def __aenter__(self) -> FakeSession:
        return self._session

    async def __aexit__(self, exc_type, exc, tb) -> bool:  # noqa: ANN001
        if self._session.pending_claims:
            await self._session.rollback()
        return False


class FakeOrderRepository:
    def __init__(self, store: InMemoryStore, *, race_to: OrderStatus | None = None) -> None:
        self._store = store
        self._race_to = race_to

    async def get_by_id(self, order_id: int) -> SimpleNamespace | None:
        order = self._store.orders.get(order_id)
        return SimpleNamespace(**vars(order)) if order else None

    async def get_status(self, order_id: int) -> OrderStatus | None:
        order = self._store.orders.get(order_id)
        return order.status if order else None

    async def update_status_if(
        self,
        order_id: int,
        expected: OrderStatus,
        target: OrderStatus,
        *,
        payment_id: str | None = None,
    ) -> bool:
        await asyncio.sleep(0)
        order = self._store.orders.get(order_id)
        if order is None:
            return False
        if self._race_to is not None:
            # Another writer commits between our read and our conditional update.
            order.status, self._race_to = self._race_to, None
        if order.status != expected:
            return False
        order.status = target
        if payment_id is not None:
            order.payment_id = payment_id
        self._store.status_updates.append((order_id, expected, target))
        return True


class FakePaymentRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def upsert_payment(self, payment_data: PaymentUpsertData) -> None:
        self._store.payments[payment_data.payment_id] = payment_data


class FakeProcessedEventRepository:
    def __init__(
        self,
        store: InMemoryStore,
        session: FakeSession,
        *,
        error: Exception | None = None,
    ) -> None:
        self._store = store
        self._session = session
        self._error = error

    async def insert_claim(
        self, external_id: str, event_type: WebhookEventType
    ) -> ProcessedWebhookEventORM:
        await asyncio.sleep(0)
        if self._error is not None:
            raise self._error
        key = (external_id, event_type)
        if key in self._store.claims:
            raise IntegrityError(
                "INSERT INTO processed_webhook_events", {}, Exception("duplicate key")
            )
        record = ProcessedWebhookEventORM(
            external_id=external_id,
            event_type=event_type,
            outcome=ProcessingOutcome.APPLIED,
        )
        self._store.claims[key] = record
        self._session.pending_claims.append(key)
        return record

    async def exists(self, external_id: str, event_type: WebhookEventType) -> bool:
        if self._error is not None:
            raise self._error
        return (external_id, event_type) in self._store.claims


def in_memory_repositories(
    *,
    claim_error: Exception | None = None,
    race_to: OrderStatus | None = None,
) -> Callable[[FakeSession], RepositoryBundle]:
    def build(session: FakeSession) -> RepositoryBundle:
        return RepositoryBundle(
            orders=FakeOrderRepository(session.store, race_to=race_to),  # type: ignore[arg-type]
            payments=FakePaymentRepository(session.store),  # type: ignore[arg-type]
            processed_events=FakeProcessedEventRepository(  # type: ignore[arg-type]
                session.store, session, error=claim_error
            ),
        )

    return build


class FakeGetOrderUseCase:
    def __init__(
        self, response: OrderResponse | None = None, *, error: Exception | None = None
    ) -> None:
        self._response = response
        self._error = error
        self.order_id: int | None = None

    async def execute(self, order_id: int) -> OrderResponse:
        self.order_id = order_id
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


class FakeUpdateOrderStatusUseCase:
    def __init__(
        self, response: OrderResponse | None = None, *, error: Exception | None = None
    ) -> None:
        self._response = response
        self._error = error
        self.calls: list[tuple[int, Any]] = []

    async def execute(self, order_id: int, requested: OrderStatus) -> OrderResponse:
        self.calls.append((order_id, requested))
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response
