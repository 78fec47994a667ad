from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.contracts import OrderResponse
from webhooks_api.core.errors import OrderNotFoundError
from webhooks_api.repositories.order_repository import OrderRepository


class GetOrderUseCase:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def execute(self, order_id: int) -> OrderResponse:
        async with self._session_factory() as session:
            repository = OrderRepository(session)
            order = await repository.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError()
            return OrderResponse.model_validate(order)
