from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import OrderORM, OrderStatus


class OrderRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, order_id: int) -> OrderORM | None:
        stmt = select(OrderORM).where(OrderORM.id == order_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_status(self, order_id: int) -> OrderStatus | None:
        stmt = select(OrderORM.status).where(OrderORM.id == order_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_status_if(
        self,
        order_id: int,
        expected: OrderStatus,
        target: OrderStatus,
        *,
        payment_id: str | None = None,
    ) -> bool:
        values: dict[str, object] = {"status": target}
        if payment_id is not None:
            values["payment_id"] = payment_id
        stmt = (
            update(OrderORM)
            .where(OrderORM.id == order_id, OrderORM.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return bool(getattr(result, "rowcount", 0))
