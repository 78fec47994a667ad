from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import PaymentORM, PaymentStatus


@dataclass(frozen=True)
class PaymentUpsertData:
    payment_id: str
    order_id: int
    status: PaymentStatus
    amount: Decimal
    currency: str


class PaymentRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert_payment(self, payment_data: PaymentUpsertData) -> None:
        stmt = insert(PaymentORM).values(
            payment_id=payment_data.payment_id,
            order_id=payment_data.order_id,
            status=payment_data.status,
            amount=payment_data.amount,
            currency=payment_data.currency,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PaymentORM.payment_id],
            set_={
                "order_id": stmt.excluded.order_id,
                "status": stmt.excluded.status,
                "amount": stmt.excluded.amount,
                "currency": stmt.excluded.currency,
                "updated_at": func.now(),
            },
        )
        await self._session.execute(stmt)
