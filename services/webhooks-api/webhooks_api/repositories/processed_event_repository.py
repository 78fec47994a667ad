from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.contracts import ProcessedWebhookEventORM, ProcessingOutcome, WebhookEventType


class ProcessedEventRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert_claim(
        self, external_id: str, event_type: WebhookEventType
    ) -> ProcessedWebhookEventORM:
        """Add the log row and flush so the unique index is checked inside this transaction."""
        record = ProcessedWebhookEventORM(
            external_id=external_id,
            event_type=event_type,
            outcome=ProcessingOutcome.APPLIED,
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def exists(self, external_id: str, event_type: WebhookEventType) -> bool:
        stmt = (
            select(ProcessedWebhookEventORM.id)
            .where(
                ProcessedWebhookEventORM.external_id == external_id,
                ProcessedWebhookEventORM.event_type == event_type,
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def purge_older_than(self, cutoff: datetime) -> int:
        stmt = delete(ProcessedWebhookEventORM).where(
            ProcessedWebhookEventORM.processed_at < cutoff
        )
        result = await self._session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0)
