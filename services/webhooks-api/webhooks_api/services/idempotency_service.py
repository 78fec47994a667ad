from __future__ import annotations

from dataclasses import dataclass

from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.constants import PROVIDER_NAME, seen_event_key
from shared.contracts import ClaimResult, ProcessedWebhookEventORM, WebhookEventType
from shared.logging import EVENT_ID, EVENT_TYPE, get_logger
from webhooks_api.core.errors import StorageUnavailableError
from webhooks_api.repositories.processed_event_repository import ProcessedEventRepository

logger = get_logger(__name__)


class SeenEventCache:
    """Redis hint in front of the processed-event log.

    Never authoritative: a miss or a Redis outage falls through to the database claim, and
    keys are only written after the claiming transaction has committed.
    """

    def __init__(self, redis_client: Redis, ttl_seconds: int) -> None:
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds

    async def was_processed(self, event_type: WebhookEventType, external_id: str) -> bool:
        key = seen_event_key(PROVIDER_NAME, event_type, external_id)
        try:
            return bool(await self._redis.exists(key))
        except RedisError as exc:
            self._log_unavailable("seen_event_cache_read_failed", exc, external_id)
            return False

    async def remember(self, event_type: WebhookEventType, external_id: str) -> None:
        key = seen_event_key(PROVIDER_NAME, event_type, external_id)
        try:
            await self._redis.set(key, "1", ex=self._ttl_seconds)
        except RedisError as exc:
            self._log_unavailable("seen_event_cache_write_failed", exc, external_id)

    def _log_unavailable(self, message: str, exc: RedisError, external_id: str) -> None:
        logger.warning(
            message,
            extra={"extra_fields": {"error_type": type(exc).__name__, EVENT_ID: external_id}},
        )


@dataclass(frozen=True)
class ClaimOutcome:
    result: ClaimResult
    record: ProcessedWebhookEventORM | None = None

    @property
    def claimed(self) -> bool:
        return self.result == ClaimResult.CLAIMED


class IdempotencyGuard:
    """Claims `(external_id, event_type)` through the unique index of the processed log.

    The claim row is inserted in the caller's transaction, so a concurrent duplicate blocks
    on the index until the first delivery commits (and then loses) or rolls back (and then
    proceeds). A rollback of the state mutation therefore also releases the claim.
    """

    def __init__(self, session: AsyncSession, repository: ProcessedEventRepository) -> None:
        self._session = session
        self._repository = repository

    async def claim(self, external_id: str, event_type: WebhookEventType) -> ClaimOutcome:
        try:
            record = await self._repository.insert_claim(external_id, event_type)
        except IntegrityError:
            await self._session.rollback()
            logger.info(
                "webhook_event_already_processed",
                extra={"extra_fields": {EVENT_ID: external_id, EVENT_TYPE: event_type.value}},
            )
            return ClaimOutcome(ClaimResult.ALREADY_PROCESSED)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageUnavailableError() from exc
        return ClaimOutcome(ClaimResult.CLAIMED, record)
