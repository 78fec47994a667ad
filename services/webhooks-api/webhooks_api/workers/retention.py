from __future__ import annotations

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.logging import configure_logging, get_logger
from shared.observability import configure_otel
from shared.utils import retention_cutoff
from webhooks_api.core.config import Settings, get_settings
from webhooks_api.core.metrics import processed_events_purged_total
from webhooks_api.db.session import build_engine, build_session_factory
from webhooks_api.repositories.processed_event_repository import ProcessedEventRepository

logger = get_logger(__name__)


class RetentionWorker:
    """Deletes processed-event log rows once they are older than the retention window.

    A purged event id is no longer deduplicated, so the window has to outlast the
    provider's redelivery horizon.
    """

    def __init__(
        self, settings: Settings, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory

    async def run_forever(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "retention_purge_failed",
                    extra={"extra_fields": {"error_type": type(exc).__name__}},
                )
            await asyncio.sleep(self._settings.retention_purge_interval_seconds)

    async def run_once(self) -> int:
        cutoff = retention_cutoff(self._settings.processed_event_retention_days)
        async with self._session_factory() as session:
            purged = await ProcessedEventRepository(session).purge_older_than(cutoff)
            await session.commit()
        processed_events_purged_total.add(purged)
        logger.info(
            "processed_events_purged",
            extra={"extra_fields": {"purged": purged, "cutoff": cutoff.isoformat()}},
        )
        return purged


async def run() -> None:
    settings = get_settings()
    service_name = f"{settings.service_name}-retention"
    configure_logging(settings.log_level, service_name=service_name)
    configure_otel(service_name, settings.app_env)

    engine = build_engine(settings.postgres_dsn)
    worker = RetentionWorker(settings, build_session_factory(engine))
    try:
        await worker.run_forever()
    finally:
        await engine.dispose()


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("retention_worker_stopped")


if __name__ == "__main__":
    main()
