from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shared.contracts import Base


def build_engine(postgres_dsn: str) -> AsyncEngine:
    return create_async_engine(postgres_dsn, echo=False, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session(factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with factory() as session:
        yield session


async def init_db(engine: AsyncEngine) -> None:
    # Local runs only; shared environments are migrated with Alembic.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
