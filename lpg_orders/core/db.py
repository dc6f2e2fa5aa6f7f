from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from lpg_orders.core.config import settings

T = TypeVar("T")


class Base(DeclarativeBase):
    pass


engine = create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, pool_pre_ping=True)

SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as session:
        yield session


async def init_models() -> None:
    # Tables only; migrations are handled outside this service
    import lpg_orders.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def bounded(aw: Awaitable[T], timeout: float | None = None) -> T:
    """Await a storage call under the configured deadline (raises asyncio.TimeoutError)."""
    return await asyncio.wait_for(aw, timeout=timeout or settings.STORAGE_TIMEOUT_SECONDS)
