"""Async engine and sessions for the purchases/recording_pages tables."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from voicehearth.config.settings import settings
from voicehearth.models import Base

logger = logging.getLogger(__name__)


def _create_engine() -> AsyncEngine:
    options: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if settings.database.serverless:
        # No pooling so an idle serverless database can suspend.
        options["poolclass"] = NullPool
    return create_async_engine(settings.database.url, **options)


engine: AsyncEngine = _create_engine()

SessionFactory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield a session; callers commit their own writes."""

    async with SessionFactory() as session:
        yield session


async def init_models() -> None:
    """Create the pipeline tables when they are missing."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Ensured tables: %s", ", ".join(sorted(Base.metadata.tables)))


async def dispose_engine() -> None:
    await engine.dispose()
