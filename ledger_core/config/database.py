"""
Database configuration.

Async engine, session factory and the unit-of-work boundary used by every
financial operation.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ledger_core.config.settings import settings


def create_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create async engine for the configured database."""
    return create_async_engine(
        url or settings.database_url,
        echo=settings.database_echo,
        **kwargs,
    )


def create_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = create_engine()
async_session_maker = create_session_maker(async_engine)


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Explicit read-decide-commit boundary.

    Everything done on the session inside the block is committed together
    on exit, or rolled back together if anything raises.

    Usage:
        async with unit_of_work(session):
            user = await repo.get_for_update(user_id)
            await guard.apply_balance_delta(...)
    """
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.debug(f"Unit of work rolled back: {type(e).__name__}: {e}")
        raise
