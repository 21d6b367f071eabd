"""Database engine and session factories."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tradehub.config.settings import settings


def create_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create async engine (defaults to settings.database_url)."""
    return create_async_engine(
        url or settings.async_database_url,
        echo=kwargs.pop("echo", settings.database_echo),
        **kwargs,
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session and roll back whatever the caller left uncommitted."""
    async with session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()
