"""
Shared fixtures for integration tests.

Services run against an in-memory SQLite database (aiosqlite driver).
SQLite ignores SELECT ... FOR UPDATE, which is fine for single-session tests.
"""

import itertools

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tradehub.models import AffiliateProgram, Base, User
from tradehub.services.affiliate import (
    AffiliateRegistrationManager,
    ReferralTracker,
)


@pytest_asyncio.fixture
async def engine():
    """In-memory database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Database session bound to the in-memory engine."""
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(session):
    """Factory creating persisted users with unique emails."""
    counter = itertools.count(1)

    async def _make_user(name: str | None = "John Doe", **kwargs) -> User:
        n = next(counter)
        user = User(name=name, email=f"user{n}@example.com", **kwargs)
        session.add(user)
        await session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def affiliate_user(make_user) -> User:
    """User who owns an affiliate program."""
    return await make_user(name="Alice Smith")


@pytest_asyncio.fixture
async def affiliate(session, affiliate_user) -> AffiliateProgram:
    """Registered, active affiliate program (BRONZE, 10%)."""
    manager = AffiliateRegistrationManager(session)
    return await manager.register(affiliate_user.id, payment_method="BANK")


@pytest.fixture
def make_referred_user(session, make_user, affiliate):
    """Factory creating users referred by the affiliate fixture."""

    async def _make_referred_user(name: str | None = "Bob Jones") -> User:
        user = await make_user(name=name)
        await ReferralTracker(session).track_referral(
            affiliate.affiliate_code, user.id
        )
        return user

    return _make_referred_user
