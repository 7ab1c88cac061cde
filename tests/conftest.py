"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for settings validation; must be set before any
# ledger_core import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("REDIS_HOST", "localhost")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ledger_core.models import (
    Base,
    Plan,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)


class RecordingNotifier:
    """Notifier that keeps every event it receives."""

    def __init__(self) -> None:
        self.events = []

    async def notify(self, event) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]


class FailingNotifier:
    """Notifier whose delivery always fails."""

    def __init__(self) -> None:
        self.calls = 0

    async def notify(self, event) -> None:
        self.calls += 1
        raise RuntimeError("gateway said {'error': 'rate limited'}")


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker):
    """Async session for one test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def notifier():
    """Recording notifier."""
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    """Notifier that raises on every event."""
    return FailingNotifier()


@pytest.fixture
def make_user(db_session):
    """
    Factory for committed users.

    A non-zero starting balance is backed by a COMPLETED deposit row so the
    ledger reconciles.
    """
    counter = {"n": 0}

    async def _make_user(
        balance_cents: int = 0,
        referred_by: User | None = None,
        email: str | None = None,
        name: str | None = None,
        is_admin: bool = False,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
            referral_code=f"REF{n:04d}",
            balance_cents=balance_cents,
            referred_by_id=referred_by.id if referred_by else None,
            is_admin=is_admin,
        )
        db_session.add(user)
        await db_session.flush()
        if balance_cents:
            db_session.add(
                Transaction(
                    user_id=user.id,
                    type=TransactionType.DEPOSIT.value,
                    amount_cents=balance_cents,
                    status=TransactionStatus.COMPLETED.value,
                    asset="USDT",
                    reference="opening-balance",
                )
            )
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_plan(db_session):
    """Factory for committed plans."""

    async def _make_plan(
        slug: str = "starter",
        name: str | None = None,
        daily_roi_bps: int = 500,
        duration_days: int | None = 5,
        min_amount_cents: int | None = 10_000,
        max_amount_cents: int | None = 1_000_000,
        is_active: bool = True,
    ) -> Plan:
        plan = Plan(
            slug=slug,
            name=name or slug.replace("-", " ").title(),
            daily_roi_bps=daily_roi_bps,
            duration_days=duration_days,
            min_amount_cents=min_amount_cents,
            max_amount_cents=max_amount_cents,
            is_active=is_active,
        )
        db_session.add(plan)
        await db_session.commit()
        return plan

    return _make_plan


@pytest.fixture
def balance_of(db_session):
    """Read a user's stored balance straight from the database."""

    async def _balance_of(user_id: int) -> int:
        return await db_session.scalar(
            select(User.balance_cents).where(User.id == user_id)
        )

    return _balance_of


@pytest.fixture
def mock_redis_client():
    """Mock Redis client for lock tests."""
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock()
    client.eval = AsyncMock(return_value=1)
    client.aclose = AsyncMock()
    return client
