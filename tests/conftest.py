"""Pytest configuration and fixtures."""

import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["NEAR_INTENTS_API_KEY"] = ""
os.environ["USE_MOCK"] = "true"
os.environ["DEBUG"] = "true"

from intentswap.assets.catalog import get_catalog_cache
from intentswap.assets.fallback import FALLBACK_ASSETS, HOME_ASSET
from intentswap.ledger.models import Base
from intentswap.ledger.repository import SwapRepository
from intentswap.models import Asset
from intentswap.routing.factory import reset_simulation_store


class FakeClock:
    """Manually advanced clock usable as both epoch-seconds and datetime source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.now, tz=timezone.utc)

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_process_state():
    """Clear process-wide caches between tests."""
    get_catalog_cache().clear()
    reset_simulation_store()
    yield
    get_catalog_cache().clear()
    reset_simulation_store()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def home_asset() -> Asset:
    return HOME_ASSET


@pytest.fixture
def btc() -> Asset:
    return next(a for a in FALLBACK_ASSETS if a.identifier == "BTC.BTC")


@pytest.fixture
def eth() -> Asset:
    return next(a for a in FALLBACK_ASSETS if a.identifier == "ETH.ETH")


@pytest.fixture
def later():
    """Factory for an aware datetime in the future."""

    def _later(seconds: float = 300) -> datetime:
        return datetime.now(timezone.utc) + timedelta(seconds=seconds)

    return _later


@pytest_asyncio.fixture
async def db_engine():
    """Create in-memory database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def swap_repo(db_session: AsyncSession) -> SwapRepository:
    """Create swap repository for testing."""
    return SwapRepository(db_session)
