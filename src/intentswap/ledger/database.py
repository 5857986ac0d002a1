"""Engine and session lifecycle for the swap ledger."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from intentswap.config import get_settings
from intentswap.ledger.models import Base

SQLITE_SYNC_PREFIX = "sqlite:///"
SQLITE_ASYNC_PREFIX = "sqlite+aiosqlite:///"

# Process-wide engine and session factory, created lazily
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _async_url(db_url: str) -> str:
    """Rewrite plain sqlite URLs for aiosqlite and create the file's directory."""
    if db_url.startswith(SQLITE_SYNC_PREFIX):
        db_url = SQLITE_ASYNC_PREFIX + db_url[len(SQLITE_SYNC_PREFIX):]
    if db_url.startswith(SQLITE_ASYNC_PREFIX) and ":memory:" not in db_url:
        Path(db_url[len(SQLITE_ASYNC_PREFIX):]).parent.mkdir(parents=True, exist_ok=True)
    return db_url


def get_engine() -> AsyncEngine:
    """Get or create the ledger engine.

    SQL statements are never echoed to stdout; the CLI routes the
    ``sqlalchemy.engine`` logger to stderr when debugging.
    """
    global _engine
    if _engine is None:
        _engine = create_async_engine(_async_url(get_settings().database_url), future=True)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session that commits on success and rolls back on error."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_db():
    """Get a database session context manager."""
    return session_scope(get_session_factory())


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
