"""Root conftest — shared test configuration and in-memory database fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Tests never touch a real Postgres or the user's home directory

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for store tests
      (PostgreSQL-specific features not exercised here)
    - DatabaseSessionManager.from_engine: store and auth share the fixture engine
"""

import os

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

# Ensure tests don't accidentally use a real database
os.environ.setdefault("FARMLINK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FARMLINK_LOG_FORMAT", "text")

from farmlink.db.base import Base  # noqa: E402
from farmlink.infrastructure.database import DatabaseSessionManager  # noqa: E402
from farmlink.infrastructure.sql_store import SqlMarketplaceStore  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def sql_store(db_manager):
    return SqlMarketplaceStore(db_manager)
