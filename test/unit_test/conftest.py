"""Shared fixtures for unit tests.

Every test gets a fresh in-memory SQLite database (``StaticPool`` keeps the
single connection alive for the engine's lifetime) with foreign keys on, and
a realtime hub of its own.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from thoraxlab.core.database import create_sessionmaker, enable_sqlite_foreign_keys
from thoraxlab.core.database import entities  # noqa: F401
from thoraxlab.server.services.realtime import RealtimeHub

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return create_sessionmaker(test_engine)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def hub() -> RealtimeHub:
    return RealtimeHub()
