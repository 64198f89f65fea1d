"""
Engine and session factory helpers.

ThoraxLab runs on SQLite (aiosqlite) by default and on Postgres (asyncpg)
when ``THORAXLAB_DATABASE_URL`` points there. Whatever driver the URL names,
the async one is substituted.
"""

from __future__ import annotations

import re

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base

_ASYNC_DRIVERS = (
    (re.compile(r"^postgres(?:ql)?(?:\+\w+)?://"), "postgresql+asyncpg://"),
    (re.compile(r"^sqlite(?:\+\w+)?://"), "sqlite+aiosqlite://"),
)


def normalize_url(db_url: str) -> str:
    """Swap whichever driver ``db_url`` names for its async counterpart."""
    for pattern, replacement in _ASYNC_DRIVERS:
        if pattern.match(db_url):
            return pattern.sub(replacement, db_url, count=1)
    return db_url


def _foreign_keys_on(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ON DELETE CASCADE unless each connection opts in."""
    event.listen(engine.sync_engine, "connect", _foreign_keys_on)


def create_engine(db_url: str) -> AsyncEngine:
    url = normalize_url(db_url)
    if not url.startswith("sqlite"):
        return create_async_engine(url, pool_pre_ping=True)

    engine = create_async_engine(url, connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Services hand entities back to the API layer after commit.
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every ThoraxLab table that does not exist yet.

    Used at startup and by the seed command; schema changes for deployed
    databases go through Alembic.
    """
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
