"""
Process-wide engine bound to the configured ``DATABASE_URL``.

Routes get sessions through :func:`get_session`; tests swap that dependency
for one bound to an in-memory database.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create missing tables on startup; existing ones are left as they are."""
    await create_all(engine)
