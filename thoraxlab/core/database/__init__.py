"""
ThoraxLab persistence: SQLModel entities under ``entities``, one repository
per aggregate under ``repositories``, and the shared engine in ``session``.
"""

from .base import Base, new_id, utc_now
from .session import (
    async_session_maker,
    engine,
    get_session,
    init_db,
)
from .utils import (
    create_all,
    create_engine,
    create_sessionmaker,
    enable_sqlite_foreign_keys,
)

__all__ = [
    "Base",
    "async_session_maker",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "enable_sqlite_foreign_keys",
    "engine",
    "get_session",
    "init_db",
    "new_id",
    "utc_now",
]
