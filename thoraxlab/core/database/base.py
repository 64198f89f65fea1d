"""
Common SQLModel base plus the id and clock helpers every entity uses.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)


def utc_now() -> datetime:
    """Naive UTC now; SQLite keeps no timezone, so every stored timestamp is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """32-char hex UUID4 used as the primary key of every row."""
    return uuid.uuid4().hex
