"""
Activity log entity model.

Append-only audit trail of user actions. The table is trimmed to the newest
entries once it grows past the configured cap.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, utc_now


class ActivityLog(Base, table=True):
    """Single recorded user action.

    Table: activity_log
    """

    __tablename__ = "activity_log"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True, ondelete="SET NULL")
    project_id: Optional[str] = Field(default=None, foreign_key="projects.id", index=True, ondelete="CASCADE")
    action: str = Field(max_length=64, index=True)
    entity_type: Optional[str] = Field(default=None, max_length=32)
    entity_id: Optional[str] = Field(default=None, max_length=64)
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"ActivityLog(id={self.id}, action={self.action}, project_id={self.project_id})"
