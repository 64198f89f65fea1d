"""
Notification entity model.

Notifications are per-user inbox entries. They expire after a configurable
number of days and only the newest entries per user are kept.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now
from thoraxlab.core.models.domain import NotificationPriority, NotificationType


class Notification(Base, table=True):
    """Inbox entry for a single user.

    Table: notifications
    """

    __tablename__ = "notifications"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    notification_type: NotificationType
    title: str = Field(max_length=200)
    message: str = Field(max_length=1000)
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    priority: NotificationPriority = Field(default=NotificationPriority.normal)
    is_read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    expires_at: datetime

    def __repr__(self) -> str:
        return f"Notification(id={self.id}, user_id={self.user_id}, type={self.notification_type})"
