"""
Notification I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from thoraxlab.core.models.domain import NotificationPriority, NotificationType


class NotificationRead(BaseModel):
    """Schema for reading a notification."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    notification_type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority
    is_read: bool
    created_at: datetime
    expires_at: datetime


class NotificationList(BaseModel):
    items: List[NotificationRead]
    unread_count: int


class MarkAllReadResult(BaseModel):
    updated: int
