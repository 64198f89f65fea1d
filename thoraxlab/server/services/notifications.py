"""
Notification service.

Persists per-user notifications, enforces the per-user cap and pushes each
new notification to the user's realtime room.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Notification
from thoraxlab.core.database.repositories.notifications import NotificationRepository
from thoraxlab.core.errors import NotFoundError
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.domain import NotificationPriority, NotificationType
from thoraxlab.core.models.io import NotificationRead
from thoraxlab.server.core.config import settings
from thoraxlab.server.services.realtime import RealtimeHub, get_hub

logger = get_logger(__name__)


class NotificationService:
    """Service for the per-user notification inbox."""

    def __init__(self, session: AsyncSession, hub: Optional[RealtimeHub] = None):
        self.session = session
        self.repo = NotificationRepository(session)
        self.hub = hub or get_hub()

    async def notify(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        priority: NotificationPriority = NotificationPriority.normal,
    ) -> Notification:
        """
        Create a notification for a user.

        The notification expires after ``notification_ttl_days``. Only the
        newest ``max_notifications_per_user`` are kept. The notification is
        also pushed as ``notification:new`` to the ``user:<id>`` room.

        Args:
            user_id: Recipient
            notification_type: Notification category
            title: Short title
            message: Body text
            data: Extra payload, e.g. the project id
            priority: Display priority

        Returns:
            The persisted notification
        """
        limits = settings.collaboration
        now = utc_now()
        notification = await self.repo.create(
            Notification(
                user_id=user_id,
                notification_type=notification_type,
                title=title[:200],
                message=message[:1000],
                data=data or {},
                priority=priority,
                created_at=now,
                expires_at=now + timedelta(days=limits.notification_ttl_days),
            )
        )
        removed = await self.repo.enforce_cap(user_id, limits.max_notifications_per_user)
        if removed:
            logger.debug(f"Dropped {removed} old notifications for user {user_id}")

        await self.hub.send_to_user(
            user_id,
            "notification:new",
            NotificationRead.model_validate(notification).model_dump(mode="json"),
        )
        return notification

    async def notify_many(
        self,
        user_ids: Iterable[str],
        notification_type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        priority: NotificationPriority = NotificationPriority.normal,
        exclude: Optional[str] = None,
    ) -> List[Notification]:
        """Notify several users, skipping ``exclude`` (usually the actor) and duplicates."""
        sent: List[Notification] = []
        seen = set()
        for user_id in user_ids:
            if user_id == exclude or user_id in seen:
                continue
            seen.add(user_id)
            sent.append(await self.notify(user_id, notification_type, title, message, data, priority))
        return sent

    async def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        return await self.repo.list_for_user(user_id, utc_now(), unread_only, limit)

    async def unread_count(self, user_id: str) -> int:
        return await self.repo.count_unread(user_id, utc_now())

    async def mark_read(self, notification_id: str, user_id: str) -> Notification:
        notification = await self.repo.get_for_user(notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification", notification_id)
        notification.is_read = True
        return await self.repo.update(notification)

    async def mark_all_read(self, user_id: str) -> int:
        return await self.repo.mark_all_read(user_id)
