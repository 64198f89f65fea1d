"""
Notification repository implementations.

This module provides data access operations for per-user notification
inboxes, including the per-user cap enforcement.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.notifications import Notification
from .base import AsyncBaseRepository


class NotificationRepository(AsyncBaseRepository[Notification]):
    """Repository for notification data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Notification)

    async def list_for_user(self, user_id: str, now: datetime, unread_only: bool, limit: int) -> List[Notification]:
        """List a user's unexpired notifications, newest first.

        Args:
            user_id: Owner of the inbox
            now: Reference time for expiry
            unread_only: Only return unread notifications
            limit: Maximum number of notifications

        Returns:
            List of notifications
        """
        stmt = select(Notification).where(Notification.user_id == user_id, Notification.expires_at > now)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        notification = await self.get_by_id(notification_id)
        if notification is None or notification.user_id != user_id:
            return None
        return notification

    async def count_unread(self, user_id: str, now: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
                Notification.expires_at > now,
            )
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of a user as read.

        Returns:
            Number of notifications updated
        """
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0

    async def enforce_cap(self, user_id: str, keep: int) -> int:
        """Delete the oldest notifications of a user beyond ``keep``.

        Args:
            user_id: Owner of the inbox
            keep: Number of newest notifications to keep

        Returns:
            Number of notifications removed
        """
        stale = (
            select(Notification.id)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(keep)
        )
        stale_ids = list((await self.session.execute(stale)).scalars().all())
        if not stale_ids:
            return 0
        await self.session.execute(delete(Notification).where(Notification.id.in_(stale_ids)))
        await self.session.commit()
        return len(stale_ids)
