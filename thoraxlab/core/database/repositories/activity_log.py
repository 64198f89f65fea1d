"""
Activity log repository implementation.

This module provides append and query operations for the audit trail, along
with the trimming that keeps the table bounded.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.activity_log import ActivityLog
from .base import AsyncBaseRepository


class ActivityLogRepository(AsyncBaseRepository[ActivityLog]):
    """Repository for activity log entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ActivityLog)

    async def list_for_project(self, project_id: str, limit: int) -> List[ActivityLog]:
        stmt = (
            select(ActivityLog)
            .where(ActivityLog.project_id == project_id)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def recent(self, limit: int) -> List[ActivityLog]:
        stmt = select(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_project(self, project_id: str, since: Optional[datetime] = None) -> int:
        stmt = select(func.count()).select_from(ActivityLog).where(ActivityLog.project_id == project_id)
        if since is not None:
            stmt = stmt.where(ActivityLog.created_at >= since)
        return int((await self.session.execute(stmt)).scalar_one())

    async def actors_for_project(self, project_id: str, since: datetime) -> List[str]:
        """Distinct user ids that acted on a project since ``since``."""
        stmt = (
            select(ActivityLog.user_id)
            .where(
                ActivityLog.project_id == project_id,
                ActivityLog.created_at >= since,
                ActivityLog.user_id.is_not(None),
            )
            .distinct()
        )
        return [user_id for user_id in (await self.session.execute(stmt)).scalars().all()]

    async def last_for_project(self, project_id: str) -> Optional[datetime]:
        stmt = select(func.max(ActivityLog.created_at)).where(ActivityLog.project_id == project_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def trim(self, max_entries: int, keep: int) -> int:
        """Trim the log to the newest ``keep`` entries once it exceeds ``max_entries``.

        Args:
            max_entries: Size that triggers trimming
            keep: Number of newest entries to keep

        Returns:
            Number of entries removed
        """
        total = await self.count()
        if total <= max_entries:
            return 0
        cutoff_stmt = select(ActivityLog.id).order_by(ActivityLog.id.desc()).offset(keep).limit(1)
        cutoff = (await self.session.execute(cutoff_stmt)).scalar_one_or_none()
        if cutoff is None:
            return 0
        result = await self.session.execute(delete(ActivityLog).where(ActivityLog.id <= cutoff))
        await self.session.commit()
        return result.rowcount or 0
