"""
Activity logging service.

Appends audit entries and keeps the table bounded by trimming it back to the
newest entries once it grows past the configured cap.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database.entities import ActivityLog
from thoraxlab.core.database.repositories.activity_log import ActivityLogRepository
from thoraxlab.core.logging_config import get_logger
from thoraxlab.server.core.config import settings

logger = get_logger(__name__)


class ActivityService:
    """Service for recording user actions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ActivityLogRepository(session)

    async def log(
        self,
        user_id: Optional[str],
        action: str,
        project_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        """
        Record one action and trim the log if it grew past the cap.

        Args:
            user_id: Acting user, if any
            action: Action name, e.g. ``project_created``
            project_id: Project the action relates to
            entity_type: Kind of entity affected
            entity_id: Identifier of the affected entity
            details: Extra JSON-serializable context

        Returns:
            The persisted entry
        """
        entry = await self.repo.create(
            ActivityLog(
                user_id=user_id,
                action=action,
                project_id=project_id,
                entity_type=entity_type,
                entity_id=entity_id,
                details=details or {},
            )
        )
        limits = settings.collaboration
        removed = await self.repo.trim(limits.activity_max_entries, limits.activity_trim_to)
        if removed:
            logger.info(f"Trimmed {removed} activity log entries")
        return entry
