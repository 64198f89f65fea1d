"""
Comment repository implementations.

This module provides data access operations for discussion comments and the
reactions users toggle on them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thoraxlab.core.models.domain import ProjectStatus, ReactionType

from ..entities.discussions import Comment, CommentReaction, Discussion
from ..entities.projects import Project
from .base import AsyncBaseRepository


class CommentRepository(AsyncBaseRepository[Comment]):
    """Repository for comment data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Comment)

    async def list_for_discussion(self, discussion_id: str) -> List[Comment]:
        """Get all comments of a discussion, oldest first."""
        stmt = select(Comment).where(Comment.discussion_id == discussion_id).order_by(Comment.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_project(self, project_id: str, since: Optional[datetime] = None) -> int:
        stmt = (
            select(func.count())
            .select_from(Comment)
            .join(Discussion, Discussion.id == Comment.discussion_id)
            .where(Discussion.project_id == project_id)
        )
        if since is not None:
            stmt = stmt.where(Comment.created_at >= since)
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_visible(self) -> int:
        stmt = (
            select(func.count())
            .select_from(Comment)
            .join(Discussion, Discussion.id == Comment.discussion_id)
            .join(Project, Project.id == Discussion.project_id)
            .where(Project.status != ProjectStatus.archived)
        )
        return int((await self.session.execute(stmt)).scalar_one())


class CommentReactionRepository(AsyncBaseRepository[CommentReaction]):
    """Repository for comment reactions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CommentReaction)

    async def toggle(self, comment_id: str, user_id: str, reaction: ReactionType) -> bool:
        """Add the reaction if absent, remove it otherwise.

        Args:
            comment_id: Comment identifier
            user_id: Reacting user
            reaction: Reaction kind

        Returns:
            True when the reaction is now set, False when it was removed
        """
        existing = await self.session.get(CommentReaction, (comment_id, user_id, reaction))
        if existing is not None:
            await self.session.delete(existing)
            await self.session.commit()
            return False
        self.session.add(CommentReaction(comment_id=comment_id, user_id=user_id, reaction=reaction))
        await self.session.commit()
        return True

    async def counts(self, comment_ids: List[str]) -> Dict[str, Dict[str, int]]:
        """Reaction counts per comment, e.g. ``{comment_id: {"like": 2}}``."""
        if not comment_ids:
            return {}
        stmt = (
            select(CommentReaction.comment_id, CommentReaction.reaction, func.count())
            .where(CommentReaction.comment_id.in_(comment_ids))
            .group_by(CommentReaction.comment_id, CommentReaction.reaction)
        )
        counts: Dict[str, Dict[str, int]] = {}
        for comment_id, reaction, count in (await self.session.execute(stmt)).all():
            counts.setdefault(comment_id, {})[ReactionType(reaction).value] = int(count)
        return counts
