"""
Decision repository implementations.

This module provides data access operations for decisions and decision votes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thoraxlab.core.models.domain import DecisionStatus, DecisionVoteType

from ..entities.decisions import Decision, DecisionVote
from .base import AsyncBaseRepository


class DecisionRepository(AsyncBaseRepository[Decision]):
    """Repository for decision data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Decision)

    async def get_by_discussion(self, discussion_id: str) -> Optional[Decision]:
        result = await self.session.execute(select(Decision).where(Decision.discussion_id == discussion_id))
        return result.scalars().first()

    async def list_for_project(self, project_id: str, status: Optional[DecisionStatus] = None) -> List[Decision]:
        """List a project's decisions, newest first.

        Args:
            project_id: Owning project
            status: Optional status filter

        Returns:
            List of decisions
        """
        stmt = select(Decision).where(Decision.project_id == project_id)
        if status is not None:
            stmt = stmt.where(Decision.status == status)
        result = await self.session.execute(stmt.order_by(Decision.created_at.desc()))
        return list(result.scalars().all())

    async def count_for_project(
        self, project_id: str, since: Optional[datetime] = None, status: Optional[DecisionStatus] = None
    ) -> int:
        stmt = select(func.count()).select_from(Decision).where(Decision.project_id == project_id)
        if since is not None:
            stmt = stmt.where(Decision.created_at >= since)
        if status is not None:
            stmt = stmt.where(Decision.status == status)
        return int((await self.session.execute(stmt)).scalar_one())


class DecisionVoteRepository(AsyncBaseRepository[DecisionVote]):
    """Repository for decision votes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DecisionVote)

    async def upsert(
        self, decision_id: str, user_id: str, vote: DecisionVoteType, comment: Optional[str] = None
    ) -> DecisionVote:
        """Record a user's vote, replacing any previous one."""
        existing = await self.session.get(DecisionVote, (decision_id, user_id))
        if existing is None:
            existing = DecisionVote(decision_id=decision_id, user_id=user_id, vote=vote, comment=comment)
        else:
            existing.vote = vote
            existing.comment = comment
        return await self.update(existing)

    async def tally(self, decision_id: str) -> Dict[str, int]:
        stmt = (
            select(DecisionVote.vote, func.count())
            .where(DecisionVote.decision_id == decision_id)
            .group_by(DecisionVote.vote)
        )
        counts = {kind.value: 0 for kind in DecisionVoteType}
        for vote, count in (await self.session.execute(stmt)).all():
            counts[DecisionVoteType(vote).value] = int(count)
        return counts
