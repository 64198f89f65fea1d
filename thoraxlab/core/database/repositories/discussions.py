"""
Discussion repository implementations.

This module provides data access operations for discussions, their votes and
the evidence links attached to them.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thoraxlab.core.models.domain import DiscussionType, ProjectStatus, VoteType

from ..entities.discussions import Discussion, DiscussionVote, EvidenceLink
from ..entities.projects import Project
from .base import AsyncBaseRepository, QueryBuilder


class DiscussionRepository(AsyncBaseRepository[Discussion]):
    """Repository for discussion data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Discussion)

    async def list_page(
        self,
        project_id: str,
        page: int,
        limit: int,
        discussion_type: Optional[DiscussionType] = None,
        author_id: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Tuple[List[Discussion], int]:
        """List one page of a project's discussions, newest first.

        Args:
            project_id: Owning project
            page: 1-based page number
            limit: Page size
            discussion_type: Optional type filter
            author_id: Optional author filter
            tag: Optional tag filter (case-insensitive)

        Returns:
            Tuple of (discussions on the page, total matching discussions)
        """
        stmt = select(Discussion).where(Discussion.project_id == project_id)
        if discussion_type is not None:
            stmt = stmt.where(Discussion.discussion_type == discussion_type)
        if author_id:
            stmt = stmt.where(Discussion.author_id == author_id)
        stmt = stmt.order_by(Discussion.created_at.desc())

        if not tag:
            return await self.paginate(stmt, page, limit)

        result = await self.session.execute(stmt)
        wanted = tag.lower()
        matching = [d for d in result.scalars().all() if wanted in {t.lower() for t in (d.tags or [])}]
        start = (page - 1) * limit
        return matching[start : start + limit], len(matching)

    async def list_for_project(self, project_id: str) -> List[Discussion]:
        stmt = select(Discussion).where(Discussion.project_id == project_id).order_by(Discussion.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_for_project(self, project_id: str) -> int:
        return await self.count({"project_id": project_id})

    async def counts_by_project(self) -> Dict[str, int]:
        stmt = select(Discussion.project_id, func.count()).group_by(Discussion.project_id)
        result = await self.session.execute(stmt)
        return {project_id: int(count) for project_id, count in result.all()}

    async def count_visible(self) -> int:
        """Count discussions that belong to non-archived projects."""
        stmt = (
            select(func.count())
            .select_from(Discussion)
            .join(Project, Project.id == Discussion.project_id)
            .where(Project.status != ProjectStatus.archived)
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def search(self, term: str, limit: int) -> List[Discussion]:
        """Find discussions of non-archived projects by title or content, newest first."""
        stmt = (
            select(Discussion)
            .join(Project, Project.id == Discussion.project_id)
            .where(Project.status != ProjectStatus.archived)
            .where(QueryBuilder.ilike_any([Discussion.title, Discussion.content], term))
            .order_by(Discussion.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def vote_totals(self, project_id: Optional[str] = None) -> Tuple[int, int]:
        """Sum the cached up/down tallies, optionally for one project."""
        stmt = select(func.coalesce(func.sum(Discussion.upvotes), 0), func.coalesce(func.sum(Discussion.downvotes), 0))
        if project_id is not None:
            stmt = stmt.where(Discussion.project_id == project_id)
        up, down = (await self.session.execute(stmt)).one()
        return int(up), int(down)


class DiscussionVoteRepository(AsyncBaseRepository[DiscussionVote]):
    """Repository for per-user discussion votes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DiscussionVote)

    async def get_vote(self, discussion_id: str, user_id: str) -> Optional[DiscussionVote]:
        return await self.session.get(DiscussionVote, (discussion_id, user_id))

    async def list_for_discussion(self, discussion_id: str) -> List[DiscussionVote]:
        result = await self.session.execute(select(DiscussionVote).where(DiscussionVote.discussion_id == discussion_id))
        return list(result.scalars().all())

    async def tally(self, discussion_id: str) -> Tuple[int, int]:
        """Count up and down votes straight from the vote rows.

        Args:
            discussion_id: Discussion identifier

        Returns:
            Tuple of (upvotes, downvotes)
        """
        stmt = (
            select(DiscussionVote.vote, func.count())
            .where(DiscussionVote.discussion_id == discussion_id)
            .group_by(DiscussionVote.vote)
        )
        counts = {VoteType(v): int(c) for v, c in (await self.session.execute(stmt)).all()}
        return counts.get(VoteType.up, 0), counts.get(VoteType.down, 0)

    async def count_for_project(self, project_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(DiscussionVote)
            .join(Discussion, Discussion.id == DiscussionVote.discussion_id)
            .where(Discussion.project_id == project_id)
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_distinct_voters(self) -> int:
        stmt = select(func.count(func.distinct(DiscussionVote.user_id)))
        return int((await self.session.execute(stmt)).scalar_one())


class EvidenceRepository(AsyncBaseRepository[EvidenceLink]):
    """Repository for evidence links."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EvidenceLink)

    async def list_for_discussion(self, discussion_id: str) -> List[EvidenceLink]:
        stmt = (
            select(EvidenceLink)
            .where(EvidenceLink.discussion_id == discussion_id)
            .order_by(EvidenceLink.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
