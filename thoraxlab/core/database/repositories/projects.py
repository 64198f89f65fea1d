"""
Project and team repository implementations.

This module provides data access operations for projects, including the
filtered/paginated listing used by the API, and for team membership.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thoraxlab.core.models.domain import ProjectStatus

from ..entities.projects import Project, ProjectTeamMember
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder


@dataclass
class ProjectFilters:
    """Filters accepted by ``ProjectRepository.list_page``."""

    status: Optional[ProjectStatus] = None
    search: Optional[str] = None
    tag: Optional[str] = None
    template_id: Optional[str] = None
    lead_id: Optional[str] = None
    member_id: Optional[str] = None
    include_archived: bool = False
    sort: str = "updated"
    order: str = "desc"


_SORT_COLUMNS = {
    "updated": Project.updated_at,
    "created": Project.created_at,
    "title": Project.title,
}


class ProjectRepository(AsyncBaseRepository[Project]):
    """Repository for project data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    def _filtered(self, filters: ProjectFilters):
        stmt = select(Project)
        if filters.status is not None:
            stmt = stmt.where(Project.status == filters.status)
        elif not filters.include_archived:
            stmt = stmt.where(Project.status != ProjectStatus.archived)
        if filters.template_id:
            stmt = stmt.where(Project.template_id == filters.template_id)
        if filters.lead_id:
            stmt = stmt.where(Project.lead_id == filters.lead_id)
        if filters.member_id:
            stmt = stmt.join(ProjectTeamMember, ProjectTeamMember.project_id == Project.id).where(
                ProjectTeamMember.user_id == filters.member_id
            )
        if filters.search:
            for term in filters.search.split():
                stmt = stmt.where(QueryBuilder.ilike_any([Project.title, Project.description], term))
        return stmt

    async def list_page(self, filters: ProjectFilters, page: int, limit: int) -> Tuple[List[Project], int]:
        """List one page of projects.

        Archived projects are excluded unless ``include_archived`` is set or
        the archived status is requested explicitly. Tag filtering happens in
        Python because tags are stored as a JSON list.

        Args:
            filters: Listing filters and sort options
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (projects on the page, total matching projects)
        """
        column = _SORT_COLUMNS.get(filters.sort, Project.updated_at)
        stmt = self._filtered(filters).order_by(column.asc() if filters.order == "asc" else column.desc())

        if not filters.tag:
            return await self.paginate(stmt, page, limit)

        result = await self.session.execute(stmt)
        wanted = filters.tag.lower()
        matching = [p for p in result.scalars().all() if wanted in {t.lower() for t in (p.tags or [])}]
        start = (page - 1) * limit
        return matching[start : start + limit], len(matching)

    async def list_visible(self) -> List[Project]:
        """All projects that are not archived."""
        stmt = select(Project).where(Project.status != ProjectStatus.archived)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_status(self) -> dict[str, int]:
        stmt = select(Project.status, func.count()).group_by(Project.status)
        result = await self.session.execute(stmt)
        return {_value(status): int(count) for status, count in result.all()}

    async def count_by_template(self) -> dict[str, int]:
        stmt = (
            select(Project.template_id, func.count())
            .where(Project.status != ProjectStatus.archived)
            .group_by(Project.template_id)
        )
        result = await self.session.execute(stmt)
        return {(template or "none"): int(count) for template, count in result.all()}


class ProjectTeamRepository(AsyncBaseRepository[ProjectTeamMember]):
    """Repository for project team membership."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProjectTeamMember)

    async def get_member(self, project_id: str, user_id: str) -> Optional[ProjectTeamMember]:
        return await self.session.get(ProjectTeamMember, (project_id, user_id))

    async def list_team(self, project_id: str) -> List[Tuple[ProjectTeamMember, User]]:
        """Get the team of a project with each member's user row.

        Args:
            project_id: Project identifier

        Returns:
            List of (membership, user) tuples ordered by join time
        """
        stmt = (
            select(ProjectTeamMember, User)
            .join(User, User.id == ProjectTeamMember.user_id)
            .where(ProjectTeamMember.project_id == project_id)
            .order_by(ProjectTeamMember.joined_at)
        )
        result = await self.session.execute(stmt)
        return [(member, user) for member, user in result.all()]

    async def count_team(self, project_id: str) -> int:
        return await self.count({"project_id": project_id})

    async def count_projects_for_user(self, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(ProjectTeamMember)
            .join(Project, Project.id == ProjectTeamMember.project_id)
            .where(ProjectTeamMember.user_id == user_id, Project.status != ProjectStatus.archived)
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def team_sizes(self) -> dict[str, int]:
        """Team size per non-archived project."""
        stmt = (
            select(ProjectTeamMember.project_id, func.count())
            .join(Project, Project.id == ProjectTeamMember.project_id)
            .where(Project.status != ProjectStatus.archived)
            .group_by(ProjectTeamMember.project_id)
        )
        result = await self.session.execute(stmt)
        return {project_id: int(count) for project_id, count in result.all()}

    async def remove_member(self, project_id: str, user_id: str) -> bool:
        member = await self.get_member(project_id, user_id)
        if member is None:
            return False
        await self.session.delete(member)
        await self.session.commit()
        return True


def _value(status) -> str:
    return status.value if hasattr(status, "value") else str(status)
