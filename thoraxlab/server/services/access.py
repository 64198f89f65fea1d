"""
Project access checks shared by the services.

Every project-scoped operation resolves the project and the caller's team
membership first; these helpers do that and raise the matching domain error.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thoraxlab.core.database.entities import Discussion, Project, ProjectTeamMember
from thoraxlab.core.errors import NotFoundError, PermissionDeniedError
from thoraxlab.core.models.domain import TeamRole

MANAGERS = (TeamRole.lead, TeamRole.admin)
EDITORS = (TeamRole.lead, TeamRole.admin, TeamRole.contributor)


async def get_project(session: AsyncSession, project_id: str) -> Project:
    project = await session.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


async def get_discussion(session: AsyncSession, discussion_id: str) -> Discussion:
    discussion = await session.get(Discussion, discussion_id)
    if discussion is None:
        raise NotFoundError("Discussion", discussion_id)
    return discussion


async def get_membership(session: AsyncSession, project_id: str, user_id: str) -> Optional[ProjectTeamMember]:
    # Always hit the database: long-lived sessions (the WebSocket) must see
    # removals and role changes committed by other requests.
    stmt = (
        select(ProjectTeamMember)
        .where(ProjectTeamMember.project_id == project_id, ProjectTeamMember.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalars().first()


async def require_member(
    session: AsyncSession,
    project_id: str,
    user_id: str,
    roles: Optional[Iterable[TeamRole]] = None,
    action: str = "access this project",
) -> Tuple[Project, ProjectTeamMember]:
    """
    Resolve a project and make sure the user belongs to its team.

    Args:
        session: Database session
        project_id: Project identifier
        user_id: Caller
        roles: Team roles allowed to perform the action; any role when None
        action: Human-readable action, used in the error message

    Returns:
        Tuple of (project, membership)

    Raises:
        NotFoundError: If the project does not exist
        PermissionDeniedError: If the user is not a member or lacks the role
    """
    project = await get_project(session, project_id)
    membership = await get_membership(session, project_id, user_id)
    if membership is None:
        raise PermissionDeniedError(f"Only team members can {action}", code="NOT_A_MEMBER")
    if roles is not None and membership.role not in tuple(roles):
        raise PermissionDeniedError(f"Your team role ({membership.role.value}) cannot {action}")
    return project, membership


def is_manager(membership: Optional[ProjectTeamMember]) -> bool:
    return membership is not None and membership.role in MANAGERS
