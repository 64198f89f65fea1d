"""Row factories shared by the unit tests."""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Project, ProjectTeamMember, User
from thoraxlab.core.models.domain import ProjectStatus, TeamRole, UserRole


async def make_user(
    session: AsyncSession,
    name: str = "Dr. Alex Chen",
    email: Optional[str] = None,
    role: UserRole = UserRole.clinician,
    **kwargs,
) -> User:
    """Insert a user directly, bypassing login."""
    email = email or f"{name.lower().replace('dr. ', '').replace(' ', '.')}@example.org"
    user = User(name=name, email=email, role=role, **kwargs)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def make_project(
    session: AsyncSession,
    lead: User,
    title: str = "COPD Early Detection Algorithm",
    members: Optional[list] = None,
    **kwargs,
) -> Project:
    """Insert a project with ``lead`` as lead and ``members`` ([(User, TeamRole)]) on its team."""
    kwargs.setdefault("description", "Wearable sensor data for early detection of COPD exacerbations.")
    kwargs.setdefault("status", ProjectStatus.active)
    project = Project(title=title, lead_id=lead.id, **kwargs)
    session.add(project)
    await session.commit()
    await session.refresh(project)

    session.add(ProjectTeamMember(project_id=project.id, user_id=lead.id, role=TeamRole.lead))
    for member, role in members or []:
        session.add(ProjectTeamMember(project_id=project.id, user_id=member.id, role=role))
    await session.commit()
    return project


def hours_ago(hours: float):
    return utc_now() - timedelta(hours=hours)
