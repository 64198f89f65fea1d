import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from thoraxlab.core.database.entities import Project, User
from thoraxlab.core.database.repositories.projects import ProjectTeamRepository
from thoraxlab.core.models.domain import TeamRole
from thoraxlab.server.seed import SAMPLE_USERS, seed

pytestmark = pytest.mark.asyncio


async def test_seed_creates_users_and_team(session: AsyncSession):
    project = await seed(session)

    assert project is not None
    assert project.template_id == "cohort"
    team = await ProjectTeamRepository(session).list_team(project.id)
    roles = {user.email: member.role for member, user in team}
    assert roles == {
        "alex.chen@hospital.org": TeamRole.lead,
        "emma.rodriguez@techmed.com": TeamRole.contributor,
        "sarah.johnson@research.edu": TeamRole.admin,
    }


async def test_seed_is_idempotent(session: AsyncSession):
    await seed(session)
    assert await seed(session) is None

    users = (await session.execute(select(func.count()).select_from(User))).scalar_one()
    projects = (await session.execute(select(func.count()).select_from(Project))).scalar_one()
    assert users == len(SAMPLE_USERS)
    assert projects == 1
