"""
Sample data for local development (``thoraxlab-seed``).

Creates three users (a clinician, an industry engineer and a clinical
researcher) and the "COPD Early Detection Algorithm" project with all three
on its team. Running it twice does not duplicate anything.
"""

import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thoraxlab.core.database import async_session_maker, init_db
from thoraxlab.core.database.entities import Project, User
from thoraxlab.core.database.repositories.projects import ProjectTeamRepository
from thoraxlab.core.database.repositories.users import UserRepository
from thoraxlab.core.logging_config import get_logger, setup_logging
from thoraxlab.core.models.domain import ProjectStatus, ProjectType, TeamRole, UserRole
from thoraxlab.core.models.io import ProjectCreate, TeamMemberAdd
from thoraxlab.server.services.auth import avatar_color_for
from thoraxlab.server.services.projects import ProjectService

logger = get_logger(__name__)

SAMPLE_USERS = [
    {
        "email": "alex.chen@hospital.org",
        "name": "Dr. Alex Chen",
        "institution": "Massachusetts General Hospital",
        "role": UserRole.clinician,
        "specialty": "Pulmonology",
    },
    {
        "email": "emma.rodriguez@techmed.com",
        "name": "Emma Rodriguez",
        "institution": "TechMed Solutions",
        "role": UserRole.industry,
        "specialty": "AI/ML Engineering",
    },
    {
        "email": "sarah.johnson@research.edu",
        "name": "Dr. Sarah Johnson",
        "institution": "Harvard Medical School",
        "role": UserRole.clinician,
        "specialty": "Clinical Research",
    },
]

SAMPLE_PROJECT = ProjectCreate(
    title="COPD Early Detection Algorithm",
    description=(
        "Development and validation of a machine learning algorithm for early detection "
        "of COPD exacerbations using wearable sensor data."
    ),
    status=ProjectStatus.active,
    project_type=ProjectType.collaborative,
    tags=["copd", "machine-learning", "wearables"],
    template_id="cohort",
    specialty="Pulmonology",
)

# Team role of each additional member, keyed by email.
SAMPLE_TEAM = {
    "emma.rodriguez@techmed.com": TeamRole.contributor,
    "sarah.johnson@research.edu": TeamRole.admin,
}


async def ensure_user(session: AsyncSession, data: dict) -> User:
    users = UserRepository(session)
    user = await users.get_by_email(data["email"])
    if user is None:
        user = await users.create(User(avatar_color=avatar_color_for(data["email"]), **data))
        logger.info(f"Created user: {user.name}")
    return user


async def seed(session: AsyncSession) -> Optional[Project]:
    """
    Insert the sample users and project.

    Returns:
        The sample project, or None when it already existed
    """
    users = {data["email"]: await ensure_user(session, data) for data in SAMPLE_USERS}

    existing = await session.execute(select(Project).where(Project.title == SAMPLE_PROJECT.title))
    if existing.scalars().first() is not None:
        logger.info("Sample project already present, skipping")
        return None

    service = ProjectService(session)
    lead = users["alex.chen@hospital.org"]
    project = await service.create(SAMPLE_PROJECT, lead)
    team = ProjectTeamRepository(session)
    for email, role in SAMPLE_TEAM.items():
        if await team.get_member(project.id, users[email].id) is None:
            await service.add_member(project.id, TeamMemberAdd(user_id=users[email].id, role=role), lead)
    logger.info(f"Created project: {project.title}")
    return project


async def main() -> None:
    await init_db()
    async with async_session_maker() as session:
        await seed(session)
    logger.info("Database seeding completed")


def run() -> None:
    """Entry point of ``thoraxlab-seed``."""
    setup_logging(enable_file=False)
    asyncio.run(main())


if __name__ == "__main__":
    run()
