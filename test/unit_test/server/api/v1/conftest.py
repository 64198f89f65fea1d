import pytest_asyncio
from httpx import AsyncClient

from test.unit_test.server.helpers import add_member, create_project, login


@pytest_asyncio.fixture
async def team(client: AsyncClient) -> dict:
    """A project led by a clinician with an industry contributor and a public viewer.

    Returns the project plus auth headers per member (``lead``, ``engineer``,
    ``viewer``) and the user records (``*_user``).
    """
    lead, lead_user = await login(client, "Sarah Chen", "sarah@hospital.org", role="clinician")
    engineer, engineer_user = await login(client, "Mark Lee", "mark@medtech.com", role="industry")
    viewer, viewer_user = await login(client, "Pat Doe", "pat@example.com", role="public")
    project = await create_project(client, lead)
    await add_member(client, lead, project["id"], engineer_user["id"], role="contributor")
    await add_member(client, lead, project["id"], viewer_user["id"], role="viewer")
    return {
        "project": project,
        "lead": lead,
        "engineer": engineer,
        "viewer": viewer,
        "lead_user": lead_user,
        "engineer_user": engineer_user,
        "viewer_user": viewer_user,
    }
