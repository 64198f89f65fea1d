import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_list_templates(client: AsyncClient):
    response = await client.get("/api/v1/templates")
    assert response.status_code == 200
    ids = [t["id"] for t in response.json()]
    assert {"rct", "cohort", "case", "review"} <= set(ids)


async def test_get_template(client: AsyncClient):
    response = await client.get("/api/v1/templates/rct")
    assert response.status_code == 200
    template = response.json()
    assert template["id"] == "rct"
    assert template["required_fields"]


async def test_unknown_template(client: AsyncClient):
    response = await client.get("/api/v1/templates/unknown")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"
