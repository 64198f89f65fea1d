"""API helpers shared by the endpoint tests."""

from typing import Dict, Tuple

from httpx import AsyncClient


async def login(
    client: AsyncClient, name: str, email: str, role: str = "clinician", **profile
) -> Tuple[Dict[str, str], dict]:
    """Log in through the API and return (auth headers, user)."""
    response = await client.post(
        "/api/v1/auth/login", json={"name": name, "email": email, "role": role, **profile}
    )
    assert response.status_code == 200, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['token']}"}, body["user"]


async def create_project(client: AsyncClient, headers: Dict[str, str], **fields) -> dict:
    payload = {
        "title": "COPD Early Detection Algorithm",
        "description": "Machine learning on wearable sensor data to detect COPD exacerbations early.",
        "project_type": "collaborative",
        "tags": ["copd", "wearables"],
    }
    payload.update(fields)
    response = await client.post("/api/v1/projects", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def add_member(client: AsyncClient, headers: Dict[str, str], project_id: str, user_id: str, role: str = "contributor"):
    response = await client.post(
        f"/api/v1/projects/{project_id}/team", json={"user_id": user_id, "role": role}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def start_discussion(client: AsyncClient, headers: Dict[str, str], project_id: str, **fields) -> dict:
    payload = {"title": "Sensor placement", "content": "Chest strap or wrist?", "discussion_type": "brainstorm"}
    payload.update(fields)
    response = await client.post(f"/api/v1/projects/{project_id}/discussions", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
