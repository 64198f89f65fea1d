import pytest
from httpx import AsyncClient

from test.unit_test.server.helpers import add_member, create_project, login

pytestmark = pytest.mark.asyncio


class TestInbox:
    async def test_welcome_notification_on_registration(self, client: AsyncClient):
        headers, user = await login(client, "Sarah", "sarah@hospital.org")

        response = await client.get("/api/v1/notifications", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["unread_count"] == 1
        assert body["items"][0]["notification_type"] == "welcome"
        assert body["items"][0]["user_id"] == user["id"]

    async def test_team_added_notification(self, client: AsyncClient):
        lead, _ = await login(client, "Sarah", "sarah@hospital.org")
        member_headers, member = await login(client, "Mark", "mark@medtech.com")
        project = await create_project(client, lead)
        await add_member(client, lead, project["id"], member["id"])

        response = await client.get("/api/v1/notifications", headers=member_headers)
        first = response.json()["items"][0]
        assert first["notification_type"] == "team_added"
        assert first["data"]["project_id"] == project["id"]

    async def test_mark_read_and_unread_filter(self, client: AsyncClient):
        headers, _ = await login(client, "Sarah", "sarah@hospital.org")
        await create_project(client, headers)

        response = await client.get("/api/v1/notifications", headers=headers)
        notification_id = response.json()["items"][0]["id"]

        response = await client.post(f"/api/v1/notifications/{notification_id}/read", headers=headers)
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        response = await client.get("/api/v1/notifications", params={"unread_only": "true"}, headers=headers)
        assert notification_id not in [n["id"] for n in response.json()["items"]]
        assert response.json()["unread_count"] == 1

    async def test_mark_all_read(self, client: AsyncClient):
        headers, _ = await login(client, "Sarah", "sarah@hospital.org")
        await create_project(client, headers)

        response = await client.post("/api/v1/notifications/read-all", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"updated": 2}

        response = await client.get("/api/v1/notifications", headers=headers)
        assert response.json()["unread_count"] == 0

    async def test_cannot_read_someone_elses_notification(self, client: AsyncClient):
        headers, _ = await login(client, "Sarah", "sarah@hospital.org")
        other, _ = await login(client, "Mark", "mark@medtech.com")

        response = await client.get("/api/v1/notifications", headers=headers)
        notification_id = response.json()["items"][0]["id"]

        response = await client.post(f"/api/v1/notifications/{notification_id}/read", headers=other)
        assert response.status_code == 404
