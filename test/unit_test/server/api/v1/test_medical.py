import pytest
from httpx import AsyncClient

from test.unit_test.server.helpers import login

pytestmark = pytest.mark.asyncio


async def test_gold_stage(client: AsyncClient):
    headers, _ = await login(client, "Sarah", "sarah@hospital.org")

    response = await client.post(
        "/api/v1/medical/calculate", json={"type": "gold-stage", "data": {"fev1_percent": 45}}, headers=headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["type"] == "gold-stage"
    assert body["result"]["stage"] == "GOLD 3 (Severe)"
    assert body["timestamp"]


async def test_ards_net_with_string_inputs(client: AsyncClient):
    headers, _ = await login(client, "Sarah", "sarah@hospital.org")

    response = await client.post(
        "/api/v1/medical/calculate", json={"type": "ards-net", "data": {"pao2": "90", "fio2": "0.6"}}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["result"]["pao2_fio2_ratio"] == 150
    assert response.json()["result"]["severity"] == "Moderate"


async def test_missing_inputs(client: AsyncClient):
    headers, _ = await login(client, "Sarah", "sarah@hospital.org")

    response = await client.post(
        "/api/v1/medical/calculate", json={"type": "bode-index", "data": {"fev1_percent": 40}}, headers=headers
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"missing": ["six_mwt", "mmrc", "bmi"]}


async def test_unknown_calculator(client: AsyncClient):
    headers, _ = await login(client, "Sarah", "sarah@hospital.org")

    response = await client.post("/api/v1/medical/calculate", json={"type": "apgar", "data": {}}, headers=headers)
    assert response.status_code == 400


async def test_calculation_is_logged_as_activity(client: AsyncClient):
    headers, _ = await login(client, "Sarah", "sarah@hospital.org")
    await client.post(
        "/api/v1/medical/calculate", json={"type": "gold-stage", "data": {"fev1_percent": 85}}, headers=headers
    )

    response = await client.get("/api/v1/analytics/detailed", headers=headers)
    actions = [entry["action"] for entry in response.json()["recent_activity"]]
    assert "medical_calculation" in actions


@pytest.mark.parametrize("pao2", ["nan", "inf", "-Infinity"])
async def test_non_finite_inputs_are_bad_requests(client: AsyncClient, pao2):
    headers, _ = await login(client, "Sarah", "sarah@hospital.org")

    response = await client.post(
        "/api/v1/medical/calculate", json={"type": "ards-net", "data": {"pao2": pao2, "fio2": "0.5"}}, headers=headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["details"] == {"invalid": ["pao2"]}
