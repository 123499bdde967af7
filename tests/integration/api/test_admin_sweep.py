import pytest
from httpx import AsyncClient

from tests.fixtures.auth_flow import register

ADMIN_HEADERS = {"X-Admin-API-Key": "integration-admin-key"}


@pytest.mark.asyncio
async def test_sweep_requires_admin_key(client: AsyncClient):
    response = await client.post("/admin/sessions/sweep")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_sweep_rejects_wrong_admin_key(client: AsyncClient):
    response = await client.post(
        "/admin/sessions/sweep", headers={"X-Admin-API-Key": "wrong-key"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_API_KEY"


@pytest.mark.asyncio
async def test_sweep_deletes_only_expired_sessions(client: AsyncClient, clock, stored_sessions):
    await register(client, "first@acme.com", "first")
    clock.advance(2000)
    await register(client, "second@acme.com", "second")
    surviving = client.cookies.get("current")
    clock.advance(1700)

    response = await client.post("/admin/sessions/sweep", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["message"] == "Expired sessions deleted!"
    assert response.json()["data"]["deleted_count"] == 1
    assert [str(session.id) for session in await stored_sessions()] == [surviving]


@pytest.mark.asyncio
async def test_sweep_is_idempotent(client: AsyncClient, clock):
    await register(client, "user@acme.com", "alice")
    clock.advance(3700)

    first = await client.post("/admin/sessions/sweep", headers=ADMIN_HEADERS)
    second = await client.post("/admin/sessions/sweep", headers=ADMIN_HEADERS)

    assert first.json()["data"]["deleted_count"] == 1
    assert second.json()["data"]["deleted_count"] == 0
