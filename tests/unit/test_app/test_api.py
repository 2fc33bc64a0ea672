"""Tests for the HTTP API."""

from __future__ import annotations

from uuid import uuid4

from httpx import ASGITransport, AsyncClient
import pytest

from koru_service.app.dependencies import ServiceContainer
from koru_service.app.main import create_app


@pytest.fixture
async def client(store, bus):
    app = create_app(ServiceContainer.build(store, bus))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _register(client: AsyncClient, name: str) -> str:
    response = await client.post("/api/v1/users", json={"name": name, "email": f"{name.lower()}@koru.test"})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.unit
class TestHealth:
    @pytest.mark.asyncio
    async def test_live(self, client):
        response = await client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True

    @pytest.mark.asyncio
    async def test_ready(self, client):
        response = await client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"] == {"store": True}

    @pytest.mark.asyncio
    async def test_not_ready_when_store_fails(self, client, store):
        store.users.crashed = True
        response = await client.get("/health/ready")
        assert response.status_code == 503
        assert response.json()["ready"] is False


@pytest.mark.unit
class TestGroupsApi:
    @pytest.mark.asyncio
    async def test_group_lifecycle(self, client):
        alice = await _register(client, "Alice")
        bob = await _register(client, "Bob")

        response = await client.post("/api/v1/groups", json={"name": "Trip"}, headers={"X-User-Id": alice})
        assert response.status_code == 201
        group_id = response.json()["id"]
        assert response.json()["members"][0]["color"] == "0,255,0"

        response = await client.post(
            f"/api/v1/groups/{group_id}/members", json={"color": "255,0,0"}, headers={"X-User-Id": bob},
        )
        assert response.status_code == 201

        response = await client.post(
            f"/api/v1/groups/{group_id}/expenses",
            json={"title": "Hotel", "amount": "90"},
            headers={"X-User-Id": alice},
        )
        assert response.status_code == 201

        response = await client.post(f"/api/v1/groups/{group_id}/settle", headers={"X-User-Id": alice})
        assert response.status_code == 201
        [transfer] = response.json()["transactions"]
        assert transfer["from_id"] == bob
        assert transfer["to_id"] == alice

    @pytest.mark.asyncio
    async def test_errors_are_problem_details(self, client):
        alice = await _register(client, "Alice")

        response = await client.get(f"/api/v1/groups/{uuid4()}", headers={"X-User-Id": alice})

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["type"] == "group-not-found"

    @pytest.mark.asyncio
    async def test_invalid_color_is_422(self, client):
        alice = await _register(client, "Alice")

        response = await client.post(
            "/api/v1/groups", json={"name": "Trip", "color": "300,0,0"}, headers={"X-User-Id": alice},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_user_header_is_422(self, client):
        response = await client.post("/api/v1/groups", json={"name": "Trip"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client):
        await _register(client, "Alice")
        response = await client.post("/api/v1/users", json={"name": "A", "email": "alice@koru.test"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_current_user(self, client):
        alice = await _register(client, "Alice")

        response = await client.get("/api/v1/users/me", headers={"X-User-Id": alice})

        assert response.status_code == 200
        body = response.json()
        assert (body["id"], body["name"], body["email"]) == (alice, "Alice", "alice@koru.test")
