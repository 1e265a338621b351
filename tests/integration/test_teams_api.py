"""Integration tests for /api/teams."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
class TestTeamReads:
    async def test_seeded_team(self, app_client: AsyncClient):
        response = await app_client.get("/api/teams")
        assert response.status_code == 200
        teams = response.json()["data"]
        assert [t["id"] for t in teams] == ["tigers"]
        assert teams[0]["name"] == "Tigers"
        assert teams[0]["color"] == "#f59e0b"
        assert "createdAt" in teams[0] and "updatedAt" in teams[0]

    async def test_list_is_ordered_by_name(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        for name in ("Zebras", "Aces"):
            response = await app_client.post("/api/teams", json={"name": name}, headers=auth_headers)
            assert response.status_code == 201

        names = [t["name"] for t in (await app_client.get("/api/teams")).json()["data"]]
        assert names == ["Aces", "Tigers", "Zebras"]

    async def test_missing_team(self, app_client: AsyncClient):
        response = await app_client.get("/api/teams/ghosts")
        assert response.status_code == 404
        assert response.json()["code"] == "TEAM_NOT_FOUND"


@pytest.mark.asyncio
class TestTeamWrites:
    async def test_create_assigns_slug_id_and_default_color(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await app_client.post(
            "/api/teams", json={"name": "Red Sox"}, headers=auth_headers
        )
        assert response.status_code == 201
        team = response.json()["data"]
        assert team["id"] == "red-sox"
        assert team["color"] == "#3b82f6"

    async def test_slug_collision_gets_suffix(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await app_client.post(
            "/api/teams", json={"name": "Tigers!"}, headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["data"]["id"] == "tigers-2"

    async def test_duplicate_name_is_case_insensitive(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await app_client.post("/api/teams", json={"name": "tIgErS"}, headers=auth_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "DUPLICATE_NAME"
        assert body["name"] == "tIgErS"

    async def test_invalid_team(self, app_client: AsyncClient, auth_headers: dict[str, str]):
        response = await app_client.post(
            "/api/teams", json={"name": "Sharks", "color": "teal"}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["Team color must be a valid hex color"]

    async def test_update_merges_and_keeps_id(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await app_client.put(
            "/api/teams/tigers", json={"name": "Big Tigers"}, headers=auth_headers
        )
        assert response.status_code == 200
        team = response.json()["data"]
        assert team["id"] == "tigers"
        assert team["name"] == "Big Tigers"
        assert team["color"] == "#f59e0b"
        assert team["description"] == "The mighty Tigers team"

    async def test_rename_onto_another_team(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        await app_client.post("/api/teams", json={"name": "Sharks"}, headers=auth_headers)
        response = await app_client.put(
            "/api/teams/sharks", json={"name": "TIGERS"}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "DUPLICATE_NAME"

    async def test_delete_team_with_players_is_rejected(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await app_client.delete("/api/teams/tigers", headers=auth_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "TEAM_HAS_PLAYERS"
        assert body["count"] == 3
        assert (await app_client.get("/api/teams/tigers")).status_code == 200

    async def test_delete_empty_team_returns_it(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        await app_client.post("/api/teams", json={"name": "Sharks"}, headers=auth_headers)

        response = await app_client.delete("/api/teams/sharks", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Sharks"
        assert (await app_client.get("/api/teams/sharks")).status_code == 404

    async def test_delete_missing_team(self, app_client: AsyncClient, auth_headers: dict[str, str]):
        response = await app_client.delete("/api/teams/ghosts", headers=auth_headers)
        assert response.status_code == 404
