"""Integration tests for player image upload and cleanup."""

from __future__ import annotations

import os

import pytest
from httpx import AsyncClient

from teamsite.config import Settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.mark.asyncio
class TestUploadImage:
    async def test_upload_stores_under_player_prefix(
        self,
        app_client: AsyncClient,
        auth_headers: dict[str, str],
        test_settings: Settings,
    ):
        response = await app_client.post(
            "/api/upload/image",
            data={"playerId": "player_1"},
            files={"image": ("Action Shot.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 200, response.text
        data = response.json()["data"]
        assert data["path"] == "/uploads/images/player_1/action-shot.png"
        assert data["originalName"] == "Action Shot.png"
        assert data["size"] == len(PNG_BYTES)
        assert data["mimetype"] == "image/png"

        stored = os.path.join(test_settings.uploads_dir, "images", "player_1", "action-shot.png")
        assert os.path.exists(stored)

        served = await app_client.get(data["path"])
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    async def test_player_delete_removes_images(
        self,
        app_client: AsyncClient,
        auth_headers: dict[str, str],
        test_settings: Settings,
    ):
        await app_client.post(
            "/api/upload/image",
            data={"playerId": "player_1"},
            files={"image": ("a.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )
        response = await app_client.delete("/api/players/player_1", headers=auth_headers)
        assert response.status_code == 200
        assert not os.path.exists(os.path.join(test_settings.uploads_dir, "images", "player_1"))

    async def test_rejects_non_images(self, app_client: AsyncClient, auth_headers: dict[str, str]):
        response = await app_client.post(
            "/api/upload/image",
            data={"playerId": "player_1"},
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["Only image files (JPEG, PNG, GIF, WebP) are allowed"]

    async def test_rejects_oversized_files(
        self, app_client: AsyncClient, auth_headers: dict[str, str]
    ):
        response = await app_client.post(
            "/api/upload/image",
            data={"playerId": "player_1"},
            files={"image": ("big.png", b"\x00" * (2 * 1024 * 1024 + 1), "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["File too large. Maximum size is 2MB."]

    async def test_missing_file(self, app_client: AsyncClient, auth_headers: dict[str, str]):
        response = await app_client.post(
            "/api/upload/image", data={"playerId": "player_1"}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"] == ["No image file provided"]

    async def test_requires_token(self, app_client: AsyncClient):
        response = await app_client.post(
            "/api/upload/image",
            data={"playerId": "player_1"},
            files={"image": ("a.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 401

    @pytest.mark.parametrize("player_id", ["../../escaped", "player_1/../..", "a b"])
    async def test_rejects_player_ids_that_are_not_path_safe(
        self,
        app_client: AsyncClient,
        auth_headers: dict[str, str],
        test_settings: Settings,
        player_id: str,
    ):
        response = await app_client.post(
            "/api/upload/image",
            data={"playerId": player_id},
            files={"image": ("x.png", PNG_BYTES, "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert (
            "Player id may only contain letters, digits, underscores and hyphens"
            in response.json()["errors"]
        )

        parent = os.path.dirname(os.path.abspath(test_settings.uploads_dir))
        assert not os.path.exists(os.path.join(parent, "escaped", "x.png"))
        assert not os.path.exists(os.path.join(test_settings.uploads_dir, "images"))
