"""Shared helpers for tests that need an authenticated admin."""

from __future__ import annotations

from httpx import AsyncClient, Response

ADMIN_PASSWORD = "let-me-in"


async def login_admin(client: AsyncClient, password: str = ADMIN_PASSWORD) -> Response:
    return await client.post("/api/auth/login", json={"password": password})


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
