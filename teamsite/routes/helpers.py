"""Shared helpers for API routes."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from teamsite.services.auth_service import TokenAuthority, parse_bearer
from teamsite.services.image_storage import ImageStorage
from teamsite.services.roster_store import RosterStore


def get_store(request: Request) -> RosterStore:
    return request.app.state.store


def get_authority(request: Request) -> TokenAuthority:
    return request.app.state.authority


def get_images(request: Request) -> ImageStorage:
    return request.app.state.images


def require_token(request: Request) -> str:
    """Dependency for every mutating route.

    Returns the verified bearer token, or raises the matching ``AuthError``
    (missing, unknown or expired token).
    """
    token = parse_bearer(request.headers.get("Authorization"))
    get_authority(request).verify(token).raise_for_failure()
    return token or ""


def ok(data: Any) -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    return {"success": True, "data": data}
