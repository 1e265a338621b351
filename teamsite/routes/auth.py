from fastapi import APIRouter, Depends, Request

from teamsite.models.auth import LoginRequest, LoginResponse
from teamsite.routes.helpers import get_authority, ok, require_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(payload: LoginRequest, request: Request) -> dict:
    """Exchange the admin secret for a bearer token."""
    issued = get_authority(request).authenticate(payload.password)
    return ok(LoginResponse(token=issued.token, expires_in_ms=issued.expires_in_ms).to_wire())


@router.post("/logout")
async def logout(request: Request, token: str = Depends(require_token)) -> dict:
    get_authority(request).revoke(token)
    return ok({"loggedOut": True})
