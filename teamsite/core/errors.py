"""Error hierarchy shared by the store, the API and the client cache.

Every error carries a wire ``code`` and an ``http_status``; ``to_response()``
produces the ``{"error": true, "message", "code"}`` envelope. The client side
rebuilds the same classes from an envelope via ``error_from_response``.
"""

from __future__ import annotations

from typing import Any


class TeamSiteError(Exception):
    """Base class for every reportable roster failure."""

    code: str = "INTERNAL_ERROR"
    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        return {"error": True, "message": self.message, "code": self.code}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(TeamSiteError):
    """Input broke one or more entity rules; carries every message."""

    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(
        self,
        errors: list[str],
        warnings: list[str] | None = None,
        message: str | None = None,
    ) -> None:
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__(message or "; ".join(self.errors) or "Validation failed")

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["errors"] = self.errors
        body["warnings"] = self.warnings
        return body


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class AuthError(TeamSiteError):
    """Caller must (re-)authenticate."""

    code = "UNAUTHORIZED"
    http_status = 401
    reason = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class InvalidCredentialsError(AuthError):
    reason = "Invalid credentials"


class MissingTokenError(AuthError):
    reason = "Missing token"


class InvalidTokenError(AuthError):
    reason = "Invalid token"


class ExpiredTokenError(AuthError):
    reason = "Token expired"


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class ConflictError(TeamSiteError):
    """Input collides with stored state; caller must change it."""

    code = "CONFLICT"
    http_status = 400


class DuplicateNumberError(ConflictError):
    code = "DUPLICATE_NUMBER"

    def __init__(self, number: int, message: str | None = None) -> None:
        self.number = number
        super().__init__(message or f"Player number {number} already exists in this team")

    def to_response(self) -> dict[str, Any]:
        return {**super().to_response(), "number": self.number}


class DuplicateNameError(ConflictError):
    code = "DUPLICATE_NAME"

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f'Team name "{name}" already exists')

    def to_response(self) -> dict[str, Any]:
        return {**super().to_response(), "name": self.name}


class TeamHasPlayersError(ConflictError):
    code = "TEAM_HAS_PLAYERS"

    def __init__(self, count: int, message: str | None = None) -> None:
        self.count = count
        super().__init__(
            message
            or f"Cannot delete team with {count} players. Move or delete players first."
        )

    def to_response(self) -> dict[str, Any]:
        return {**super().to_response(), "count": self.count}


class UnknownTeamError(ConflictError):
    """A player references a team id that is not stored."""

    code = "TEAM_NOT_FOUND"

    def __init__(self, team_id: str, message: str | None = None) -> None:
        self.team_id = team_id
        super().__init__(message or f"Team {team_id} not found")

    def to_response(self) -> dict[str, Any]:
        return {**super().to_response(), "teamId": self.team_id}


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class NotFoundError(TeamSiteError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class PlayerNotFoundError(NotFoundError):
    code = "PLAYER_NOT_FOUND"

    def __init__(self, player_id: str = "", message: str = "Player not found") -> None:
        self.player_id = player_id
        super().__init__(message)


class TeamNotFoundError(NotFoundError):
    code = "TEAM_NOT_FOUND"

    def __init__(self, team_id: str = "", message: str = "Team not found") -> None:
        self.team_id = team_id
        super().__init__(message)


class ConfigNotFoundError(NotFoundError):
    code = "CONFIG_NOT_FOUND"

    def __init__(self, message: str = "Site configuration not found") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Client side
# ---------------------------------------------------------------------------


class TransientNetworkError(TeamSiteError):
    """The API could not be reached or answered with a server fault."""

    code = "NETWORK_ERROR"
    http_status = 503


class RemoteError(TeamSiteError):
    """An API error envelope whose code has no dedicated class."""

    def __init__(self, code: str, message: str, http_status: int) -> None:
        super().__init__(message)
        self.code = code
        self.http_status = http_status


def error_from_response(status_code: int, body: dict[str, Any]) -> TeamSiteError:
    """Rebuild a typed error from an API error envelope."""
    code = str(body.get("code") or "")
    message = str(body.get("message") or "Request failed")

    if code == "VALIDATION_ERROR":
        return ValidationError(
            list(body.get("errors") or [message]),
            list(body.get("warnings") or []),
            message=message,
        )
    if code == "UNAUTHORIZED":
        for auth_error in (
            ExpiredTokenError,
            MissingTokenError,
            InvalidTokenError,
            InvalidCredentialsError,
        ):
            if message == auth_error.reason:
                return auth_error()
        return AuthError(message)
    if code == "DUPLICATE_NUMBER":
        return DuplicateNumberError(int(body.get("number") or 0), message=message)
    if code == "DUPLICATE_NAME":
        return DuplicateNameError(str(body.get("name") or ""), message=message)
    if code == "TEAM_HAS_PLAYERS":
        return TeamHasPlayersError(int(body.get("count") or 0), message=message)
    if code == "TEAM_NOT_FOUND" and status_code == 400:
        return UnknownTeamError(str(body.get("teamId") or ""), message=message)
    if status_code == 404:
        if code == "PLAYER_NOT_FOUND":
            return PlayerNotFoundError(message=message)
        if code == "TEAM_NOT_FOUND":
            return TeamNotFoundError(message=message)
        if code == "CONFIG_NOT_FOUND":
            return ConfigNotFoundError(message)
        error = NotFoundError(message)
        error.code = code or NotFoundError.code
        return error
    if status_code >= 500:
        return TransientNetworkError(message)
    return RemoteError(code or "UNKNOWN_ERROR", message, status_code)
