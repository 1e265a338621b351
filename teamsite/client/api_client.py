"""Async HTTP client for the roster API.

Unwraps the success envelope into typed models and turns error envelopes
back into the exceptions in :mod:`teamsite.core.errors`. Connection failures,
timeouts and 5xx answers all surface as :class:`TransientNetworkError`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from teamsite.core.errors import TransientNetworkError, error_from_response
from teamsite.models.auth import LoginResponse
from teamsite.models.fields import ApiModel
from teamsite.models.players import PlayerCreate, PlayerRead, PlayerUpdate
from teamsite.models.site_config import SiteConfigRead, SiteConfigUpdate
from teamsite.models.teams import TeamCreate, TeamRead, TeamUpdate

logger = logging.getLogger(__name__)


class RosterApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self.token: Optional[str] = None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RosterApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: Optional[ApiModel] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        """Send one request and return the envelope's ``data``."""
        json_body = body.model_dump(mode="json", by_alias=True, exclude_unset=True) if body else None
        try:
            response = await self._client.request(
                method,
                f"{self.base_url}{path}",
                json=json_body,
                params=params,
                headers=self._headers(),
            )
        except httpx.TimeoutException as exc:
            raise TransientNetworkError(f"Request to {path} timed out") from exc
        except httpx.TransportError as exc:
            raise TransientNetworkError(f"Could not reach API: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.is_success and payload.get("success"):
            return payload.get("data")

        if response.is_success:
            raise TransientNetworkError(f"Malformed response from {path}")
        raise error_from_response(response.status_code, payload)

    # -- auth ---------------------------------------------------------------

    async def login(self, password: str) -> LoginResponse:
        data = await self._request("POST", "/auth/login", body=_Login(password=password))
        result = LoginResponse.model_validate(data)
        self.token = result.token
        return result

    async def logout(self) -> None:
        if self.token is None:
            return
        try:
            await self._request("POST", "/auth/logout")
        finally:
            self.token = None

    # -- teams --------------------------------------------------------------

    async def list_teams(self) -> list[TeamRead]:
        data = await self._request("GET", "/teams")
        return [TeamRead.model_validate(item) for item in data]

    async def get_team(self, team_id: str) -> TeamRead:
        return TeamRead.model_validate(await self._request("GET", f"/teams/{team_id}"))

    async def create_team(self, payload: TeamCreate) -> TeamRead:
        return TeamRead.model_validate(await self._request("POST", "/teams", body=payload))

    async def update_team(self, team_id: str, patch: TeamUpdate) -> TeamRead:
        data = await self._request("PUT", f"/teams/{team_id}", body=patch)
        return TeamRead.model_validate(data)

    async def delete_team(self, team_id: str) -> TeamRead:
        return TeamRead.model_validate(await self._request("DELETE", f"/teams/{team_id}"))

    # -- players ------------------------------------------------------------

    async def list_players(self, team_id: Optional[str] = None) -> list[PlayerRead]:
        params = {"teamId": team_id} if team_id else None
        data = await self._request("GET", "/players", params=params)
        return [PlayerRead.model_validate(item) for item in data]

    async def get_player(self, player_id: str) -> PlayerRead:
        return PlayerRead.model_validate(await self._request("GET", f"/players/{player_id}"))

    async def create_player(self, payload: PlayerCreate) -> PlayerRead:
        return PlayerRead.model_validate(await self._request("POST", "/players", body=payload))

    async def update_player(self, player_id: str, patch: PlayerUpdate) -> PlayerRead:
        data = await self._request("PUT", f"/players/{player_id}", body=patch)
        return PlayerRead.model_validate(data)

    async def delete_player(self, player_id: str) -> PlayerRead:
        data = await self._request("DELETE", f"/players/{player_id}")
        return PlayerRead.model_validate(data)

    # -- site config --------------------------------------------------------

    async def get_site_config(self) -> SiteConfigRead:
        return SiteConfigRead.model_validate(await self._request("GET", "/config"))

    async def update_site_config(self, patch: SiteConfigUpdate) -> SiteConfigRead:
        data = await self._request("PUT", "/config", body=patch)
        return SiteConfigRead.model_validate(data)


class _Login(ApiModel):
    password: str
