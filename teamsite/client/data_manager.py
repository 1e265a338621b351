"""Client-side cache of the roster.

``DataManager`` keeps an in-memory mirror of the site config, teams and
players. Reads are synchronous and hand out deep copies. Writes validate
locally against the mirror, call the API, and only then splice the server's
echo into the mirror and notify listeners, so a listener always sees a mirror
that already contains the change it is told about.

Lifecycle::

    UNINITIALIZED -> LOADING -> READY
                        |  ^
                        v  |
                      RETRYING

``initialize()`` loads all three collections concurrently. A transient
failure (network error, timeout, 5xx) retries the whole load up to
``max_attempts`` times with a linear back-off. When the budget runs out the
cache is still READY, holding whatever was loaded last, and ``load_failed``
is emitted.

A write confirmed while a load is in flight makes that load fetch again, so
the reload never replaces the mirror with a list that predates the write.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from pydantic import BaseModel

from teamsite.client.api_client import RosterApiClient
from teamsite.client.events import CacheEvent, ChangeNotificationBus
from teamsite.config import Settings
from teamsite.core.errors import (
    PlayerNotFoundError,
    TeamHasPlayersError,
    TeamNotFoundError,
    TransientNetworkError,
)
from teamsite.core.validation import (
    require_valid,
    validate_player,
    validate_site_config,
    validate_team,
)
from teamsite.models.players import PlayerCreate, PlayerRead, PlayerUpdate, merge_player
from teamsite.models.site_config import SiteConfigRead, SiteConfigUpdate, merge_site_config
from teamsite.models.teams import TeamCreate, TeamRead, TeamUpdate, merge_team

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CacheState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    RETRYING = "retrying"
    READY = "ready"


def _coerce(model: type[ModelT], value: Union[ModelT, dict[str, Any]]) -> ModelT:
    if isinstance(value, model):
        return value
    return model.model_validate(value)


class DataManager:
    def __init__(
        self,
        api: RosterApiClient,
        *,
        bus: Optional[ChangeNotificationBus] = None,
        max_attempts: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.api = api
        self.bus = bus or ChangeNotificationBus()
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self._sleep = sleep

        self.state = CacheState.UNINITIALIZED
        self.last_error: Optional[Exception] = None
        self._generation = 0
        # bumped by every confirmed write
        self._writes = 0

        self._site_config = SiteConfigRead()
        self._teams: list[TeamRead] = []
        self._players: list[PlayerRead] = []

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "DataManager":
        api = RosterApiClient(settings.api_base_url, timeout=settings.client_timeout_seconds)
        return cls(
            api,
            max_attempts=settings.client_max_attempts,
            retry_delay=settings.client_retry_delay_seconds,
            **kwargs,
        )

    # -- events -------------------------------------------------------------

    def add_listener(self, event: CacheEvent, callback: Callable[[Any], None]) -> None:
        self.bus.add_listener(event, callback)

    def remove_listener(self, event: CacheEvent, callback: Callable[[Any], None]) -> bool:
        return self.bus.remove_listener(event, callback)

    # -- loading ------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        return self.state == CacheState.READY

    async def initialize(self) -> bool:
        """Load config, teams and players; returns True when all three loaded.

        Calling again while a load is in flight supersedes the earlier run,
        which then returns False without touching the mirror.
        """
        self._generation += 1
        generation = self._generation
        self.state = CacheState.LOADING
        self.last_error = None

        attempt = 0
        failure: Optional[Exception] = None
        while attempt < self.max_attempts:
            attempt += 1
            writes = self._writes
            results = await asyncio.gather(
                self.api.get_site_config(),
                self.api.list_teams(),
                self.api.list_players(),
                return_exceptions=True,
            )
            if generation != self._generation:
                return False
            if writes != self._writes:
                # a write was confirmed mid-fetch and may be missing from these results
                logger.info("Write confirmed during load; fetching again")
                attempt -= 1
                continue

            for result in results:
                if isinstance(result, BaseException) and not isinstance(result, Exception):
                    raise result

            config, teams, players = results
            if not isinstance(config, Exception):
                self._site_config = config
            if not isinstance(teams, Exception):
                self._teams = list(teams)
            if not isinstance(players, Exception):
                self._players = list(players)

            failures = [r for r in results if isinstance(r, Exception)]
            if not failures:
                self.state = CacheState.READY
                logger.info(
                    f"Loaded {len(self._teams)} teams and {len(self._players)} players"
                )
                self.bus.notify(CacheEvent.DATA_LOADED, self.snapshot())
                return True

            failure = next(
                (f for f in failures if not isinstance(f, TransientNetworkError)),
                failures[0],
            )
            if not isinstance(failure, TransientNetworkError) or attempt >= self.max_attempts:
                break

            self.state = CacheState.RETRYING
            delay = attempt * self.retry_delay
            logger.warning(
                f"Load attempt {attempt}/{self.max_attempts} failed ({failure}); "
                f"retrying in {delay:.1f}s"
            )
            self.bus.notify(
                CacheEvent.LOAD_RETRYING,
                {"attempt": attempt, "delay": delay, "error": str(failure)},
            )
            await self._sleep(delay)
            if generation != self._generation:
                return False

        self.last_error = failure
        self.state = CacheState.READY
        logger.error(f"Giving up loading roster after {attempt} attempt(s): {failure}")
        self.bus.notify(
            CacheEvent.LOAD_FAILED, {"attempts": attempt, "error": str(failure)}
        )
        return False

    # -- reads --------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return {
            "siteConfig": self.get_site_config(),
            "teams": self.get_teams(),
            "players": self.get_players(),
        }

    def export_json(self, indent: Optional[int] = 2) -> str:
        """Serialize the mirror in the same camelCase shape the API returns."""
        return json.dumps(
            {
                "siteConfig": self._site_config.to_wire(),
                "teams": [t.to_wire() for t in self._teams],
                "players": [p.to_wire() for p in self._players],
            },
            indent=indent,
        )

    def get_site_config(self) -> SiteConfigRead:
        return self._site_config.model_copy(deep=True)

    def get_teams(self) -> list[TeamRead]:
        return [team.model_copy(deep=True) for team in self._teams]

    def get_team(self, team_id: str) -> Optional[TeamRead]:
        team = self._find_team(team_id)
        return team.model_copy(deep=True) if team else None

    def get_players(self) -> list[PlayerRead]:
        return [player.model_copy(deep=True) for player in self._players]

    def get_player(self, player_id: str) -> Optional[PlayerRead]:
        player = self._find_player(player_id)
        return player.model_copy(deep=True) if player else None

    def get_players_by_team(self, team_id: str) -> list[PlayerRead]:
        return [p.model_copy(deep=True) for p in self._players if p.team_id == team_id]

    def _find_team(self, team_id: str) -> Optional[TeamRead]:
        return next((t for t in self._teams if t.id == team_id), None)

    def _find_player(self, player_id: str) -> Optional[PlayerRead]:
        return next((p for p in self._players if p.id == player_id), None)

    # -- player writes ------------------------------------------------------

    async def add_player(self, data: Union[PlayerCreate, dict[str, Any]]) -> PlayerRead:
        payload = _coerce(PlayerCreate, data)
        require_valid(validate_player(payload, self._players, self._teams))

        created = await self.api.create_player(payload)
        self._players.append(created)
        return self._confirm(CacheEvent.PLAYER_ADDED, created)

    async def update_player(
        self, player_id: str, data: Union[PlayerUpdate, dict[str, Any]]
    ) -> PlayerRead:
        patch = _coerce(PlayerUpdate, data)
        existing = self._find_player(player_id)
        if existing is None:
            raise PlayerNotFoundError(player_id)
        merged = merge_player(existing, patch)
        require_valid(validate_player(merged, self._players, self._teams, player_id=player_id))

        updated = await self.api.update_player(player_id, patch)
        self._replace(self._players, updated)
        return self._confirm(CacheEvent.PLAYER_UPDATED, updated)

    async def delete_player(self, player_id: str) -> PlayerRead:
        if self._find_player(player_id) is None:
            raise PlayerNotFoundError(player_id)

        removed = await self.api.delete_player(player_id)
        self._players = [p for p in self._players if p.id != player_id]
        return self._confirm(CacheEvent.PLAYER_DELETED, removed)

    # -- team writes --------------------------------------------------------

    async def add_team(self, data: Union[TeamCreate, dict[str, Any]]) -> TeamRead:
        payload = _coerce(TeamCreate, data)
        require_valid(validate_team(payload, self._teams))

        created = await self.api.create_team(payload)
        self._teams.append(created)
        return self._confirm(CacheEvent.TEAM_ADDED, created)

    async def update_team(
        self, team_id: str, data: Union[TeamUpdate, dict[str, Any]]
    ) -> TeamRead:
        patch = _coerce(TeamUpdate, data)
        existing = self._find_team(team_id)
        if existing is None:
            raise TeamNotFoundError(team_id)
        require_valid(validate_team(merge_team(existing, patch), self._teams, team_id=team_id))

        updated = await self.api.update_team(team_id, patch)
        self._replace(self._teams, updated)
        return self._confirm(CacheEvent.TEAM_UPDATED, updated)

    async def delete_team(self, team_id: str) -> TeamRead:
        if self._find_team(team_id) is None:
            raise TeamNotFoundError(team_id)
        player_count = sum(1 for p in self._players if p.team_id == team_id)
        if player_count:
            raise TeamHasPlayersError(player_count)

        removed = await self.api.delete_team(team_id)
        self._teams = [t for t in self._teams if t.id != team_id]
        return self._confirm(CacheEvent.TEAM_DELETED, removed)

    # -- site config --------------------------------------------------------

    async def update_site_config(
        self, data: Union[SiteConfigUpdate, dict[str, Any]]
    ) -> SiteConfigRead:
        patch = _coerce(SiteConfigUpdate, data)
        require_valid(validate_site_config(merge_site_config(self._site_config, patch)))

        updated = await self.api.update_site_config(patch)
        self._site_config = updated
        return self._confirm(CacheEvent.SITE_CONFIG_UPDATED, updated)

    def _confirm(self, event: CacheEvent, model: ModelT) -> ModelT:
        self._writes += 1
        self.bus.notify(event, model.model_copy(deep=True))
        return model.model_copy(deep=True)

    @staticmethod
    def _replace(items: list, updated: Any) -> None:
        for index, item in enumerate(items):
            if item.id == updated.id:
                items[index] = updated
                return
        items.append(updated)
