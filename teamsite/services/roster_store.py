"""The authoritative roster store: engine lifecycle, sessions and seed data.

One ``RosterStore`` is constructed by the application factory and owned by the
app for its lifetime (opened in the lifespan startup, closed at shutdown).
Handlers reach it through ``request.app.state.store``; nothing in the package
holds a module-level engine.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from teamsite.models.players import PlayerStats
from teamsite.models.site_config import SeasonWindow, SiteConfigFields, ThemeColors
from teamsite.schemas.base import utcnow
from teamsite.schemas.players import PlayerTable
from teamsite.schemas.teams import TeamTable
from teamsite.services.config_service import ensure_site_config
from teamsite.utils.db_async import build_engine, describe_database_url, init_db

logger = logging.getLogger(__name__)

DEFAULT_SITE_CONFIG = SiteConfigFields(
    title="Little League Champions",
    description="The future stars of baseball",
    theme=ThemeColors(primary="#3b82f6", secondary="#10b981", accent="#f59e0b"),
    season=SeasonWindow(
        year=2024,
        start_date=date(2024, 4, 6),
        end_date=date(2024, 6, 15),
        featured_date=date(2024, 5, 18),
    ),
)

DEFAULT_TEAMS = [
    {"id": "tigers", "name": "Tigers", "color": "#f59e0b", "description": "The mighty Tigers team"},
]

DEFAULT_PLAYERS = [
    {
        "id": "player_1",
        "name": "Jason Miller",
        "number": 12,
        "team_id": "tigers",
        "position": "Pitcher",
        "image_path": "http://static.photos/sport/640x360/1",
        "bio": "Jason is our star pitcher with a powerful fastball.",
        "stats": PlayerStats(batting_average=0.285, home_runs=3, rbi=15, games_played=12),
    },
    {
        "id": "player_2",
        "name": "Mike Johnson",
        "number": 7,
        "team_id": "tigers",
        "position": "Shortstop",
        "image_path": "http://static.photos/sport/640x360/2",
        "bio": "Mike's quick reflexes make him an excellent shortstop.",
        "stats": PlayerStats(batting_average=0.320, home_runs=5, rbi=22, games_played=12),
    },
    {
        "id": "player_3",
        "name": "David Wilson",
        "number": 23,
        "team_id": "tigers",
        "position": "Outfield",
        "image_path": "http://static.photos/sport/640x360/3",
        "bio": "David's speed and agility make him a great outfielder.",
        "stats": PlayerStats(batting_average=0.275, home_runs=2, rbi=18, games_played=12),
    },
]


async def seed_default_roster(db: AsyncSession) -> bool:
    """Insert the default teams and players when no team exists yet."""
    async with db.begin():
        team_count = await db.scalar(select(func.count(TeamTable.id)))  # type: ignore[arg-type]
        if team_count:
            return False

        now = utcnow()
        for team in DEFAULT_TEAMS:
            db.add(
                TeamTable(
                    **team,
                    name_key=team["name"].casefold(),
                    created_at=now,
                    updated_at=now,
                )
            )
        await db.flush()

        for player in DEFAULT_PLAYERS:
            fields = dict(player)
            stats: PlayerStats = fields.pop("stats")
            db.add(
                PlayerTable(
                    **fields,
                    batting_average=stats.batting_average,
                    home_runs=stats.home_runs,
                    rbi=stats.rbi,
                    games_played=stats.games_played,
                    created_at=now,
                    updated_at=now,
                )
            )
    return True


class RosterStore:
    """Owns the engine and session factory for one database."""

    def __init__(
        self,
        database_url: str,
        *,
        create_tables: bool = True,
        seed_defaults: bool = True,
        site_defaults: SiteConfigFields = DEFAULT_SITE_CONFIG,
    ) -> None:
        self.database_url = database_url
        self.create_tables = create_tables
        self.seed_defaults = seed_defaults
        self.site_defaults = site_defaults
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("RosterStore is not open")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        """Connect, create tables if configured, and make sure the site config exists."""
        if self._engine is not None:
            return
        logger.info(f"Opening roster store: {describe_database_url(self.database_url)}")
        self._engine = build_engine(self.database_url)
        self._session_factory = async_sessionmaker(
            bind=self._engine, expire_on_commit=False, class_=AsyncSession
        )

        if self.create_tables:
            await init_db(self._engine)

        async with self.session() as db:
            if await ensure_site_config(db, self.site_defaults):
                logger.info("Inserted default site configuration")
            if self.seed_defaults and await seed_default_roster(db):
                logger.info("Inserted default roster")

    async def close(self) -> None:
        if self._engine is None:
            return
        logger.info("Disposing roster store engine…")
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def session(self) -> AsyncSession:
        """Return a new session; use as ``async with store.session() as db``."""
        if self._session_factory is None:
            raise RuntimeError("RosterStore is not open")
        return self._session_factory()
