"""Team persistence: CRUD against the ``teams`` table.

Case-insensitive name uniqueness and the "no delete while referenced" rule
are enforced here, at the record level, whatever the caller checked before.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamsite.core.errors import (
    DuplicateNameError,
    TeamHasPlayersError,
    TeamNotFoundError,
)
from teamsite.core.validation import require_valid, team_name_key, validate_team
from teamsite.models.teams import TeamCreate, TeamRead, TeamUpdate, merge_team
from teamsite.schemas.base import utcnow
from teamsite.schemas.players import PlayerTable
from teamsite.schemas.teams import TeamTable
from teamsite.utils.slug import generate_team_id

logger = logging.getLogger(__name__)


async def list_teams(db: AsyncSession) -> list[TeamRead]:
    """Return all teams ordered by name."""
    async with db.begin():
        result = await db.execute(
            select(TeamTable).order_by(TeamTable.name, TeamTable.id)  # type: ignore[arg-type]
        )
        return [TeamRead.from_row(row) for row in result.scalars().all()]


async def get_team(db: AsyncSession, team_id: str) -> TeamRead:
    async with db.begin():
        row = await db.get(TeamTable, team_id)
        if row is None:
            raise TeamNotFoundError(team_id)
        return TeamRead.from_row(row)


async def _assert_name_free(
    db: AsyncSession, name: str, exclude_id: str | None = None
) -> None:
    query = select(TeamTable.id).where(TeamTable.name_key == team_name_key(name))  # type: ignore[arg-type]
    if exclude_id is not None:
        query = query.where(TeamTable.id != exclude_id)  # type: ignore[arg-type]
    result = await db.execute(query)
    if result.first() is not None:
        raise DuplicateNameError(name)


async def count_team_players(db: AsyncSession, team_id: str) -> int:
    result = await db.scalar(
        select(func.count(PlayerTable.id)).where(PlayerTable.team_id == team_id)  # type: ignore[arg-type]
    )
    return int(result or 0)


async def create_team(db: AsyncSession, payload: TeamCreate) -> TeamRead:
    """Validate and insert a team; the id is derived from its name."""
    require_valid(validate_team(payload))
    name = payload.name or ""

    async with db.begin():
        await _assert_name_free(db, name)
        now = utcnow()
        row = TeamTable(
            id=await generate_team_id(name, db),
            name=name,
            name_key=team_name_key(name),
            color=payload.color,
            description=payload.description,
            created_at=now,
            updated_at=now,
        )
        db.add(row)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise DuplicateNameError(name) from exc
        created = TeamRead.from_row(row)

    logger.info(f"Created team {created.id} ({created.name})")
    return created


async def update_team(db: AsyncSession, team_id: str, patch: TeamUpdate) -> TeamRead:
    """Merge ``patch`` over the stored team, re-validate the result and write it."""
    async with db.begin():
        row = await db.get(TeamTable, team_id)
        if row is None:
            raise TeamNotFoundError(team_id)

        merged = merge_team(TeamRead.from_row(row), patch)
        require_valid(validate_team(merged, team_id=team_id))
        name = merged.name or ""
        if team_name_key(name) != row.name_key:
            await _assert_name_free(db, name, exclude_id=team_id)

        row.name = name
        row.name_key = team_name_key(name)
        row.color = merged.color
        row.description = merged.description
        row.updated_at = utcnow()
        try:
            await db.flush()
        except IntegrityError as exc:
            raise DuplicateNameError(name) from exc
        return TeamRead.from_row(row)


async def delete_team(db: AsyncSession, team_id: str) -> TeamRead:
    """Delete a team with no players; returns the removed team."""
    try:
        async with db.begin():
            row = await db.get(TeamTable, team_id)
            if row is None:
                raise TeamNotFoundError(team_id)

            player_count = await count_team_players(db, team_id)
            if player_count > 0:
                raise TeamHasPlayersError(player_count)

            removed = TeamRead.from_row(row)
            await db.delete(row)
    except IntegrityError as exc:
        # a player was attached between the count and the delete
        async with db.begin():
            player_count = await count_team_players(db, team_id)
        raise TeamHasPlayersError(player_count) from exc

    logger.info(f"Deleted team {team_id}")
    return removed
