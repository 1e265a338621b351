"""Player persistence: CRUD against the ``players`` table.

Handles the record-level invariants for players:

- ``team_id`` must reference a stored team (``UnknownTeamError``)
- ``(team_id, number)`` is unique (``DuplicateNumberError``)

Both are checked before writing and backed by the table's foreign key and
unique constraint, so a racing writer still ends in the same condition.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamsite.core.errors import (
    DuplicateNumberError,
    PlayerNotFoundError,
    UnknownTeamError,
)
from teamsite.core.validation import require_valid, validate_player
from teamsite.models.players import (
    PlayerCreate,
    PlayerFields,
    PlayerRead,
    PlayerUpdate,
    merge_player,
)
from teamsite.schemas.base import utcnow
from teamsite.schemas.players import PlayerTable
from teamsite.schemas.teams import TeamTable
from teamsite.utils.slug import generate_player_id

if TYPE_CHECKING:
    from teamsite.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)


async def list_players(db: AsyncSession, team_id: str | None = None) -> list[PlayerRead]:
    """Return players ordered by name, optionally limited to one team."""
    query = select(PlayerTable).order_by(PlayerTable.name, PlayerTable.id)  # type: ignore[arg-type]
    if team_id is not None:
        query = query.where(PlayerTable.team_id == team_id)  # type: ignore[arg-type]
    async with db.begin():
        result = await db.execute(query)
        return [PlayerRead.from_row(row) for row in result.scalars().all()]


async def get_player(db: AsyncSession, player_id: str) -> PlayerRead:
    async with db.begin():
        row = await db.get(PlayerTable, player_id)
        if row is None:
            raise PlayerNotFoundError(player_id)
        return PlayerRead.from_row(row)


async def _assert_team_exists(db: AsyncSession, team_id: str) -> None:
    if await db.get(TeamTable, team_id) is None:
        raise UnknownTeamError(team_id)


async def _assert_number_free(
    db: AsyncSession,
    team_id: str,
    number: int,
    exclude_id: str | None = None,
) -> None:
    query = select(PlayerTable.id).where(
        PlayerTable.team_id == team_id,  # type: ignore[arg-type]
        PlayerTable.number == number,  # type: ignore[arg-type]
    )
    if exclude_id is not None:
        query = query.where(PlayerTable.id != exclude_id)  # type: ignore[arg-type]
    result = await db.execute(query)
    if result.first() is not None:
        raise DuplicateNumberError(number)


def _apply_fields(row: PlayerTable, fields: PlayerFields) -> None:
    row.name = fields.name or ""
    row.number = fields.number or 0
    row.team_id = fields.team_id or ""
    row.position = fields.position or ""
    row.image_path = fields.image
    row.bio = fields.bio
    row.batting_average = fields.stats.batting_average
    row.home_runs = fields.stats.home_runs
    row.rbi = fields.stats.rbi
    row.games_played = fields.stats.games_played


async def create_player(db: AsyncSession, payload: PlayerCreate) -> PlayerRead:
    """Validate and insert a player with a generated id and fresh timestamps."""
    require_valid(validate_player(payload))
    team_id = payload.team_id or ""
    number = payload.number or 0

    async with db.begin():
        await _assert_team_exists(db, team_id)
        await _assert_number_free(db, team_id, number)

        now = utcnow()
        row = PlayerTable(id=generate_player_id(), created_at=now, updated_at=now)
        _apply_fields(row, payload)
        db.add(row)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise DuplicateNumberError(number) from exc
        created = PlayerRead.from_row(row)

    logger.info(f"Created player {created.id} (#{created.number}, team {created.team_id})")
    return created


async def update_player(
    db: AsyncSession, player_id: str, patch: PlayerUpdate
) -> PlayerRead:
    """Merge ``patch`` over the stored player, re-validate the result and write it."""
    async with db.begin():
        row = await db.get(PlayerTable, player_id)
        if row is None:
            raise PlayerNotFoundError(player_id)

        merged = merge_player(PlayerRead.from_row(row), patch)
        require_valid(validate_player(merged, player_id=player_id))
        team_id = merged.team_id or ""
        number = merged.number or 0

        if team_id != row.team_id:
            await _assert_team_exists(db, team_id)
        if team_id != row.team_id or number != row.number:
            await _assert_number_free(db, team_id, number, exclude_id=player_id)

        _apply_fields(row, merged)
        row.updated_at = utcnow()
        try:
            await db.flush()
        except IntegrityError as exc:
            raise DuplicateNumberError(number) from exc
        return PlayerRead.from_row(row)


async def delete_player(
    db: AsyncSession,
    player_id: str,
    images: ImageStorage | None = None,
) -> PlayerRead:
    """Delete a player, then best-effort remove its stored images.

    A failed image cleanup is logged; the delete itself has already committed.
    """
    async with db.begin():
        row = await db.get(PlayerTable, player_id)
        if row is None:
            raise PlayerNotFoundError(player_id)
        removed = PlayerRead.from_row(row)
        await db.delete(row)

    logger.info(f"Deleted player {player_id}")

    if images is not None:
        try:
            await asyncio.to_thread(images.delete_player_images, player_id)
        except Exception as exc:
            logger.warning(f"Failed to remove images for player {player_id}: {exc}")

    return removed
