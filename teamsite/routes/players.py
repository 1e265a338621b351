from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from teamsite.models.players import PlayerCreate, PlayerUpdate
from teamsite.routes.helpers import get_images, ok, require_token
from teamsite.services import player_service
from teamsite.services.image_storage import ImageStorage
from teamsite.utils.db_async import get_session

router = APIRouter(prefix="/api/players", tags=["players"])


@router.get("")
async def list_players(
    team_id: Optional[str] = Query(default=None, alias="teamId"),
    db: AsyncSession = Depends(get_session),
) -> dict:
    """List players ordered by name; ``?teamId=`` narrows to one team."""
    players = await player_service.list_players(db, team_id=team_id)
    return ok([player.to_wire() for player in players])


@router.get("/{player_id}")
async def get_player(player_id: str, db: AsyncSession = Depends(get_session)) -> dict:
    player = await player_service.get_player(db, player_id)
    return ok(player.to_wire())


@router.post("", status_code=201, dependencies=[Depends(require_token)])
async def create_player(
    payload: PlayerCreate, db: AsyncSession = Depends(get_session)
) -> dict:
    player = await player_service.create_player(db, payload)
    return ok(player.to_wire())


@router.put("/{player_id}", dependencies=[Depends(require_token)])
async def update_player(
    player_id: str,
    patch: PlayerUpdate,
    db: AsyncSession = Depends(get_session),
) -> dict:
    player = await player_service.update_player(db, player_id, patch)
    return ok(player.to_wire())


@router.delete("/{player_id}", dependencies=[Depends(require_token)])
async def delete_player(
    player_id: str,
    db: AsyncSession = Depends(get_session),
    images: ImageStorage = Depends(get_images),
) -> dict:
    player = await player_service.delete_player(db, player_id, images=images)
    return ok(player.to_wire())
