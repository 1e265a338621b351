from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamsite.models.teams import TeamCreate, TeamUpdate
from teamsite.routes.helpers import ok, require_token
from teamsite.services import team_service
from teamsite.utils.db_async import get_session

router = APIRouter(prefix="/api/teams", tags=["teams"])


@router.get("")
async def list_teams(db: AsyncSession = Depends(get_session)) -> dict:
    """List all teams, ordered by name."""
    teams = await team_service.list_teams(db)
    return ok([team.to_wire() for team in teams])


@router.get("/{team_id}")
async def get_team(team_id: str, db: AsyncSession = Depends(get_session)) -> dict:
    team = await team_service.get_team(db, team_id)
    return ok(team.to_wire())


@router.post("", status_code=201, dependencies=[Depends(require_token)])
async def create_team(payload: TeamCreate, db: AsyncSession = Depends(get_session)) -> dict:
    team = await team_service.create_team(db, payload)
    return ok(team.to_wire())


@router.put("/{team_id}", dependencies=[Depends(require_token)])
async def update_team(
    team_id: str,
    patch: TeamUpdate,
    db: AsyncSession = Depends(get_session),
) -> dict:
    team = await team_service.update_team(db, team_id, patch)
    return ok(team.to_wire())


@router.delete("/{team_id}", dependencies=[Depends(require_token)])
async def delete_team(team_id: str, db: AsyncSession = Depends(get_session)) -> dict:
    """Delete a team that no player references."""
    team = await team_service.delete_team(db, team_id)
    return ok(team.to_wire())
