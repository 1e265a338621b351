from datetime import datetime
from typing import Optional

from pydantic import Field, StrictInt

from teamsite.models.fields import REQUEST_CONFIG, ApiModel, RequestModel, as_utc


class PlayerStats(ApiModel):
    batting_average: float = 0.0
    home_runs: StrictInt = 0
    rbi: StrictInt = 0
    games_played: StrictInt = 0


class PlayerStatsUpdate(RequestModel):
    batting_average: Optional[float] = None
    home_runs: Optional[StrictInt] = None
    rbi: Optional[StrictInt] = None
    games_played: Optional[StrictInt] = None


class PlayerFields(ApiModel):
    name: Optional[str] = None
    number: Optional[StrictInt] = None
    team_id: Optional[str] = None
    position: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None
    stats: PlayerStats = Field(default_factory=PlayerStats)


class PlayerCreate(PlayerFields):
    model_config = REQUEST_CONFIG


class PlayerUpdate(RequestModel):
    name: Optional[str] = None
    number: Optional[StrictInt] = None
    team_id: Optional[str] = None
    position: Optional[str] = None
    image: Optional[str] = None
    bio: Optional[str] = None
    stats: Optional[PlayerStatsUpdate] = None


class PlayerRead(PlayerFields):
    id: str
    name: str
    number: StrictInt
    team_id: str
    position: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row) -> "PlayerRead":
        return cls(
            id=row.id,
            name=row.name,
            number=row.number,
            team_id=row.team_id,
            position=row.position,
            image=row.image_path,
            bio=row.bio,
            stats=PlayerStats(
                batting_average=row.batting_average,
                home_runs=row.home_runs,
                rbi=row.rbi,
                games_played=row.games_played,
            ),
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )


def merge_player(existing: PlayerFields, patch: PlayerUpdate) -> PlayerFields:
    """Overlay the fields set on ``patch`` onto ``existing``.

    Stats merge per field, so ``{"stats": {"rbi": 4}}`` leaves the other
    counters alone.
    """
    merged = existing.model_dump(include=set(PlayerFields.model_fields))
    changes = patch.model_dump(exclude_unset=True, exclude={"stats"})
    merged.update(changes)
    if patch.stats is not None:
        merged["stats"].update(
            {k: v for k, v in patch.stats.model_dump(exclude_unset=True).items() if v is not None}
        )
    return PlayerFields(**merged)
