from datetime import datetime
from typing import Optional

from teamsite.models.fields import (
    DEFAULT_TEAM_COLOR,
    REQUEST_CONFIG,
    ApiModel,
    RequestModel,
    as_utc,
)


class TeamFields(ApiModel):
    # Optional at the type level so missing values are reported by the
    # validation rules alongside every other problem.
    name: Optional[str] = None
    color: Optional[str] = DEFAULT_TEAM_COLOR
    description: Optional[str] = None


class TeamCreate(TeamFields):
    model_config = REQUEST_CONFIG


class TeamUpdate(RequestModel):
    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None


class TeamRead(TeamFields):
    id: str
    name: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row) -> "TeamRead":
        return cls(
            id=row.id,
            name=row.name,
            color=row.color,
            description=row.description,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )


def merge_team(existing: TeamFields, patch: TeamUpdate) -> TeamFields:
    """Overlay the fields set on ``patch`` onto ``existing``."""
    merged = existing.model_dump(include=set(TeamFields.model_fields))
    merged.update(patch.model_dump(exclude_unset=True))
    return TeamFields(**merged)
