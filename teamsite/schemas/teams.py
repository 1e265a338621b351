"""Teams table."""

from typing import Optional

from sqlmodel import Field

from teamsite.models.fields import DEFAULT_TEAM_COLOR
from teamsite.schemas.base import TimestampMixin


class TeamTable(TimestampMixin, table=True):  # type: ignore[call-arg]
    __tablename__ = "teams"

    id: str = Field(primary_key=True)
    name: str
    # casefolded name; backs case-insensitive uniqueness at the record level
    name_key: str = Field(unique=True, index=True)
    color: str = Field(default=DEFAULT_TEAM_COLOR)
    description: Optional[str] = Field(default=None)
