"""
SQLModels for players, to be stored in the database.
"""
from typing import Optional

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlmodel import Field as SQLField

from teamsite.schemas.base import TimestampMixin


class PlayerTable(TimestampMixin, table=True):  # type: ignore[call-arg]
    __tablename__ = "players"
    __table_args__ = (
        UniqueConstraint("team_id", "number", name="uq_players_team_number"),
    )

    id: str = SQLField(primary_key=True)
    name: str = SQLField(index=True)
    number: int
    # RESTRICT: a team is never removed out from under its players
    team_id: str = SQLField(
        sa_column=Column(
            String,
            ForeignKey("teams.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        )
    )
    position: str
    image_path: Optional[str] = SQLField(default=None)
    bio: Optional[str] = SQLField(default=None)
    batting_average: float = SQLField(default=0.0)
    home_runs: int = SQLField(default=0)
    rbi: int = SQLField(default=0)
    games_played: int = SQLField(default=0)
