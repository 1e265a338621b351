"""Singleton site configuration row (id is always 1)."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from teamsite.schemas.base import utcnow

SITE_CONFIG_ID = 1


class SiteConfigTable(SQLModel, table=True):  # type: ignore[call-arg]
    __tablename__ = "site_config"

    id: int = Field(default=SITE_CONFIG_ID, primary_key=True)
    title: str
    description: Optional[str] = Field(default=None)
    primary_color: str
    secondary_color: str
    accent_color: str
    season_year: int
    start_date: date
    end_date: date
    featured_date: Optional[date] = Field(default=None)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
