from datetime import date, datetime
from typing import Optional

from pydantic import Field

from teamsite.models.fields import ApiModel, RequestModel, as_utc


class ThemeColors(ApiModel):
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None


class SeasonWindow(ApiModel):
    year: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    featured_date: Optional[date] = None  # e.g. all-star weekend


class SiteConfigFields(ApiModel):
    title: Optional[str] = None
    description: Optional[str] = None
    theme: ThemeColors = Field(default_factory=ThemeColors)
    season: SeasonWindow = Field(default_factory=SeasonWindow)


class SiteConfigRead(SiteConfigFields):
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "SiteConfigRead":
        return cls(
            title=row.title,
            description=row.description,
            theme=ThemeColors(
                primary=row.primary_color,
                secondary=row.secondary_color,
                accent=row.accent_color,
            ),
            season=SeasonWindow(
                year=row.season_year,
                start_date=row.start_date,
                end_date=row.end_date,
                featured_date=row.featured_date,
            ),
            updated_at=as_utc(row.updated_at),
        )


class ThemeUpdate(RequestModel):
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None


class SeasonUpdate(RequestModel):
    year: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    featured_date: Optional[date] = None


class SiteConfigUpdate(RequestModel):
    title: Optional[str] = None
    description: Optional[str] = None
    theme: Optional[ThemeUpdate] = None
    season: Optional[SeasonUpdate] = None


def merge_site_config(existing: SiteConfigFields, patch: SiteConfigUpdate) -> SiteConfigFields:
    """Overlay ``patch`` onto ``existing``; nested theme/season merge per field."""
    merged = existing.model_dump(include=set(SiteConfigFields.model_fields))
    merged.update(patch.model_dump(exclude_unset=True, exclude={"theme", "season"}))
    if patch.theme is not None:
        merged["theme"].update(patch.theme.model_dump(exclude_unset=True))
    if patch.season is not None:
        merged["season"].update(patch.season.model_dump(exclude_unset=True))
    return SiteConfigFields(**merged)
