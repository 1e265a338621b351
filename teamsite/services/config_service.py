"""Site configuration persistence (single row, id 1)."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from teamsite.core.errors import ConfigNotFoundError
from teamsite.core.validation import require_valid, validate_site_config
from teamsite.models.site_config import (
    SiteConfigFields,
    SiteConfigRead,
    SiteConfigUpdate,
    merge_site_config,
)
from teamsite.schemas.base import utcnow
from teamsite.schemas.site_config import SITE_CONFIG_ID, SiteConfigTable

logger = logging.getLogger(__name__)


def _apply_fields(row: SiteConfigTable, fields: SiteConfigFields) -> None:
    row.title = fields.title or ""
    row.description = fields.description
    row.primary_color = fields.theme.primary or ""
    row.secondary_color = fields.theme.secondary or ""
    row.accent_color = fields.theme.accent or ""
    row.season_year = fields.season.year or 0
    if fields.season.start_date is not None:
        row.start_date = fields.season.start_date
    if fields.season.end_date is not None:
        row.end_date = fields.season.end_date
    row.featured_date = fields.season.featured_date


async def get_site_config(db: AsyncSession) -> SiteConfigRead:
    async with db.begin():
        row = await db.get(SiteConfigTable, SITE_CONFIG_ID)
        if row is None:
            raise ConfigNotFoundError()
        return SiteConfigRead.from_row(row)


async def update_site_config(db: AsyncSession, patch: SiteConfigUpdate) -> SiteConfigRead:
    """Merge ``patch`` over the stored configuration, re-validate and write it."""
    async with db.begin():
        row = await db.get(SiteConfigTable, SITE_CONFIG_ID)
        if row is None:
            raise ConfigNotFoundError()

        merged = merge_site_config(SiteConfigRead.from_row(row), patch)
        require_valid(validate_site_config(merged))

        _apply_fields(row, merged)
        row.updated_at = utcnow()
        await db.flush()
        updated = SiteConfigRead.from_row(row)

    logger.info("Updated site configuration")
    return updated


async def ensure_site_config(db: AsyncSession, defaults: SiteConfigFields) -> bool:
    """Insert the singleton row from ``defaults`` if it is missing.

    Returns True when a row was created.
    """
    async with db.begin():
        if await db.get(SiteConfigTable, SITE_CONFIG_ID) is not None:
            return False
        require_valid(validate_site_config(defaults))
        row = SiteConfigTable(
            id=SITE_CONFIG_ID,
            start_date=defaults.season.start_date,
            end_date=defaults.season.end_date,
        )
        _apply_fields(row, defaults)
        db.add(row)
    return True
