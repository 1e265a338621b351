from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamsite.models.site_config import SiteConfigUpdate
from teamsite.routes.helpers import ok, require_token
from teamsite.services import config_service
from teamsite.utils.db_async import get_session

router = APIRouter(prefix="/api/config", tags=["config"])


@router.get("")
async def get_site_config(db: AsyncSession = Depends(get_session)) -> dict:
    config = await config_service.get_site_config(db)
    return ok(config.to_wire())


@router.put("", dependencies=[Depends(require_token)])
async def update_site_config(
    patch: SiteConfigUpdate, db: AsyncSession = Depends(get_session)
) -> dict:
    """Partially update the site configuration; theme and season merge per field."""
    config = await config_service.update_site_config(db, patch)
    return ok(config.to_wire())
