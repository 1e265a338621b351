"""
Main entry point for the FastAPI application.
"""
from contextlib import asynccontextmanager
from datetime import timedelta
import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from teamsite.config import Settings, settings as default_settings
from teamsite.logging_config import setup_logging
from teamsite.routes import auth, config, players, teams, upload
from teamsite.routes.error_handlers import register_error_handlers
from teamsite.services.auth_service import TokenAuthority
from teamsite.services.image_storage import ImageStorage
from teamsite.services.roster_store import RosterStore

logger = logging.getLogger(__name__)


def _should_init_db(settings: Settings) -> bool:
    return settings.auto_init_db and not os.getenv("FLY_APP_NAME")


@asynccontextmanager
async def lifespan(app: FastAPI):
    store: RosterStore = app.state.store
    try:
        await store.open()
        logger.info("Roster store ready.")
    except Exception:
        logger.exception("Roster store failed to open")
        raise

    # Hand control to the application
    yield

    try:
        await store.close()
        logger.info("Roster store closed.")
    except Exception:
        logger.exception("Failed to close roster store")


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[RosterStore] = None,
    authority: Optional[TokenAuthority] = None,
    images: Optional[ImageStorage] = None,
) -> FastAPI:
    """Build the application and its collaborators.

    Tests pass their own store/authority/images; the defaults come from
    ``settings``.
    """
    settings = settings or default_settings

    app = FastAPI(title="TeamSite Roster", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store or RosterStore(
        settings.database_url,
        create_tables=_should_init_db(settings),
        seed_defaults=settings.seed_default_data,
    )
    app.state.authority = authority or TokenAuthority(
        settings.admin_password,
        settings.secret_key,
        ttl=timedelta(hours=settings.token_ttl_hours),
    )
    app.state.images = images or ImageStorage(settings)

    register_error_handlers(app)
    app.include_router(auth.router)
    app.include_router(teams.router)
    app.include_router(players.router)
    app.include_router(config.router)
    app.include_router(upload.router)

    if settings.image_storage_local:
        os.makedirs(settings.uploads_dir, exist_ok=True)
        app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")

    @app.get("/api/health")
    async def health_check():
        """Health Check Endpoint"""
        return {"success": True, "data": {"status": "ok"}}

    return app


setup_logging(
    level=default_settings.log_level,
    access_log=default_settings.access_log,
    sql_echo=default_settings.sql_echo,
)

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
