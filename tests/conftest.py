"""Pytest fixtures: a temp-file SQLite roster store and the app wired to it."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from teamsite.config import Settings
from teamsite.main import create_app
from teamsite.services.roster_store import RosterStore
from tests.integration.auth_helpers import ADMIN_PASSWORD, bearer, login_admin

load_dotenv()


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment and pointed at ``tmp_path``."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'roster.db'}",
        admin_password=ADMIN_PASSWORD,
        secret_key="test-signing-key",
        uploads_dir=str(tmp_path / "uploads"),
        image_storage_local=True,
        seed_default_data=True,
    )


@pytest_asyncio.fixture()
async def store(test_settings: Settings) -> AsyncGenerator[RosterStore, None]:
    """An opened store seeded with the default config and Tigers roster."""
    roster_store = RosterStore(test_settings.database_url)
    await roster_store.open()
    try:
        yield roster_store
    finally:
        await roster_store.close()


@pytest_asyncio.fixture()
async def db_session(store: RosterStore) -> AsyncGenerator[AsyncSession, None]:
    async with store.session() as session:
        yield session


@pytest.fixture()
def app(test_settings: Settings, store: RosterStore) -> FastAPI:
    # ASGITransport does not run the lifespan; the store fixture opens it instead.
    return create_app(test_settings, store=store)


@pytest_asyncio.fixture()
async def app_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide an HTTP client with the application wired to the test store."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture()
async def auth_headers(app_client: AsyncClient) -> dict[str, str]:
    response = await login_admin(app_client)
    assert response.status_code == 200, response.text
    token = response.json()["data"]["token"]
    return bearer(token)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Ensure HTTPX uses asyncio backend during tests."""
    return "asyncio"
