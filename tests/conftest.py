"""Shared fixtures: a temporary SQLite database, repository and API client."""
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.main import create_app
from core.cache import TagCache
from core.database import Database
from core.settings import Settings
from features.tasks.repository import TaskRepository


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}",
        cache_ttl_seconds=60,
    )


@pytest_asyncio.fixture()
async def database(settings: Settings):
    db = Database.from_settings(settings)
    await db.connect()
    yield db
    await db.close()


@pytest.fixture()
def repo(database: Database) -> TaskRepository:
    return TaskRepository(database)


@pytest.fixture()
def cache() -> TagCache:
    return TagCache(ttl_seconds=60)


@pytest.fixture()
def app(settings: Settings, database: Database, cache: TagCache):
    # ASGITransport does not run the lifespan; the database is already open
    return create_app(settings=settings, database=database, cache=cache)


@pytest_asyncio.fixture()
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
