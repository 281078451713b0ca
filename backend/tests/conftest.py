"""Shared test fixtures and configuration."""
import pytest
from fastapi.testclient import TestClient

from nexus.config import Settings
from nexus.database import Database
from nexus.main import create_app
from nexus.seed import seed_database

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def empty_database():
    """In-memory database with the schema created and no rows."""
    database = Database(MEMORY_URL)
    await database.create_schema()
    yield database
    await database.dispose()


@pytest.fixture
async def database(empty_database):
    """In-memory database holding the default seed data."""
    async with empty_database.session() as session:
        await seed_database(session)
    return empty_database


@pytest.fixture
async def session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=MEMORY_URL, seed_on_startup=True, max_page_size=50)


@pytest.fixture
def client(settings):
    """TestClient over a freshly seeded app; the lifespan runs on enter."""
    app = create_app(settings=settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def strict_client():
    app = create_app(
        settings=Settings(database_url=MEMORY_URL, strict_references=True)
    )
    with TestClient(app) as test_client:
        yield test_client
