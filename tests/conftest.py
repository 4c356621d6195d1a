"""
Pytest configuration and fixtures for the asset library API tests.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from assetlib.config import Settings, get_settings
from assetlib.db.base import Base
from assetlib.db.session import get_db
from assetlib.dependencies import get_icon_resolver
from assetlib.main import app
from assetlib.models import Asset, User
from assetlib.schemas.asset import AssetCreate
from assetlib.services.asset_service import AssetService
from assetlib.services.cache import MemoryCache
from assetlib.services.icon_resolver import IconResolver
from assetlib.services.user_service import UserService

AUTHOR_NAME = "alice"
REVIEWER_NAME = "bob"


@pytest.fixture
def test_settings() -> Settings:
    """Settings used by the API: identities always come from the header."""
    return Settings(
        DEV_MODE=False,
        DEV_USER_NAME="dev",
        DEV_USER_EMAIL="dev@localhost",
        AUTH_USER_HEADER="X-Remote-User",
        ASSETS_PER_PAGE=40,
    )


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test database engine backed by a file in `tmp_path`."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def existing_icons() -> set[str]:
    """URLs the fake repository hosts answer with 200."""
    return set()


@pytest.fixture
def probed_urls() -> list[str]:
    """Every URL probed through the fake repository hosts, in order."""
    return []


@pytest_asyncio.fixture(scope="function")
async def http_client(existing_icons, probed_urls) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client whose requests never leave the process."""

    def handler(request: httpx.Request) -> httpx.Response:
        probed_urls.append(str(request.url))
        return httpx.Response(200 if str(request.url) in existing_icons else 404)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def icon_resolver(http_client) -> IconResolver:
    return IconResolver(cache=MemoryCache(), client=http_client, ttl=900)


@pytest_asyncio.fixture(scope="function")
async def client(db_session, icon_resolver, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_icon_resolver] = lambda: icon_resolver
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def author(db_session) -> User:
    return await UserService(db_session).get_or_create(AUTHOR_NAME)


@pytest_asyncio.fixture
async def reviewer(db_session) -> User:
    return await UserService(db_session).get_or_create(REVIEWER_NAME)


@pytest.fixture
def author_headers() -> dict[str, str]:
    """Identity headers of the author of the assets created by fixtures."""
    return {"X-Remote-User": AUTHOR_NAME}


@pytest.fixture
def reviewer_headers() -> dict[str, str]:
    return {"X-Remote-User": REVIEWER_NAME}


@pytest.fixture
def sample_asset_data() -> dict[str, Any]:
    """Sample asset submission."""
    return {
        "title": "Platformer Kit",
        "blurb": "Everything a 2D platformer needs",
        "description": "# Platformer Kit\n\nA **complete** kit.",
        "tags": "2D, Platformer ,physics",
        "category_id": 0,
        "cost": "MIT",
        "browse_url": "http://github.com/alice/platformer-kit.git",
        "versions": [
            {"version_string": "1.0.0", "godot_version": "4.2.x"},
        ],
        "previews": [
            {"type_id": 0, "link": "https://example.com/screenshot.png", "caption": "Level 1"},
        ],
    }


@pytest.fixture
def make_asset(db_session, author, sample_asset_data) -> Callable[..., Awaitable[Asset]]:
    """
    Factory submitting assets through the service.
    Keyword arguments override the submission fields; `owner` overrides the
    author.
    """

    async def _make_asset(owner: User | None = None, **overrides: Any) -> Asset:
        data = {**sample_asset_data, **overrides}
        return await AssetService(db_session).create(AssetCreate(**data), author=owner or author)

    return _make_asset
