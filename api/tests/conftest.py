"""Shared fixtures.

Every test gets its own SQLite database file and upload directory under
``tmp_path``; the app is built with ``create_app(settings)`` so nothing
touches the developer's ``.env``.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.auth.dependencies import require_admin
from src.auth.schemas import AuthenticatedUser
from src.config.settings import Settings
from src.core.database import Database
from src.main import create_app


ADMIN_USER = AuthenticatedUser(
    uid="admin-uid",
    email="admin@example.com",
    email_verified=True,
    claims={"admin": True},
)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway database and upload directory."""
    return Settings(
        _env_file=None,
        environment="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        database_create_tables=True,
        upload_dir=str(tmp_path / "uploads"),
        log_requests=False,
        firebase_enabled=False,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    """Application without admin override."""
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Client with the lifespan running (database and services ready)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Client whose requests pass the admin guard."""
    app.dependency_overrides[require_admin] = lambda: ADMIN_USER
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Database with all tables created."""
    db = Database(settings)
    await db.create_all()
    yield db
    await db.dispose()
