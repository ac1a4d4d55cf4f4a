"""Shared test fixtures for the OneSync API."""
import asyncio
import os
import tempfile
import uuid
from pathlib import Path
from typing import Generator

import httpx
import pytest

# Settings are read once at import time, so the environment goes first
_test_root = Path(tempfile.mkdtemp(prefix="onesync-tests-"))
os.environ.update({
    "DATABASE_URL": f"sqlite+aiosqlite:///{_test_root / 'import.db'}",
    "SECRET_KEY": "test-secret-key",
    "STORAGE_ROOT": str(_test_root / "storage"),
    "PICA_SECRET_KEY": "pica-secret",
    "PICA_SPOTIFY_CONNECTION_KEY": "spotify-key",
    "PICA_APPLE_MUSIC_CONNECTION_KEY": "apple-key",
    "PICA_STRIPE_CONNECTION_KEY": "stripe-key",
    "PICA_INTERCOM_CONNECTION_KEY": "intercom-key",
    "INTERCOM_PROJECT_REF": "proj_test",
    "TROLLEY_API_KEY": "trolley-key",
    "TROLLEY_API_SECRET": "trolley-secret",
    "FTP_HOST": "ftp.example.com",
    "FTP_USER": "distributor",
    "FTP_PASSWORD": "ftp-password",
    "MASTERING_API_URL": "https://mastering.example.com",
    "MASTERING_API_KEY": "mastering-key",
    "SPOTIFY_CLIENT_ID": "spotify-client",
})

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from onesync.main import app
from onesync.services.database import Base, get_db, get_session_factory
from onesync.services.storage import LocalObjectStorage, get_storage


def run(coro):
    """Run a coroutine to completion from synchronous test code."""
    return asyncio.run(coro)


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def session_factory(tmp_path: Path) -> Generator[sessionmaker, None, None]:
    """A fresh SQLite database per test. NullPool keeps connections off the event loops."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    run(create_tables())
    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    run(engine.dispose())


@pytest.fixture
def storage(tmp_path: Path) -> LocalObjectStorage:
    return LocalObjectStorage(root=str(tmp_path / "storage"), public_url="/storage")


@pytest.fixture
def db_run(session_factory):
    """Run `fn(session)` against the test database and return its result."""
    def _run(fn):
        async def _go():
            async with session_factory() as session:
                result = await fn(session)
                await session.commit()
                return result
        return run(_go())
    return _run


@pytest.fixture
def client(session_factory, storage) -> Generator[TestClient, None, None]:
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_user(client: TestClient, email: str = None, password: str = "secret123", name: str = "Test Artist") -> dict:
    email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
    response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    token = client.post("/api/auth/token", data={"username": email, "password": password}).json()["access_token"]
    return {"id": response.json()["id"], "email": email, "headers": {"Authorization": f"Bearer {token}"}}


@pytest.fixture
def user(client: TestClient) -> dict:
    return register_user(client)


@pytest.fixture
def auth_headers(user: dict) -> dict:
    return user["headers"]


@pytest.fixture
def override_dependency():
    """Swap a service dependency for the duration of a test."""
    def _override(dependency, factory):
        app.dependency_overrides[dependency] = factory
    return _override


def mock_transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)
