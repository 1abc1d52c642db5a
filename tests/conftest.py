from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from marketplace_api.api.main import create_app
from marketplace_api.core.security import create_access_token
from marketplace_api.core.settings import get_app_settings
from marketplace_api.db.base import Base
from marketplace_api.db.session import get_engine, reset_engine
from tests.support import SeededUser, create_user


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # Every test gets its own SQLite file regardless of shell/.env overrides.
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}")
    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "false")
    monkeypatch.setenv("AUTO_SEED", "false")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret-key-for-tests")
    monkeypatch.delenv("LOGIN_MAX_FAILED_ATTEMPTS", raising=False)
    monkeypatch.delenv("LOGIN_LOCKOUT_MINUTES", raising=False)


@pytest_asyncio.fixture()
async def database(_test_env) -> AsyncIterator[None]:
    await reset_engine()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await reset_engine()


@pytest_asyncio.fixture()
async def app(database) -> AsyncIterator[FastAPI]:
    application = create_app(get_app_settings())
    yield application
    application.state.login_tracker.close()


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture()
async def seeded_user(database) -> SeededUser:
    return await create_user("Alice", "alice@example.com", "secret123")


@pytest.fixture()
def auth_headers(seeded_user: SeededUser) -> dict[str, str]:
    token = create_access_token(subject=str(seeded_user.id), email=seeded_user.email)
    return {"Authorization": f"Bearer {token}"}
