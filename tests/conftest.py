"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database with the achievement
catalog seeded, and a frozen clock injected through the ``get_clock``
dependency so calendar-day and ISO-week rules are deterministic.
"""

from __future__ import annotations

import os

os.environ["TQ_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TQ_REDIS_URL"] = ""
os.environ["TQ_LOG_FORMAT"] = "console"
os.environ["TQ_JWT_SECRET"] = "test-secret-with-at-least-32-bytes!"

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from helpers import FrozenClock, bearer, register_user  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from taskquest.clock import get_clock  # noqa: E402
from taskquest.config import get_settings  # noqa: E402
from taskquest.database import close_db, create_all, get_session, init_db  # noqa: E402
from taskquest.gamification.seed import seed_achievements  # noqa: E402

get_settings.cache_clear()

# Wednesday of ISO week 2026-W10 (Monday 2026-03-02 .. Sunday 2026-03-08).
DEFAULT_NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(DEFAULT_NOW)


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema and seeded achievements; disposed after the test."""
    await init_db(get_settings().database_url)
    await create_all()
    async for session in get_session():
        await seed_achievements(session)
        break
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for service-level tests."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(database: None, clock: FrozenClock) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the ASGI app, with the frozen clock injected."""
    from taskquest.main import create_app

    app = create_app()
    app.dependency_overrides[get_clock] = lambda: clock
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    """Registration response for the default test user."""
    return await register_user(client)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    """Client carrying the default test user's bearer token."""
    client.headers.update(bearer(registered_user["access_token"]))
    return client
