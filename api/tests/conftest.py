"""Shared test fixtures.

Tests run against a throwaway SQLite database unless CD_DATABASE_URL points
somewhere else. The schema is rebuilt for every test that touches the store.
"""

import os

os.environ.setdefault("CD_DATABASE_URL", "sqlite+aiosqlite:///./courtdesk_test.db")
os.environ.setdefault("CD_CREATE_TABLES", "false")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from courtdesk.core.auth import hash_password  # noqa: E402
from courtdesk.core.database import async_session_factory, engine  # noqa: E402
from courtdesk.main import app  # noqa: E402
from courtdesk.models import Base, User, UserRole  # noqa: E402
from courtdesk.services.audit import action_guard  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass123"
STAFF_EMAIL = "staff@example.com"
STAFF_PASSWORD = "staffpass123"


@pytest.fixture
async def schema():
    """Dispose stale pool connections and rebuild every table.

    The global engine is created at import time; pooled connections are bound
    to the event loop of the test that opened them.
    """
    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    action_guard.reset()
    yield
    await engine.dispose()


@pytest.fixture
async def db(schema):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
async def client(schema):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def seed_users(schema):
    """One admin and one regular staff account."""
    async with async_session_factory() as session:
        admin = User(
            name="Admin",
            email=ADMIN_EMAIL,
            hashed_password=hash_password(ADMIN_PASSWORD),
            role=UserRole.ADMIN,
        )
        staff = User(
            name="Front Desk",
            email=STAFF_EMAIL,
            hashed_password=hash_password(STAFF_PASSWORD),
            role=UserRole.USER,
        )
        session.add_all([admin, staff])
        await session.commit()
        return {"admin": admin, "staff": staff}


async def _login(client, email, password):
    resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
async def admin_headers(client, seed_users):
    return await _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
async def staff_headers(client, seed_users):
    return await _login(client, STAFF_EMAIL, STAFF_PASSWORD)
