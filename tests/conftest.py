"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Env vars are set before anything from taskboard is imported, so the
   settings singleton sees SQLite and cheap bcrypt rounds.
2. Each test gets its own in-memory SQLite engine. StaticPool keeps a
   single connection open, otherwise every new connection would see an
   empty database.
3. get_db is overridden to hand out sessions from that engine — one
   session per request, exactly like production.

Auth is NOT overridden: tests register users and send real bearer tokens.
"""

import os

os.environ["TASKBOARD_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["TASKBOARD_BCRYPT_ROUNDS"] = "4"
os.environ["TASKBOARD_ENVIRONMENT"] = "development"

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from taskboard.db.engine import get_db  # noqa: E402
from taskboard.db.models import Base  # noqa: E402
from taskboard.main import app  # noqa: E402

PASSWORD = "secret123"


@pytest_asyncio.fixture()
async def session_factory():
    """Per-test engine with the schema created from the models."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Direct session for service-level tests and for inspecting rows."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with the app's get_db pointed at the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ─── Users ───────────────────────────────────────────────


@pytest_asyncio.fixture()
async def make_user(client):
    """Factory: register a user, return its fields plus ready-made auth headers."""

    async def _make(name: str = "Test User", email: str = None) -> dict:
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/register",
            json={
                "name": name,
                "email": email,
                "password": PASSWORD,
                "password_confirmation": PASSWORD,
            },
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return {
            **body["data"],
            "password": PASSWORD,
            "token": body["access_token"],
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
        }

    return _make


@pytest_asyncio.fixture()
async def alice(make_user):
    return await make_user(name="Alice")


@pytest_asyncio.fixture()
async def bob(make_user):
    return await make_user(name="Bob")
