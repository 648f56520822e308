"""Async SQLAlchemy engine and session factory.

SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.
"""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import settings


def _engine_options(url: str) -> dict:
    # SQLite (local dev, tests) uses a single-connection pool; sizing
    # options only apply to server databases.
    if url.startswith("sqlite"):
        return {"echo": settings.debug}
    return {"echo": settings.debug, "pool_size": 5, "max_overflow": 15, "pool_pre_ping": True}


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Session factory, one session per request.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request.

    Anything not committed by the service layer is rolled back when the
    request ends, so a failure never leaves a partial write behind.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
