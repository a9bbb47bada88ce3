"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- A fresh SQLite database per test (aiosqlite, file in tmp_path)
- Redis client (in-memory fake)
- HTTP client with dependency overrides
- Base data fixtures (user, admin_user, auth_headers, team)
"""

import os
import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from fakeredis import FakeAsyncRedis

# Set test environment variables BEFORE importing app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SENTRY_DSN"] = ""

from teamtasks.main import app
from teamtasks.api.dependencies import get_db, get_redis
from teamtasks.core.config import settings
from teamtasks.core.security import SESSION_MAX_AGE, create_session_token, generate_session_id
from teamtasks.db.base import Base
from teamtasks.models.user_session import UserSession


# ==================== Database ====================

@pytest.fixture
async def test_engine(tmp_path):
    """
    Create a database engine backed by a throwaway SQLite file.

    Each connection is opened fresh (NullPool) so the app's sessions and the
    test's session behave like separate clients of the same database.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False  # Set to True for SQL debugging
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session used by tests to arrange data and inspect results.

    Commit after arranging data: the app reads through its own sessions.
    """
    async with session_factory() as session:
        yield session


# ==================== Redis ====================

@pytest.fixture
async def redis_client() -> AsyncGenerator[FakeAsyncRedis, None]:
    """
    Create fake Redis client (in-memory) for each test.
    """
    redis = FakeAsyncRedis()
    yield redis
    await redis.flushall()
    await redis.aclose()


# ==================== FastAPI Client ====================

@pytest.fixture
async def client(session_factory, redis_client: FakeAsyncRedis) -> AsyncGenerator[AsyncClient, None]:
    """
    Create HTTP client for testing FastAPI endpoints.

    Overrides get_db and get_redis so every request gets its own session on
    the test database and shares the fake Redis.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        yield redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Sessions ====================

async def make_session_headers(db_session: AsyncSession, user) -> dict:
    """
    Open a real server-side session for ``user`` and return a Cookie header.
    """
    sid = generate_session_id()
    db_session.add(UserSession(
        sid=sid,
        user_id=user.id,
        expire=datetime.now(timezone.utc) + SESSION_MAX_AGE,
    ))
    await db_session.commit()

    token = create_session_token(user.id, sid, user.token_version)
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}


@pytest.fixture
def login_as(db_session: AsyncSession):
    """
    Build Cookie headers for any user.

    Usage:
        headers = await login_as(other_user)
    """
    async def _login_as(user) -> dict:
        return await make_session_headers(db_session, user)
    return _login_as


# ==================== Base Data Fixtures ====================

@pytest.fixture
async def user(db_session: AsyncSession):
    """
    Create a test user (password "Password123!").
    """
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, email="user@test.com", name="Test User")
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def admin_user(db_session: AsyncSession):
    """
    Second user, used as a fellow admin in team tests.
    """
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(
        db_session,
        email="admin@test.com",
        name="Admin User"
    )
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def auth_headers(db_session: AsyncSession, user):
    """
    Cookie header carrying a valid session for ``user``.
    """
    return await make_session_headers(db_session, user)


@pytest.fixture
async def admin_auth_headers(db_session: AsyncSession, admin_user):
    return await make_session_headers(db_session, admin_user)


@pytest.fixture
async def team(db_session: AsyncSession, user):
    """
    Create a team created by ``user``, who is its admin.
    """
    from tests.factories.team import TeamFactory
    team = await TeamFactory.create_with_admin_async(db_session, creator=user)
    await db_session.commit()
    await db_session.refresh(team)
    return team


# ==================== Helper Fixtures ====================

@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for httpx AsyncClient.
    """
    return "asyncio"
