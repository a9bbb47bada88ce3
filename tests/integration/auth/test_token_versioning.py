"""
Integration tests for password changes and session invalidation.

Changing the password bumps token_version and drops every session of the
user; the caller gets a fresh cookie.
"""

import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.core.config import settings
from teamtasks.core.security import create_session_token, verify_password
from teamtasks.models.user import User
from teamtasks.models.user_session import UserSession
from tests.utils import cookie_headers


@pytest.mark.asyncio
class TestPasswordChange:
    """Test PUT /api/auth/password endpoint."""

    async def test_change_password_success(
        self, client: AsyncClient, db_session: AsyncSession, user, auth_headers
    ):
        response = await client.put(
            "/api/auth/password",
            headers=auth_headers,
            json={"oldPassword": "Password123!", "newPassword": "NewPassword456"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Password changed successfully"

        result = await db_session.execute(select(User).where(User.id == user.id))
        stored = result.scalar_one()
        await db_session.refresh(stored)
        assert verify_password("NewPassword456", stored.password)
        assert stored.token_version == 2

    async def test_wrong_current_password(self, client: AsyncClient, auth_headers):
        response = await client.put(
            "/api/auth/password",
            headers=auth_headers,
            json={"oldPassword": "NotMyPassword", "newPassword": "NewPassword456"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Current password is incorrect"}

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.put(
            "/api/auth/password",
            json={"oldPassword": "Password123!", "newPassword": "NewPassword456"}
        )

        assert response.status_code == 401

    async def test_old_sessions_stop_working(
        self, client: AsyncClient, user, auth_headers, login_as
    ):
        other_device = await login_as(user)

        response = await client.put(
            "/api/auth/password",
            headers=auth_headers,
            json={"oldPassword": "Password123!", "newPassword": "NewPassword456"}
        )
        assert response.status_code == 200

        assert (await client.get("/api/auth/me", headers=auth_headers)).status_code == 401
        assert (await client.get("/api/auth/me", headers=other_device)).status_code == 401

        # The re-issued cookie works and the new password logs in
        assert (await client.get("/api/auth/me", headers=cookie_headers(response))).status_code == 200
        login = await client.post(
            "/api/auth/login",
            json={"email": user.email, "password": "NewPassword456"}
        )
        assert login.status_code == 200


@pytest.mark.asyncio
class TestSessionValidity:
    """Cookies only resolve while their session row is alive and current."""

    async def test_stale_token_version_is_rejected(
        self, client: AsyncClient, db_session: AsyncSession, user
    ):
        db_session.add(UserSession(
            sid="stale-session",
            user_id=user.id,
            expire=datetime.now(timezone.utc) + timedelta(days=1),
        ))
        await db_session.commit()

        token = create_session_token(user.id, "stale-session", token_version=user.token_version + 1)
        response = await client.get(
            "/api/auth/me",
            headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}
        )

        assert response.status_code == 401

    async def test_expired_session_row_is_rejected(
        self, client: AsyncClient, db_session: AsyncSession, user
    ):
        db_session.add(UserSession(
            sid="expired-session",
            user_id=user.id,
            expire=datetime.now(timezone.utc) - timedelta(minutes=1),
        ))
        await db_session.commit()

        token = create_session_token(user.id, "expired-session", user.token_version)
        response = await client.get(
            "/api/auth/me",
            headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}
        )

        assert response.status_code == 401

    async def test_signed_cookie_without_session_row(self, client: AsyncClient, user):
        token = create_session_token(user.id, "never-created", user.token_version)
        response = await client.get(
            "/api/auth/me",
            headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}
        )

        assert response.status_code == 401

    async def test_session_bound_to_its_user(
        self, client: AsyncClient, db_session: AsyncSession, user, admin_user
    ):
        db_session.add(UserSession(
            sid="user-session",
            user_id=user.id,
            expire=datetime.now(timezone.utc) + timedelta(days=1),
        ))
        await db_session.commit()

        token = create_session_token(admin_user.id, "user-session", admin_user.token_version)
        response = await client.get(
            "/api/auth/me",
            headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}
        )

        assert response.status_code == 401
