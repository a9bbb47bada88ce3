"""
Integration tests for user directory endpoints.

Tests:
- GET /api/users/all
- GET /api/users/get/{id}
- GET /api/users/get/{id}/tasks
- PUT /api/users/update/{id}
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import MembershipFactory, TaskFactory, TeamFactory, UserFactory


@pytest.mark.asyncio
class TestListUsers:

    async def test_lists_public_fields(self, client: AsyncClient, user, admin_user, auth_headers):
        response = await client.get("/api/users/all", headers=auth_headers)

        assert response.status_code == 200
        users = response.json()["users"]
        assert [u["name"] for u in users] == ["Admin User", "Test User"]
        assert all("password" not in u and "token_version" not in u for u in users)

    async def test_search(self, client: AsyncClient, db_session: AsyncSession, user, auth_headers):
        await UserFactory.create_async(db_session, name="Grace Hopper", email="grace@navy.mil")
        await UserFactory.create_async(db_session, name="Alan Turing", email="alan@bletchley.uk")
        await db_session.commit()

        by_name = await client.get("/api/users/all", headers=auth_headers, params={"q": "grace"})
        by_email = await client.get("/api/users/all", headers=auth_headers, params={"q": "BLETCHLEY"})

        assert [u["name"] for u in by_name.json()["users"]] == ["Grace Hopper"]
        assert [u["name"] for u in by_email.json()["users"]] == ["Alan Turing"]

    async def test_requires_session(self, client: AsyncClient):
        response = await client.get("/api/users/all")

        assert response.status_code == 401


@pytest.mark.asyncio
class TestGetUser:

    async def test_get(self, client: AsyncClient, admin_user, auth_headers):
        response = await client.get(f"/api/users/get/{admin_user.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "admin@test.com"

    async def test_missing(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/users/get/9999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}


@pytest.mark.asyncio
class TestUserTasks:

    async def test_teammate_tasks(
        self, client: AsyncClient, db_session: AsyncSession, user, team, auth_headers
    ):
        mate = await UserFactory.create_async(db_session)
        await MembershipFactory.create_async(db_session, team_id=team.id, user_id=mate.id)
        task = await TaskFactory.create_async(db_session, team_id=team.id, created_by=user.id, assigned_to=mate.id)
        await TaskFactory.create_async(db_session, team_id=team.id, created_by=user.id)
        await db_session.commit()

        response = await client.get(f"/api/users/get/{mate.id}/tasks", headers=auth_headers)

        assert response.status_code == 200
        assert [t["id"] for t in response.json()["tasks"]] == [task.id]

    async def test_own_tasks(self, client: AsyncClient, db_session: AsyncSession, user, team, auth_headers):
        await TaskFactory.create_async(db_session, team_id=team.id, created_by=user.id)
        await db_session.commit()

        response = await client.get(f"/api/users/get/{user.id}/tasks", headers=auth_headers)

        assert len(response.json()["tasks"]) == 1

    async def test_stranger_tasks_forbidden(
        self, client: AsyncClient, db_session: AsyncSession, admin_user, auth_headers
    ):
        other_team = await TeamFactory.create_with_admin_async(db_session, creator=admin_user)
        await TaskFactory.create_async(db_session, team_id=other_team.id, created_by=admin_user.id)
        await db_session.commit()

        response = await client.get(f"/api/users/get/{admin_user.id}/tasks", headers=auth_headers)

        assert response.status_code == 403
        assert response.json() == {"error": "Not authorized to view tasks for this user"}

    async def test_missing_user(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/users/get/9999/tasks", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.asyncio
class TestUpdateUser:

    async def test_update_self(self, client: AsyncClient, user, auth_headers):
        response = await client.put(
            f"/api/users/update/{user.id}",
            headers=auth_headers,
            json={"name": "Renamed User"}
        )

        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Renamed User"
        assert response.json()["message"] == "Profile updated successfully"

    async def test_cannot_update_others(self, client: AsyncClient, admin_user, auth_headers):
        response = await client.put(
            f"/api/users/update/{admin_user.id}",
            headers=auth_headers,
            json={"name": "Hijacked"}
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Cannot update other user's profile"}

    async def test_email_conflict(self, client: AsyncClient, user, admin_user, auth_headers):
        response = await client.put(
            f"/api/users/update/{user.id}",
            headers=auth_headers,
            json={"email": "admin@test.com"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Email already taken"}
