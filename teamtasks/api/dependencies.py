from datetime import datetime, timezone
from typing import Dict

import redis.asyncio as aioredis
from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.core.config import settings
from teamtasks.core.exceptions import ForbiddenError, NotFoundError, UnauthenticatedError
from teamtasks.core.permissions import Action, Resource, has_permission, role_of
from teamtasks.core.security import decode_session_token
from teamtasks.db.session import SessionAsync
from teamtasks.models.membership import Membership
from teamtasks.models.team import Team
from teamtasks.models.user import User
from teamtasks.models.user_session import UserSession


async def get_db():
    async with SessionAsync() as session:
        yield session


async def get_redis():
    redis = aioredis.from_url(settings.REDIS_URL)
    try:
        yield redis
    finally:
        await redis.aclose()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; they are stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def resolve_session_user(token: str, db: AsyncSession):
    """
    Resolve a session cookie value to its user.

    Returns:
        (User, UserSession) or (None, None) when the cookie is invalid,
        expired, revoked or signed for an older token_version
    """
    claims = decode_session_token(token) if token else None
    if claims is None:
        return None, None

    result = await db.execute(
        select(UserSession).where(
            UserSession.sid == claims["sid"],
            UserSession.user_id == int(claims["sub"])
        )
    )
    session = result.scalar_one_or_none()
    if session is None or _as_utc(session.expire) <= datetime.now(timezone.utc):
        return None, None

    result = await db.execute(select(User).where(User.id == session.user_id))
    user = result.scalar_one_or_none()
    if user is None or int(claims["tv"]) != int(user.token_version or 1):
        return None, None

    return user, session


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    user, session = await resolve_session_user(token, db)
    if user is None:
        raise UnauthenticatedError()

    request.state.user = user
    request.state.session_id = session.sid
    return user


# ==================== Membership lookups ====================

async def get_membership(db: AsyncSession, team_id: int, user_id: int, for_update: bool = False):
    query = select(Membership).where(
        Membership.team_id == team_id,
        Membership.user_id == user_id
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_team_member_context(
    team_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Dict:
    """
    Get team member context for the current user.

    Returns a context dict with user, team, membership and role.

    Raises:
        ForbiddenError: If user is not a member of the team
        NotFoundError: If the team row is gone
    """
    membership = await get_membership(db, team_id, current_user.id)
    if membership is None:
        raise ForbiddenError("Not a team member")

    result = await db.execute(select(Team).where(Team.id == team_id))
    team = result.scalar_one_or_none()
    if team is None:
        raise NotFoundError("Team not found")

    return {
        "team_id": team_id,
        "team": team,
        "user": current_user,
        "membership": membership,
        "role": role_of(membership),
    }


def require_permission(resource: Resource, action: Action):
    """
    Factory to create a dependency that checks the caller's team role.

    Usage:
        @router.put("/update/{team_id}")
        async def update_team(
            team_id: int,
            context = Depends(require_permission(Resource.TEAM, Action.UPDATE)),
            db: AsyncSession = Depends(get_db)
        ):
            ...

    Args:
        resource: Resource being accessed
        action: Action being performed

    Returns:
        Dependency function that validates permissions
    """
    async def permission_checker(
        context: Dict = Depends(get_team_member_context)
    ) -> Dict:
        if not has_permission(context["role"], resource, action):
            raise ForbiddenError("Insufficient permissions")
        return context

    return permission_checker
