"""
Team persistence helpers: membership queries and the cascading delete.
"""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.core.permissions import TeamRole
from teamtasks.logging import get_logger
from teamtasks.models.membership import Membership
from teamtasks.models.task import Task
from teamtasks.models.team import Team
from teamtasks.models.user import User
from teamtasks.schemas.membership import TeamMemberOut
from teamtasks.schemas.team import TeamWithRole

logger = get_logger("teams")


async def list_user_teams(db: AsyncSession, user_id: int) -> List[TeamWithRole]:
    result = await db.execute(
        select(Team, Membership.role)
        .join(Membership, Membership.team_id == Team.id)
        .where(Membership.user_id == user_id)
        .order_by(Team.created_at, Team.id)
    )
    return [
        TeamWithRole(
            id=team.id,
            name=team.name,
            description=team.description,
            creator_id=team.creator_id,
            created_at=team.created_at,
            updated_at=team.updated_at,
            role=role,
        )
        for team, role in result.all()
    ]


async def list_team_members(db: AsyncSession, team_id: int) -> List[TeamMemberOut]:
    result = await db.execute(
        select(User, Membership)
        .join(Membership, Membership.user_id == User.id)
        .where(Membership.team_id == team_id)
        .order_by(Membership.joined_at, Membership.id)
    )
    return [
        TeamMemberOut(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar_url=user.avatar_url,
            role=membership.role,
            joined_at=membership.joined_at,
        )
        for user, membership in result.all()
    ]


async def count_admins(db: AsyncSession, team_id: int, lock: bool = False) -> int:
    """
    Count admin memberships of a team.

    With ``lock`` the admin rows are read FOR UPDATE so two concurrent
    removals/demotions cannot both see a second admin.
    """
    query = select(Membership.id).where(
        Membership.team_id == team_id,
        Membership.role == TeamRole.ADMIN.value
    )
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    return len(result.scalars().all())


async def _delete_team_tasks(db: AsyncSession, team_id: int) -> int:
    result = await db.execute(delete(Task).where(Task.team_id == team_id))
    return result.rowcount


async def _delete_team_memberships(db: AsyncSession, team_id: int) -> int:
    result = await db.execute(delete(Membership).where(Membership.team_id == team_id))
    return result.rowcount


async def _delete_team_row(db: AsyncSession, team_id: int) -> int:
    result = await db.execute(delete(Team).where(Team.id == team_id))
    return result.rowcount


async def delete_team_cascade(db: AsyncSession, team_id: int) -> None:
    """
    Delete a team with its tasks and memberships in one transaction.

    Any failure rolls every step back and is re-raised, leaving the team
    fully intact.
    """
    try:
        tasks_deleted = await _delete_team_tasks(db, team_id)
        memberships_deleted = await _delete_team_memberships(db, team_id)
        await _delete_team_row(db, team_id)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.error("Team deletion rolled back", team_id=team_id)
        raise

    logger.info(
        "Team deleted",
        team_id=team_id,
        tasks_deleted=tasks_deleted,
        memberships_deleted=memberships_deleted,
    )
