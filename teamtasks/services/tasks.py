"""
Task queries: the visibility predicate, joined task payloads and stats.

A task is visible to a user who holds any membership in the task's team or
who is its assignee. Every listing and aggregate goes through
``visible_to`` so the rule lives in one place.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from teamtasks.core.permissions import TaskStatus
from teamtasks.models.membership import Membership
from teamtasks.models.task import Task
from teamtasks.models.team import Team
from teamtasks.models.user import User
from teamtasks.schemas.task import TaskOut, TaskStats

DEFAULT_PAGE_SIZE = 20

Assignee = aliased(User, name="assignee_user")
Creator = aliased(User, name="creator_user")


def visible_to(user_id: int):
    """SQL predicate: caller is a member of the task's team OR its assignee"""
    member_of_team = (
        select(Membership.id)
        .where(Membership.team_id == Task.team_id, Membership.user_id == user_id)
        .exists()
    )
    return or_(member_of_team, Task.assigned_to == user_id)


def task_detail_query():
    return (
        select(
            Task,
            Team.name.label("team_name"),
            Assignee.name.label("assigned_to_name"),
            Creator.name.label("created_by_name"),
        )
        .join(Team, Task.team_id == Team.id)
        .outerjoin(Assignee, Task.assigned_to == Assignee.id)
        .outerjoin(Creator, Task.created_by == Creator.id)
    )


def to_task_out(row) -> TaskOut:
    task, team_name, assigned_to_name, created_by_name = row
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        created_at=task.created_at,
        updated_at=task.updated_at,
        team_id=task.team_id,
        team_name=team_name,
        assigned_to=task.assigned_to,
        assigned_to_id=task.assigned_to,
        assigned_to_name=assigned_to_name,
        created_by=task.created_by,
        created_by_name=created_by_name,
    )


async def get_task_out(db: AsyncSession, task_id: int) -> Optional[TaskOut]:
    result = await db.execute(task_detail_query().where(Task.id == task_id))
    row = result.first()
    return to_task_out(row) if row else None


async def shares_team(db: AsyncSession, user_id: int, other_user_id: int) -> bool:
    """True when both users hold a membership in at least one common team"""
    mine = aliased(Membership)
    theirs = aliased(Membership)
    result = await db.execute(
        select(mine.id)
        .join(theirs, mine.team_id == theirs.team_id)
        .where(mine.user_id == user_id, theirs.user_id == other_user_id)
        .limit(1)
    )
    return result.first() is not None


async def list_visible_tasks(
    db: AsyncSession,
    user_id: int,
    team_id: Optional[int] = None,
    assignee_id: Optional[int] = None,
    assigned_user_id: Optional[int] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0
) -> List[TaskOut]:
    """
    List tasks the user can see, newest first.

    ``assigned_user_id`` narrows to one user's assignments (the caller is
    expected to have checked they share a team); the other filters are
    plain AND predicates on top of visibility.
    """
    filters = [visible_to(user_id)]
    if assigned_user_id is not None:
        filters.append(Task.assigned_to == assigned_user_id)
    if team_id is not None:
        filters.append(Task.team_id == team_id)
    if assignee_id is not None:
        filters.append(Task.assigned_to == assignee_id)
    if status is not None:
        filters.append(Task.status == status)
    if priority is not None:
        filters.append(Task.priority == priority)

    query = (
        task_detail_query()
        .where(and_(*filters))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .limit(limit)
        .offset(offset)
    )
    result = await db.execute(query)
    return [to_task_out(row) for row in result.all()]


async def task_stats(db: AsyncSession, user_id: int, now: Optional[datetime] = None) -> TaskStats:
    """
    Counts by status, total and overdue over the user's visible tasks.

    Each task is counted once even when it is both in one of the user's
    teams and assigned to them.
    """
    now = now or datetime.now(timezone.utc)
    visible = visible_to(user_id)

    by_status = await db.execute(
        select(Task.status, func.count(Task.id)).where(visible).group_by(Task.status)
    )
    total = await db.execute(select(func.count(Task.id)).where(visible))
    overdue = await db.execute(
        select(func.count(Task.id)).where(
            visible,
            Task.due_date.is_not(None),
            Task.due_date < now,
            Task.status != TaskStatus.COMPLETED.value,
        )
    )

    return TaskStats(
        stats={status: count for status, count in by_status.all()},
        total=total.scalar_one(),
        overdue=overdue.scalar_one(),
    )
