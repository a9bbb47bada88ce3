"""
Tasks API Endpoints

Listing honours the visibility rule (team membership OR assignee); creation
and updates validate the assignee against the task's team and emit
assignment, reassignment and completion notifications in the same
transaction as the write.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.api.dependencies import get_current_user, get_db, get_membership
from teamtasks.core.exceptions import ForbiddenError, NotFoundError, ValidationFailedError
from teamtasks.core.permissions import (
    TaskPriority, TaskStatus, can_create_task, can_delete_task, can_read_task, can_update_task
)
from teamtasks.core.task_rules import (
    ASSIGNEE_NOT_MEMBER, assignment_notifications, needs_membership_check,
    resolve_initial_assignee, update_notifications
)
from teamtasks.logging import get_logger
from teamtasks.models.task import Task
from teamtasks.models.user import User
from teamtasks.schemas.task import TaskCreate, TaskUpdate
from teamtasks.services.notifications import emit_drafts
from teamtasks.services.tasks import get_task_out, list_visible_tasks, shares_team, task_stats

router = APIRouter()
logger = get_logger("tasks")

OTHER_USER_TASKS_FORBIDDEN = "Not authorized to view tasks for this user"


async def load_task(db: AsyncSession, task_id: int) -> Task:
    result = await db.execute(select(Task).where(Task.id == task_id))
    task = result.scalar_one_or_none()
    if task is None:
        raise NotFoundError("Task not found")
    return task


async def ensure_assignee_is_member(db: AsyncSession, team_id: int, assignee_id: int) -> None:
    if await get_membership(db, team_id, assignee_id) is None:
        raise ValidationFailedError(ASSIGNEE_NOT_MEMBER)


async def ensure_can_view_user_tasks(db: AsyncSession, caller_id: int, user_id: int) -> None:
    """Looking at someone else's assignments requires sharing a team with them"""
    if user_id != caller_id and not await shares_team(db, caller_id, user_id):
        raise ForbiddenError(OTHER_USER_TASKS_FORBIDDEN)


@router.get("/all")
@router.get("/")
async def list_tasks(
    team: Optional[int] = Query(None, gt=0),
    assignee: Optional[int] = Query(None, gt=0),
    userId: Optional[int] = Query(None, gt=0),
    status: Optional[TaskStatus] = Query(None),
    priority: Optional[TaskPriority] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List the tasks visible to the caller, newest first.

    Query parameters:
    - team / assignee / status / priority: extra filters
    - userId: only tasks assigned to that user (must share a team with them)
    - limit (1-100, default 20), offset
    """
    if userId is not None:
        await ensure_can_view_user_tasks(db, current_user.id, userId)

    tasks = await list_visible_tasks(
        db,
        current_user.id,
        team_id=team,
        assignee_id=assignee,
        assigned_user_id=userId,
        status=status.value if status else None,
        priority=priority.value if priority else None,
        limit=limit,
        offset=offset,
    )
    return {"tasks": tasks}


@router.get("/stats")
async def get_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await task_stats(db, current_user.id)


@router.post("/add", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a task in one of the caller's teams.

    Without an assignee the task goes to its creator. A different assignee
    must be a member of the same team and is notified.
    """
    membership = await get_membership(db, payload.team_id, current_user.id)
    if not can_create_task(membership):
        raise ForbiddenError("Not a team member")

    assignee_id = resolve_initial_assignee(payload.assigned_to, current_user.id)
    if assignee_id != current_user.id:
        await ensure_assignee_is_member(db, payload.team_id, assignee_id)

    task = Task(
        title=payload.title,
        description=payload.description,
        status=payload.status.value,
        priority=payload.priority.value,
        team_id=payload.team_id,
        assigned_to=assignee_id,
        created_by=current_user.id,
        due_date=payload.due_date,
    )
    db.add(task)
    await db.flush()

    await emit_drafts(db, assignment_notifications(task))
    await db.commit()

    logger.info("Task created", task_id=task.id, team_id=task.team_id, assigned_to=assignee_id)
    return {"task": await get_task_out(db, task.id), "message": "Task created successfully"}


@router.get("/get/{task_id}")
@router.get("/{task_id}")
async def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    task = await load_task(db, task_id)
    membership = await get_membership(db, task.team_id, current_user.id)
    if not can_read_task(current_user.id, task, membership):
        raise ForbiddenError("Not authorized to view this task")

    return {"task": await get_task_out(db, task_id)}


@router.put("/update/{task_id}")
@router.put("/{task_id}")
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a task.

    Team members and the current assignee may update. The team cannot be
    changed. Reassignment notifies the new assignee; moving into completed
    notifies the creator unless the creator is the assignee.
    """
    task = await load_task(db, task_id)
    membership = await get_membership(db, task.team_id, current_user.id)
    if not can_update_task(current_user.id, task, membership):
        raise ForbiddenError("Not authorized to update this task")

    changes = payload.changes()
    if "assigned_to" in changes and needs_membership_check(changes["assigned_to"], task.assigned_to):
        await ensure_assignee_is_member(db, task.team_id, changes["assigned_to"])

    drafts = update_notifications(task, changes, current_user.name)

    for field, value in changes.items():
        setattr(task, field, value)
    await db.flush()

    await emit_drafts(db, drafts)
    await db.commit()

    logger.info(
        "Task updated",
        task_id=task_id,
        user_id=current_user.id,
        fields=",".join(sorted(changes)),
    )
    return {"task": await get_task_out(db, task_id), "message": "Task updated successfully"}


@router.delete("/delete/{task_id}")
@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Only the task creator or an admin of its team can delete it."""
    task = await load_task(db, task_id)
    membership = await get_membership(db, task.team_id, current_user.id)
    if not can_delete_task(current_user.id, task, membership):
        raise ForbiddenError("Not authorized to delete this task")

    await db.delete(task)
    await db.commit()

    logger.info("Task deleted", task_id=task_id, user_id=current_user.id)
    return {"message": "Task deleted successfully"}
