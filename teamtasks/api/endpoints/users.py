"""
Users API Endpoints

Directory lookups used by the invitation and profile screens. All routes
require an authenticated session.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.api.dependencies import get_current_user, get_db
from teamtasks.api.endpoints.auth import email_taken
from teamtasks.api.endpoints.tasks import ensure_can_view_user_tasks
from teamtasks.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from teamtasks.logging import get_logger
from teamtasks.models.user import User
from teamtasks.schemas.user import UserOut, UserUpdate
from teamtasks.services.tasks import list_visible_tasks

router = APIRouter()
logger = get_logger("users")


async def load_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/all")
async def list_users(
    q: str = Query(None, max_length=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Public fields of every user.

    ``q`` filters on name or email, case-insensitively.
    """
    query = select(User).order_by(User.name, User.id)
    if q:
        pattern = f"%{q}%"
        query = query.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    result = await db.execute(query)
    return {"users": [UserOut.model_validate(user) for user in result.scalars().all()]}


@router.get("/get/{user_id}")
async def get_user(
    user_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return {"user": UserOut.model_validate(await load_user(db, user_id))}


@router.get("/get/{user_id}/tasks")
async def get_user_tasks(
    user_id: int = Path(..., gt=0),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Tasks assigned to the user that the caller is allowed to see."""
    await load_user(db, user_id)
    await ensure_can_view_user_tasks(db, current_user.id, user_id)

    tasks = await list_visible_tasks(
        db, current_user.id, assigned_user_id=user_id, limit=limit, offset=offset
    )
    return {"tasks": tasks}


@router.put("/update/{user_id}")
async def update_user(
    payload: UserUpdate,
    user_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if user_id != current_user.id:
        raise ForbiddenError("Cannot update other user's profile")

    changes = payload.changes()
    if changes.get("email") and changes["email"] != current_user.email:
        if await email_taken(db, changes["email"], exclude_user_id=current_user.id):
            raise ConflictError("Email already taken")

    for field, value in changes.items():
        setattr(current_user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already taken")

    await db.refresh(current_user)
    logger.info("User updated", user_id=current_user.id)
    return {"user": UserOut.model_validate(current_user), "message": "Profile updated successfully"}
