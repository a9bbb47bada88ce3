"""
Notifications API Endpoints

Read-side of the notification feed. Notifications are only ever created by
task events; the recipient can list them, count unread ones and mark them
read.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.api.dependencies import get_current_user, get_db
from teamtasks.core.exceptions import NotFoundError
from teamtasks.core.permissions import NotificationFilter
from teamtasks.models.notification import Notification
from teamtasks.models.user import User
from teamtasks.schemas.notification import NotificationOut

router = APIRouter()


@router.get("/")
async def list_notifications(
    filter: NotificationFilter = Query(NotificationFilter.ALL),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(Notification).where(Notification.user_id == current_user.id)

    if filter == NotificationFilter.UNREAD:
        query = query.where(Notification.read.is_(False))
    elif filter == NotificationFilter.READ:
        query = query.where(Notification.read.is_(True))

    query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).offset(offset)
    result = await db.execute(query)

    return {"notifications": [NotificationOut.model_validate(n) for n in result.scalars().all()]}


@router.get("/count")
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == current_user.id,
            Notification.read.is_(False)
        )
    )
    return {"count": result.scalar_one()}


@router.put("/read-all")
async def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await db.execute(
        update(Notification)
        .where(Notification.user_id == current_user.id, Notification.read.is_(False))
        .values(read=True)
    )
    await db.commit()
    return {"message": "All notifications marked as read"}


@router.put("/read/{notification_id}")
async def mark_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Mark one of the caller's notifications as read.

    Someone else's notification is reported as missing. Marking an already
    read notification succeeds.
    """
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == current_user.id
        )
    )
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError("Notification not found")

    if not notification.read:
        notification.read = True
        await db.commit()

    return {"message": "Notification marked as read"}
