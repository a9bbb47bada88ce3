"""
Notification emitter.

Notifications are only created as side effects of task events; there is no
public endpoint that creates one. The row is added to the caller's session
and committed together with the change that caused it.
"""

from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.core.permissions import NotificationType
from teamtasks.logging import get_logger
from teamtasks.models.notification import Notification
from teamtasks.schemas.notification import NotificationCreate

logger = get_logger("notifications")


async def emit_notification(
    db: AsyncSession,
    recipient_id: int,
    title: str,
    description: Optional[str],
    type: NotificationType,
    related_id: Optional[int] = None,
    related_type: Optional[str] = None
) -> Notification:
    notification = Notification(
        user_id=recipient_id,
        title=title,
        description=description,
        type=NotificationType(type).value,
        related_id=related_id,
        related_type=related_type,
        read=False,
    )
    db.add(notification)
    await db.flush()

    logger.info(
        "Notification emitted",
        recipient_id=recipient_id,
        type=notification.type,
        related_id=related_id,
    )
    return notification


async def emit_drafts(db: AsyncSession, drafts: Iterable[NotificationCreate]) -> List[Notification]:
    """Emit every draft produced by the task rules"""
    return [
        await emit_notification(
            db,
            recipient_id=draft.user_id,
            title=draft.title,
            description=draft.description,
            type=draft.type,
            related_id=draft.related_id,
            related_type=draft.related_type,
        )
        for draft in drafts
    ]
