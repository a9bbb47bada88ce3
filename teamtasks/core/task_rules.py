"""
Task assignment rules and the notifications they produce.

Pure functions: they take task rows (or anything with the same attributes)
plus the requested changes, and return NotificationCreate drafts that the
caller hands to the notification emitter.
"""

from typing import Any, Dict, List, Optional

from teamtasks.core.permissions import NotificationType, TaskStatus
from teamtasks.schemas.notification import NotificationCreate

NULL_ASSIGNEE_SENTINELS = ("", "null", "undefined")
ASSIGNEE_NOT_MEMBER = "Assigned user is not a member of this team"


def normalize_assignee(value: Any) -> Optional[int]:
    """
    Normalize an ``assigned_to`` input to a user id or None.

    Accepts positive integers, strings of digits, None and the null-ish
    strings a browser form sends ("", "null", "undefined").

    Raises:
        ValueError: for anything else (pydantic reports it as a field error)
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise _invalid_assignee()
    if isinstance(value, int):
        if value < 1:
            raise _invalid_assignee()
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped in NULL_ASSIGNEE_SENTINELS:
            return None
        if stripped.isdigit() and int(stripped) >= 1:
            return int(stripped)
    raise _invalid_assignee()


def _invalid_assignee() -> ValueError:
    return ValueError("assigned_to must be a positive user id or null")


def resolve_initial_assignee(requested: Optional[int], creator_id: int) -> int:
    """Tasks created without an assignee belong to their creator."""
    return requested if requested is not None else creator_id


def needs_membership_check(new_assignee: Optional[int], current_assignee: Optional[int]) -> bool:
    """An assignee must be verified when it is set to somebody new."""
    return new_assignee is not None and new_assignee != current_assignee


def assignment_notifications(task) -> List[NotificationCreate]:
    """Notify the assignee of a freshly created task unless they created it."""
    if task.assigned_to is None or task.assigned_to == task.created_by:
        return []
    return [
        NotificationCreate(
            user_id=task.assigned_to,
            title="New task assigned",
            description=f'You have been assigned to "{task.title}"',
            type=NotificationType.TASK_ASSIGNMENT,
            related_id=task.id,
            related_type="task",
        )
    ]


def update_notifications(before, changes: Dict[str, Any], actor_name: str) -> List[NotificationCreate]:
    """
    Compute the notifications caused by an update.

    Args:
        before: Task state before the update (needs id, title, status,
            assigned_to, created_by)
        changes: Fields being written (already normalized)
        actor_name: Display name of the user performing the update

    Returns:
        task_reassignment to a new assignee and/or task_completion to the
        creator when the task moves into completed
    """
    drafts: List[NotificationCreate] = []
    title = changes.get("title") or before.title

    assignee_after = changes["assigned_to"] if "assigned_to" in changes else before.assigned_to

    if "assigned_to" in changes and needs_membership_check(changes["assigned_to"], before.assigned_to):
        drafts.append(
            NotificationCreate(
                user_id=changes["assigned_to"],
                title="Task reassigned to you",
                description=f'"{title}" has been reassigned to you',
                type=NotificationType.TASK_REASSIGNMENT,
                related_id=before.id,
                related_type="task",
            )
        )

    new_status = changes.get("status")
    if (
        new_status is not None
        and TaskStatus(new_status) == TaskStatus.COMPLETED
        and TaskStatus(before.status) != TaskStatus.COMPLETED
        and before.created_by != assignee_after
    ):
        drafts.append(
            NotificationCreate(
                user_id=before.created_by,
                title="Task completed",
                description=f'"{title}" has been completed by {actor_name}',
                type=NotificationType.TASK_COMPLETION,
                related_id=before.id,
                related_type="task",
            )
        )

    return drafts
