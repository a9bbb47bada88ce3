"""
Authorization rules for teams, memberships and tasks.

Defines the closed enumerations used across the API, the role permission
matrix, and pure predicates consumed by every endpoint. Nothing in this
module touches the database: callers load the membership/team/task rows and
pass them in.
"""

from enum import Enum
from typing import Dict, Optional, Set, Tuple


class TeamRole(str, Enum):
    """Roles a user can hold inside a team"""
    ADMIN = "admin"      # Manages composition, settings and any task
    MEMBER = "member"    # Works on tasks


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    IN_REVIEW = "in_review"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationType(str, Enum):
    TASK_ASSIGNMENT = "task_assignment"
    TASK_REASSIGNMENT = "task_reassignment"
    TASK_COMPLETION = "task_completion"
    TEAM_INVITE = "team_invite"
    DEADLINE_REMINDER = "deadline_reminder"
    COMMENT_ADDED = "comment_added"


class NotificationFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    READ = "read"


class Resource(str, Enum):
    """Resources that can be accessed"""
    TEAM = "team"
    TEAM_MEMBER = "team_member"
    TASK = "task"


class Action(str, Enum):
    """Actions that can be performed on resources"""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    INVITE = "invite"
    REMOVE = "remove"
    MANAGE = "manage"


# Permission matrix for team roles
ROLE_PERMISSIONS: Dict[TeamRole, Set[Tuple[Resource, Action]]] = {
    TeamRole.ADMIN: {
        # Team settings
        (Resource.TEAM, Action.READ),
        (Resource.TEAM, Action.UPDATE),
        # Member management
        (Resource.TEAM_MEMBER, Action.READ),
        (Resource.TEAM_MEMBER, Action.INVITE),
        (Resource.TEAM_MEMBER, Action.REMOVE),
        (Resource.TEAM_MEMBER, Action.MANAGE),
        # Tasks
        (Resource.TASK, Action.READ),
        (Resource.TASK, Action.CREATE),
        (Resource.TASK, Action.UPDATE),
        (Resource.TASK, Action.DELETE),
    },
    TeamRole.MEMBER: {
        (Resource.TEAM, Action.READ),
        (Resource.TEAM_MEMBER, Action.READ),
        (Resource.TASK, Action.READ),
        (Resource.TASK, Action.CREATE),
        (Resource.TASK, Action.UPDATE),
    },
}

LAST_ADMIN_REMOVAL = "Cannot remove the last admin from the team. Make another member an admin first."
LAST_ADMIN_DEMOTION = "Cannot demote the last admin of the team. Make another member an admin first."
CREATOR_REMOVAL = "Cannot remove the team creator"


def has_permission(role: Optional[TeamRole], resource: Resource, action: Action) -> bool:
    """
    Check if a role has permission to perform an action on a resource.

    Args:
        role: Team role, or None for a non-member
        resource: Resource being accessed
        action: Action being performed

    Returns:
        True if permission is granted, False otherwise
    """
    if role is None:
        return False
    return (resource, action) in ROLE_PERMISSIONS.get(TeamRole(role), set())


def role_of(membership) -> Optional[TeamRole]:
    """Role carried by a membership row, None when there is no membership."""
    if membership is None:
        return None
    return TeamRole(membership.role)


# ==================== Team predicates ====================

def can_read_team(membership) -> bool:
    return has_permission(role_of(membership), Resource.TEAM, Action.READ)


def can_update_team(membership) -> bool:
    return has_permission(role_of(membership), Resource.TEAM, Action.UPDATE)


def can_delete_team(user_id: int, team) -> bool:
    """Only the creator deletes a team, whatever roles other members hold."""
    return team is not None and team.creator_id == user_id


def can_manage_members(membership) -> bool:
    """
    Check if a membership allows adding, removing and re-roling members.

    Args:
        membership: Caller's membership in the team (or None)

    Returns:
        True if the caller is a team admin
    """
    return has_permission(role_of(membership), Resource.TEAM_MEMBER, Action.MANAGE)


def is_last_admin(target_membership, admin_count: int) -> bool:
    return role_of(target_membership) == TeamRole.ADMIN and admin_count <= 1


def check_member_removal(team, target_membership, admin_count: int) -> Optional[str]:
    """
    Decide whether a membership may be deleted.

    Returns:
        The rejection message, or None when removal is allowed
    """
    if is_last_admin(target_membership, admin_count):
        return LAST_ADMIN_REMOVAL
    if team is not None and team.creator_id == target_membership.user_id:
        return CREATOR_REMOVAL
    return None


def check_role_change(target_membership, new_role: TeamRole, admin_count: int) -> Optional[str]:
    """Reject demotions that would leave the team without an admin."""
    if TeamRole(new_role) != TeamRole.ADMIN and is_last_admin(target_membership, admin_count):
        return LAST_ADMIN_DEMOTION
    return None


# ==================== Task predicates ====================

def can_create_task(membership) -> bool:
    return has_permission(role_of(membership), Resource.TASK, Action.CREATE)


def can_read_task(user_id: int, task, membership) -> bool:
    """Team members and the current assignee can see a task."""
    return has_permission(role_of(membership), Resource.TASK, Action.READ) or task.assigned_to == user_id


def can_update_task(user_id: int, task, membership) -> bool:
    return has_permission(role_of(membership), Resource.TASK, Action.UPDATE) or task.assigned_to == user_id


def can_delete_task(user_id: int, task, membership) -> bool:
    """The task creator or any admin of the task's team."""
    return task.created_by == user_id or has_permission(role_of(membership), Resource.TASK, Action.DELETE)
