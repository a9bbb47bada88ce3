"""
Teams API Endpoints

Team CRUD and membership management. Every route is available under its
legacy path (/all, /add, /get/{id}, /update/{id}, /delete/{id}) and its REST
alias.
"""

from typing import Dict

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamtasks.api.dependencies import (
    get_current_user, get_db, get_membership, get_team_member_context, require_permission
)
from teamtasks.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from teamtasks.core.permissions import (
    Action, Resource, TeamRole, can_delete_team, check_member_removal, check_role_change
)
from teamtasks.logging import get_logger
from teamtasks.models.membership import Membership
from teamtasks.models.team import Team
from teamtasks.models.user import User
from teamtasks.schemas.membership import MembershipAdd, MembershipOut, MembershipRoleUpdate
from teamtasks.schemas.team import TeamCreate, TeamOut, TeamUpdate
from teamtasks.services.teams import count_admins, delete_team_cascade, list_team_members, list_user_teams

router = APIRouter()
logger = get_logger("teams")

NOT_A_MEMBER = "User is not a member of this team"


# ==================== Team CRUD ====================

@router.get("/all")
@router.get("/")
async def list_teams(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Teams the caller belongs to, each carrying the caller's role."""
    return {"teams": await list_user_teams(db, current_user.id)}


@router.post("/add", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new team.

    The creator becomes an admin member in the same transaction.
    """
    new_team = Team(
        name=team_data.name,
        description=team_data.description,
        creator_id=current_user.id,
    )
    db.add(new_team)
    await db.flush()

    db.add(Membership(user_id=current_user.id, team_id=new_team.id, role=TeamRole.ADMIN.value))
    await db.commit()
    await db.refresh(new_team)

    logger.info("Team created", team_id=new_team.id, user_id=current_user.id)
    return {"team": TeamOut.model_validate(new_team), "message": "Team created successfully"}


@router.get("/get/{team_id}")
@router.get("/{team_id}")
async def get_team(
    team_id: int,
    context: Dict = Depends(require_permission(Resource.TEAM, Action.READ))
):
    return {"team": TeamOut.model_validate(context["team"])}


@router.put("/update/{team_id}")
@router.put("/{team_id}")
async def update_team(
    team_id: int,
    team_update: TeamUpdate,
    context: Dict = Depends(require_permission(Resource.TEAM, Action.UPDATE)),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a team.

    Requires an admin membership.
    """
    team = context["team"]

    update_data = team_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(team, field, value)

    await db.commit()
    await db.refresh(team)

    logger.info("Team updated", team_id=team.id, user_id=context["user"].id)
    return {"team": TeamOut.model_validate(team), "message": "Team updated successfully"}


@router.delete("/delete/{team_id}")
@router.delete("/{team_id}")
async def delete_team(
    team_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a team with all its tasks and memberships.

    Only the creator may delete; admins who did not create the team cannot.
    """
    result = await db.execute(select(Team).where(Team.id == team_id))
    team = result.scalar_one_or_none()
    if team is None:
        raise NotFoundError("Team not found")
    if not can_delete_team(current_user.id, team):
        raise ForbiddenError("Insufficient permissions")

    await delete_team_cascade(db, team_id)
    return {"message": "Team deleted successfully"}


# ==================== Team Member Management ====================

@router.get("/{team_id}/members")
async def list_members(
    team_id: int,
    context: Dict = Depends(get_team_member_context),
    db: AsyncSession = Depends(get_db)
):
    """Members of the team, oldest membership first."""
    return {"members": await list_team_members(db, team_id)}


@router.post("/{team_id}/members", status_code=status.HTTP_201_CREATED)
async def add_member(
    team_id: int,
    payload: MembershipAdd,
    context: Dict = Depends(require_permission(Resource.TEAM_MEMBER, Action.INVITE)),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a user to the team.

    Requires an admin membership. The target user must exist and must not
    already be a member.
    """
    result = await db.execute(select(User.id).where(User.id == payload.userId))
    if result.first() is None:
        raise NotFoundError("User not found")

    if await get_membership(db, team_id, payload.userId) is not None:
        raise ConflictError("User is already a member of this team")

    membership = Membership(user_id=payload.userId, team_id=team_id, role=payload.role.value)
    db.add(membership)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent add of the same user
        await db.rollback()
        raise ConflictError("User is already a member of this team")

    await db.refresh(membership)
    logger.info(
        "Member added",
        team_id=team_id,
        user_id=payload.userId,
        role=membership.role,
        by=context["user"].id,
    )
    return {
        "membership": MembershipOut.model_validate(membership),
        "message": "Member added to team successfully",
    }


@router.delete("/{team_id}/members/{user_id}")
async def remove_member(
    team_id: int,
    user_id: int = Path(..., gt=0),
    context: Dict = Depends(require_permission(Resource.TEAM_MEMBER, Action.REMOVE)),
    db: AsyncSession = Depends(get_db)
):
    """
    Remove a member from the team.

    The creator can never be removed, and neither can the last admin. The
    admin rows are locked until commit so concurrent removals serialize.
    """
    target = await get_membership(db, team_id, user_id, for_update=True)
    if target is None:
        raise NotFoundError(NOT_A_MEMBER)

    admin_count = await count_admins(db, team_id, lock=True)
    reason = check_member_removal(context["team"], target, admin_count)
    if reason:
        await db.rollback()
        raise ConflictError(reason)

    await db.delete(target)
    await db.commit()

    logger.info("Member removed", team_id=team_id, user_id=user_id, by=context["user"].id)
    return {"message": "Member removed from team successfully"}


@router.put("/{team_id}/members/{user_id}")
async def update_member_role(
    team_id: int,
    payload: MembershipRoleUpdate,
    user_id: int = Path(..., gt=0),
    context: Dict = Depends(require_permission(Resource.TEAM_MEMBER, Action.MANAGE)),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a member's role.

    Demoting the only admin is rejected.
    """
    target = await get_membership(db, team_id, user_id, for_update=True)
    if target is None:
        raise NotFoundError(NOT_A_MEMBER)

    admin_count = await count_admins(db, team_id, lock=True)
    reason = check_role_change(target, payload.role, admin_count)
    if reason:
        await db.rollback()
        raise ConflictError(reason)

    target.role = payload.role.value
    await db.commit()
    await db.refresh(target)

    logger.info(
        "Member role changed",
        team_id=team_id,
        user_id=user_id,
        role=target.role,
        by=context["user"].id,
    )
    return {
        "membership": MembershipOut.model_validate(target),
        "message": "Member role updated successfully",
    }
