"""
Pydantic schemas for team memberships.
"""

from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator

from teamtasks.core.permissions import TeamRole


class MembershipAdd(BaseModel):
    """Schema for adding a user to a team"""
    userId: Union[int, str] = Field(...)
    role: TeamRole = TeamRole.MEMBER

    @field_validator("userId")
    @classmethod
    def positive_user_id(cls, value):
        if isinstance(value, str):
            if not value.strip().isdigit():
                raise ValueError("Valid user ID is required")
            value = int(value)
        if isinstance(value, bool) or value <= 0:
            raise ValueError("Valid user ID is required")
        return value


class MembershipRoleUpdate(BaseModel):
    """Schema for changing a member's role"""
    role: TeamRole


class MembershipOut(BaseModel):
    """Schema for membership output"""
    id: int
    user_id: int
    team_id: int
    role: TeamRole
    joined_at: datetime

    class Config:
        from_attributes = True


class TeamMemberOut(BaseModel):
    """Member as listed on a team page"""
    id: int  # user id
    name: str
    email: str
    avatar_url: Optional[str] = None
    role: TeamRole
    joined_at: datetime
