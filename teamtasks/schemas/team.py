"""
Pydantic schemas for Team entities.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from teamtasks.core.permissions import TeamRole


class TeamBase(BaseModel):
    """Base schema for team with common fields"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class TeamCreate(TeamBase):
    """Schema for creating a new team"""


class TeamUpdate(BaseModel):
    """Schema for updating a team"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def name_not_null(self):
        if "name" in self.model_fields_set and self.name is None:
            raise ValueError("name cannot be null")
        return self


class TeamOut(TeamBase):
    """Schema for team output"""
    id: int
    creator_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamWithRole(TeamOut):
    """Team as listed for the current user, with the user's role in it"""
    role: TeamRole
