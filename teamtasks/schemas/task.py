"""
Pydantic schemas for Tasks.

``assigned_to`` accepts numbers, digit strings and null-ish strings; it is
normalized to ``int | None`` before any rule looks at it. ``team_id`` is not
part of TaskUpdate: a task never moves between teams.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from teamtasks.core.permissions import TaskPriority, TaskStatus
from teamtasks.core.task_rules import normalize_assignee


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    team_id: int = Field(..., gt=0)
    assigned_to: Optional[Any] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None

    class Config:
        extra = "forbid"

    @field_validator("assigned_to", mode="before")
    @classmethod
    def normalize_assigned_to(cls, value):
        return normalize_assignee(value)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    assigned_to: Optional[Any] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    class Config:
        extra = "forbid"

    @field_validator("assigned_to", mode="before")
    @classmethod
    def normalize_assigned_to(cls, value):
        return normalize_assignee(value)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for field in ("title", "status", "priority"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields present in the request, with enums reduced to their values"""
        data = self.model_dump(exclude_unset=True)
        for key in ("status", "priority"):
            if data.get(key) is not None:
                data[key] = data[key].value
        return data


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    team_id: int
    team_name: Optional[str] = None
    assigned_to: Optional[int] = None
    assigned_to_id: Optional[int] = None
    assigned_to_name: Optional[str] = None
    created_by: int
    created_by_name: Optional[str] = None


class TaskStats(BaseModel):
    stats: Dict[str, int]
    total: int
    overdue: int
