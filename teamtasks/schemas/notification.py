"""
Pydantic schemas for Notifications.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from teamtasks.core.permissions import NotificationType


class NotificationCreate(BaseModel):
    """Notification draft handed to the emitter"""
    user_id: int
    title: str = Field(..., max_length=200)
    description: Optional[str] = None
    type: NotificationType
    related_id: Optional[int] = None
    related_type: Optional[str] = None


class NotificationOut(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    type: NotificationType
    related_id: Optional[int] = None
    related_type: Optional[str] = None
    read: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
