"""
Pydantic schemas for User entities and profile updates.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AnyHttpUrl, BaseModel, EmailStr, Field, TypeAdapter, field_validator, model_validator

_http_url = TypeAdapter(AnyHttpUrl)

# Only these columns can ever be written through profile updates
PROFILE_FIELDS = (
    "name", "email", "bio", "timezone", "language", "theme", "notifications",
    "privacy", "location", "job_title", "company", "website", "phone", "avatar_url",
)


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is not None:
        _http_url.validate_python(value)
    return value


NON_NULLABLE_PROFILE_FIELDS = ("name", "email")


class UserBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    """Registration payload"""
    password: str = Field(..., min_length=6, max_length=100)


class UserOut(BaseModel):
    """Public user fields (search results, team member lists)"""
    id: int
    name: str
    email: str
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserProfileOut(UserOut):
    """Everything about the current user except the password hash"""
    bio: Optional[str] = None
    timezone: Optional[str] = None
    language: Optional[str] = None
    theme: Optional[str] = None
    notifications: Optional[Dict[str, Any]] = None
    privacy: Optional[Dict[str, Any]] = None
    location: Optional[str] = None
    job_title: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    last_login_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """
    Profile update payload.

    Unknown keys are dropped, so nothing outside PROFILE_FIELDS is persisted.
    """
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    bio: Optional[str] = Field(None, max_length=500)
    timezone: Optional[str] = Field(None, max_length=50)
    language: Optional[str] = Field(None, max_length=10)
    theme: Optional[str] = Field(None, max_length=20)
    notifications: Optional[Dict[str, Any]] = None
    privacy: Optional[Dict[str, Any]] = None
    location: Optional[str] = Field(None, max_length=100)
    job_title: Optional[str] = Field(None, max_length=100)
    company: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    avatar_url: Optional[str] = Field(None, max_length=500)

    class Config:
        extra = "ignore"

    @field_validator("website", "avatar_url")
    @classmethod
    def valid_url(cls, value):
        return _check_url(value)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set & set(PROFILE_FIELDS):
            raise ValueError("At least one field must be provided")
        for field in NON_NULLABLE_PROFILE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(include=set(PROFILE_FIELDS), exclude_unset=True)


class UserUpdate(BaseModel):
    """Legacy /api/users/update/{id} payload"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("avatar_url")
    @classmethod
    def valid_url(cls, value):
        return _check_url(value)

    def changes(self) -> Dict[str, Any]:
        return {key: value for key, value in self.model_dump(exclude_unset=True).items()
                if value is not None or key == "avatar_url"}
