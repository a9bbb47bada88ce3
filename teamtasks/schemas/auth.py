from pydantic import BaseModel, EmailStr, Field


class Login(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=100)


class PasswordChange(BaseModel):
    oldPassword: str = Field(..., min_length=1, max_length=100)
    newPassword: str = Field(..., min_length=6, max_length=100)
