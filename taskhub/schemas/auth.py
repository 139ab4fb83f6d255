"""
Authentication and user schemas.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime


class UserCreate(BaseModel):
    """User registration request."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    passwordConfirm: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=200)
    display_name: Optional[str] = Field(None, max_length=200)


class UserUpdate(BaseModel):
    """Profile update; omitted fields are left alone."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    display_name: Optional[str] = Field(None, max_length=200)


class PasswordChange(BaseModel):
    currentPassword: str
    password: str = Field(..., min_length=8)
    passwordConfirm: str = Field(..., min_length=8)


class UserLogin(BaseModel):
    """User login request."""
    identity: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    display_name: Optional[str] = None
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    token: str
    record: UserResponse
