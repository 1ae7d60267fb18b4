"""
Oleang Blog API: User Schemas
=============================

What:  Request and response models for /api/signup, /api/login and
       /api/update_user.

Update allow-list:
    `UserUpdate` forbids unknown keys, so identity and credential columns
    (id, email, created_at, password, ...) can never be written through
    /api/update_user. A payload naming any of them is rejected with 400.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class SignupRequest(BaseModel):
    name: str = Field(min_length=1)
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class UserUpdate(BaseModel):
    """Mutable profile fields."""

    name: Optional[str] = Field(default=None, min_length=1)
    username: Optional[str] = Field(default=None, min_length=1)
    profile_pic: Optional[str] = None
    bio: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("name", "username")
    @classmethod
    def reject_null(cls, v: Optional[str]) -> str:
        """Both columns may be changed but never cleared."""
        if v is None:
            raise ValueError("cannot be null")
        return v


class UpdateUserRequest(BaseModel):
    """Body of PUT /api/update_user: `{"userId": ..., "updateData": {...}}`."""

    user_id: uuid.UUID = Field(alias="userId")
    update_data: UserUpdate = Field(alias="updateData")

    model_config = {"populate_by_name": True}


class UserOut(BaseModel):
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    profile_pic: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None


class UserResponse(BaseModel):
    success: bool = True
    data: UserOut
