"""
Oleang Blog API: Like Schemas
=============================

What:  Request and response models for /api/isLiked, /api/likes, /api/unlike.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LikeRequest(BaseModel):
    """A (user_id, post_id) pair; both fields are required."""

    user_id: uuid.UUID
    post_id: int


class LikeOut(BaseModel):
    id: Optional[int] = None
    user_id: str
    post_id: int
    liked_at: Optional[datetime] = None

    model_config = {"extra": "allow"}


class LikeResponse(BaseModel):
    success: bool = True
    data: LikeOut


class LikeStatusResponse(BaseModel):
    success: bool = True
    is_liked: bool = Field(alias="isLiked")

    model_config = {"populate_by_name": True}
