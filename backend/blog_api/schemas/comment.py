"""
Oleang Blog API: Comment Schemas
================================

What:  Request and response models for /api/comments/{post_id}.

Quirk kept for the frontend:
    A post without comments answers `{"success": true, "comments": null}`,
    not an empty list.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    user_id: uuid.UUID
    comment_text: str = Field(min_length=1)


class CommentOut(BaseModel):
    """A comment annotated with the commenter's display fields."""

    id: int
    post_id: int
    user_id: str
    comment_text: str
    created_at: Optional[datetime] = None
    name: Optional[str] = Field(default=None, description="Commenter's name")
    profile_pic: Optional[str] = Field(default=None, description="Commenter's avatar URL")


class CommentListResponse(BaseModel):
    success: bool = True
    comments: Optional[List[CommentOut]] = None
