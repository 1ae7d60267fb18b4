"""
Oleang Blog API: Post Schemas
=============================

What:  Request and response models for the /api/posts routes.
How:   Row models allow extra keys so columns added upstream pass through
       untouched; the declared fields document the contract.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PostCreate(BaseModel):
    """Body of POST /api/posts. The category is given by name."""

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: str = Field(min_length=1, description="Category name")
    description: Optional[str] = None
    image: Optional[str] = Field(default=None, description="Image URL")


class PostOut(BaseModel):
    id: int
    image: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    content: Optional[str] = None
    status_id: Optional[int] = None
    likes_count: int = 0
    category_id: Optional[int] = None
    category_name: Optional[str] = None

    model_config = {"extra": "allow"}


class PostListResponse(BaseModel):
    success: bool = True
    data: List[PostOut]


class PostResponse(BaseModel):
    success: bool = True
    data: PostOut
