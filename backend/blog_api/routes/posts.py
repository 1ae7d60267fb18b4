"""
Oleang Blog API: Post Route Handlers
====================================

What:  GET/POST /api/posts and GET /api/posts/{id}.
How:   Extracts query parameters and bodies, delegates to PostService,
       wraps results in the success envelope.
Who:   Called by the blog frontend's listing, editor and detail pages.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from blog_api.config import Settings
from blog_api.dependencies import get_settings, get_store
from blog_api.schemas.common import ErrorResponse
from blog_api.schemas.post import PostCreate, PostListResponse, PostResponse
from blog_api.services.post_service import post_service
from blog_api.services.store_base import RemoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Posts"])


@router.get(
    "/posts",
    response_model=PostListResponse,
    responses={
        400: {"description": "Unknown category or invalid paging", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="List posts, newest first",
)
async def list_posts(
    category: Optional[str] = Query(default=None, description="Category name"),
    keyword: Optional[str] = Query(default=None, description="Case-insensitive title substring"),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(default=10, gt=0, description="Posts per page"),
    store: RemoteStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> PostListResponse:
    """
    Example:
        GET /api/posts?category=Travel&keyword=tokyo&page=2&limit=6
    """
    posts = await post_service.list_posts(
        store,
        category=category,
        keyword=keyword,
        page=page,
        limit=limit,
        max_limit=settings.posts_max_limit,
    )
    return PostListResponse(data=posts)


@router.post(
    "/posts",
    status_code=201,
    response_model=PostResponse,
    responses={
        400: {"description": "Missing fields", "model": ErrorResponse},
        500: {"description": "Unknown category or store error", "model": ErrorResponse},
    },
    summary="Create a post",
)
async def create_post(
    body: PostCreate,
    store: RemoteStore = Depends(get_store),
) -> PostResponse:
    post = await post_service.create_post(
        store,
        title=body.title,
        content=body.content,
        category=body.category,
        description=body.description,
        image=body.image,
    )
    return PostResponse(data=post)


@router.get(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses={
        404: {"description": "Post not found", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Get a single post",
)
async def get_post(
    post_id: int,
    store: RemoteStore = Depends(get_store),
) -> PostResponse:
    post = await post_service.get_post(store, post_id)
    return PostResponse(data=post)
