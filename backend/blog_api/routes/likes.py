"""
Oleang Blog API: Like Route Handlers
====================================

What:  POST /api/isLiked, POST /api/likes, POST /api/unlike.
How:   Delegates to LikeService. When the like-count procedure fails after
       the like row was written, a reconciliation of that post's counter is
       scheduled as a background task and the request still succeeds.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from blog_api.dependencies import get_store
from blog_api.schemas.common import ErrorResponse, MessageResponse
from blog_api.schemas.like import LikeRequest, LikeResponse, LikeStatusResponse
from blog_api.services.like_service import like_service
from blog_api.services.store_base import RemoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Likes"])


@router.post(
    "/isLiked",
    response_model=LikeStatusResponse,
    responses={400: {"description": "Missing fields", "model": ErrorResponse}},
    summary="Check whether a user liked a post",
)
async def check_liked(
    body: LikeRequest,
    store: RemoteStore = Depends(get_store),
) -> LikeStatusResponse:
    liked = await like_service.is_liked(store, str(body.user_id), body.post_id)
    return LikeStatusResponse(is_liked=liked)


@router.post(
    "/likes",
    status_code=201,
    response_model=LikeResponse,
    responses={
        400: {"description": "Already liked or missing fields", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Like a post",
)
async def like_post(
    body: LikeRequest,
    background_tasks: BackgroundTasks,
    store: RemoteStore = Depends(get_store),
) -> LikeResponse:
    result = await like_service.like(store, str(body.user_id), body.post_id)
    if not result.counter_synced:
        background_tasks.add_task(like_service.reconcile_likes, store, body.post_id)
    return LikeResponse(data=result.like)


@router.post(
    "/unlike",
    response_model=MessageResponse,
    responses={
        400: {"description": "Not liked or missing fields", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Remove a like",
)
async def unlike_post(
    body: LikeRequest,
    background_tasks: BackgroundTasks,
    store: RemoteStore = Depends(get_store),
) -> MessageResponse:
    synced = await like_service.unlike(store, str(body.user_id), body.post_id)
    if not synced:
        background_tasks.add_task(like_service.reconcile_likes, store, body.post_id)
    return MessageResponse(message="Post unliked successfully")
