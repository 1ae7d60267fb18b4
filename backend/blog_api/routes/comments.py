"""
Oleang Blog API: Comment Route Handlers
=======================================

What:  GET and POST /api/comments/{post_id}.
"""

from fastapi import APIRouter, Depends

from blog_api.dependencies import get_store
from blog_api.schemas.comment import CommentCreate, CommentListResponse
from blog_api.schemas.common import ErrorResponse, MessageResponse
from blog_api.services.comment_service import comment_service
from blog_api.services.store_base import RemoteStore

router = APIRouter(prefix="/api", tags=["Comments"])


@router.get(
    "/comments/{post_id}",
    response_model=CommentListResponse,
    responses={500: {"description": "Store error", "model": ErrorResponse}},
    summary="List a post's comments",
    description="`comments` is null when the post has no comments.",
)
async def list_comments(
    post_id: int,
    store: RemoteStore = Depends(get_store),
) -> CommentListResponse:
    comments = await comment_service.list_comments(store, post_id)
    return CommentListResponse(comments=comments)


@router.post(
    "/comments/{post_id}",
    status_code=201,
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing fields", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Comment on a post",
)
async def create_comment(
    post_id: int,
    body: CommentCreate,
    store: RemoteStore = Depends(get_store),
) -> MessageResponse:
    await comment_service.create_comment(store, post_id, str(body.user_id), body.comment_text)
    return MessageResponse(message="Comment added successfully")
