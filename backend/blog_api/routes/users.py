"""
Oleang Blog API: User Route Handlers
====================================

What:  POST /api/signup, POST /api/login, PUT /api/update_user.
How:   Delegates to UserService; every answer uses the standard envelope
       (`{success, data}` / `{success: false, error}`).

Security:
    - Passwords are forwarded to the identity service and never stored or logged
    - /api/update_user only accepts the fields declared on UserUpdate
"""

import logging

from fastapi import APIRouter, Depends

from blog_api.dependencies import get_store
from blog_api.schemas.common import ErrorResponse
from blog_api.schemas.user import (
    LoginRequest,
    SignupRequest,
    UpdateUserRequest,
    UserResponse,
)
from blog_api.services.store_base import RemoteStore
from blog_api.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.post(
    "/signup",
    status_code=201,
    response_model=UserResponse,
    responses={
        400: {"description": "Identity or profile rejected", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def signup(
    body: SignupRequest,
    store: RemoteStore = Depends(get_store),
) -> UserResponse:
    user = await user_service.sign_up(
        store,
        name=body.name,
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return UserResponse(data=user)


@router.post(
    "/login",
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid credentials", "model": ErrorResponse},
        404: {"description": "No profile for this identity", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    store: RemoteStore = Depends(get_store),
) -> UserResponse:
    user = await user_service.log_in(store, body.email, body.password)
    return UserResponse(data=user)


@router.put(
    "/update_user",
    response_model=UserResponse,
    responses={
        400: {"description": "Disallowed or empty update", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Store error", "model": ErrorResponse},
    },
    summary="Update profile fields",
)
async def update_user(
    body: UpdateUserRequest,
    store: RemoteStore = Depends(get_store),
) -> UserResponse:
    changes = body.update_data.model_dump(exclude_unset=True)
    user = await user_service.update_user(store, str(body.user_id), changes)
    return UserResponse(data=user)
