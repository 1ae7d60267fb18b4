"""
Oleang Blog API: Health Check Routes
====================================

What:  Liveness and readiness checks.
Who:   Docker health checks, load balancers, uptime monitors.

    GET /health        → 200 {"status": "ok"}; never calls the store
    GET /health/ready  → 200 when the store answers, 503 otherwise
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from blog_api import __version__
from blog_api.dependencies import get_store
from blog_api.schemas.common import HealthResponse, ReadinessResponse
from blog_api.services.store_base import RemoteStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Store unreachable", "model": ReadinessResponse}},
    summary="Readiness check",
)
async def readiness_check(store: RemoteStore = Depends(get_store)):
    """
    Check the remote store with a lightweight call.

    Returns:
        ReadinessResponse with status ok/unavailable (HTTP 200/503).
    """
    if await store.health_check():
        return ReadinessResponse(status="ok", store="connected", version=__version__)

    logger.warning("Readiness check: store unreachable")
    body = ReadinessResponse(status="unavailable", store="disconnected", version=__version__)
    return JSONResponse(status_code=503, content=body.model_dump())
