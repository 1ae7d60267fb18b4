"""
Oleang Blog API: Shared Response Schemas
========================================

What:  Envelope, error and health models shared by every route module.

Envelope:
    success → {"success": true, "data": ...}
    failure → {"success": false, "error": "...", "request_id": "..."}
"""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Success envelope carrying only a human-readable message."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error envelope for all API errors.

    Example:
        {
            "success": false,
            "error": "Already liked this post",
            "request_id": "a1b2c3d4"
        }
    """

    success: bool = False
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Liveness check answer; never touches the store."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check answer including remote store reachability."""

    status: str = Field(description="ok or unavailable")
    store: str = Field(description="connected or disconnected")
    version: str
