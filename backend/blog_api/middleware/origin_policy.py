"""
Oleang Blog API: Origin Policy Middleware
=========================================

What:  Rejects browser requests whose Origin is outside the allow-list.
How:   Compares the Origin header with the configured origins before the
       request reaches CORS handling or any route.

Rules:
    - No Origin header (curl, mobile apps, server-to-server) → allowed
    - Origin in ALLOWED_ORIGINS                             → allowed
    - ALLOWED_ORIGINS contains "*"                          → everything allowed
    - Anything else → 403 with the CORS policy error envelope

CORSMiddleware still adds the Access-Control-* headers for allowed origins;
this gate only decides who gets through.
"""

import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from blog_api.exceptions import OriginNotAllowedError
from blog_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    """
    Allow-list gate for cross-origin callers.

    Args:
        allowed_origins: Origins as they appear in the Origin header
                         (scheme://host[:port]); trailing slashes ignored.
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]) -> None:
        super().__init__(app)
        self.allowed_origins = {origin.rstrip("/") for origin in allowed_origins}
        self.allow_any = "*" in self.allowed_origins

    def is_allowed(self, origin: Optional[str]) -> bool:
        if not origin or self.allow_any:
            return True
        return origin.rstrip("/") in self.allowed_origins

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        origin = request.headers.get("origin")
        if self.is_allowed(origin):
            return await call_next(request)

        error = OriginNotAllowedError(origin)
        logger.warning(
            "Rejected %s %s from origin %s", request.method, request.url.path, origin
        )
        return JSONResponse(
            status_code=403,
            content={
                "success": False,
                "error": error.message,
                "request_id": request_id_var.get(""),
            },
        )
