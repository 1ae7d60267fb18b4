"""
Oleang Blog API: Request Logging Middleware
===========================================

What:  One access-log line per HTTP request.
How:   Times the work done below this middleware and logs method, path,
       query, status, duration, request ID and the caller's Origin.

What we log vs what we don't:
    Logged:     method, path, query string, status, duration, origin, request ID
    Not logged: request bodies (passwords, emails), Authorization headers

Example line:
    POST /api/likes 201 48.3ms [a1b2c3d4] origin=http://localhost:5173
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blog_api.middleware.request_id import request_id_var

logger = logging.getLogger("blog_api.access")

# Health checks hit these every few seconds
QUIET_PREFIXES = ("/health", "/docs", "/redoc", "/openapi.json")


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(QUIET_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        origin = request.headers.get("origin", "-")

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.log(
            level_for_status(response.status_code),
            "%s %s %d %.1fms [%s] origin=%s",
            request.method,
            target,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
            origin,
        )
        return response
