"""
Oleang Blog API: Request ID Middleware
======================================

What:  Assigns a correlation ID to every request and echoes it back.
How:   Reuses a caller-supplied X-Request-ID or generates a short UUID,
       stores it in a ContextVar for loggers and error envelopes, and sets
       it on the response.

Unhandled exceptions are turned into the 500 envelope here, while the ID is
still set, so even unexpected failures carry their request_id.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from blog_api.exceptions import UNEXPECTED_ERROR

logger = logging.getLogger(__name__)

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the X-Request-ID header when the client sent one
        2. Otherwise generate an 8-character ID
        3. Expose it through request_id_var and request.state.request_id
        4. Return it in the X-Request-ID response header, error or not
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                rid, request.method, request.url.path, exc, exc_info=True,
            )
            response = JSONResponse(
                status_code=500,
                content={"success": False, "error": UNEXPECTED_ERROR, "request_id": rid},
            )
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
