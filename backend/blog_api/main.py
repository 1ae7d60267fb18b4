"""
Oleang Blog API: FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings, store) returns a configured app.
Who:   uvicorn (`uvicorn blog_api.main:app`), `python -m blog_api`, tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                        FastAPI App                       │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────┐ ┌─────────┐ ┌───────────────┐ ┌──────┐       │
    │  │ Req ID │→│ Logging │→│ Origin Policy │→│ CORS │       │
    │  └────────┘ └─────────┘ └───────────────┘ └──────┘       │
    │                                                          │
    │  Routes: /api/posts  /api/likes  /api/comments           │
    │          /api/signup /api/login  /api/update_user        │
    │          /health     /health/ready                       │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ NotFound→404 │ Origin→403 │ Store→500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate store settings (logged, not fatal)
    Shutdown: close the store's HTTP connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api import __version__
from blog_api.config import Settings, get_settings
from blog_api.exceptions import (
    BlogAPIError,
    NotFoundError,
    OriginNotAllowedError,
    StoreError,
    UNEXPECTED_ERROR,
    ValidationError,
)
from blog_api.middleware.logging import RequestLoggingMiddleware
from blog_api.middleware.origin_policy import OriginPolicyMiddleware
from blog_api.middleware.request_id import RequestIDMiddleware, request_id_var
from blog_api.routes import comments, health, likes, posts, users
from blog_api.services.store_base import RemoteStore
from blog_api.services.supabase_service import SupabaseStore

logger = logging.getLogger(__name__)

GENERIC_STORE_ERROR = "An internal error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every request at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("Oleang Blog API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The server still answers health checks so the problem is visible
        logger.error("Configuration error: %s", str(e))

    logger.info("Allowed origins: %s", ", ".join(settings.allowed_origins_list) or "(none)")
    logger.info("Listening on http://%s:%d", settings.listen_host, settings.listen_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Oleang Blog API shutting down...")
    await app.state.store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "request_id": request_id_var.get("")},
    )


def _validation_message(exc: RequestValidationError) -> str:
    """
    Turn FastAPI's validation error list into one readable sentence.

    Example: "user_id is required; post_id: Input should be a valid integer"
    """
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        kind = err.get("type")
        if not field:
            parts.append("Request body is required" if kind == "missing" else str(err.get("msg")))
        elif kind == "missing":
            parts.append(f"{field} is required")
        elif kind == "extra_forbidden":
            parts.append(f"{field} cannot be updated")
        else:
            parts.append(f"{field}: {err.get('msg')}")
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the error envelope.

    Handler hierarchy:
        RequestValidationError → 400 Bad Request (not FastAPI's 422)
        ValidationError        → 400 Bad Request
        NotFoundError          → 404 Not Found
        OriginNotAllowedError  → 403 Forbidden
        StoreError             → 500 (upstream text only if expose_upstream_errors)
        BlogAPIError (base)    → 500 with its message
        HTTPException          → its own status (unknown route, wrong method)
        Exception (fallback)   → 500 generic message, trace logged server-side
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.info("[%s] Rejected request body: %s", request_id_var.get(""), message)
        return _error(400, message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error(400, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, exc.message)

    @app.exception_handler(OriginNotAllowedError)
    async def handle_origin_not_allowed(request: Request, exc: OriginNotAllowedError):
        return _error(403, exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(
            "[%s] Store error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        settings: Settings = request.app.state.settings
        message = exc.message if settings.expose_upstream_errors else GENERIC_STORE_ERROR
        return _error(500, message)

    @app.exception_handler(BlogAPIError)
    async def handle_app_error(request: Request, exc: BlogAPIError):
        logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error(500, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc.detail), "request_id": request_id_var.get("")},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return _error(500, UNEXPECTED_ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RemoteStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration built once at startup; read from the
                  environment when omitted.
        store: RemoteStore to forward to; a SupabaseStore built from
               `settings` when omitted.

    Returns: Fully configured FastAPI instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Oleang Blog API",
        description="Posts, likes, comments and accounts for the Oleang blog.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store or SupabaseStore(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → OriginPolicy → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.allow_any_origin else settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(OriginPolicyMiddleware, allowed_origins=settings.allowed_origins_list)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(posts.router)
    app.include_router(likes.router)
    app.include_router(comments.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# uvicorn expects `blog_api.main:app` to be importable
app = create_app()
