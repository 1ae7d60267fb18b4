"""
Oleang Blog API: Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the `{success: false, error: ...}` envelope with the right
       HTTP status code.
Who:   Raised by services, the store client and middleware.

Exception Hierarchy:
    BlogAPIError (base)           → 500 Internal Server Error
    ├── ValidationError           → 400 Bad Request (client can fix)
    │   └── CategoryNotFoundError → 400 Bad Request
    ├── NotFoundError             → 404 Not Found
    ├── OriginNotAllowedError     → 403 Forbidden
    └── StoreError                → 500 Internal Server Error
        ├── StoreConflictError    → unique constraint violated upstream
        ├── StoreReferenceError   → foreign key points at a missing row
        └── StoreAuthError        → identity service rejected the request
"""

from typing import Any, Dict, Optional

UNEXPECTED_ERROR = "An unexpected error occurred"


class BlogAPIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (returned as `error`)
        context:  Additional debug info (logged, never returned to client)
    """

    def __init__(
        self,
        message: str = UNEXPECTED_ERROR,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    """
    Raised when client input fails validation or a business rule.

    When:    Missing fields, duplicate like, missing like, unknown category.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class CategoryNotFoundError(ValidationError):
    """Raised when a category name does not resolve to a category row."""

    def __init__(self, category: str):
        super().__init__(
            message="Category not found",
            field="category",
            context={"category": category},
        )
        self.category = category


class NotFoundError(BlogAPIError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/posts/{id} with an unknown id, update of an unknown user.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class OriginNotAllowedError(BlogAPIError):
    """
    Raised by the origin gate for a browser origin outside the allow-list.

    HTTP:    403 Forbidden
    """

    MESSAGE = (
        "The CORS policy for this site does not allow access from the specified Origin."
    )

    def __init__(self, origin: str):
        super().__init__(message=self.MESSAGE, context={"origin": origin})
        self.origin = origin


class StoreError(BlogAPIError):
    """
    Raised when the remote store rejects or fails a call.

    What:    Wraps the upstream error text, HTTP status and error code.
    HTTP:    500 Internal Server Error (message echoed only when the
             `expose_upstream_errors` setting is on)
    """

    def __init__(
        self,
        message: str = "The data service returned an error",
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        if code:
            ctx["code"] = code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code
        self.code = code


class StoreConflictError(StoreError):
    """Unique constraint violation reported by the store (Postgres 23505)."""


class StoreReferenceError(StoreError):
    """
    Foreign key violation reported by the store (Postgres 23503).

    PostgREST names the constraint in the message, e.g.
    `... violates foreign key constraint "likes_post_id_fkey"`.
    """

    def references(self, column: str) -> bool:
        return f"_{column}_fkey" in self.message


class StoreAuthError(StoreError):
    """The identity service refused a sign-up or sign-in."""
