"""
Oleang Blog API: Supabase Remote Store Implementation
=====================================================

What:  Concrete RemoteStore talking to a hosted Supabase project.
How:   One pooled httpx.AsyncClient per process.
       Tables and stored procedures go through PostgREST (/rest/v1),
       identities through GoTrue (/auth/v1).
Who:   Built once by create_app(); injected into routes via get_store().

Resilience Strategy:
    1. Every call is bounded by `store_timeout`
    2. Idempotent reads retry transient failures (timeouts, network errors,
       HTTP 429 and 5xx) with tenacity exponential backoff + jitter
    3. Writes, procedure calls and identity calls are never retried
    4. Upstream errors are translated into the StoreError family with the
       upstream message, HTTP status and error code preserved

PostgREST request shapes:
    GET    /rest/v1/posts?select=id,title&category_id=eq.3&order=date.desc&offset=0&limit=10
    POST   /rest/v1/likes            Prefer: return=representation
    PATCH  /rest/v1/users?id=eq.<id> Prefer: return=representation
    DELETE /rest/v1/likes?user_id=eq.<u>&post_id=eq.<p>  Prefer: return=representation
    POST   /rest/v1/rpc/increment_likes  {"post_id": 7}
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from blog_api.config import Settings
from blog_api.exceptions import (
    StoreAuthError,
    StoreConflictError,
    StoreError,
    StoreReferenceError,
)
from blog_api.services.store_base import AuthUser, Filter, RemoteStore, Row

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
AUTH_PREFIX = "/auth/v1"

# Postgres SQLSTATEs; PostgREST answers HTTP 409 for both
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


class TransientStoreError(StoreError):
    """Retryable failure: timeout, connection problem, 429 or 5xx."""


def _error_details(response: httpx.Response) -> Tuple[str, Optional[str]]:
    """
    Extract (message, code) from a PostgREST or GoTrue error body.

    PostgREST: {"code": "23505", "message": "duplicate key value ...", ...}
    GoTrue:    {"code": 400, "error_code": "invalid_credentials", "msg": "..."}
               or {"error": "invalid_grant", "error_description": "..."}
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
        )
        code = body.get("error_code") or body.get("code")
        if message:
            return str(message), str(code) if code is not None else None

    text = response.text.strip()
    return text[:200] or f"HTTP {response.status_code}", None


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _filter_params(filters: Sequence[Filter]) -> List[Tuple[str, str]]:
    params = []
    for f in filters:
        op = "is" if f.value is None and f.op == "eq" else f.op
        params.append((f.column, f"{op}.{_filter_value(f.value)}"))
    return params


def _auth_user(body: Any) -> AuthUser:
    """GoTrue answers with either a session ({user: {...}}) or a bare user."""
    user = body.get("user") if isinstance(body, dict) and isinstance(body.get("user"), dict) else body
    if not isinstance(user, dict) or not user.get("id"):
        raise StoreAuthError(message="Identity service returned no user")
    return AuthUser(id=str(user["id"]), email=user.get("email"), raw=user)


class SupabaseStore(RemoteStore):
    """
    PostgREST + GoTrue client for a hosted Supabase project.

    Args:
        settings: Application settings (endpoint, key, timeout, retry policy)
        transport: Optional httpx transport, used by tests to stub the network
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._timeout = httpx.Timeout(
            timeout=settings.store_timeout,
            connect=min(5.0, settings.store_timeout),
        )
        self._limits = httpx.Limits(
            max_connections=100,
            max_keepalive_connections=20,
            keepalive_expiry=30.0,
        )
        self._client: Optional[httpx.AsyncClient] = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Lazy initialization of the HTTP client."""
        if self._client is None:
            key = self._settings.store_credentials
            self._client = httpx.AsyncClient(
                base_url=self._settings.store_endpoint,
                limits=self._limits,
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "apikey": key,
                    "Authorization": f"Bearer {key}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close all connections and cleanup resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ══════════════════════════════════════════════════════════════════════
    # Transport
    # ══════════════════════════════════════════════════════════════════════

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[List[Tuple[str, str]]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        Perform one HTTP call and translate failures.

        Raises:
            TransientStoreError: timeout, network error, HTTP 429 or 5xx
            StoreConflictError: unique constraint violated (23505)
            StoreReferenceError: foreign key violated (23503)
            StoreError: any other non-2xx answer
        """
        client = await self._ensure_client()

        try:
            response = await client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as exc:
            raise TransientStoreError(
                message="The data service did not respond in time",
                context={"method": method, "path": path},
            ) from exc
        except httpx.TransportError as exc:
            raise TransientStoreError(
                message=f"The data service is unreachable: {exc}",
                context={"method": method, "path": path},
            ) from exc

        if response.is_success:
            return response

        message, code = _error_details(response)
        status = response.status_code
        ctx = {"method": method, "path": path}

        if status == 429 or status >= 500:
            raise TransientStoreError(message=message, status_code=status, code=code, context=ctx)
        if code == UNIQUE_VIOLATION:
            raise StoreConflictError(message=message, status_code=status, code=code, context=ctx)
        if code == FOREIGN_KEY_VIOLATION:
            raise StoreReferenceError(message=message, status_code=status, code=code, context=ctx)

        logger.warning("Store call %s %s failed: HTTP %d %s", method, path, status, message)
        raise StoreError(message=message, status_code=status, code=code, context=ctx)

    async def _get_with_retry(self, path: str, params: List[Tuple[str, str]]) -> Any:
        """GET with tenacity retry on transient failures."""

        @retry(
            reraise=True,
            stop=stop_after_attempt(self._settings.retry_max_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.retry_min_wait,
                max=self._settings.retry_max_wait,
                jitter=1,
            ),
            retry=retry_if_exception_type(TransientStoreError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        async def _runner() -> Any:
            response = await self._send("GET", path, params=params)
            return response.json()

        return await _runner()

    @staticmethod
    def _body(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ══════════════════════════════════════════════════════════════════════
    # Tables
    # ══════════════════════════════════════════════════════════════════════

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        params = [("select", "".join(columns.split()))]
        params.extend(_filter_params(filters))
        if order_by:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        if offset:
            params.append(("offset", str(offset)))
        if limit is not None:
            params.append(("limit", str(limit)))

        rows = await self._get_with_retry(f"{REST_PREFIX}/{table}", params)
        return rows or []

    async def insert(self, table: str, rows: List[Row]) -> List[Row]:
        response = await self._send(
            "POST", f"{REST_PREFIX}/{table}", json=rows, headers=RETURN_REPRESENTATION
        )
        return self._body(response) or []

    async def update(
        self, table: str, values: Row, filters: Sequence[Filter]
    ) -> List[Row]:
        if not filters:
            raise ValueError("update() requires at least one filter")
        response = await self._send(
            "PATCH",
            f"{REST_PREFIX}/{table}",
            params=_filter_params(filters),
            json=values,
            headers=RETURN_REPRESENTATION,
        )
        return self._body(response) or []

    async def delete(self, table: str, filters: Sequence[Filter]) -> List[Row]:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        response = await self._send(
            "DELETE",
            f"{REST_PREFIX}/{table}",
            params=_filter_params(filters),
            headers=RETURN_REPRESENTATION,
        )
        return self._body(response) or []

    async def rpc(self, function: str, params: Optional[Row] = None) -> Any:
        response = await self._send(
            "POST", f"{REST_PREFIX}/rpc/{function}", json=params or {}
        )
        return self._body(response)

    # ══════════════════════════════════════════════════════════════════════
    # Identities
    # ══════════════════════════════════════════════════════════════════════

    async def _auth_call(
        self,
        path: str,
        payload: Row,
        params: Optional[List[Tuple[str, str]]] = None,
    ) -> Any:
        try:
            response = await self._send(
                "POST", f"{AUTH_PREFIX}{path}", params=params, json=payload
            )
        except TransientStoreError:
            raise
        except StoreError as exc:
            raise StoreAuthError(
                message=exc.message,
                status_code=exc.status_code,
                code=exc.code,
                context=exc.context,
            ) from exc
        return self._body(response)

    async def sign_up(
        self, email: str, password: str, metadata: Optional[Row] = None
    ) -> AuthUser:
        body = await self._auth_call(
            "/signup",
            {"email": email, "password": password, "data": metadata or {}},
        )
        return _auth_user(body)

    async def sign_in(self, email: str, password: str) -> AuthUser:
        body = await self._auth_call(
            "/token",
            {"email": email, "password": password},
            params=[("grant_type", "password")],
        )
        return _auth_user(body)

    async def health_check(self) -> bool:
        """
        Check if PostgREST answers with our key.

        How:     GET /rest/v1/ (the schema root); no retries, no table reads.
        """
        try:
            await self._send("GET", f"{REST_PREFIX}/")
            return True
        except StoreError as exc:
            logger.warning("Store health check failed: %s", exc.message)
            return False
