"""
Oleang Blog API: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── settings: Settings pointing at a fake project, fast retries
    ├── mock_store: AsyncMock RemoteStore for service unit tests
    ├── memory_store: InMemoryStore seeded with two categories
    └── test_client: HTTPX AsyncClient bound to create_app(settings, memory_store)
"""

import os
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any blog_api import: blog_api.main builds a module-level app
os.environ["STORE_ENDPOINT"] = "https://test-project.supabase.co"
os.environ["STORE_CREDENTIALS"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from blog_api.config import Settings  # noqa: E402
from blog_api.exceptions import (  # noqa: E402
    StoreAuthError,
    StoreConflictError,
    StoreError,
    StoreReferenceError,
)
from blog_api.main import create_app  # noqa: E402
from blog_api.services.store_base import AuthUser, Filter, RemoteStore, Row  # noqa: E402


ALLOWED_ORIGIN = "http://localhost:5173"


# ══════════════════════════════════════════════════════════════════════════
# In-memory RemoteStore
# ══════════════════════════════════════════════════════════════════════════

# (table, embedded table) → foreign key column on `table`
FOREIGN_KEYS = {
    ("comments", "users"): "user_id",
    ("posts", "categories"): "category_id",
}

_EMBED = re.compile(r"^(\w+)\((.*)\)$")


def _split_columns(columns: str) -> List[str]:
    """Split a PostgREST select list on top-level commas."""
    parts, depth, current = [], 0, ""
    for ch in columns:
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


def _like_to_regex(pattern: str) -> "re.Pattern[str]":
    body = ".*".join(re.escape(part) for part in pattern.split("%"))
    return re.compile(f"^{body}$", re.IGNORECASE | re.DOTALL)


def _matches(row: Row, f: Filter) -> bool:
    value = row.get(f.column)
    if f.op == "eq":
        return value == f.value
    if f.op == "ilike":
        return value is not None and bool(_like_to_regex(f.value).match(str(value)))
    raise AssertionError(f"Unsupported filter operator: {f.op}")


class InMemoryStore(RemoteStore):
    """
    RemoteStore double holding tables as lists of dicts.

    Mirrors what the hosted project enforces: auto ids, posts.likes_count
    default, the post foreign key on likes and comments, the unique
    (user_id, post_id) pair on likes, the three like
    count procedures and email/password identities.

    Knobs:
        failing_procedures: procedure names that raise StoreError
        healthy: value returned by health_check()
    """

    def __init__(self) -> None:
        self.tables: Dict[str, List[Row]] = {
            "categories": [],
            "posts": [],
            "users": [],
            "likes": [],
            "comments": [],
        }
        self._next_id: Dict[str, int] = {}
        self.identities: Dict[str, Dict[str, str]] = {}
        self.rpc_calls: List[tuple] = []
        self.failing_procedures: set = set()
        self.healthy = True

    # ── helpers ───────────────────────────────────────────────────────────

    def seed(self, table: str, **values: Any) -> Row:
        row = dict(values)
        if "id" not in row:
            row["id"] = self._allocate_id(table)
        if table == "posts":
            row.setdefault("likes_count", 0)
        self.tables[table].append(row)
        return row

    def _allocate_id(self, table: str) -> int:
        existing = [r["id"] for r in self.tables[table] if isinstance(r.get("id"), int)]
        next_id = max([self._next_id.get(table, 0), *existing]) + 1
        self._next_id[table] = next_id
        return next_id

    def _project(self, table: str, row: Row, columns: str) -> Row:
        out: Row = {}
        for column in _split_columns(columns):
            embed = _EMBED.match(column)
            if embed:
                other, inner = embed.group(1), embed.group(2)
                fk = FOREIGN_KEYS[(table, other)]
                target = next(
                    (r for r in self.tables[other] if r.get("id") == row.get(fk)), None
                )
                out[other] = self._project(other, target, inner) if target else None
            elif column == "*":
                out.update(row)
            else:
                out[column] = row.get(column)
        return out

    # ── RemoteStore ───────────────────────────────────────────────────────

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
        rows = [r for r in self.tables[table] if all(_matches(r, f) for f in filters)]
        if order_by:
            rows.sort(key=lambda r: r[order_by], reverse=descending)
        start = offset or 0
        rows = rows[start:] if limit is None else rows[start:start + limit]
        return [self._project(table, r, columns) for r in rows]

    async def insert(self, table: str, rows: List[Row]) -> List[Row]:
        created = []
        for values in rows:
            if table in ("likes", "comments") and not any(
                p["id"] == values["post_id"] for p in self.tables["posts"]
            ):
                raise StoreReferenceError(
                    message=(
                        f'insert or update on table "{table}" violates foreign key '
                        f'constraint "{table}_post_id_fkey"'
                    ),
                    status_code=409,
                    code="23503",
                )
            if table == "likes" and any(
                r["user_id"] == values["user_id"] and r["post_id"] == values["post_id"]
                for r in self.tables["likes"]
            ):
                raise StoreConflictError(
                    message='duplicate key value violates unique constraint "uq_likes_user_post"',
                    status_code=409,
                    code="23505",
                )
            created.append(dict(self.seed(table, **values)))
        return created

    async def update(self, table: str, values: Row, filters: Sequence[Filter]) -> List[Row]:
        updated = []
        for row in self.tables[table]:
            if all(_matches(row, f) for f in filters):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def delete(self, table: str, filters: Sequence[Filter]) -> List[Row]:
        kept, deleted = [], []
        for row in self.tables[table]:
            (deleted if all(_matches(row, f) for f in filters) else kept).append(row)
        self.tables[table] = kept
        return deleted

    async def rpc(self, function: str, params: Optional[Row] = None) -> Any:
        params = params or {}
        self.rpc_calls.append((function, params))
        if function in self.failing_procedures:
            raise StoreError(message=f"{function} failed", status_code=500)

        post = next((p for p in self.tables["posts"] if p["id"] == params.get("post_id")), None)
        if function == "increment_likes":
            if post:
                post["likes_count"] += 1
            return None
        if function == "decrement_likes":
            if post:
                post["likes_count"] = max(post["likes_count"] - 1, 0)
            return None
        if function == "reconcile_likes_count":
            if post:
                post["likes_count"] = sum(
                    1 for like in self.tables["likes"] if like["post_id"] == post["id"]
                )
                return post["likes_count"]
            return None
        raise StoreError(message=f"Could not find the function public.{function}", status_code=404)

    async def sign_up(self, email: str, password: str, metadata: Optional[Row] = None) -> AuthUser:
        if email in self.identities:
            raise StoreAuthError(
                message="User already registered", status_code=422, code="user_already_exists"
            )
        if len(password) < 6:
            raise StoreAuthError(
                message="Password should be at least 6 characters",
                status_code=422,
                code="weak_password",
            )
        user_id = str(uuid.uuid4())
        self.identities[email] = {"id": user_id, "password": password}
        return AuthUser(id=user_id, email=email, raw={"id": user_id, "email": email})

    async def sign_in(self, email: str, password: str) -> AuthUser:
        identity = self.identities.get(email)
        if identity is None or identity["password"] != password:
            raise StoreAuthError(
                message="Invalid login credentials", status_code=400, code="invalid_credentials"
            )
        return AuthUser(id=identity["id"], email=email, raw={"id": identity["id"], "email": email})

    async def health_check(self) -> bool:
        return self.healthy


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings():
    """Settings for a fake project with retries that never sleep."""
    return Settings(
        store_endpoint="https://test-project.supabase.co",
        store_credentials="test-key-not-real",
        allowed_origins=f"{ALLOWED_ORIGIN},https://oleang-blog-project.vercel.app",
        retry_max_attempts=3,
        retry_min_wait=0,
        retry_max_wait=0,
        log_level="WARNING",
    )


@pytest.fixture
def mock_store():
    """
    Provides a mock RemoteStore.

    Usage:
        async def test_get_post(mock_store):
            mock_store.select_one.return_value = {"id": 1, "categories": None}
            result = await post_service.get_post(mock_store, 1)
    """
    return AsyncMock(spec=RemoteStore)


@pytest.fixture
def memory_store():
    """InMemoryStore with the categories Travel (1) and Food (2)."""
    store = InMemoryStore()
    store.seed("categories", id=1, name="Travel")
    store.seed("categories", id=2, name="Food")
    return store


@pytest.fixture
def seed_posts(memory_store):
    """
    Adds `count` posts dated one hour apart, oldest first.

    Returns the seeded rows; post N is titled "Post N".
    """

    def _seed(count: int, category_id: int = 1, title_prefix: str = "Post") -> List[Row]:
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        return [
            memory_store.seed(
                "posts",
                title=f"{title_prefix} {n}",
                content=f"Body of {title_prefix.lower()} {n}",
                description=None,
                image=None,
                status_id=1,
                category_id=category_id,
                date=(base + timedelta(hours=n)).isoformat(),
            )
            for n in range(1, count + 1)
        ]

    return _seed


@pytest_asyncio.fixture
async def test_client(settings, memory_store):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient talking to create_app(settings, memory_store).
    How:     Uses ASGITransport to route requests directly to the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app(settings, memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
