"""
Oleang Blog API: Supabase Store Unit Tests (Mocked Network)
===========================================================

What:  Tests for SupabaseStore request shaping, error translation and retries.
How:   httpx.MockTransport stands in for the hosted project; no real calls.

What we test:
    ✅ PostgREST query strings (select, filters, order, paging) and headers
    ✅ Writes send Prefer: return=representation and are never retried
    ✅ Unique violations → StoreConflictError, foreign key → StoreReferenceError
    ✅ Other 4xx → StoreError
    ✅ Reads retry on 5xx and timeouts, then give up
    ✅ GoTrue sign-in/sign-up parsing and rejection → StoreAuthError
    ✅ Health check never raises
    ❌ Real network calls (use a staging project for that)
"""

import json
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

from blog_api.exceptions import (
    StoreAuthError,
    StoreConflictError,
    StoreError,
    StoreReferenceError,
)
from blog_api.services.store_base import eq, ilike
from blog_api.services.supabase_service import SupabaseStore, TransientStoreError


@pytest_asyncio.fixture
async def make_store(settings):
    """
    Builds SupabaseStore instances over a MockTransport.

    Returns (store, requests): every request the store sends is appended to
    `requests`.
    """
    stores: List[SupabaseStore] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        store = SupabaseStore(settings, transport=httpx.MockTransport(_record))
        stores.append(store)
        return store, requests

    yield _make

    for store in stores:
        await store.close()


class TestSelect:

    @pytest.mark.asyncio
    async def test_query_string_and_headers(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(200, json=[{"id": 1}]))

        rows = await store.select(
            "posts",
            columns="id, title, categories(name)",
            filters=[eq("category_id", 3), ilike("title", "%tokyo%")],
            order_by="date",
            descending=True,
            offset=10,
            limit=5,
        )

        assert rows == [{"id": 1}]
        request = requests[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/posts"
        params = request.url.params
        assert params["select"] == "id,title,categories(name)"
        assert params["category_id"] == "eq.3"
        assert params["title"] == "ilike.%tokyo%"
        assert params["order"] == "date.desc"
        assert params["offset"] == "10"
        assert params["limit"] == "5"
        assert request.headers["apikey"] == "test-key-not-real"
        assert request.headers["authorization"] == "Bearer test-key-not-real"

    @pytest.mark.asyncio
    async def test_first_page_omits_offset(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(200, json=[]))

        await store.select("posts", order_by="created_at", offset=0, limit=10)

        params = requests[0].url.params
        assert "offset" not in params
        assert params["order"] == "created_at.asc"

    @pytest.mark.asyncio
    async def test_none_filter_becomes_is_null(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(200, json=[]))

        await store.select("posts", filters=[eq("category_id", None)])

        assert requests[0].url.params["category_id"] == "is.null"

    @pytest.mark.asyncio
    async def test_select_one_limits_to_one_row(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(200, json=[]))

        assert await store.select_one("users", filters=[eq("email", "a@b.c")]) is None
        assert requests[0].url.params["limit"] == "1"


class TestRetries:

    @pytest.mark.asyncio
    async def test_read_retries_server_errors(self, make_store):
        answers = iter([
            httpx.Response(503, json={"message": "upstream unavailable"}),
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, json=[{"id": 1}]),
        ])
        store, requests = make_store(lambda r: next(answers))

        rows = await store.select("posts")

        assert rows == [{"id": 1}]
        assert len(requests) == 3

    @pytest.mark.asyncio
    async def test_read_gives_up_after_max_attempts(self, make_store, settings):
        store, requests = make_store(
            lambda r: httpx.Response(503, json={"message": "upstream unavailable"})
        )

        with pytest.raises(TransientStoreError, match="upstream unavailable"):
            await store.select("posts")

        assert len(requests) == settings.retry_max_attempts

    @pytest.mark.asyncio
    async def test_read_retries_timeouts(self, make_store, settings):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        store, requests = make_store(handler)

        with pytest.raises(TransientStoreError, match="did not respond in time"):
            await store.select("posts")

        assert len(requests) == settings.retry_max_attempts

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, make_store):
        store, requests = make_store(
            lambda r: httpx.Response(
                400, json={"code": "42703", "message": "column posts.nope does not exist"}
            )
        )

        with pytest.raises(StoreError) as exc_info:
            await store.select("posts", columns="nope")

        assert not isinstance(exc_info.value, TransientStoreError)
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "42703"
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_writes_are_not_retried(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(503, text="unavailable"))

        with pytest.raises(TransientStoreError):
            await store.insert("likes", [{"user_id": "u1", "post_id": 1}])

        assert len(requests) == 1


class TestWrites:

    @pytest.mark.asyncio
    async def test_insert_requests_representation(self, make_store):
        store, requests = make_store(
            lambda r: httpx.Response(201, json=[{"id": 5, "user_id": "u1", "post_id": 1}])
        )

        rows = await store.insert("likes", [{"user_id": "u1", "post_id": 1}])

        assert rows[0]["id"] == 5
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/likes"
        assert request.headers["prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_unique_violation_is_a_conflict(self, make_store):
        store, _ = make_store(
            lambda r: httpx.Response(
                409,
                json={
                    "code": "23505",
                    "message": 'duplicate key value violates unique constraint "uq_likes_user_post"',
                },
            )
        )

        with pytest.raises(StoreConflictError) as exc_info:
            await store.insert("likes", [{"user_id": "u1", "post_id": 1}])

        assert exc_info.value.code == "23505"
        assert "uq_likes_user_post" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_foreign_key_violation_is_not_a_conflict(self, make_store):
        """PostgREST answers 409 for missing references too; only 23505 is a duplicate."""
        store, _ = make_store(
            lambda r: httpx.Response(
                409,
                json={
                    "code": "23503",
                    "message": (
                        'insert or update on table "likes" violates foreign key '
                        'constraint "likes_post_id_fkey"'
                    ),
                },
            )
        )

        with pytest.raises(StoreReferenceError) as exc_info:
            await store.insert("likes", [{"user_id": "u1", "post_id": 999999}])

        assert not isinstance(exc_info.value, StoreConflictError)
        assert exc_info.value.code == "23503"
        assert exc_info.value.references("post_id")
        assert not exc_info.value.references("user_id")

    @pytest.mark.asyncio
    async def test_update_and_delete_filter_rows(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(200, json=[{"id": "u1"}]))

        await store.update("users", {"bio": "hi"}, filters=[eq("id", "u1")])
        deleted = await store.delete("likes", filters=[eq("user_id", "u1"), eq("post_id", 4)])

        assert deleted == [{"id": "u1"}]
        assert requests[0].method == "PATCH"
        assert requests[0].url.params["id"] == "eq.u1"
        assert requests[1].method == "DELETE"
        assert requests[1].url.params["post_id"] == "eq.4"
        assert requests[1].headers["prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_unfiltered_update_and_delete_are_refused(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(200, json=[]))

        with pytest.raises(ValueError):
            await store.update("users", {"bio": "hi"}, filters=[])
        with pytest.raises(ValueError):
            await store.delete("likes", filters=[])

        assert requests == []

    @pytest.mark.asyncio
    async def test_rpc_posts_named_arguments(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(204))

        result = await store.rpc("increment_likes", {"post_id": 7})

        assert result is None
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/rest/v1/rpc/increment_likes"
        assert json.loads(requests[0].content) == {"post_id": 7}


class TestAuth:

    @pytest.mark.asyncio
    async def test_sign_in_reads_session_user(self, make_store):
        store, requests = make_store(
            lambda r: httpx.Response(
                200,
                json={
                    "access_token": "jwt",
                    "token_type": "bearer",
                    "user": {"id": "u-1", "email": "ana@example.com"},
                },
            )
        )

        user = await store.sign_in("ana@example.com", "secret123")

        assert user.id == "u-1"
        assert user.email == "ana@example.com"
        assert requests[0].url.path == "/auth/v1/token"
        assert requests[0].url.params["grant_type"] == "password"

    @pytest.mark.asyncio
    async def test_sign_up_reads_bare_user(self, make_store):
        store, requests = make_store(
            lambda r: httpx.Response(200, json={"id": "u-2", "email": "bo@example.com"})
        )

        user = await store.sign_up("bo@example.com", "secret123", metadata={"name": "Bo"})

        assert user.id == "u-2"
        assert requests[0].url.path == "/auth/v1/signup"

    @pytest.mark.asyncio
    async def test_invalid_credentials(self, make_store):
        store, _ = make_store(
            lambda r: httpx.Response(
                400,
                json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
            )
        )

        with pytest.raises(StoreAuthError) as exc_info:
            await store.sign_in("ana@example.com", "wrong")

        assert exc_info.value.message == "Invalid login credentials"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_gotrue_error_code(self, make_store):
        store, _ = make_store(
            lambda r: httpx.Response(
                422,
                json={"code": 422, "error_code": "user_already_exists", "msg": "User already registered"},
            )
        )

        with pytest.raises(StoreAuthError) as exc_info:
            await store.sign_up("ana@example.com", "secret123")

        assert exc_info.value.code == "user_already_exists"
        assert exc_info.value.message == "User already registered"


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_reachable(self, make_store):
        store, requests = make_store(lambda r: httpx.Response(200, json={}))

        assert await store.health_check() is True
        assert requests[0].url.path == "/rest/v1/"

    @pytest.mark.asyncio
    async def test_unreachable(self, make_store):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store, requests = make_store(handler)

        assert await store.health_check() is False
        assert len(requests) == 1
