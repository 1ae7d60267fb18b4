"""
Oleang Blog API: Post Service
=============================

What:  Listing, creation and lookup of blog posts.
How:   Issues PostgREST queries through the injected RemoteStore and joins
       posts to categories in memory by id.
Who:   Called by the /api/posts route handlers.

List flow (GET /api/posts):
    ┌────────────────┐    ┌──────────────────┐    ┌──────────────────┐
    │ Resolve        │───▶│ Query posts      │───▶│ Fetch categories │
    │ category name  │    │ (filter, order,  │    │ and annotate     │
    │ (optional)     │    │  offset/limit)   │    │ category_name    │
    └────────────────┘    └──────────────────┘    └──────────────────┘
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from blog_api.exceptions import (
    BlogAPIError,
    CategoryNotFoundError,
    NotFoundError,
)
from blog_api.services.store_base import RemoteStore, Row, eq, ilike

logger = logging.getLogger(__name__)

POST_COLUMNS = (
    "id, image, title, description, date, content, "
    "status_id, likes_count, category_id"
)


class PostService:
    """
    Route logic for posts.

    Responsibilities:
        - list_posts(): filtered, paginated listing annotated with category names
        - create_post(): insert with a server-side timestamp
        - get_post(): single post with its category name
    """

    async def resolve_category_id(self, store: RemoteStore, name: str) -> int:
        """
        Map a category name to its id.

        Raises:
            CategoryNotFoundError: no category has that name
        """
        row = await store.select_one("categories", columns="id", filters=[eq("name", name)])
        if row is None:
            raise CategoryNotFoundError(name)
        return row["id"]

    async def list_posts(
        self,
        store: RemoteStore,
        category: Optional[str] = None,
        keyword: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        max_limit: Optional[int] = None,
    ) -> List[Row]:
        """
        List posts newest first.

        Args:
            category: Category name filter (unknown name → CategoryNotFoundError)
            keyword: Case-insensitive substring of the title
            page: 1-based page number
            limit: Page size; clamped to `max_limit` when given

        Returns:
            Post rows, each with an added `category_name` (None if unmatched)
        """
        if max_limit is not None:
            limit = min(limit, max_limit)
        offset = (page - 1) * limit

        filters = []
        if category:
            filters.append(eq("category_id", await self.resolve_category_id(store, category)))
        if keyword:
            filters.append(ilike("title", f"%{keyword}%"))

        posts = await store.select(
            "posts",
            columns=POST_COLUMNS,
            filters=filters,
            order_by="date",
            descending=True,
            offset=offset,
            limit=limit,
        )

        categories = await store.select("categories", columns="id, name")
        names: Dict[int, str] = {c["id"]: c["name"] for c in categories}

        logger.debug(
            "Listed %d posts (category=%s, keyword=%s, page=%d, limit=%d)",
            len(posts), category, keyword, page, limit,
        )
        return [{**post, "category_name": names.get(post.get("category_id"))} for post in posts]

    async def create_post(
        self,
        store: RemoteStore,
        title: str,
        content: str,
        category: str,
        description: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Row:
        """
        Insert a post under the named category.

        Raises:
            BlogAPIError: unknown category. Creation reports this as a server
                error (500), unlike listing which answers 400.
        """
        try:
            category_id = await self.resolve_category_id(store, category)
        except CategoryNotFoundError as e:
            raise BlogAPIError(message=e.message, context=e.context) from e

        row: Row = {
            "title": title,
            "content": content,
            "category_id": category_id,
            "date": datetime.now(timezone.utc).isoformat(),
        }
        if description is not None:
            row["description"] = description
        if image is not None:
            row["image"] = image

        created = await store.insert("posts", [row])
        post = created[0] if created else row
        logger.info("Post created: id=%s category=%s", post.get("id"), category)
        return {**post, "category_name": category}

    async def get_post(self, store: RemoteStore, post_id: int) -> Row:
        """
        Fetch one post with its category name.

        Raises:
            NotFoundError: no post with that id (→ 404)
        """
        row = await store.select_one(
            "posts",
            columns=f"{POST_COLUMNS}, categories(name)",
            filters=[eq("id", post_id)],
        )
        if row is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))

        nested = row.pop("categories", None) or {}
        return {**row, "category_name": nested.get("name")}


post_service = PostService()
