"""
Oleang Blog API: Comment Service
================================

What:  Reading and writing comments on a post.
How:   Comments are read with the commenter embedded
       (`users(name, profile_pic)`) and flattened into the comment row.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from blog_api.exceptions import StoreReferenceError
from blog_api.services.like_service import missing_reference
from blog_api.services.store_base import RemoteStore, Row, eq

logger = logging.getLogger(__name__)

COMMENT_COLUMNS = "id, post_id, user_id, comment_text, created_at, users(name, profile_pic)"


class CommentService:

    async def list_comments(self, store: RemoteStore, post_id: int) -> Optional[List[Row]]:
        """
        Comments of a post in creation order.

        Returns:
            The annotated comments, or None when the post has none.
        """
        rows = await store.select(
            "comments",
            columns=COMMENT_COLUMNS,
            filters=[eq("post_id", post_id)],
            order_by="created_at",
        )
        if not rows:
            return None

        comments = []
        for row in rows:
            user = row.pop("users", None) or {}
            comments.append(
                {**row, "name": user.get("name"), "profile_pic": user.get("profile_pic")}
            )
        return comments

    async def create_comment(
        self, store: RemoteStore, post_id: int, user_id: str, comment_text: str
    ) -> Row:
        """
        Raises:
            NotFoundError: the post or the user does not exist (→ 404)
        """
        row: Row = {
            "post_id": post_id,
            "user_id": user_id,
            "comment_text": comment_text,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            created = await store.insert("comments", [row])
        except StoreReferenceError as e:
            raise missing_reference(e, user_id, post_id) from e
        logger.info("Comment added to post %s by %s", post_id, user_id)
        return created[0] if created else {}


comment_service = CommentService()
