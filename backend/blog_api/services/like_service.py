"""
Oleang Blog API: Like Service
=============================

What:  Like state checks and the like/unlike operations.
How:   Likes are written as a two-phase operation against the remote store.

Two-phase like/unlike:
    Phase 1  like-row write
             like   → INSERT guarded by the unique (user_id, post_id) constraint
             unlike → DELETE returning the removed rows
             A failure here fails the request.
    Phase 2  counter procedure (increment_likes / decrement_likes)
             A failure here is logged and reported back as
             `counter_synced=False`; the route then schedules
             `reconcile_likes()` which recomputes `posts.likes_count`
             from the like rows.

    Neither phase reads before writing, so two concurrent likes for the same
    pair resolve in the store: one insert wins, the other gets a conflict.
"""

import logging
from datetime import datetime, timezone
from typing import NamedTuple

from blog_api.exceptions import (
    NotFoundError,
    StoreConflictError,
    StoreError,
    StoreReferenceError,
    ValidationError,
)
from blog_api.services.store_base import RemoteStore, Row, eq

logger = logging.getLogger(__name__)

INCREMENT_PROCEDURE = "increment_likes"
DECREMENT_PROCEDURE = "decrement_likes"
RECONCILE_PROCEDURE = "reconcile_likes_count"


def missing_reference(error: StoreReferenceError, user_id: str, post_id: int) -> NotFoundError:
    """NotFoundError naming whichever side of a (user, post) reference is absent."""
    if error.references("user_id"):
        return NotFoundError(resource="user", resource_id=user_id)
    return NotFoundError(resource="post", resource_id=str(post_id))


class LikeResult(NamedTuple):
    like: Row
    counter_synced: bool


class LikeService:
    """Route logic for likes; stateless."""

    async def is_liked(self, store: RemoteStore, user_id: str, post_id: int) -> bool:
        row = await store.select_one(
            "likes",
            columns="id",
            filters=[eq("user_id", user_id), eq("post_id", post_id)],
        )
        return row is not None

    async def like(self, store: RemoteStore, user_id: str, post_id: int) -> LikeResult:
        """
        Record a like and bump the post's counter.

        Raises:
            ValidationError: the pair is already liked (→ 400)
            NotFoundError: the post or the user does not exist (→ 404)
            StoreError: the like row could not be written (→ 500)
        """
        row: Row = {
            "user_id": user_id,
            "post_id": post_id,
            "liked_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            created = await store.insert("likes", [row])
        except StoreConflictError as e:
            raise ValidationError(
                message="Already liked this post",
                context={"user_id": user_id, "post_id": post_id},
            ) from e
        except StoreReferenceError as e:
            raise missing_reference(e, user_id, post_id) from e

        synced = await self._adjust_counter(store, INCREMENT_PROCEDURE, post_id)
        return LikeResult(like=created[0] if created else row, counter_synced=synced)

    async def unlike(self, store: RemoteStore, user_id: str, post_id: int) -> bool:
        """
        Remove a like and lower the post's counter.

        Returns:
            Whether the counter procedure succeeded.

        Raises:
            ValidationError: the pair was not liked (→ 400)
        """
        deleted = await store.delete(
            "likes",
            filters=[eq("user_id", user_id), eq("post_id", post_id)],
        )
        if not deleted:
            raise ValidationError(
                message="Not liked this post",
                context={"user_id": user_id, "post_id": post_id},
            )

        return await self._adjust_counter(store, DECREMENT_PROCEDURE, post_id)

    async def _adjust_counter(self, store: RemoteStore, procedure: str, post_id: int) -> bool:
        try:
            await store.rpc(procedure, {"post_id": post_id})
            return True
        except StoreError as e:
            logger.warning(
                "%s failed for post %s, like count needs reconciliation: %s",
                procedure, post_id, e.message,
            )
            return False

    async def reconcile_likes(self, store: RemoteStore, post_id: int) -> None:
        """
        Recompute `likes_count` of one post from its like rows.

        Runs as a background task after a failed counter procedure, so it
        logs failures instead of raising.
        """
        try:
            await store.rpc(RECONCILE_PROCEDURE, {"post_id": post_id})
            logger.info("Reconciled like count for post %s", post_id)
        except StoreError as e:
            logger.error("Like count reconciliation failed for post %s: %s", post_id, e.message)


like_service = LikeService()
