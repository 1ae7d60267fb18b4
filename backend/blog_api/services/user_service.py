"""
Oleang Blog API: User Service
=============================

What:  Sign-up, log-in and profile updates.
How:   Identities live in the store's auth subsystem; the public profile is
       a `users` row whose id mirrors the identity id.

Sign-up flow:
    1. Create the identity (email + password, name/username as metadata)
    2. Insert the profile row keyed by the returned identity id
    A rejection at either step answers 400 with the upstream message;
    profile creation is skipped when step 1 fails.

    There is no rollback: when step 2 fails the identity is left without a
    profile and is logged at ERROR as orphaned. Signing up again with that
    email answers "User already registered" until the identity is deleted.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from blog_api.exceptions import (
    NotFoundError,
    StoreAuthError,
    StoreError,
    ValidationError,
)
from blog_api.services.store_base import RemoteStore, Row, eq

logger = logging.getLogger(__name__)


def _is_client_rejection(error: StoreError) -> bool:
    """Upstream 4xx: the caller's data was refused, not a service failure."""
    return error.status_code is not None and 400 <= error.status_code < 500


class UserService:

    async def sign_up(
        self,
        store: RemoteStore,
        name: str,
        username: str,
        email: str,
        password: str,
    ) -> Row:
        """
        Create an identity and its profile row.

        Raises:
            ValidationError: identity or profile rejected upstream (→ 400)
            StoreError: the store failed (→ 500)
        """
        try:
            identity = await store.sign_up(
                email, password, metadata={"name": name, "username": username}
            )
        except StoreAuthError as e:
            if not _is_client_rejection(e):
                raise
            logger.info("Sign-up rejected for %s: %s", email, e.message)
            raise ValidationError(message=e.message, context=e.context) from e

        profile = {
            "id": identity.id,
            "name": name,
            "username": username,
            "email": email,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            created = await store.insert("users", [profile])
        except StoreError as e:
            logger.error(
                "Orphaned identity %s (%s): profile insert failed: %s",
                identity.id, email, e.message,
            )
            if not _is_client_rejection(e):
                raise
            raise ValidationError(message=e.message, context=e.context) from e

        logger.info("User signed up: %s", identity.id)
        return created[0] if created else profile

    async def log_in(self, store: RemoteStore, email: str, password: str) -> Row:
        """
        Authenticate and return the profile row (no session token).

        Raises:
            ValidationError: bad credentials (→ 400)
            NotFoundError: authenticated identity without a profile (→ 404)
        """
        try:
            await store.sign_in(email, password)
        except StoreAuthError as e:
            if not _is_client_rejection(e):
                raise
            raise ValidationError(message=e.message, context=e.context) from e

        profile = await store.select_one("users", filters=[eq("email", email)])
        if profile is None:
            raise NotFoundError(resource="user", context={"email": email})
        return profile

    async def update_user(
        self, store: RemoteStore, user_id: str, changes: Dict[str, Any]
    ) -> Row:
        """
        Apply an already allow-listed partial update to a profile row.

        Raises:
            ValidationError: nothing to update, or the store refused the values
            NotFoundError: no profile with that id
        """
        if not changes:
            raise ValidationError(message="No updatable fields supplied", field="updateData")

        try:
            rows = await store.update("users", changes, filters=[eq("id", user_id)])
        except StoreError as e:
            if not _is_client_rejection(e):
                raise
            raise ValidationError(message=e.message, context=e.context) from e

        if not rows:
            raise NotFoundError(resource="user", resource_id=user_id)
        logger.info("User %s updated fields: %s", user_id, ", ".join(sorted(changes)))
        return rows[0]


user_service = UserService()
