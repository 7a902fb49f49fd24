"""
Document-store implementation of the UserRepository port.

User profiles live at Users/{uid} with `username`, `email` and `bio`.
"""

import logging
from typing import Optional

from litlore.domain.entities import User
from litlore.domain.errors import NotFoundError, RemoteFailure, ValidationError
from litlore.domain.ports import DocumentStore, UserRepository
from litlore.domain.value_objects import Outcome, UserContext

from .documents import USERS_COLLECTION, check_segment, remote_failure, user_path

logger = logging.getLogger(__name__)


class DocumentUserRepository(UserRepository):
    """User profile documents over a DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def create_user(self, user_id: str, username: str, email: str) -> Outcome[User]:
        """
        Write the profile document for a newly registered account.

        The bio starts empty. A username already held by a different user
        is rejected; the check and the write are not atomic, so two
        simultaneous sign-ups can still race.
        """
        try:
            check_segment(user_id, "user_id")
            if not username or not username.strip():
                raise ValidationError("username is required", field="username")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            holders = await self._store.range_query(USERS_COLLECTION, "username", username, username)
            if any(doc.id != user_id for doc in holders):
                return Outcome.failure(
                    ValidationError(f"Username '{username}' is already taken", field="username")
                )
            await self._store.set(
                user_path(user_id), {"username": username, "email": email or "", "bio": ""}
            )
        except Exception as e:
            return Outcome.failure(remote_failure("create_user", e))

        logger.info(f"Created user {user_id} ({username})")
        return Outcome.success(User(id=user_id, username=username, email=email or "", bio=""))

    async def fetch_user(self, user_id: str) -> Outcome[Optional[User]]:
        """The user's profile, or None when no document exists."""
        try:
            check_segment(user_id, "user_id")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            doc = await self._store.get(user_path(user_id))
        except Exception as e:
            return Outcome.failure(remote_failure("fetch_user", e))

        if doc is None:
            logger.warning(f"User document not found for UID: {user_id}")
            return Outcome.success(None)

        try:
            user = User(
                id=doc.id,
                username=doc.data.get("username"),
                email=doc.data.get("email") or "",
                bio=doc.data.get("bio") or "",
            )
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Failed to parse user data for UID {user_id}: {e}")
            return Outcome.failure(RemoteFailure("Failed to parse user data.", operation="fetch_user"))
        return Outcome.success(user)

    async def fetch_username(self, user_id: str) -> Outcome[str]:
        """The user's username; NotFoundError when the user or username is missing."""
        try:
            check_segment(user_id, "user_id")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            doc = await self._store.get(user_path(user_id))
        except Exception as e:
            return Outcome.failure(remote_failure("fetch_username", e))

        if doc is None:
            return Outcome.failure(NotFoundError("User", user_id))
        username = doc.data.get("username")
        if not isinstance(username, str) or not username:
            logger.error(f"Username is null or empty for UID: {user_id}")
            return Outcome.failure(NotFoundError("Username for user", user_id))
        return Outcome.success(username)

    async def update_bio(self, ctx: UserContext, bio: str) -> Outcome[None]:
        """Replace the acting user's bio."""
        if bio is None:
            return Outcome.failure(ValidationError("bio cannot be None", field="bio"))

        try:
            await self._store.update(user_path(ctx.user_id), {"bio": bio})
        except Exception as e:
            return Outcome.failure(remote_failure("update_bio", e))
        return Outcome.success(None)
