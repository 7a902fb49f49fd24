"""
Document-store implementation of the SocialGraphRepository port.

A follow edge is a document at Users/{followerId}/Follow/{followedUsername}
holding `followed` (the target username) and `timestamp`. Following counts
read the follower's own sub-collection; follower counts are a
collection-group count over every Follow sub-collection, i.e. a scan whose
cost grows with the total number of edges.

Concurrent follow/unfollow of the same pair is last-write-wins: racing
toggles may leave the edge in either state.
"""

import logging
from typing import List

from litlore.domain.entities import FollowEdge, User
from litlore.domain.errors import ParseSkip, ValidationError
from litlore.domain.ports import (
    PREFIX_SENTINEL,
    SERVER_TIMESTAMP,
    DocumentStore,
    SocialGraphRepository,
)
from litlore.domain.value_objects import Outcome, UserContext

from .documents import (
    FOLLOW_SUBCOLLECTION,
    USERS_COLLECTION,
    check_segment,
    follow_collection,
    follow_path,
    millis_to_datetime,
    remote_failure,
)

logger = logging.getLogger(__name__)


class DocumentSocialGraphRepository(SocialGraphRepository):
    """User search and follow edges over a DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def search_users(self, prefix: str) -> Outcome[List[User]]:
        """
        Find users whose username starts with `prefix`.

        Runs a range query over [prefix, prefix + U+F8FF] on the username
        field, so results come back in lexicographic order. The match is
        case-sensitive.
        """
        prefix = prefix or ""
        try:
            docs = await self._store.range_query(
                USERS_COLLECTION, "username", prefix, prefix + PREFIX_SENTINEL
            )
        except Exception as e:
            return Outcome.failure(remote_failure("search_users", e))

        users: List[User] = []
        skipped: List[ParseSkip] = []
        for doc in docs:
            try:
                users.append(
                    User(
                        id=doc.id,
                        username=doc.data.get("username"),
                        email=doc.data.get("email") or "",
                        bio=doc.data.get("bio") or "",
                    )
                )
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping user {doc.path}: {e}")
                skipped.append(ParseSkip(doc.path, str(e)))

        logger.debug(f"User search {prefix!r} matched {len(users)} users")
        return Outcome.success(users, skipped)

    async def follow(self, ctx: UserContext, target_username: str) -> Outcome[None]:
        """
        Create the edge ctx.user_id -> target_username.

        Following an already-followed user succeeds without touching the
        existing edge.
        """
        try:
            check_segment(target_username, "target_username")
            if ctx.username and ctx.username == target_username:
                raise ValidationError("Users cannot follow themselves", field="target_username")
        except ValidationError as e:
            return Outcome.failure(e)

        path = follow_path(ctx.user_id, target_username)
        try:
            existing = await self._store.get(path)
            if existing is not None:
                logger.debug(f"{ctx.user_id} already follows {target_username}")
                return Outcome.success(None)
            await self._store.set(path, {"followed": target_username, "timestamp": SERVER_TIMESTAMP})
        except Exception as e:
            return Outcome.failure(remote_failure("follow", e))

        logger.info(f"{ctx.user_id} followed {target_username}")
        return Outcome.success(None)

    async def unfollow(self, ctx: UserContext, target_username: str) -> Outcome[None]:
        """Remove the edge ctx.user_id -> target_username (no-op when absent)."""
        try:
            check_segment(target_username, "target_username")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            await self._store.delete(follow_path(ctx.user_id, target_username))
        except Exception as e:
            return Outcome.failure(remote_failure("unfollow", e))

        logger.info(f"{ctx.user_id} unfollowed {target_username}")
        return Outcome.success(None)

    async def is_following(self, user_id: str, target_username: str) -> Outcome[bool]:
        try:
            check_segment(user_id, "user_id")
            check_segment(target_username, "target_username")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            doc = await self._store.get(follow_path(user_id, target_username))
        except Exception as e:
            return Outcome.failure(remote_failure("is_following", e))
        return Outcome.success(doc is not None)

    async def fetch_following(self, user_id: str) -> Outcome[List[FollowEdge]]:
        """
        The follow edges owned by `user_id`, ordered by followed username.

        The followed username is the edge document id; `created_at` is None
        for edges written without a timestamp.
        """
        try:
            check_segment(user_id, "user_id")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            docs = await self._store.list_collection(follow_collection(user_id))
        except Exception as e:
            return Outcome.failure(remote_failure("fetch_following", e))

        edges = [
            FollowEdge(
                follower_id=user_id,
                followed_username=doc.id,
                created_at=millis_to_datetime(doc.data.get("timestamp")),
            )
            for doc in docs
        ]
        return Outcome.success(edges)

    async def fetch_following_usernames(self, user_id: str) -> Outcome[List[str]]:
        """Usernames `user_id` follows (the edge document ids)."""
        outcome = await self.fetch_following(user_id)
        if not outcome.ok:
            return Outcome.failure(outcome.error)
        return Outcome.success([edge.followed_username for edge in outcome.value])

    async def fetch_following_count(self, user_id: str) -> Outcome[int]:
        try:
            check_segment(user_id, "user_id")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            count = await self._store.count_collection(follow_collection(user_id))
        except Exception as e:
            return Outcome.failure(remote_failure("fetch_following_count", e))
        return Outcome.success(count)

    async def fetch_followers_count(self, username: str) -> Outcome[int]:
        """Number of follow edges, across all users, whose target is `username`."""
        try:
            check_segment(username, "username")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            count = await self._store.count_group(FOLLOW_SUBCOLLECTION, "followed", username)
        except Exception as e:
            return Outcome.failure(remote_failure("fetch_followers_count", e))
        return Outcome.success(count)
