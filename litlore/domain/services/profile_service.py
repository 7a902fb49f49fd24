"""
Profile aggregation service.

A profile page is assembled from several independent queries. They run
concurrently; a failing query never cancels the others, and the result is
a ProfileSnapshot carrying whatever succeeded plus one BranchError per
failed query.
"""

import asyncio
import logging
from typing import Any, Dict, List, Tuple

from ..errors import LitLoreError, NotFoundError, RemoteFailure
from ..ports import ReviewRepository, SavedBooksRepository, SocialGraphRepository, UserRepository
from ..value_objects import BranchError, Outcome, ProfileSnapshot

logger = logging.getLogger(__name__)

REVIEWS_BY_USERNAME = "username"
REVIEWS_BY_AUTHOR_ID = "author_id"

# Order in which branch errors are reported
BRANCHES = ("user", "reviews", "followers_count", "following_count", "following", "saved_books")


class ProfileService:
    """
    Builds ProfileSnapshots by fanning out to the repositories.

    Branches:
        user            - UserRepository.fetch_user
        reviews         - reviews joined by username (default) or author id
        followers_count - follow edges pointing at the username
        following_count - follow edges owned by the user
        following       - usernames the user follows
        saved_books     - the user's saved books

    `reviews` (when joined by username) and `followers_count` need the
    username, so they start once the user lookup finishes and fail with the
    lookup's error when it fails. All other branches start immediately.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        review_repository: ReviewRepository,
        social_graph_repository: SocialGraphRepository,
        saved_books_repository: SavedBooksRepository,
        reviews_key: str = REVIEWS_BY_USERNAME,
    ) -> None:
        """
        Initialize the profile service.

        Args:
            user_repository: Source of the user document
            review_repository: Source of the user's reviews
            social_graph_repository: Source of follow counts and edges
            saved_books_repository: Source of saved books
            reviews_key: "username" to match reviews on the username snapshot,
                        "author_id" to match them on the author's user id
        """
        if reviews_key not in (REVIEWS_BY_USERNAME, REVIEWS_BY_AUTHOR_ID):
            raise ValueError(
                f"reviews_key must be '{REVIEWS_BY_USERNAME}' or '{REVIEWS_BY_AUTHOR_ID}', got {reviews_key!r}"
            )
        self._users = user_repository
        self._reviews = review_repository
        self._social = social_graph_repository
        self._saved = saved_books_repository
        self._reviews_key = reviews_key

    async def load_profile(self, user_id: str) -> ProfileSnapshot:
        """
        Load everything shown on a user's profile.

        Never raises: failures are reported per branch in
        ProfileSnapshot.errors.
        """
        names = ["following_count", "following", "saved_books"]
        calls = [
            self._social.fetch_following_count(user_id),
            self._social.fetch_following_usernames(user_id),
            self._saved.fetch_saved(user_id),
        ]
        if self._reviews_key == REVIEWS_BY_AUTHOR_ID:
            names.append("reviews")
            calls.append(self._reviews.fetch_for_author_id(user_id))

        results = await asyncio.gather(self._load_user_branches(user_id), *calls, return_exceptions=True)

        outcomes: Dict[str, Outcome] = dict(results[0])
        for name, result in zip(names, results[1:]):
            outcomes[name] = self._as_outcome(name, result)

        snapshot = self._build_snapshot(user_id, outcomes)
        if snapshot.errors:
            logger.warning(f"Profile {user_id} loaded with failed branches: {snapshot.failed_branches()}")
        else:
            logger.debug(f"Profile {user_id} loaded")
        return snapshot

    # =========================================================================
    # Private helper methods
    # =========================================================================

    async def _load_user_branches(self, user_id: str) -> List[Tuple[str, Outcome]]:
        """The user lookup followed by the branches that need the username."""
        dependents = ["followers_count"]
        if self._reviews_key == REVIEWS_BY_USERNAME:
            dependents.insert(0, "reviews")

        try:
            user_outcome = await self._users.fetch_user(user_id)
        except Exception as e:
            user_outcome = self._as_outcome("user", e)

        if user_outcome.ok and user_outcome.value is None:
            user_outcome = Outcome.failure(NotFoundError("User", user_id))

        if not user_outcome.ok:
            return [("user", user_outcome)] + [(name, user_outcome) for name in dependents]

        username = user_outcome.value.username
        calls = [self._social.fetch_followers_count(username)]
        if self._reviews_key == REVIEWS_BY_USERNAME:
            calls.insert(0, self._reviews.fetch_for_author_username(username))

        results = await asyncio.gather(*calls, return_exceptions=True)
        return [("user", user_outcome)] + [
            (name, self._as_outcome(name, result)) for name, result in zip(dependents, results)
        ]

    @staticmethod
    def _as_outcome(branch: str, result: Any) -> Outcome:
        if isinstance(result, Outcome):
            return result
        if isinstance(result, LitLoreError):
            return Outcome.failure(result)
        if isinstance(result, BaseException):
            logger.error(f"Profile branch '{branch}' raised: {result!r}")
            return Outcome.failure(RemoteFailure.from_exception(result, operation=branch))
        return Outcome.success(result)

    @staticmethod
    def _build_snapshot(user_id: str, outcomes: Dict[str, Outcome]) -> ProfileSnapshot:
        values: Dict[str, Any] = {}
        errors: List[BranchError] = []
        for name in BRANCHES:
            outcome = outcomes[name]
            if outcome.ok:
                values[name] = outcome.value
            else:
                errors.append(BranchError(name, outcome.error))

        return ProfileSnapshot(
            user_id=user_id,
            user=values.get("user"),
            reviews=list(values.get("reviews") or []),
            followers_count=values.get("followers_count"),
            following_count=values.get("following_count"),
            following=list(values.get("following") or []),
            saved_books=list(values.get("saved_books") or []),
            errors=errors,
        )
