"""
Document-store implementation of the ReviewRepository port.

Reviews live at Reviews/{bookId}/UserReviews/{reviewId}. The store assigns
the review id and the creation timestamp. Only the author of a review may
update or delete it: the stored `authorUid` is compared with the acting
UserContext before any write.

Authorship is checked with a read followed by a write; there is no
transaction around the pair, matching the store's last-write-wins model.
"""

import logging
from typing import List, Tuple, Union

from litlore.domain.entities import MAX_RATING, MIN_RATING, Review
from litlore.domain.errors import NotFoundError, ParseSkip, Unauthorized, ValidationError
from litlore.domain.ports import SERVER_TIMESTAMP, Document, DocumentStore, ReviewRepository
from litlore.domain.value_objects import Outcome, UserContext

from .documents import (
    USER_REVIEWS_SUBCOLLECTION,
    check_segment,
    millis_to_datetime,
    remote_failure,
    review_path,
    reviews_collection,
)

logger = logging.getLogger(__name__)


def _check_rating(rating) -> None:
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        raise ValidationError("rating must be a number", field="rating")
    if not (MIN_RATING <= rating <= MAX_RATING):
        raise ValidationError(
            f"rating must be between {MIN_RATING} and {MAX_RATING}", field="rating"
        )


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _check_identifiers(review: Review) -> None:
    check_segment(review.book_id, "book_id")
    check_segment(review.review_id, "review_id")


class DocumentReviewRepository(ReviewRepository):
    """
    Reviews stored under each book's UserReviews sub-collection.

    Fetches never fail because of a single bad record: malformed documents
    (no username, unusable rating) are logged, left out of the result and
    listed in Outcome.skipped.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    # =========================================================================
    # Writes
    # =========================================================================

    async def post(self, ctx: UserContext, review: Review) -> Outcome[str]:
        """
        Store a new review under its book.

        The author is the acting user. The username snapshot is the acting
        user's username when known, else the one carried by the review.

        Returns:
            Outcome with the store-assigned review id
        """
        try:
            check_segment(review.book_id, "book_id")
            _check_rating(review.rating)
            if review.author_id and review.author_id != ctx.user_id:
                raise Unauthorized(ctx.user_id, f"review authored by '{review.author_id}'")
            username = ctx.username or review.username
            if not username or not username.strip():
                raise ValidationError("username is required", field="username")
        except (ValidationError, Unauthorized) as e:
            return Outcome.failure(e)

        data = {
            "username": username,
            "rating": float(review.rating),
            "comment": review.comment or "",
            "timestamp": SERVER_TIMESTAMP,
            "thumbnailUrl": review.thumbnail_url or "",
            "authorUid": ctx.user_id,
        }

        try:
            review_id = await self._store.add(reviews_collection(review.book_id), data)
        except Exception as e:
            return Outcome.failure(remote_failure("post_review", e))

        logger.info(f"Posted review {review_id} on book '{review.book_id}' by {ctx.user_id}")
        return Outcome.success(review_id)

    async def update(self, ctx: UserContext, review: Review) -> Outcome[None]:
        """
        Write a review's new rating and comment.

        Book, review id and author are never changed. Missing identifiers
        fail locally without touching the store.
        """
        try:
            _check_identifiers(review)
            _check_rating(review.rating)
            if review.comment is None:
                raise ValidationError("comment cannot be None", field="comment")
        except ValidationError as e:
            logger.error(f"Cannot update review: {e}")
            return Outcome.failure(e)

        path = review_path(review.book_id, review.review_id)
        try:
            stored = await self._store.get(path)
            if stored is None:
                return Outcome.failure(NotFoundError("Review", review.review_id))
            if stored.data.get("authorUid") != ctx.user_id:
                logger.warning(
                    f"User {ctx.user_id} tried to edit review {review.review_id} "
                    f"authored by {stored.data.get('authorUid')!r}"
                )
                return Outcome.failure(Unauthorized(ctx.user_id, f"review '{review.review_id}'"))
            await self._store.update(
                path, {"rating": float(review.rating), "comment": review.comment}
            )
        except Exception as e:
            return Outcome.failure(remote_failure("update_review", e))

        logger.info(f"Updated review {review.review_id} on book '{review.book_id}'")
        return Outcome.success(None)

    async def delete(self, ctx: UserContext, review: Review) -> Outcome[None]:
        """
        Delete a review.

        A review that no longer exists is treated as already deleted.
        """
        try:
            _check_identifiers(review)
        except ValidationError as e:
            logger.error(f"Cannot delete review: {e}")
            return Outcome.failure(e)

        path = review_path(review.book_id, review.review_id)
        try:
            stored = await self._store.get(path)
            if stored is None:
                logger.debug(f"Review {review.review_id} already gone")
                return Outcome.success(None)
            if stored.data.get("authorUid") != ctx.user_id:
                logger.warning(
                    f"User {ctx.user_id} tried to delete review {review.review_id} "
                    f"authored by {stored.data.get('authorUid')!r}"
                )
                return Outcome.failure(Unauthorized(ctx.user_id, f"review '{review.review_id}'"))
            await self._store.delete(path)
        except Exception as e:
            return Outcome.failure(remote_failure("delete_review", e))

        logger.info(f"Deleted review {review.review_id} on book '{review.book_id}'")
        return Outcome.success(None)

    # =========================================================================
    # Reads
    # =========================================================================

    async def fetch_for_book(self, book_id: str) -> Outcome[List[Review]]:
        """All reviews of a book, most recent first."""
        try:
            check_segment(book_id, "book_id")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            docs = await self._store.list_collection(
                reviews_collection(book_id), order_by="timestamp", descending=True
            )
        except Exception as e:
            return Outcome.failure(remote_failure("fetch_reviews_for_book", e))

        reviews, skipped = self._map_documents(docs)
        logger.debug(f"Fetched {len(reviews)} reviews for book '{book_id}'")
        return Outcome.success(reviews, skipped)

    async def fetch_for_author_username(self, username: str) -> Outcome[List[Review]]:
        """
        Reviews across every book whose username snapshot equals `username`.

        Matches the display snapshot, not the author id, so reviews posted
        under an earlier username are not found.
        """
        return await self._fetch_by_field("username", username, "username")

    async def fetch_for_author_id(self, author_id: str) -> Outcome[List[Review]]:
        """Reviews across every book written by `author_id`."""
        return await self._fetch_by_field("authorUid", author_id, "author_id")

    async def _fetch_by_field(self, field_name: str, value: str, arg_name: str) -> Outcome[List[Review]]:
        if not value or not value.strip():
            return Outcome.failure(ValidationError(f"{arg_name} is required", field=arg_name))

        try:
            docs = await self._store.collection_group(USER_REVIEWS_SUBCOLLECTION, field_name, value)
        except Exception as e:
            return Outcome.failure(remote_failure(f"fetch_reviews_by_{arg_name}", e))

        if not docs:
            logger.info(f"No reviews found with {field_name}={value!r}")

        reviews, skipped = self._map_documents(docs)
        reviews.sort(
            key=lambda r: (r.created_at.timestamp() if r.created_at else float("-inf"), r.review_id),
            reverse=True,
        )
        return Outcome.success(reviews, skipped)

    # =========================================================================
    # Private helper methods
    # =========================================================================

    def _map_documents(self, docs: List[Document]) -> Tuple[List[Review], List[ParseSkip]]:
        reviews: List[Review] = []
        skipped: List[ParseSkip] = []
        for doc in docs:
            parsed = self._document_to_review(doc)
            if isinstance(parsed, ParseSkip):
                logger.warning(f"Skipping review {parsed.path}: {parsed.reason}")
                skipped.append(parsed)
            else:
                reviews.append(parsed)
        return reviews, skipped

    def _document_to_review(self, doc: Document) -> Union[Review, ParseSkip]:
        """
        Map a stored review document to a Review.

        Missing comment / thumbnail become empty strings and a non-numeric
        rating becomes 0.0. A missing username, or a rating outside 0-5,
        makes the document unusable.
        """
        data = doc.data

        username = data.get("username")
        if not isinstance(username, str) or not username.strip():
            return ParseSkip(doc.path, "missing username")

        rating = data.get("rating")
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            logger.warning(f"Review {doc.path} has no numeric rating ({rating!r}); using 0.0")
            rating = 0.0

        author_id = data.get("authorUid")
        if not isinstance(author_id, str) or not author_id.strip():
            logger.warning(f"Review {doc.path} has no authorUid")
            author_id = ""

        try:
            return Review(
                book_id=doc.parent_id or "",
                username=username,
                rating=float(rating),
                comment=_text(data.get("comment")),
                author_id=author_id,
                thumbnail_url=_text(data.get("thumbnailUrl")),
                review_id=doc.id,
                created_at=millis_to_datetime(data.get("timestamp")),
            )
        except ValueError as e:
            return ParseSkip(doc.path, str(e))
