"""
Document layout shared by the repositories.

    Users/{uid}
    Users/{uid}/Follow/{username}
    Users/{uid}/SavedBooks/{bookId}
    Reviews/{bookId}/UserReviews/{reviewId}
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from litlore.domain.errors import NotFoundError, RemoteFailure, ValidationError

logger = logging.getLogger(__name__)

USERS_COLLECTION = "Users"
REVIEWS_COLLECTION = "Reviews"
USER_REVIEWS_SUBCOLLECTION = "UserReviews"
SAVED_BOOKS_SUBCOLLECTION = "SavedBooks"
FOLLOW_SUBCOLLECTION = "Follow"


def check_segment(value: Optional[str], field: str) -> str:
    """
    Validate an identifier used as a document id.

    Raises:
        ValidationError: If the value is missing, blank, or contains '/'
    """
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    if "/" in value:
        raise ValidationError(f"{field} cannot contain '/'", field=field)
    return value


def user_path(user_id: str) -> str:
    return f"{USERS_COLLECTION}/{user_id}"


def follow_collection(user_id: str) -> str:
    return f"{user_path(user_id)}/{FOLLOW_SUBCOLLECTION}"


def follow_path(user_id: str, username: str) -> str:
    return f"{follow_collection(user_id)}/{username}"


def saved_books_collection(user_id: str) -> str:
    return f"{user_path(user_id)}/{SAVED_BOOKS_SUBCOLLECTION}"


def saved_book_path(user_id: str, book_id: str) -> str:
    return f"{saved_books_collection(user_id)}/{book_id}"


def reviews_collection(book_id: str) -> str:
    return f"{REVIEWS_COLLECTION}/{book_id}/{USER_REVIEWS_SUBCOLLECTION}"


def review_path(book_id: str, review_id: str) -> str:
    return f"{reviews_collection(book_id)}/{review_id}"


def millis_to_datetime(value: Any) -> Optional[datetime]:
    """Convert a stored epoch-millisecond timestamp to an aware datetime."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def remote_failure(operation: str, exc: BaseException):
    """
    Translate a store exception into a domain error and log it.

    KeyError (raised by DocumentStore.update on a missing document) becomes
    NotFoundError; everything else becomes RemoteFailure carrying the
    store's message.
    """
    if isinstance(exc, KeyError):
        path = exc.args[0] if exc.args else "document"
        logger.warning(f"{operation}: {path}")
        return NotFoundError("Document", str(path))
    logger.error(f"{operation} failed: {exc}")
    return RemoteFailure.from_exception(exc, operation=operation)
