"""
Converters between domain entities/value objects and API schemas.

This module centralizes all conversion logic between the domain layer
and the API layer, including the mapping of domain errors to HTTP errors.
"""

from dataclasses import asdict
from typing import Any

from fastapi import HTTPException, status

from litlore.domain import entities as domain
from litlore.domain import errors as domain_errors
from litlore.domain import value_objects as domain_vo
from litlore.api.v1 import schemas as api


def domain_book_to_api(book: domain.Book) -> api.Book:
    """
    Convert a domain Book entity to an API Book model.

    Args:
        book: Domain Book entity

    Returns:
        API Book model
    """
    return api.Book(**asdict(book))


def api_book_to_domain(book: api.Book) -> domain.Book:
    """
    Convert an API Book body to a domain Book.

    Raises:
        ValueError: If the book data is invalid (e.g. blank title)
    """
    return domain.Book(
        title=book.title,
        author=book.author,
        description=book.description,
        thumbnail_url=book.thumbnail_url,
        rating=book.rating,
        id=book.id,
    )


def domain_review_to_api(review: domain.Review) -> api.Review:
    return api.Review(**asdict(review))


def domain_user_to_api(user: domain.User) -> api.User:
    return api.User(**asdict(user))


def domain_follow_edge_to_api(edge: domain.FollowEdge) -> api.FollowEdge:
    return api.FollowEdge(username=edge.followed_username, followed_at=edge.created_at)


def domain_profile_to_api(snapshot: domain_vo.ProfileSnapshot) -> api.Profile:
    """Convert a ProfileSnapshot, flattening branch errors to type + message."""
    return api.Profile(
        user_id=snapshot.user_id,
        user=domain_user_to_api(snapshot.user) if snapshot.user else None,
        reviews=[domain_review_to_api(r) for r in snapshot.reviews],
        followers_count=snapshot.followers_count,
        following_count=snapshot.following_count,
        following=list(snapshot.following),
        saved_books=[domain_book_to_api(b) for b in snapshot.saved_books],
        errors=[
            api.BranchError(
                branch=e.branch,
                error_type=type(e.error).__name__,
                message=e.error.message,
            )
            for e in snapshot.errors
        ],
    )


# =============================================================================
# Error mapping
# =============================================================================


def error_to_http(error: domain_errors.LitLoreError) -> HTTPException:
    """
    Map a domain error to the HTTP error returned to clients.

        ValidationError -> 400
        Unauthorized    -> 403
        NotFoundError   -> 404
        RemoteFailure   -> 503 (SearchError included)
    """
    if isinstance(error, domain_errors.ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, domain_errors.Unauthorized):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, domain_errors.NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HTTPException(status_code=code, detail=error.message)


def unwrap_or_raise(outcome: domain_vo.Outcome) -> Any:
    """Return the outcome's value, or raise the matching HTTPException."""
    if not outcome.ok:
        raise error_to_http(outcome.error)
    return outcome.value
