"""
API endpoints for book reviews.

Writes act on behalf of the user identified by the X-User-Id header;
only a review's author may edit or delete it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from litlore.domain.entities import Review
from litlore.domain.ports import ReviewRepository
from litlore.domain.value_objects import UserContext
from litlore.api.v1 import schemas as api
from litlore.api.v1.converters import domain_review_to_api, unwrap_or_raise
from litlore.api.v1.dependencies import get_review_repository, get_user_context

router = APIRouter()


def _review_list(outcome) -> api.ReviewList:
    reviews = unwrap_or_raise(outcome)
    return api.ReviewList(
        reviews=[domain_review_to_api(r) for r in reviews],
        skipped=len(outcome.skipped),
    )


@router.get("/books/{book_id}/reviews", response_model=api.ReviewList)
async def list_book_reviews(
    book_id: str,
    reviews: ReviewRepository = Depends(get_review_repository),
) -> api.ReviewList:
    """All reviews of a book, most recent first."""
    return _review_list(await reviews.fetch_for_book(book_id))


@router.post(
    "/books/{book_id}/reviews",
    response_model=api.ReviewCreated,
    status_code=status.HTTP_201_CREATED,
)
async def post_review(
    book_id: str,
    body: api.ReviewCreate,
    ctx: UserContext = Depends(get_user_context),
    reviews: ReviewRepository = Depends(get_review_repository),
) -> api.ReviewCreated:
    """
    Post a review as the acting user.

    Raises:
        400: Missing username (send X-Username) or invalid rating
        503: Store failure
    """
    review = Review(
        book_id=book_id,
        username=ctx.username,
        rating=body.rating,
        comment=body.comment,
        author_id=ctx.user_id,
        thumbnail_url=body.thumbnail_url,
    )
    review_id = unwrap_or_raise(await reviews.post(ctx, review))
    return api.ReviewCreated(review_id=review_id)


@router.put("/books/{book_id}/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_review(
    book_id: str,
    review_id: str,
    body: api.ReviewUpdate,
    ctx: UserContext = Depends(get_user_context),
    reviews: ReviewRepository = Depends(get_review_repository),
) -> None:
    """
    Change the rating and comment of one of the acting user's reviews.

    Raises:
        403: The review belongs to someone else
        404: No such review
    """
    review = Review(
        book_id=book_id,
        username=ctx.username,
        rating=body.rating,
        comment=body.comment,
        author_id=ctx.user_id,
        review_id=review_id,
    )
    unwrap_or_raise(await reviews.update(ctx, review))


@router.delete("/books/{book_id}/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    book_id: str,
    review_id: str,
    ctx: UserContext = Depends(get_user_context),
    reviews: ReviewRepository = Depends(get_review_repository),
) -> None:
    """Delete one of the acting user's reviews (a missing review is not an error)."""
    review = Review(
        book_id=book_id,
        username=ctx.username,
        rating=0.0,
        author_id=ctx.user_id,
        review_id=review_id,
    )
    unwrap_or_raise(await reviews.delete(ctx, review))


@router.get("/reviews", response_model=api.ReviewList)
async def list_reviews_by_author(
    username: Optional[str] = Query(default=None, description="Match the username snapshot"),
    author_id: Optional[str] = Query(default=None, description="Match the author's user id"),
    reviews: ReviewRepository = Depends(get_review_repository),
) -> api.ReviewList:
    """
    Reviews across all books by one author.

    Exactly one of `username` / `author_id` must be given.
    """
    if bool(username) == bool(author_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide exactly one of 'username' or 'author_id'",
        )
    if username:
        return _review_list(await reviews.fetch_for_author_username(username))
    return _review_list(await reviews.fetch_for_author_id(author_id))
