"""
Request and response bodies for the v1 HTTP API.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# =============================================================================
# Books
# =============================================================================


class Book(BaseModel):
    """
    API representation of a Book entity.

    `id` may be left empty in request bodies; it is then derived from the
    title and author.
    """

    id: str = Field(default="", description="Stable storage key of the book")
    title: str = Field(min_length=1, description="Book title")
    author: str = Field(default="Unknown Author", description="Display author")
    description: str = Field(default="No description available.", description="Book description")
    thumbnail_url: str = Field(default="", description="Cover image URL (https)")
    rating: float = Field(default=0.0, ge=0.0, le=5.0, description="Average catalog rating")


class BookList(BaseModel):
    books: list[Book]
    skipped: int = Field(default=0, description="Malformed records left out of the result")


class SavedState(BaseModel):
    book_id: str
    saved: bool


# =============================================================================
# Reviews
# =============================================================================


class ReviewCreate(BaseModel):
    """Request body for POST /books/{book_id}/reviews."""

    rating: float = Field(ge=0.0, le=5.0, description="Rating (0-5)")
    comment: str = Field(default="", description="Review text")
    thumbnail_url: str = Field(default="", description="Thumbnail of the reviewed book")


class ReviewUpdate(BaseModel):
    """Request body for PUT /books/{book_id}/reviews/{review_id}."""

    rating: float = Field(ge=0.0, le=5.0, description="New rating (0-5)")
    comment: str = Field(default="", description="New review text")


class ReviewCreated(BaseModel):
    review_id: str


class Review(BaseModel):
    review_id: str
    book_id: str
    username: str
    rating: float
    comment: str = ""
    author_id: str = ""
    thumbnail_url: str = ""
    created_at: datetime | None = None


class ReviewList(BaseModel):
    reviews: list[Review]
    skipped: int = 0


# =============================================================================
# Users and follows
# =============================================================================


class UserCreate(BaseModel):
    """Request body for POST /users."""

    user_id: str = Field(min_length=1, description="Id issued by the identity provider")
    username: str = Field(min_length=1, description="Unique username")
    email: str = Field(default="", description="Contact email")


class BioUpdate(BaseModel):
    bio: str = Field(description="New profile bio (may be empty)")


class User(BaseModel):
    id: str
    username: str
    email: str = ""
    bio: str = ""


class UserList(BaseModel):
    users: list[User]
    skipped: int = 0


class FollowStatus(BaseModel):
    username: str
    following: bool


class FollowEdge(BaseModel):
    username: str
    followed_at: datetime | None = None


class Following(BaseModel):
    user_id: str
    usernames: list[str]
    edges: list[FollowEdge] = Field(default_factory=list)


# =============================================================================
# Profile
# =============================================================================


class BranchError(BaseModel):
    branch: str = Field(description="Name of the failed query")
    error_type: str = Field(description="Error class, e.g. RemoteFailure")
    message: str


class Profile(BaseModel):
    """
    Everything shown on a user's profile.

    Fields whose query failed are null / empty and listed in `errors`.
    """

    user_id: str
    user: User | None = None
    reviews: list[Review] = Field(default_factory=list)
    followers_count: int | None = None
    following_count: int | None = None
    following: list[str] = Field(default_factory=list)
    saved_books: list[Book] = Field(default_factory=list)
    errors: list[BranchError] = Field(default_factory=list)
