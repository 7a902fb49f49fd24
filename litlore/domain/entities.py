"""
Domain entities for the reading-and-review platform.

Entities are objects with an identity that runs through time: users,
reviews, follow edges and saved-book records. Book is a shared value-like
entity identified by a synthesized stable key.
"""

import hashlib
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional


MIN_RATING = 0.0
MAX_RATING = 5.0


def _check_rating(rating: float, what: str) -> None:
    if not (MIN_RATING <= rating <= MAX_RATING):
        raise ValueError(
            f"{what} rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}"
        )


@dataclass(frozen=True)
class Book:
    """
    A book as returned by the external catalog.

    Immutable once constructed. The `id` is a stable key derived from the
    normalized title and author, so two catalog records for the same
    title/author pair map to the same stored reviews and saves, while two
    distinct books that share a title do not collide.
    """

    title: str
    """Book title"""

    author: str = "Unknown Author"
    """Display author (first author from the catalog)"""

    description: str = "No description available."
    """Book description"""

    thumbnail_url: str = ""
    """Cover image URL, always https when present"""

    rating: float = 0.0
    """Average catalog rating (0.0 to 5.0)"""

    id: str = ""
    """Stable storage key; derived from title + author when left empty"""

    def __post_init__(self) -> None:
        """Validate book data and derive the storage key."""
        if not self.title or not self.title.strip():
            raise ValueError("Book title cannot be empty")

        _check_rating(self.rating, "Book")

        if self.thumbnail_url.startswith("http://"):
            object.__setattr__(
                self, "thumbnail_url", "https://" + self.thumbnail_url[len("http://"):]
            )

        if not self.id:
            object.__setattr__(self, "id", Book.stable_key(self.title, self.author))

    @staticmethod
    def stable_key(title: str, author: str) -> str:
        """
        Derive the storage key for a title/author pair.

        Case and surrounding whitespace are ignored. The result never
        contains '/', so it is always a valid document id.
        """
        normalized = f"{title.strip().lower()}\x1f{author.strip().lower()}"
        return hashlib.sha1(normalized.encode("utf-8")).hexdigest()

    def to_document(self) -> dict:
        """Serialize the book snapshot stored under a user's SavedBooks."""
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "thumbnailUrl": self.thumbnail_url,
            "rating": self.rating,
        }


@dataclass
class SavedBook:
    """A locally-held save record: a user bookmarked a book snapshot."""

    user_id: str
    book: Book

    @property
    def key(self) -> str:
        return self.book.id


@dataclass
class User:
    """
    A registered user.

    `id` is assigned by the store (or the identity provider) and never
    changes. `username` is unique and searchable by prefix.
    """

    id: str
    username: str
    email: str = ""
    bio: str = ""

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("User id cannot be empty")
        if not self.username or not self.username.strip():
            raise ValueError("Username cannot be empty")


@dataclass
class Review:
    """
    A user's review of a book.

    A review lives under its book (`book_id` is the parent key) and remembers
    who wrote it (`author_id`). Only the author may edit or delete it, and
    only `rating` and `comment` are editable.
    """

    book_id: str
    """Storage key of the reviewed book"""

    username: str
    """Author's username at post time (display snapshot)"""

    rating: float
    """Rating given by the author (0.0 to 5.0)"""

    comment: str = ""
    """Review text; may be empty, never None"""

    author_id: str = ""
    """User id of the author"""

    thumbnail_url: str = ""
    """Denormalized copy of the book's thumbnail"""

    review_id: str = ""
    """Store-assigned id; empty until posted"""

    created_at: Optional[datetime] = None
    """Server-side creation time; None until posted"""

    def __post_init__(self) -> None:
        _check_rating(self.rating, "Review")
        if self.comment is None:
            raise ValueError("Review comment cannot be None (use an empty string)")

    def is_authored_by(self, user_id: str) -> bool:
        """Check whether the given user wrote this review."""
        return bool(user_id) and self.author_id == user_id

    def with_changes(self, rating: float, comment: str) -> "Review":
        """Return a copy with a new rating and comment; identity fields are kept."""
        return replace(self, rating=rating, comment=comment)


@dataclass(frozen=True)
class FollowEdge:
    """A directed follow relationship: follower_id follows followed_username."""

    follower_id: str
    followed_username: str
    created_at: Optional[datetime] = field(default=None, compare=False)
