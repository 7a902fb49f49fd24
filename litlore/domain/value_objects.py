"""
Value objects for the domain layer.

Value objects are immutable objects that describe something (who is acting,
how an operation ended) with no identity of their own.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, Tuple, TypeVar

from .entities import Book, Review, User
from .errors import LitLoreError, ParseSkip

T = TypeVar("T")


@dataclass(frozen=True)
class UserContext:
    """
    The identity on whose behalf an operation runs.

    Passed explicitly into every mutating repository call; there is no
    ambient "current user".
    """

    user_id: str
    """Store id of the acting user"""

    username: str = ""
    """Acting user's username (used as the display snapshot on reviews)"""

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise ValueError("UserContext requires a non-empty user_id")
        if "/" in self.user_id:
            raise ValueError("UserContext user_id cannot contain '/'")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    The single result delivered by a repository operation.

    Exactly one of `value` / `error` is meaningful: `ok` tells which.
    `skipped` lists malformed stored records excluded from a list fetch;
    they never turn a successful fetch into a failure.
    """

    value: Optional[T] = None
    """Success payload (may legitimately be None, e.g. for deletes)"""

    error: Optional[LitLoreError] = None
    """Failure, if any"""

    skipped: Tuple[ParseSkip, ...] = ()
    """Records skipped while mapping a list result"""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None, skipped: Tuple[ParseSkip, ...] = ()) -> "Outcome[T]":
        return cls(value=value, skipped=tuple(skipped))

    @classmethod
    def failure(cls, error: LitLoreError) -> "Outcome[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """
        Return the value, or raise the carried error.

        Handy for callers (and tests) that prefer exceptions over branching.
        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class BranchError:
    """A failed branch of a fan-out query (see ProfileService)."""

    branch: str
    """Branch name, e.g. 'reviews' or 'followers_count'"""

    error: LitLoreError
    """Why the branch failed"""


@dataclass(frozen=True)
class ProfileSnapshot:
    """
    Everything shown about a user, gathered from independent queries.

    Any field may be missing (None / empty) when its branch failed; the
    corresponding failure is listed in `errors`.
    """

    user_id: str
    user: Optional[User] = None
    reviews: List[Review] = field(default_factory=list)
    followers_count: Optional[int] = None
    following_count: Optional[int] = None
    following: List[str] = field(default_factory=list)
    saved_books: List[Book] = field(default_factory=list)
    errors: List[BranchError] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every branch succeeded."""
        return not self.errors

    def failed_branches(self) -> List[str]:
        return [e.branch for e in self.errors]
