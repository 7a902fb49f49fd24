"""
Port interfaces (protocols) for the domain layer.

Ports define the contracts between the domain and infrastructure layers.
They are implemented by adapters in the infrastructure layer, allowing
the domain to remain independent of technical details.

Every operation here is a coroutine. Repository ports never raise: they
deliver exactly one Outcome per call. The DocumentStore port is the one
exception - it is the raw collaborator and may raise; repositories turn
its exceptions into RemoteFailure outcomes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from .entities import Book, FollowEdge, Review, SavedBook, User
from .value_objects import Outcome, UserContext


class _ServerTimestamp:
    """Sentinel: the store replaces it with its own clock at write time."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()
"""Field value resolved by the store to epoch milliseconds when written"""

PREFIX_SENTINEL = "\uf8ff"
"""High code point closing a prefix range: [prefix, prefix + PREFIX_SENTINEL]"""


@dataclass(frozen=True)
class Document:
    """A stored document as returned by the DocumentStore."""

    path: str
    """Full slash-separated path, e.g. 'Users/u1/Follow/alice'"""

    data: Dict[str, Any] = field(default_factory=dict)
    """Field values"""

    @property
    def id(self) -> str:
        """Last path segment."""
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent_id(self) -> Optional[str]:
        """Id of the document owning this document's collection, if any."""
        segments = self.path.split("/")
        if len(segments) < 4:
            return None
        return segments[-3]


class DocumentStore(Protocol):
    """
    Port for the remote document-oriented store.

    Documents live at paths made of alternating collection / document
    segments: 'Users/{uid}', 'Users/{uid}/Follow/{username}',
    'Reviews/{bookId}/UserReviews/{reviewId}'.

    Implementations raise on infrastructure failure (unreachable store,
    I/O error). Writes are last-write-wins; there is no locking.
    """

    async def get(self, path: str) -> Optional[Document]:
        """Fetch a document by path, or None when it does not exist."""
        ...

    async def set(self, path: str, data: Dict[str, Any]) -> None:
        """
        Create or overwrite a document (idempotent upsert).

        SERVER_TIMESTAMP values are resolved at write time.
        """
        ...

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            KeyError: If the document does not exist
        """
        ...

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        """
        Append a document with a store-assigned id.

        Returns:
            The new document id
        """
        ...

    async def delete(self, path: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        ...

    async def list_collection(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        """
        List the documents directly under a collection.

        Args:
            collection_path: e.g. 'Users/u1/Follow'
            order_by: Optional field to sort on; documents missing it are excluded
            descending: Reverse the order
        """
        ...

    async def range_query(
        self,
        collection_path: str,
        field_name: str,
        start_at: str,
        end_at: str,
    ) -> List[Document]:
        """
        Return documents whose `field_name` lies in [start_at, end_at].

        Results are ordered by that field, ascending. Documents without the
        field are excluded.
        """
        ...

    async def collection_group(
        self,
        collection_id: str,
        field_name: str,
        value: Any,
    ) -> List[Document]:
        """
        Equality query across every collection named `collection_id`,
        regardless of parent.
        """
        ...

    async def count_collection(self, collection_path: str) -> int:
        """Number of documents directly under a collection."""
        ...

    async def count_group(self, collection_id: str, field_name: str, value: Any) -> int:
        """Number of documents a collection_group() query would return."""
        ...


class CatalogSearchProvider(Protocol):
    """
    Port for the external book catalog.

    Implementations normalize raw catalog records into domain Books and
    report provider failures as SearchError outcomes.
    """

    async def search(self, query: str, max_results: int = 10) -> Outcome[List[Book]]:
        """
        Search the catalog.

        Args:
            query: Free text, or a structured token like 'subject:Fantasy'
            max_results: Upper bound on returned books

        Returns:
            Outcome with the list of books, or a SearchError
        """
        ...

    async def fetch_top_rated(self, max_results: int = 10) -> Outcome[List[Book]]:
        """Books shown on the browse screen's top-rated shelf."""
        ...

    async def fetch_by_genre(self, genre: str, max_results: int = 12) -> Outcome[List[Book]]:
        """Books for one browse genre."""
        ...


class ReviewRepository(Protocol):
    """
    Port for book reviews.

    Reviews are stored under their book. Only a review's author may update
    or delete it; the repository enforces this, returning Unauthorized.
    """

    async def post(self, ctx: UserContext, review: Review) -> Outcome[str]:
        """Store a new review; returns the assigned review id."""
        ...

    async def fetch_for_book(self, book_id: str) -> Outcome[List[Review]]:
        """All reviews of a book, most recent first. Malformed records are skipped."""
        ...

    async def fetch_for_author_username(self, username: str) -> Outcome[List[Review]]:
        """Reviews across all books whose username snapshot matches."""
        ...

    async def fetch_for_author_id(self, author_id: str) -> Outcome[List[Review]]:
        """Reviews across all books written by the given user id."""
        ...

    async def update(self, ctx: UserContext, review: Review) -> Outcome[None]:
        """Write the review's rating and comment. Author only."""
        ...

    async def delete(self, ctx: UserContext, review: Review) -> Outcome[None]:
        """Remove the review. Author only; deleting twice is a no-op."""
        ...


class SocialGraphRepository(Protocol):
    """Port for user search and follow edges."""

    async def search_users(self, prefix: str) -> Outcome[List[User]]:
        """Users whose username starts with `prefix`, lexicographically ordered."""
        ...

    async def follow(self, ctx: UserContext, target_username: str) -> Outcome[None]:
        """Idempotently create the edge ctx.user_id -> target_username."""
        ...

    async def unfollow(self, ctx: UserContext, target_username: str) -> Outcome[None]:
        """Idempotently remove the edge ctx.user_id -> target_username."""
        ...

    async def is_following(self, user_id: str, target_username: str) -> Outcome[bool]:
        ...

    async def fetch_following(self, user_id: str) -> Outcome[List[FollowEdge]]:
        """The follow edges owned by `user_id`, ordered by followed username."""
        ...

    async def fetch_following_usernames(self, user_id: str) -> Outcome[List[str]]:
        ...

    async def fetch_following_count(self, user_id: str) -> Outcome[int]:
        ...

    async def fetch_followers_count(self, username: str) -> Outcome[int]:
        ...


class SavedBooksRepository(Protocol):
    """Port for a user's bookmarked books."""

    async def save(self, ctx: UserContext, book: Book) -> Outcome[SavedBook]:
        """Idempotently store the book snapshot; returns the save record."""
        ...

    async def remove(self, ctx: UserContext, book: Book) -> Outcome[None]:
        ...

    async def toggle(self, ctx: UserContext, book: Book) -> Outcome[bool]:
        ...

    async def is_saved(self, user_id: str, book: Book) -> bool:
        """Never fails: an unreachable store reads as 'not saved'."""
        ...

    async def fetch_saved(self, user_id: str) -> Outcome[List[Book]]:
        ...


class UserRepository(Protocol):
    """Port for user profile documents."""

    async def create_user(self, user_id: str, username: str, email: str) -> Outcome[User]:
        ...

    async def fetch_user(self, user_id: str) -> Outcome[Optional[User]]:
        ...

    async def fetch_username(self, user_id: str) -> Outcome[str]:
        ...

    async def update_bio(self, ctx: UserContext, bio: str) -> Outcome[None]:
        ...
