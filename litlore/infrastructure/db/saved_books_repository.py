"""
Document-store implementation of the SavedBooksRepository port.

A saved book is a snapshot of the Book stored at
Users/{uid}/SavedBooks/{bookId}. Its existence is the whole signal.
"""

import logging
from typing import List, Union

from litlore.domain.entities import Book, SavedBook
from litlore.domain.errors import ParseSkip, ValidationError
from litlore.domain.ports import Document, DocumentStore, SavedBooksRepository
from litlore.domain.value_objects import Outcome, UserContext

from .documents import check_segment, remote_failure, saved_book_path, saved_books_collection

logger = logging.getLogger(__name__)


def document_to_book(doc: Document) -> Union[Book, ParseSkip]:
    """
    Rebuild a Book from its stored snapshot.

    Snapshots written before books carried an `id` field are keyed by
    their document id, which then becomes the book id so that remove()
    addresses the same document.
    """
    data = doc.data
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        return ParseSkip(doc.path, "missing title")

    rating = data.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        rating = 0.0

    try:
        return Book(
            title=title,
            author=data.get("author") or "Unknown Author",
            description=data.get("description") or "No description available.",
            thumbnail_url=data.get("thumbnailUrl") or "",
            rating=float(rating),
            id=data.get("id") or doc.id,
        )
    except ValueError as e:
        return ParseSkip(doc.path, str(e))


class DocumentSavedBooksRepository(SavedBooksRepository):
    """Per-user saved books over a DocumentStore."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def save(self, ctx: UserContext, book: Book) -> Outcome[SavedBook]:
        """Save (or re-save) a book for the acting user and return the save record."""
        try:
            check_segment(book.id, "book.id")
        except ValidationError as e:
            return Outcome.failure(e)

        record = SavedBook(user_id=ctx.user_id, book=book)
        try:
            await self._store.set(saved_book_path(record.user_id, record.key), book.to_document())
        except Exception as e:
            return Outcome.failure(remote_failure("save_book", e))

        logger.info(f"{ctx.user_id} saved '{book.title}'")
        return Outcome.success(record)

    async def remove(self, ctx: UserContext, book: Book) -> Outcome[None]:
        """Remove a saved book (no-op when it was not saved)."""
        try:
            check_segment(book.id, "book.id")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            await self._store.delete(saved_book_path(ctx.user_id, book.id))
        except Exception as e:
            return Outcome.failure(remote_failure("remove_saved_book", e))

        logger.info(f"{ctx.user_id} removed '{book.title}' from saved books")
        return Outcome.success(None)

    async def toggle(self, ctx: UserContext, book: Book) -> Outcome[bool]:
        """
        Flip the saved state of a book.

        Returns:
            Outcome with the new state (True when the book is now saved)
        """
        try:
            check_segment(book.id, "book.id")
        except ValidationError as e:
            return Outcome.failure(e)

        path = saved_book_path(ctx.user_id, book.id)
        try:
            if await self._store.get(path) is None:
                await self._store.set(path, book.to_document())
                return Outcome.success(True)
            await self._store.delete(path)
            return Outcome.success(False)
        except Exception as e:
            return Outcome.failure(remote_failure("toggle_saved_book", e))

    async def is_saved(self, user_id: str, book: Book) -> bool:
        """
        Whether `user_id` has saved `book`.

        Never fails: a missing user id or an unreachable store reads as
        "not saved".
        """
        if not user_id or "/" in user_id or not book.id:
            return False
        try:
            return await self._store.get(saved_book_path(user_id, book.id)) is not None
        except Exception as e:
            logger.error(f"Error checking if book is saved: {e}")
            return False

    async def fetch_saved(self, user_id: str) -> Outcome[List[Book]]:
        """All books saved by `user_id`, ordered by title."""
        try:
            check_segment(user_id, "user_id")
        except ValidationError as e:
            return Outcome.failure(e)

        try:
            docs = await self._store.list_collection(saved_books_collection(user_id))
        except Exception as e:
            return Outcome.failure(remote_failure("fetch_saved_books", e))

        books: List[Book] = []
        skipped: List[ParseSkip] = []
        for doc in docs:
            parsed = document_to_book(doc)
            if isinstance(parsed, ParseSkip):
                logger.warning(f"Skipping saved book {parsed.path}: {parsed.reason}")
                skipped.append(parsed)
            else:
                books.append(parsed)

        books.sort(key=lambda b: b.title.casefold())
        return Outcome.success(books, skipped)
