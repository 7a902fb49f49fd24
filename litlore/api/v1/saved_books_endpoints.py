"""
API endpoints for per-user saved books.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, status

from litlore.domain.entities import Book
from litlore.domain.ports import SavedBooksRepository
from litlore.domain.value_objects import UserContext
from litlore.api.v1 import schemas as api
from litlore.api.v1.converters import api_book_to_domain, domain_book_to_api, unwrap_or_raise
from litlore.api.v1.dependencies import get_saved_books_repository, get_user_context

router = APIRouter()


def _to_domain(book: api.Book) -> Book:
    try:
        return api_book_to_domain(book)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/users/{user_id}/saved-books", response_model=api.BookList)
async def list_saved_books(
    user_id: str,
    saved: SavedBooksRepository = Depends(get_saved_books_repository),
) -> api.BookList:
    """A user's saved books, ordered by title."""
    outcome = await saved.fetch_saved(user_id)
    books = unwrap_or_raise(outcome)
    return api.BookList(books=[domain_book_to_api(b) for b in books], skipped=len(outcome.skipped))


@router.put("/saved-books", response_model=api.SavedState)
async def save_book(
    body: api.Book,
    ctx: UserContext = Depends(get_user_context),
    saved: SavedBooksRepository = Depends(get_saved_books_repository),
) -> api.SavedState:
    book = _to_domain(body)
    unwrap_or_raise(await saved.save(ctx, book))
    return api.SavedState(book_id=book.id, saved=True)


@router.delete("/saved-books", response_model=api.SavedState)
async def remove_book(
    body: api.Book = Body(...),
    ctx: UserContext = Depends(get_user_context),
    saved: SavedBooksRepository = Depends(get_saved_books_repository),
) -> api.SavedState:
    book = _to_domain(body)
    unwrap_or_raise(await saved.remove(ctx, book))
    return api.SavedState(book_id=book.id, saved=False)


@router.post("/saved-books/toggle", response_model=api.SavedState)
async def toggle_book(
    body: api.Book,
    ctx: UserContext = Depends(get_user_context),
    saved: SavedBooksRepository = Depends(get_saved_books_repository),
) -> api.SavedState:
    """Save the book if it is not saved, else remove it."""
    book = _to_domain(body)
    now_saved = unwrap_or_raise(await saved.toggle(ctx, book))
    return api.SavedState(book_id=book.id, saved=now_saved)


@router.post("/saved-books/status", response_model=api.SavedState)
async def saved_status(
    body: api.Book,
    ctx: UserContext = Depends(get_user_context),
    saved: SavedBooksRepository = Depends(get_saved_books_repository),
) -> api.SavedState:
    """Whether the acting user has saved the book (false when the store is unreachable)."""
    book = _to_domain(body)
    return api.SavedState(book_id=book.id, saved=await saved.is_saved(ctx.user_id, book))
