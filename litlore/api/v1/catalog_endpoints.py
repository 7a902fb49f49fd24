"""
API endpoints for catalog search and the browse shelves.
"""

from fastapi import APIRouter, Depends, Query

from litlore.domain.ports import CatalogSearchProvider
from litlore.infrastructure.external.google_books_client import BROWSE_GENRES
from litlore.api.v1 import schemas as api
from litlore.api.v1.converters import domain_book_to_api, unwrap_or_raise
from litlore.api.v1.dependencies import get_catalog_client

router = APIRouter()


def _book_list(outcome) -> api.BookList:
    books = unwrap_or_raise(outcome)
    return api.BookList(
        books=[domain_book_to_api(b) for b in books],
        skipped=len(outcome.skipped),
    )


@router.get("/catalog/search", response_model=api.BookList)
async def search_catalog(
    q: str = Query(description="Free text or structured query, e.g. 'subject:History'"),
    max_results: int = Query(default=10, ge=1, le=40),
    catalog: CatalogSearchProvider = Depends(get_catalog_client),
) -> api.BookList:
    """
    Search the external catalog.

    Raises:
        400: Empty query
        503: Catalog provider failure
    """
    return _book_list(await catalog.search(q, max_results))


@router.get("/catalog/top-rated", response_model=api.BookList)
async def top_rated(
    max_results: int = Query(default=10, ge=1, le=40),
    catalog: CatalogSearchProvider = Depends(get_catalog_client),
) -> api.BookList:
    return _book_list(await catalog.fetch_top_rated(max_results))


@router.get("/catalog/genres")
def list_genres() -> dict:
    """Genres offered as browse shelves."""
    return {"genres": list(BROWSE_GENRES)}


@router.get("/catalog/genres/{genre}", response_model=api.BookList)
async def books_by_genre(
    genre: str,
    max_results: int = Query(default=12, ge=1, le=40),
    catalog: CatalogSearchProvider = Depends(get_catalog_client),
) -> api.BookList:
    return _book_list(await catalog.fetch_by_genre(genre, max_results))
