"""
Google Books API client implementing the CatalogSearchProvider port.

This class is an adapter: it talks HTTP/JSON to Google and hands the rest
of the application plain Book entities, so nothing above it knows which
catalog is in use.

The constructor accepts an optional `session`:
- In production: a requests.Session() is created
- In tests: inject a fake session that returns canned responses

`requests` is blocking; every request runs in a worker thread via
asyncio.to_thread.
"""

import asyncio
import logging
from typing import Any, List, Optional, Tuple

import requests

from litlore import config
from litlore.domain.entities import Book
from litlore.domain.errors import ParseSkip, SearchError, ValidationError
from litlore.domain.ports import CatalogSearchProvider
from litlore.domain.value_objects import Outcome

logger = logging.getLogger(__name__)

# Genres offered on the browse screen, each fetched with fetch_by_genre()
BROWSE_GENRES = ("Mystery", "Fiction", "Romance", "History", "Fantasy", "Science")

TOP_RATED_QUERY = "top rated fiction"

MAX_RESULTS_LIMIT = 40  # Google Books API limit per request

NETWORK_ERROR_MESSAGE = "Network error"
UNKNOWN_API_ERROR_MESSAGE = "Unknown error from Google Books API"
INVALID_RESPONSE_MESSAGE = "Invalid response from Google Books API"


class GoogleBooksClient(CatalogSearchProvider):
    """
    Google Books API client for catalog search.

    Features:
    - Free-text and structured ("subject:Fantasy") queries
    - Browse shelves: top rated and per genre
    - Graceful handling of missing/partial data from the API
    - Dependency-injected HTTP session for testability

    Failures are never raised: they come back as Outcome.failure(SearchError).
    There are no automatic retries.

    Usage:
        # Production
        client = GoogleBooksClient(api_key="your-api-key")
        outcome = await client.search("dune", max_results=10)

        # Testing (with fake session)
        client = GoogleBooksClient(session=fake_session)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[Any] = None,
        base_url: str = config.GOOGLE_BOOKS_BASE_URL,
        timeout: float = config.CATALOG_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the Google Books client.

        Args:
            api_key: Optional Google API key for higher rate limits.
                    Without a key, requests are limited but still work.
            session: Optional HTTP session for dependency injection.
                    If None, creates a new requests.Session().
            base_url: Volumes endpoint
            timeout: Per-request timeout in seconds
        """
        self._api_key = api_key
        self._session = session if session is not None else requests.Session()
        self._base_url = base_url
        self._timeout = timeout

    async def search(self, query: str, max_results: int = 10) -> Outcome[List[Book]]:
        """
        Search Google Books.

        Args:
            query: Free text, or a structured token like "subject:History"
            max_results: Number of books wanted, clamped to 1-40

        Returns:
            Outcome with the parsed books (volumes without volumeInfo are
            listed in `skipped`), a ValidationError for an empty query, or a
            SearchError when the request fails
        """
        if not query or not query.strip():
            return Outcome.failure(ValidationError("query cannot be empty", field="query"))

        params = {
            "q": query.strip(),
            "maxResults": max(1, min(int(max_results), MAX_RESULTS_LIMIT)),
        }
        if self._api_key:
            params["key"] = self._api_key

        try:
            response = await asyncio.to_thread(
                self._session.get, self._base_url, params=params, timeout=self._timeout
            )
        except Exception as e:
            message = str(e).strip() or NETWORK_ERROR_MESSAGE
            logger.error(f"Google Books request for {params['q']!r} failed: {message}")
            return Outcome.failure(SearchError(message, operation="search"))

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.error(f"Google Books returned {response.status_code} for {params['q']!r}: {message}")
            return Outcome.failure(SearchError(message, operation="search"))

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Google Books returned invalid JSON: {e}")
            return Outcome.failure(SearchError(f"{INVALID_RESPONSE_MESSAGE}: {e}", operation="search"))

        items = (data.get("items") or []) if isinstance(data, dict) else None
        if not isinstance(items, list):
            logger.error(f"Google Books returned an unexpected body for {params['q']!r}")
            return Outcome.failure(SearchError(INVALID_RESPONSE_MESSAGE, operation="search"))

        books, skipped = self._parse_items(items)
        logger.debug(f"Google Books {params['q']!r} returned {len(books)} books")
        return Outcome.success(books, skipped)

    async def fetch_top_rated(self, max_results: int = 10) -> Outcome[List[Book]]:
        """Books for the top-rated shelf."""
        return await self.search(TOP_RATED_QUERY, max_results)

    async def fetch_by_genre(self, genre: str, max_results: int = 12) -> Outcome[List[Book]]:
        """Books for one genre shelf, using a subject: query."""
        if not genre or not genre.strip():
            return Outcome.failure(ValidationError("genre cannot be empty", field="genre"))
        return await self.search(f"subject:{genre.strip()}", max_results)

    # =========================================================================
    # Private helper methods
    # =========================================================================

    def _parse_items(self, items: list) -> Tuple[List[Book], List[ParseSkip]]:
        books: List[Book] = []
        skipped: List[ParseSkip] = []
        for index, item in enumerate(items):
            volume_id = item.get("id") if isinstance(item, dict) else None
            location = f"items[{index}]" + (f" ({volume_id})" if volume_id else "")
            book = self._parse_volume_to_book(item)
            if book is None:
                logger.warning(f"Skipping Google Books volume {location}: no usable volumeInfo")
                skipped.append(ParseSkip(location, "missing volumeInfo"))
            else:
                books.append(book)
        return books, skipped

    def _parse_volume_to_book(self, volume: Any) -> Optional[Book]:
        """
        Parse a Google Books volume JSON object into a Book entity.

        Missing fields fall back to defaults:

            title        -> "No Title"
            authors[0]   -> "Unknown Author"
            description  -> "No description available."
            thumbnail    -> ""  (http:// upgraded to https://)
            averageRating-> 0.0

        Returns:
            Book entity, or None when the volume has no volumeInfo
        """
        if not isinstance(volume, dict):
            return None
        volume_info = volume.get("volumeInfo")
        if not isinstance(volume_info, dict):
            return None

        title = volume_info.get("title")
        if not isinstance(title, str) or not title.strip():
            title = "No Title"

        authors = volume_info.get("authors")
        author = authors[0] if isinstance(authors, list) and authors and authors[0] else "Unknown Author"

        description = volume_info.get("description") or "No description available."

        image_links = volume_info.get("imageLinks") or {}
        thumbnail = image_links.get("thumbnail") if isinstance(image_links, dict) else None
        thumbnail_url = thumbnail if isinstance(thumbnail, str) else ""

        rating = volume_info.get("averageRating")
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            rating = 0.0
        # Book ratings are bounded to 0-5
        rating = max(0.0, min(float(rating), 5.0))

        return Book(
            title=title,
            author=str(author),
            description=str(description),
            thumbnail_url=thumbnail_url,
            rating=rating,
        )

    def _error_message(self, response: Any) -> str:
        """Upstream error message: JSON error.message, then HTTP reason, then a fallback."""
        try:
            body = response.json()
        except Exception:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        reason = getattr(response, "reason", None)
        if reason:
            return str(reason)
        return UNKNOWN_API_ERROR_MESSAGE
