#!/usr/bin/env python3
"""
Catalog browsing script.

Runs a Google Books query (free text, top rated, or one genre shelf) and
prints the normalized books. With --save-for, the results are also saved
to that user's SavedBooks in the SQLite document store.

Usage:
    python -m scripts.browse_catalog --query "dune"
    python -m scripts.browse_catalog --top-rated
    python -m scripts.browse_catalog --genre Mystery --save-for u1
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from litlore import config
from litlore.domain.entities import Book
from litlore.domain.value_objects import UserContext
from litlore.infrastructure.db import DocumentSavedBooksRepository
from litlore.infrastructure.external.google_books_client import BROWSE_GENRES, GoogleBooksClient
from litlore.infrastructure.store import SqliteDocumentStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=config.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


def print_books(books: List[Book]) -> None:
    for i, book in enumerate(books, 1):
        print(f"{i:2d}. {book.title} - {book.author} ({book.rating:.1f})")
        if book.thumbnail_url:
            print(f"    {book.thumbnail_url}")


async def run(
    query: Optional[str],
    top_rated: bool,
    genre: Optional[str],
    max_results: int,
    save_for: Optional[str],
    db_path: Path,
) -> int:
    """
    Fetch one shelf and optionally save it.

    Returns:
        Process exit code (0 on success)
    """
    client = GoogleBooksClient(api_key=config.GOOGLE_BOOKS_API_KEY)

    if top_rated:
        outcome = await client.fetch_top_rated(max_results)
    elif genre:
        outcome = await client.fetch_by_genre(genre, max_results)
    else:
        outcome = await client.search(query, max_results)

    if not outcome.ok:
        logger.error(f"Catalog request failed: {outcome.error}")
        return 1

    books = outcome.value
    logger.info(f"Fetched {len(books)} books ({len(outcome.skipped)} skipped)")
    print_books(books)

    if save_for:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        repository = DocumentSavedBooksRepository(SqliteDocumentStore(db_path))
        try:
            ctx = UserContext(user_id=save_for)
        except ValueError as e:
            logger.error(f"Invalid --save-for user id: {e}")
            return 1
        for book in books:
            saved = await repository.save(ctx, book)
            if not saved.ok:
                logger.error(f"Could not save '{book.title}': {saved.error}")
                return 1
        logger.info(f"Saved {len(books)} books for {save_for} in {db_path}")

    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Browse the Google Books catalog")
    shelf = parser.add_mutually_exclusive_group(required=True)
    shelf.add_argument(
        "--query", "-q",
        type=str,
        help="Free-text query (or a structured one such as 'subject:History')"
    )
    shelf.add_argument(
        "--top-rated",
        action="store_true",
        help="Fetch the top-rated shelf"
    )
    shelf.add_argument(
        "--genre", "-g",
        type=str,
        choices=BROWSE_GENRES,
        help="Fetch one genre shelf"
    )
    parser.add_argument(
        "--max-results", "-n",
        type=int,
        default=10,
        help="Maximum number of books to fetch (1-40, default: 10)"
    )
    parser.add_argument(
        "--save-for",
        type=str,
        default=None,
        help="User id whose saved books receive the results"
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=config.DB_PATH,
        help=f"SQLite document store (default: {config.DB_PATH})"
    )

    args = parser.parse_args()
    sys.exit(asyncio.run(run(
        args.query, args.top_rated, args.genre, args.max_results, args.save_for, args.db_path
    )))
