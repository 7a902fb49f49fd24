"""
Configuration settings for LitLore.

Values come from environment variables so the same code runs against the
in-memory store in tests and a SQLite file (or another adapter) in
deployments.
"""

import logging
import os
from pathlib import Path

# Document store
STORE_BACKEND = os.getenv("LITLORE_STORE_BACKEND", "memory")  # "memory" or "sqlite"
DB_PATH = Path(os.getenv("LITLORE_DB_PATH", "data/litlore.db"))

# External catalog (Google Books)
GOOGLE_BOOKS_API_KEY = os.getenv("GOOGLE_BOOKS_API_KEY") or None
GOOGLE_BOOKS_BASE_URL = os.getenv(
    "GOOGLE_BOOKS_BASE_URL", "https://www.googleapis.com/books/v1/volumes"
)
CATALOG_TIMEOUT_SECONDS = float(os.getenv("LITLORE_CATALOG_TIMEOUT", "10"))

# Profile aggregation: join reviews to a profile by "username" or "author_id"
PROFILE_REVIEWS_KEY = os.getenv("LITLORE_PROFILE_REVIEWS_KEY", "username")

# Logging
LOG_LEVEL = os.getenv("LITLORE_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure root logging for entry points (API server, scripts)."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
