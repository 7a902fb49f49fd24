"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the document store, the
repositories and services for use with FastAPI's Depends() system, plus
the acting-user dependency read from request headers.

Singletons live at module level and are cleared with reset_dependencies().
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from litlore import config
from litlore.domain.ports import (
    CatalogSearchProvider,
    DocumentStore,
    ReviewRepository,
    SavedBooksRepository,
    SocialGraphRepository,
    UserRepository,
)
from litlore.domain.services import ProfileService
from litlore.domain.value_objects import UserContext
from litlore.infrastructure.db import (
    DocumentReviewRepository,
    DocumentSavedBooksRepository,
    DocumentSocialGraphRepository,
    DocumentUserRepository,
)
from litlore.infrastructure.external.google_books_client import GoogleBooksClient
from litlore.infrastructure.store import InMemoryDocumentStore, SqliteDocumentStore

logger = logging.getLogger(__name__)

# Module-level singletons (initialized lazily)
_document_store: Optional[DocumentStore] = None
_catalog_client: Optional[CatalogSearchProvider] = None
_review_repository: Optional[ReviewRepository] = None
_social_graph_repository: Optional[SocialGraphRepository] = None
_saved_books_repository: Optional[SavedBooksRepository] = None
_user_repository: Optional[UserRepository] = None
_profile_service: Optional[ProfileService] = None


def get_document_store() -> DocumentStore:
    """Provide the document store selected by LITLORE_STORE_BACKEND."""
    global _document_store
    if _document_store is None:
        if config.STORE_BACKEND == "sqlite":
            _document_store = SqliteDocumentStore(config.DB_PATH)
        elif config.STORE_BACKEND == "memory":
            _document_store = InMemoryDocumentStore()
        else:
            raise RuntimeError(f"Unknown store backend: {config.STORE_BACKEND!r}")
        logger.info(f"Using {config.STORE_BACKEND} document store")
    return _document_store


def get_catalog_client() -> CatalogSearchProvider:
    """Provide a singleton instance of the Google Books client."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = GoogleBooksClient(api_key=config.GOOGLE_BOOKS_API_KEY)
    return _catalog_client


def get_review_repository() -> ReviewRepository:
    global _review_repository
    if _review_repository is None:
        _review_repository = DocumentReviewRepository(get_document_store())
    return _review_repository


def get_social_graph_repository() -> SocialGraphRepository:
    global _social_graph_repository
    if _social_graph_repository is None:
        _social_graph_repository = DocumentSocialGraphRepository(get_document_store())
    return _social_graph_repository


def get_saved_books_repository() -> SavedBooksRepository:
    global _saved_books_repository
    if _saved_books_repository is None:
        _saved_books_repository = DocumentSavedBooksRepository(get_document_store())
    return _saved_books_repository


def get_user_repository() -> UserRepository:
    global _user_repository
    if _user_repository is None:
        _user_repository = DocumentUserRepository(get_document_store())
    return _user_repository


def get_profile_service() -> ProfileService:
    """Provide the Profile Service with all repositories wired."""
    global _profile_service
    if _profile_service is None:
        _profile_service = ProfileService(
            user_repository=get_user_repository(),
            review_repository=get_review_repository(),
            social_graph_repository=get_social_graph_repository(),
            saved_books_repository=get_saved_books_repository(),
            reviews_key=config.PROFILE_REVIEWS_KEY,
        )
    return _profile_service


def get_user_context(
    x_user_id: Optional[str] = Header(default=None),
    x_username: Optional[str] = Header(default=None),
) -> UserContext:
    """
    The acting user, from the X-User-Id / X-Username headers.

    Raises:
        401: X-User-Id missing or blank
        400: X-User-Id is not a valid document id
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    try:
        return UserContext(user_id=x_user_id.strip(), username=(x_username or "").strip())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def reset_dependencies() -> None:
    """
    Reset all singletons. Useful for testing.

    This allows tests to inject fake dependencies by resetting
    the module state between test cases.
    """
    global _document_store, _catalog_client, _review_repository
    global _social_graph_repository, _saved_books_repository
    global _user_repository, _profile_service

    _document_store = None
    _catalog_client = None
    _review_repository = None
    _social_graph_repository = None
    _saved_books_repository = None
    _user_repository = None
    _profile_service = None
