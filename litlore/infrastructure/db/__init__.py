"""
Repositories backed by a DocumentStore.
"""

from .review_repository import DocumentReviewRepository
from .saved_books_repository import DocumentSavedBooksRepository
from .social_graph_repository import DocumentSocialGraphRepository
from .user_repository import DocumentUserRepository

__all__ = [
    "DocumentReviewRepository",
    "DocumentSavedBooksRepository",
    "DocumentSocialGraphRepository",
    "DocumentUserRepository",
]
