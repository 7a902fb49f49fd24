"""
Domain layer - Core business logic and entities.

This layer contains the business entities, value objects and errors, and
defines the ports (interfaces) that the infrastructure layer must implement.

It has NO dependencies on external frameworks, databases, or APIs.
"""

from .entities import Book, FollowEdge, Review, SavedBook, User
from .errors import (
    LitLoreError,
    NotFoundError,
    ParseSkip,
    RemoteFailure,
    SearchError,
    Unauthorized,
    ValidationError,
)
from .value_objects import BranchError, Outcome, ProfileSnapshot, UserContext

__all__ = [
    # Entities
    "Book",
    "FollowEdge",
    "Review",
    "SavedBook",
    "User",
    # Errors
    "LitLoreError",
    "NotFoundError",
    "ParseSkip",
    "RemoteFailure",
    "SearchError",
    "Unauthorized",
    "ValidationError",
    # Value Objects
    "BranchError",
    "Outcome",
    "ProfileSnapshot",
    "UserContext",
]
