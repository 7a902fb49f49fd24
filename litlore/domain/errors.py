"""
Domain error taxonomy.

Every failure a repository can report is one of these types. Repositories
never raise them past their boundary: they are delivered inside an
Outcome (see value_objects.Outcome) so the caller always receives exactly
one success-or-failure result.

- ValidationError: a required identifier or value is missing or invalid.
  Always raised locally, before any remote call is attempted.
- RemoteFailure: the document store (or network) failed. Carries the
  store's message verbatim, or a generic fallback.
- SearchError: a RemoteFailure coming from the external catalog provider.
- Unauthorized: a mutation was attempted by someone who does not own the
  record (e.g. editing another user's review).
- NotFoundError: a record required by the operation does not exist.

ParseSkip is not an exception: it records a malformed stored document that
was excluded from a list fetch.
"""

from dataclasses import dataclass
from typing import Optional


GENERIC_REMOTE_MESSAGE = "Remote store request failed"


class LitLoreError(Exception):
    """
    Base exception for all domain errors.

    Attributes:
        message: Human readable description
        details: Structured context (field names, ids) for logging/API use
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ValidationError(LitLoreError):
    """Raised when a required identifier or value is missing before a remote call."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, details)
        self.field = field


class RemoteFailure(LitLoreError):
    """Raised when the document store or the network fails."""

    def __init__(self, message: Optional[str] = None, operation: Optional[str] = None) -> None:
        details = {"operation": operation} if operation else {}
        super().__init__(message or GENERIC_REMOTE_MESSAGE, details)
        self.operation = operation

    @classmethod
    def from_exception(cls, exc: BaseException, operation: Optional[str] = None) -> "RemoteFailure":
        """Wrap an infrastructure exception, keeping its message verbatim."""
        message = str(exc).strip() or None
        return cls(message, operation=operation)


class SearchError(RemoteFailure):
    """Raised when the external catalog provider fails or answers with an error."""


class Unauthorized(LitLoreError):
    """Raised when a user tries to mutate a record they do not own."""

    def __init__(self, actor_id: str, resource: str) -> None:
        super().__init__(
            f"User '{actor_id}' is not allowed to modify {resource}",
            {"actor_id": actor_id, "resource": resource},
        )
        self.actor_id = actor_id
        self.resource = resource


class NotFoundError(LitLoreError):
    """Raised when a record required by the operation does not exist."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(
            f"{entity_type} '{entity_id}' not found",
            {"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


@dataclass(frozen=True)
class ParseSkip:
    """
    A stored document that could not be mapped to a domain entity.

    Produced during list fetches. The document is excluded from the result
    set; the fetch itself still succeeds.
    """

    path: str
    """Full document path, e.g. 'Reviews/abc/UserReviews/xyz'"""

    reason: str
    """Why the document was skipped"""
