"""
Domain utilities module.

Provides shared utilities for the domain layer that remain
independent of infrastructure concerns.
"""

from .completion import deliver
from .ids import new_document_id, uuid7

__all__ = ["deliver", "new_document_id", "uuid7"]
