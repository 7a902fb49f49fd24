"""
Document store adapters.

This package contains:
- InMemoryDocumentStore: dict-backed store for tests and local runs
- SqliteDocumentStore: persistent store on a single SQLite file
"""

from .base import StoreUnavailableError
from .in_memory_document_store import InMemoryDocumentStore
from .sqlite_document_store import SqliteDocumentStore

__all__ = [
    "InMemoryDocumentStore",
    "SqliteDocumentStore",
    "StoreUnavailableError",
]
