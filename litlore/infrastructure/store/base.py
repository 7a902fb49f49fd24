"""
Helpers shared by the DocumentStore adapters.
"""

from typing import Any, Dict, Tuple

from litlore.domain.ports import SERVER_TIMESTAMP


class StoreUnavailableError(ConnectionError):
    """The store cannot be reached (offline, connection refused, ...)."""


def split_document_path(path: str) -> Tuple[str, str]:
    """
    Split 'A/a/B/b' into ('A/a/B', 'b').

    Raises:
        ValueError: If the path does not address a document (odd segment count)
    """
    segments = path.split("/")
    if len(segments) % 2 != 0 or any(not s for s in segments):
        raise ValueError(f"Not a document path: '{path}'")
    return "/".join(segments[:-1]), segments[-1]


def collection_id_of(collection_path: str) -> str:
    """Last segment of a collection path: 'Users/u1/Follow' -> 'Follow'."""
    return collection_path.rsplit("/", 1)[-1]


def check_collection_path(collection_path: str) -> None:
    segments = collection_path.split("/")
    if len(segments) % 2 != 1 or any(not s for s in segments):
        raise ValueError(f"Not a collection path: '{collection_path}'")


def resolve_server_values(data: Dict[str, Any], now_ms: int) -> Dict[str, Any]:
    """Copy `data`, replacing SERVER_TIMESTAMP sentinels with `now_ms`."""
    return {
        key: (now_ms if value is SERVER_TIMESTAMP else value)
        for key, value in data.items()
    }


def sort_key(value: Any) -> Tuple[int, Any]:
    """Order values of mixed types: numbers, then strings, then anything else."""
    if isinstance(value, bool):
        return (2, str(value))
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (2, str(value))
