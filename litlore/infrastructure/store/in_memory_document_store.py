"""
In-memory implementation of the DocumentStore port.

Used by tests and by the default "memory" backend. Every call yields to the
event loop before touching state, so completions always arrive
asynchronously.
"""

import asyncio
import copy
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from litlore.domain.ports import Document, DocumentStore
from litlore.domain.utils.ids import new_document_id

from .base import (
    StoreUnavailableError,
    check_collection_path,
    collection_id_of,
    resolve_server_values,
    sort_key,
    split_document_path,
)

logger = logging.getLogger(__name__)


def _epoch_ms() -> int:
    return int(time.time() * 1000)


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    Attributes:
        offline: When True every call raises StoreUnavailableError
        request_count: Number of calls that reached the store
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        """
        Args:
            clock: Returns epoch milliseconds used for SERVER_TIMESTAMP.
                   Inject a counter in tests for deterministic ordering.
        """
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._clock = clock or _epoch_ms
        self.offline = False
        self.request_count = 0

    async def _enter(self, operation: str) -> None:
        await asyncio.sleep(0)
        self.request_count += 1
        if self.offline:
            logger.debug(f"Store offline, rejecting {operation}")
            raise StoreUnavailableError("Document store is unreachable")

    def _collection_docs(self, collection_path: str) -> List[Document]:
        prefix = collection_path + "/"
        return [
            Document(path=path, data=copy.deepcopy(data))
            for path, data in self._docs.items()
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]

    def _group_docs(self, collection_id: str, field_name: str, value: Any) -> List[Document]:
        matches = []
        for path, data in self._docs.items():
            collection_path, _ = split_document_path(path)
            if collection_id_of(collection_path) != collection_id:
                continue
            if field_name in data and data[field_name] == value:
                matches.append(Document(path=path, data=copy.deepcopy(data)))
        matches.sort(key=lambda d: d.path)
        return matches

    async def get(self, path: str) -> Optional[Document]:
        await self._enter("get")
        split_document_path(path)
        data = self._docs.get(path)
        if data is None:
            return None
        return Document(path=path, data=copy.deepcopy(data))

    async def set(self, path: str, data: Dict[str, Any]) -> None:
        await self._enter("set")
        split_document_path(path)
        self._docs[path] = copy.deepcopy(resolve_server_values(data, self._clock()))

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        await self._enter("update")
        if path not in self._docs:
            raise KeyError(f"No document to update at '{path}'")
        self._docs[path].update(copy.deepcopy(resolve_server_values(fields, self._clock())))

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        await self._enter("add")
        check_collection_path(collection_path)
        doc_id = new_document_id()
        self._docs[f"{collection_path}/{doc_id}"] = copy.deepcopy(
            resolve_server_values(data, self._clock())
        )
        return doc_id

    async def delete(self, path: str) -> None:
        await self._enter("delete")
        self._docs.pop(path, None)

    async def list_collection(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        await self._enter("list_collection")
        check_collection_path(collection_path)
        docs = self._collection_docs(collection_path)
        if order_by is None:
            docs.sort(key=lambda d: d.path, reverse=descending)
            return docs
        docs = [d for d in docs if order_by in d.data]
        docs.sort(key=lambda d: (sort_key(d.data[order_by]), d.path), reverse=descending)
        return docs

    async def range_query(
        self,
        collection_path: str,
        field_name: str,
        start_at: str,
        end_at: str,
    ) -> List[Document]:
        await self._enter("range_query")
        check_collection_path(collection_path)
        docs = [
            d for d in self._collection_docs(collection_path)
            if isinstance(d.data.get(field_name), str)
            and start_at <= d.data[field_name] <= end_at
        ]
        docs.sort(key=lambda d: (d.data[field_name], d.path))
        return docs

    async def collection_group(
        self,
        collection_id: str,
        field_name: str,
        value: Any,
    ) -> List[Document]:
        await self._enter("collection_group")
        return self._group_docs(collection_id, field_name, value)

    async def count_collection(self, collection_path: str) -> int:
        await self._enter("count_collection")
        check_collection_path(collection_path)
        return len(self._collection_docs(collection_path))

    async def count_group(self, collection_id: str, field_name: str, value: Any) -> int:
        await self._enter("count_group")
        return len(self._group_docs(collection_id, field_name, value))
