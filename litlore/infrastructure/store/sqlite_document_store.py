"""
SQLite implementation of the DocumentStore port.

Documents are stored as JSON bodies in a single table keyed by their full
path. Queries use SQLite's JSON1 functions (`json_extract`, `json_type`),
which are built into the sqlite3 module shipped with CPython.

sqlite3 is blocking, so every call runs in a worker thread via
asyncio.to_thread; a fresh connection is opened per call.
"""

import asyncio
import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from litlore.domain.ports import Document, DocumentStore
from litlore.domain.utils.ids import new_document_id

from .base import (
    check_collection_path,
    collection_id_of,
    resolve_server_values,
    split_document_path,
)


def _json_path(field_name: str) -> str:
    escaped = field_name.replace('"', '\\"')
    return f'$."{escaped}"'


class SqliteDocumentStore(DocumentStore):
    """
    Persists documents to a SQLite file.

    Writes are last-write-wins (INSERT OR REPLACE); there is no locking
    beyond SQLite's own.
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the store with a database path.

        The parent directory and the table are created if missing.
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Create the documents table if it doesn't exist."""
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS documents (
                        path TEXT PRIMARY KEY,
                        collection_path TEXT NOT NULL,
                        collection_id TEXT NOT NULL,
                        data TEXT NOT NULL
                    )
                """)
                conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_documents_collection "
                    "ON documents(collection_path)"
                )
                conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_documents_group "
                    "ON documents(collection_id)"
                )
        finally:
            conn.close()

    def _query(self, sql: str, params: tuple) -> List[sqlite3.Row]:
        conn = self._get_connection()
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    def _write(self, sql: str, params: tuple) -> int:
        conn = self._get_connection()
        try:
            with conn:
                return conn.execute(sql, params).rowcount
        finally:
            conn.close()

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> Document:
        return Document(path=row["path"], data=json.loads(row["data"]))

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    # =========================================================================
    # Blocking implementations (run in a worker thread)
    # =========================================================================

    def _get_sync(self, path: str) -> Optional[Document]:
        split_document_path(path)
        rows = self._query("SELECT path, data FROM documents WHERE path = ?", (path,))
        return self._row_to_document(rows[0]) if rows else None

    def _set_sync(self, path: str, data: Dict[str, Any]) -> None:
        collection_path, _ = split_document_path(path)
        body = json.dumps(resolve_server_values(data, self._now_ms()))
        self._write(
            "INSERT OR REPLACE INTO documents (path, collection_path, collection_id, data) "
            "VALUES (?, ?, ?, ?)",
            (path, collection_path, collection_id_of(collection_path), body),
        )

    def _update_sync(self, path: str, fields: Dict[str, Any]) -> None:
        conn = self._get_connection()
        try:
            with conn:
                row = conn.execute(
                    "SELECT data FROM documents WHERE path = ?", (path,)
                ).fetchone()
                if row is None:
                    raise KeyError(f"No document to update at '{path}'")
                merged = json.loads(row["data"])
                merged.update(resolve_server_values(fields, self._now_ms()))
                conn.execute(
                    "UPDATE documents SET data = ? WHERE path = ?",
                    (json.dumps(merged), path),
                )
        finally:
            conn.close()

    def _list_sync(
        self, collection_path: str, order_by: Optional[str], descending: bool
    ) -> List[Document]:
        check_collection_path(collection_path)
        direction = "DESC" if descending else "ASC"
        if order_by is None:
            rows = self._query(
                f"SELECT path, data FROM documents WHERE collection_path = ? "
                f"ORDER BY path {direction}",
                (collection_path,),
            )
        else:
            json_path = _json_path(order_by)
            rows = self._query(
                f"SELECT path, data FROM documents "
                f"WHERE collection_path = ? AND json_type(data, ?) IS NOT NULL "
                f"AND json_type(data, ?) != 'null' "
                f"ORDER BY json_extract(data, ?) {direction}, path {direction}",
                (collection_path, json_path, json_path, json_path),
            )
        return [self._row_to_document(r) for r in rows]

    def _range_sync(
        self, collection_path: str, field_name: str, start_at: str, end_at: str
    ) -> List[Document]:
        check_collection_path(collection_path)
        json_path = _json_path(field_name)
        rows = self._query(
            "SELECT path, data FROM documents "
            "WHERE collection_path = ? AND json_type(data, ?) = 'text' "
            "AND json_extract(data, ?) >= ? AND json_extract(data, ?) <= ? "
            "ORDER BY json_extract(data, ?), path",
            (collection_path, json_path, json_path, start_at, json_path, end_at, json_path),
        )
        return [self._row_to_document(r) for r in rows]

    def _group_sync(self, collection_id: str, field_name: str, value: Any) -> List[Document]:
        rows = self._query(
            "SELECT path, data FROM documents "
            "WHERE collection_id = ? AND json_extract(data, ?) = ? ORDER BY path",
            (collection_id, _json_path(field_name), value),
        )
        return [self._row_to_document(r) for r in rows]

    def _count_collection_sync(self, collection_path: str) -> int:
        check_collection_path(collection_path)
        rows = self._query(
            "SELECT COUNT(*) AS cnt FROM documents WHERE collection_path = ?",
            (collection_path,),
        )
        return rows[0]["cnt"]

    def _count_group_sync(self, collection_id: str, field_name: str, value: Any) -> int:
        rows = self._query(
            "SELECT COUNT(*) AS cnt FROM documents "
            "WHERE collection_id = ? AND json_extract(data, ?) = ?",
            (collection_id, _json_path(field_name), value),
        )
        return rows[0]["cnt"]

    # =========================================================================
    # DocumentStore port
    # =========================================================================

    async def get(self, path: str) -> Optional[Document]:
        return await asyncio.to_thread(self._get_sync, path)

    async def set(self, path: str, data: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._set_sync, path, data)

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._update_sync, path, fields)

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        check_collection_path(collection_path)
        doc_id = new_document_id()
        await asyncio.to_thread(self._set_sync, f"{collection_path}/{doc_id}", data)
        return doc_id

    async def delete(self, path: str) -> None:
        await asyncio.to_thread(self._write, "DELETE FROM documents WHERE path = ?", (path,))

    async def list_collection(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        return await asyncio.to_thread(self._list_sync, collection_path, order_by, descending)

    async def range_query(
        self,
        collection_path: str,
        field_name: str,
        start_at: str,
        end_at: str,
    ) -> List[Document]:
        return await asyncio.to_thread(
            self._range_sync, collection_path, field_name, start_at, end_at
        )

    async def collection_group(
        self,
        collection_id: str,
        field_name: str,
        value: Any,
    ) -> List[Document]:
        return await asyncio.to_thread(self._group_sync, collection_id, field_name, value)

    async def count_collection(self, collection_path: str) -> int:
        return await asyncio.to_thread(self._count_collection_sync, collection_path)

    async def count_group(self, collection_id: str, field_name: str, value: Any) -> int:
        return await asyncio.to_thread(self._count_group_sync, collection_id, field_name, value)
