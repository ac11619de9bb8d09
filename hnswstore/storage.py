"""
SQLiteCollection - a durable key-value collection backed by one SQLite file.

This is the persistence collaborator of VectorStore: it holds the serialized
index under one key and the index metadata under another. Values are stored as
JSON text, so anything put into the collection must be JSON-serializable.

API:
- SQLiteCollection.open(name, directory=None) -> collection (creates the file on first use)
- get(key) -> value or None
- put(key, value)
- SQLiteCollection.delete(name, directory=None)
"""

import json
import logging
import os
import sqlite3
import threading
from pathlib import Path
from typing import Any, List, Optional, Union

from hnswstore.errors import IndexPurgeFailedError, VectorStoreUninitializedError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

# Files SQLite may create next to the main database in WAL mode
_SIDECAR_SUFFIXES = ("-wal", "-shm")


def collection_path(name: str, directory: Optional[PathLike] = None) -> Path:
    """Location of the database file for a named collection."""
    base = Path(directory) if directory is not None else Path.cwd()
    return base / f"{name}.db"


class SQLiteCollection:
    """A named, persistent key-value collection."""

    def __init__(self, name: str, directory: Optional[PathLike] = None) -> None:
        self.name = name
        self.path = collection_path(name, directory)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @classmethod
    def open(cls, name: str, directory: Optional[PathLike] = None) -> "SQLiteCollection":
        """Open (creating on first use) the collection called name."""
        collection = cls(name, directory)
        collection._connect()
        return collection

    def _connect(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS collection (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        conn.commit()
        self._conn = conn

        logger.debug("Opened collection '%s' at %s", self.name, self.path)

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise VectorStoreUninitializedError()
        return self._conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def get(self, key: str) -> Optional[Any]:
        """Return the decoded value stored under key, or None if absent."""
        with self._lock:
            row = self._get_conn().execute(
                "SELECT value FROM collection WHERE key = ?", (key,)
            ).fetchone()

        if row is None:
            return None
        return json.loads(row[0])

    def put(self, key: str, value: Any) -> None:
        """Store value (JSON-encoded) under key, replacing any previous value."""
        payload = json.dumps(value)

        with self._lock:
            conn = self._get_conn()
            conn.execute(
                "INSERT OR REPLACE INTO collection (key, value) VALUES (?, ?)",
                (key, payload),
            )
            conn.commit()

    def keys(self) -> List[str]:
        with self._lock:
            rows = self._get_conn().execute(
                "SELECT key FROM collection ORDER BY key"
            ).fetchall()
        return [row[0] for row in rows]

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @classmethod
    def delete(cls, name: str, directory: Optional[PathLike] = None) -> None:
        """
        Remove the collection's files. Deleting a collection that doesn't exist
        is a no-op.

        Raises:
            IndexPurgeFailedError: If a file exists but can't be removed
        """
        path = collection_path(name, directory)
        targets = [path] + [Path(f"{path}{suffix}") for suffix in _SIDECAR_SUFFIXES]

        for target in targets:
            try:
                target.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise IndexPurgeFailedError(name) from exc

        logger.info("Deleted collection '%s'", name)

    def __enter__(self) -> "SQLiteCollection":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"SQLiteCollection(name={self.name!r}, path={str(self.path)!r}, {state})"
