"""Durable key → bytes storage for gallery images.

Blobs live in a single SQLite table.  Every public operation runs one
statement on its own connection in a worker thread, which gives per-key
atomicity without any process-wide lock.  Nothing is ever evicted
implicitly; a blob stays until :meth:`BlobStore.delete` removes it.

The store is the single source of truth for which images exist: the gallery
listing is a projection of :meth:`BlobStore.list_keys`.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path

from swgallery.core.database import sqlite_connection

logger = logging.getLogger(__name__)


class BlobStore:
    """SQLite-backed blob store.

    Attributes:
        db_path: Path to the SQLite database file.
        timeout: Seconds a connection waits on a locked database.
    """

    def __init__(self, db_path: Path, timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout
        self._initialize_db()
        logger.info(f"Initialized blob store at {self.db_path}")

    def _connect(self):
        return sqlite_connection(self.db_path, self.timeout)

    def _initialize_db(self) -> None:
        """Create the blobs table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS blobs (
                    id TEXT PRIMARY KEY,
                    data BLOB NOT NULL
                )
                """)

    # -- synchronous primitives ------------------------------------------

    def put_sync(self, blob_id: str, data: bytes) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO blobs (id, data) VALUES (?, ?)",
                (blob_id, sqlite3.Binary(data)),
            )
        logger.debug(f"Stored blob {blob_id} ({len(data)} bytes)")

    def get_sync(self, blob_id: str) -> bytes | None:
        with self._connect() as conn:
            row = conn.execute("SELECT data FROM blobs WHERE id = ?", (blob_id,)).fetchone()
        return bytes(row[0]) if row is not None else None

    def delete_sync(self, blob_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM blobs WHERE id = ?", (blob_id,))
            was_deleted = cursor.rowcount > 0

        if was_deleted:
            logger.info(f"Deleted blob {blob_id}")
        return was_deleted

    def list_keys_sync(self) -> set[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT id FROM blobs").fetchall()
        return {row[0] for row in rows}

    # -- async API used by the request handlers ---------------------------

    async def put(self, blob_id: str, data: bytes) -> None:
        """Store *data* under *blob_id*, overwriting any existing blob."""
        await asyncio.to_thread(self.put_sync, blob_id, data)

    async def get(self, blob_id: str) -> bytes | None:
        """Return the stored bytes, or ``None`` when *blob_id* is unknown."""
        return await asyncio.to_thread(self.get_sync, blob_id)

    async def delete(self, blob_id: str) -> bool:
        """Remove *blob_id*.  Returns ``True`` if a blob was removed."""
        return await asyncio.to_thread(self.delete_sync, blob_id)

    async def list_keys(self) -> set[str]:
        """Return the current set of stored identifiers."""
        return await asyncio.to_thread(self.list_keys_sync)
