"""Versioned, URL-keyed cache of constructed image responses.

Only the image retrieval path uses this cache.  It is a read-through layer
in front of :class:`~swgallery.core.blob_store.BlobStore`: on a miss the
handler reads the blob, builds the response, and stores it here under the
exact request URL.

Entries are never authoritative.  Everything in the cache can be rebuilt
from the blob store, which is why eviction during Delete is best-effort
(:meth:`ResponseCache.evict_quietly`).

Versioning
----------
Rows are stored together with the cache name (``image-cache-v1`` by
default).  A cache instance only ever sees rows under its own name, so
switching the name invalidates every earlier entry at once.
:meth:`ResponseCache.purge_other_versions` reclaims the space those rows use.

Storage
-------
The cache lives in its own ``response_cache`` table, separate from the
``blobs`` table, so clearing it never touches stored images.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path

from swgallery.core.database import sqlite_connection
from swgallery.core.errors import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedResponse:
    """A complete response as stored in the cache."""

    body: bytes
    content_type: str
    cache_control: str


@dataclass(frozen=True)
class EvictionResult:
    """Outcome of a best-effort eviction.

    Attributes:
        removed: Whether an entry existed and was removed.
        error: The failure that prevented eviction, if any.
    """

    removed: bool = False
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ResponseCache:
    """SQLite-backed response cache bound to one version token.

    Attributes:
        db_path: Path to the SQLite database file.
        name: Version token; rows under other names are invisible.
        timeout: Seconds a connection waits on a locked database.
    """

    def __init__(self, db_path: Path, name: str = "image-cache-v1", timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.name = name
        self.timeout = timeout
        self._initialize_db()
        logger.info(f"Opened response cache {self.name!r} at {self.db_path}")

    def _connect(self):
        return sqlite_connection(self.db_path, self.timeout)

    def _initialize_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS response_cache (
                    cache_name TEXT NOT NULL,
                    url TEXT NOT NULL,
                    body BLOB NOT NULL,
                    content_type TEXT NOT NULL,
                    cache_control TEXT NOT NULL,
                    stored_at REAL NOT NULL,
                    PRIMARY KEY (cache_name, url)
                )
                """)

    def lookup_sync(self, url: str) -> CachedResponse | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT body, content_type, cache_control FROM response_cache
                WHERE cache_name = ? AND url = ?
                """,
                (self.name, url),
            ).fetchone()
        if row is None:
            return None
        return CachedResponse(body=bytes(row[0]), content_type=row[1], cache_control=row[2])

    def store_sync(self, url: str, response: CachedResponse) -> None:
        # Concurrent misses for the same URL write identical rows; last write wins.
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO response_cache
                    (cache_name, url, body, content_type, cache_control, stored_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    self.name,
                    url,
                    sqlite3.Binary(response.body),
                    response.content_type,
                    response.cache_control,
                    time.time(),
                ),
            )

    def evict_sync(self, url: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM response_cache WHERE cache_name = ? AND url = ?",
                (self.name, url),
            )
            return cursor.rowcount > 0

    def purge_other_versions_sync(self) -> int:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM response_cache WHERE cache_name != ?", (self.name,))
            purged = cursor.rowcount

        if purged:
            logger.info(f"Purged {purged} cached responses from previous cache versions")
        return purged

    async def lookup(self, url: str) -> CachedResponse | None:
        """Return the cached response for *url*, or ``None`` on a miss."""
        return await asyncio.to_thread(self.lookup_sync, url)

    async def store(self, url: str, response: CachedResponse) -> None:
        """Cache *response* under *url*, replacing any previous entry."""
        await asyncio.to_thread(self.store_sync, url, response)

    async def evict(self, url: str) -> bool:
        """Remove the entry for *url*.  Raises :class:`StorageError` on failure."""
        return await asyncio.to_thread(self.evict_sync, url)

    async def evict_quietly(self, url: str) -> EvictionResult:
        """Best-effort eviction that reports failures instead of raising."""
        try:
            removed = await self.evict(url)
        except StorageError as e:
            return EvictionResult(removed=False, error=e)
        return EvictionResult(removed=removed)

    async def purge_other_versions(self) -> int:
        """Delete entries cached under any other version token."""
        return await asyncio.to_thread(self.purge_other_versions_sync)
