"""SQLite connection helper shared by the blob store and the response cache."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from swgallery.core.errors import StorageError


@contextmanager
def sqlite_connection(db_path: Path, timeout: float = 5.0) -> Iterator[sqlite3.Connection]:
    """Open a short-lived connection wrapped in a single transaction.

    The transaction commits when the block exits normally and rolls back
    otherwise.  Any ``sqlite3.Error`` (locked database, full disk, corrupt
    file) is re-raised as :class:`StorageError`.

    Args:
        db_path: Path to the SQLite database file.
        timeout: Seconds to wait for a lock held by another connection.

    Yields:
        An open ``sqlite3.Connection``.
    """
    try:
        conn = sqlite3.connect(db_path, timeout=timeout)
    except sqlite3.Error as e:
        raise StorageError(f"Cannot open database {db_path}: {e}") from e

    try:
        with conn:
            yield conn
    except sqlite3.Error as e:
        raise StorageError(f"Database operation failed on {db_path}: {e}") from e
    finally:
        conn.close()
