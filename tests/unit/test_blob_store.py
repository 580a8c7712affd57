"""Tests for swgallery.core.blob_store — SQLite blob persistence."""

from __future__ import annotations

import asyncio
import sqlite3

import pytest

from swgallery.core.blob_store import BlobStore
from swgallery.core.errors import StorageError


@pytest.fixture
def store(temp_dir) -> BlobStore:
    return BlobStore(temp_dir / "blobs.sqlite3")


class TestBlobStore:
    """Basic put/get/delete/list semantics."""

    @pytest.mark.asyncio
    async def test_put_then_get(self, store):
        await store.put("1-a.webp", b"\x00\x01binary")
        assert await store.get("1-a.webp") == b"\x00\x01binary"

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_put_overwrites(self, store):
        await store.put("k", b"old")
        await store.put("k", b"new")
        assert await store.get("k") == b"new"
        assert await store.list_keys() == {"k"}

    @pytest.mark.asyncio
    async def test_delete_reports_removal(self, store):
        await store.put("k", b"data")
        assert await store.delete("k") is True
        assert await store.delete("k") is False
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_list_keys_is_exact_set(self, store):
        for key in ("a", "b", "c"):
            await store.put(key, key.encode())
        await store.delete("b")
        assert await store.list_keys() == {"a", "c"}

    @pytest.mark.asyncio
    async def test_empty_bytes_round_trip(self, store):
        await store.put("empty", b"")
        assert await store.get("empty") == b""


class TestDurability:
    """State survives re-opening the database."""

    def test_reopen_sees_previous_blobs(self, temp_dir):
        path = temp_dir / "durable.sqlite3"
        BlobStore(path).put_sync("keep", b"bytes")

        reopened = BlobStore(path)
        assert reopened.get_sync("keep") == b"bytes"
        assert reopened.list_keys_sync() == {"keep"}

    def test_creates_parent_directory(self, temp_dir):
        path = temp_dir / "nested" / "deeper" / "db.sqlite3"
        BlobStore(path)
        assert path.exists()


class TestConcurrency:
    """Independent keys can be written concurrently."""

    @pytest.mark.asyncio
    async def test_concurrent_puts(self, store):
        keys = [f"key-{i}" for i in range(20)]
        await asyncio.gather(*(store.put(key, key.encode()) for key in keys))
        assert await store.list_keys() == set(keys)

    @pytest.mark.asyncio
    async def test_concurrent_writes_to_same_key(self, store):
        await asyncio.gather(*(store.put("same", b"payload") for _ in range(10)))
        assert await store.get("same") == b"payload"


class TestStorageFailure:
    """SQLite errors surface as StorageError."""

    def test_corrupt_database_raises_storage_error(self, temp_dir):
        path = temp_dir / "corrupt.sqlite3"
        path.write_bytes(b"this is not a sqlite database" * 100)
        with pytest.raises(StorageError):
            BlobStore(path)

    @pytest.mark.asyncio
    async def test_dropped_table_raises_storage_error(self, store):
        with sqlite3.connect(store.db_path) as conn:
            conn.execute("DROP TABLE blobs")
        with pytest.raises(StorageError):
            await store.get("anything")
