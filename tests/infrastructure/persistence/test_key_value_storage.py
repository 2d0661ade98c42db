"""Tests for the SQLite key-value storage."""

import pytest

from songcheck.config import DatabaseConfig
from songcheck.domain.exceptions import StorageQuotaExceededError
from songcheck.infrastructure.persistence import SQLiteKeyValueStorage


@pytest.fixture
async def kv_storage(tmp_path):
    config = DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path}/songcheck.db", capacity_bytes=100)
    storage = await SQLiteKeyValueStorage.open(config)
    yield storage
    await storage.close()


class TestSQLiteKeyValueStorage:
    """Test read, write and capacity of the durable store."""

    async def test_missing_key(self, kv_storage):
        """Test reading an unknown key gives None."""
        assert await kv_storage.read("missing") is None

    async def test_write_read_overwrite(self, kv_storage):
        """Test values are stored and replaced."""
        await kv_storage.write("key", "first")
        await kv_storage.write("key", "second")

        assert await kv_storage.read("key") == "second"
        assert await kv_storage.usage_bytes() == len("second")

    async def test_remove(self, kv_storage):
        """Test removed keys read as missing."""
        await kv_storage.write("key", "value")

        await kv_storage.remove("key")
        await kv_storage.remove("never-written")

        assert await kv_storage.read("key") is None

    async def test_capacity_counts_utf8_bytes(self, kv_storage):
        """Test multi-byte characters count by encoded size."""
        await kv_storage.write("a", "x" * 60)

        with pytest.raises(StorageQuotaExceededError) as exc_info:
            await kv_storage.write("b", "曖" * 14)

        assert exc_info.value.required_bytes == 60 + 42
        assert await kv_storage.read("b") is None

    async def test_overwrite_does_not_count_old_value(self, kv_storage):
        """Test replacing a key frees its previous size."""
        await kv_storage.write("a", "x" * 90)
        await kv_storage.write("a", "y" * 100)

        assert await kv_storage.read("a") == "y" * 100

    async def test_persists_across_connections(self, tmp_path):
        """Test values survive reopening the database file."""
        config = DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path}/reopen.db")
        first = await SQLiteKeyValueStorage.open(config)
        await first.write("key", "value")
        await first.close()

        second = await SQLiteKeyValueStorage.open(config)
        try:
            assert await second.read("key") == "value"
        finally:
            await second.close()
