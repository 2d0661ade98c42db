"""Bounded durable string storage on SQLite."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncEngine

from songcheck.config import DatabaseConfig, get_logger
from songcheck.domain.exceptions import StorageQuotaExceededError

from .database import (
    DBCacheRecord,
    create_db_engine,
    create_session_factory,
    get_session,
    init_db,
)

logger = get_logger(__name__)


class SQLiteKeyValueStorage:
    """Key-value storage with a hard capacity, measured in UTF-8 bytes.

    A write that would push the total stored size past ``capacity_bytes``
    raises ``StorageQuotaExceededError`` and leaves the store unchanged.
    """

    def __init__(self, engine: AsyncEngine, capacity_bytes: int) -> None:
        self.engine = engine
        self.capacity_bytes = capacity_bytes
        self._session_factory = create_session_factory(engine)

    @classmethod
    async def open(cls, config: DatabaseConfig) -> "SQLiteKeyValueStorage":
        """Create the engine and make sure the table exists."""
        storage = cls(create_db_engine(config), config.capacity_bytes)
        await init_db(storage.engine)
        return storage

    async def read(self, key: str) -> str | None:
        async with get_session(self._session_factory) as session:
            record = await session.get(DBCacheRecord, key)
            return record.value if record else None

    async def write(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        async with get_session(self._session_factory) as session:
            others = await session.scalar(
                select(func.coalesce(func.sum(DBCacheRecord.size_bytes), 0)).where(
                    DBCacheRecord.key != key
                )
            )
            required = int(others or 0) + size
            if required > self.capacity_bytes:
                raise StorageQuotaExceededError(key, required, self.capacity_bytes)

            record = await session.get(DBCacheRecord, key)
            if record is None:
                session.add(DBCacheRecord(key=key, value=value, size_bytes=size))
            else:
                record.value = value
                record.size_bytes = size

        logger.debug(f"Stored {size} bytes under '{key}'")

    async def remove(self, key: str) -> None:
        async with get_session(self._session_factory) as session:
            await session.execute(delete(DBCacheRecord).where(DBCacheRecord.key == key))

    async def usage_bytes(self) -> int:
        """Total size of all stored values."""
        async with get_session(self._session_factory) as session:
            total = await session.scalar(
                select(func.coalesce(func.sum(DBCacheRecord.size_bytes), 0))
            )
            return int(total or 0)

    async def close(self) -> None:
        await self.engine.dispose()
