"""SQLAlchemy engine and session management for the local SQLite store.

Engines and session factories are created by the composition root and
passed to the storage that needs them; there are no module-level singletons.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from songcheck.config import DatabaseConfig, get_logger

from .db_models import SongCheckDBBase

logger = get_logger(__name__)


def create_db_engine(config: DatabaseConfig | None = None) -> AsyncEngine:
    """Create an async SQLAlchemy engine tuned for a single-user SQLite file."""
    config = config or DatabaseConfig()
    db_url = config.url

    connect_args = {}
    if db_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30.0}
        database = make_url(db_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(db_url, connect_args=connect_args, echo=config.echo)

    if db_url.startswith("sqlite"):

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, _):  # type: ignore # pragma: no cover
            """Set SQLite PRAGMAs on connection creation."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA busy_timeout = 30000")
            cursor.execute("PRAGMA journal_mode = WAL")
            cursor.execute("PRAGMA synchronous = NORMAL")
            cursor.close()

    logger.debug("Created database engine with SQLite optimizations")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=True,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(SongCheckDBBase.metadata.create_all)


@asynccontextmanager
async def get_session(
    session_factory: async_sessionmaker[AsyncSession], rollback: bool = True
) -> AsyncGenerator[AsyncSession]:
    """Session with automatic commit, and rollback on error.

    Args:
        session_factory: Factory from ``create_session_factory``
        rollback: If True (default), automatically rolls back on exception.

    Yields:
        AsyncSession: Managed database session
    """
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        if rollback:
            await session.rollback()
        raise
    finally:
        await session.close()
