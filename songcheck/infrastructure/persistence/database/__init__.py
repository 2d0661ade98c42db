"""SQLite persistence via SQLAlchemy's async engine."""

from .db_connection import (
    create_db_engine,
    create_session_factory,
    get_session,
    init_db,
)
from .db_models import DBCacheRecord, SongCheckDBBase

__all__ = [
    "DBCacheRecord",
    "SongCheckDBBase",
    "create_db_engine",
    "create_session_factory",
    "get_session",
    "init_db",
]
