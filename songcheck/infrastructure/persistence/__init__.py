"""Durable storage implementations."""

from .key_value import SQLiteKeyValueStorage

__all__ = ["SQLiteKeyValueStorage"]
