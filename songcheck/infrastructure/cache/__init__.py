"""Local cache for catalog searches and tracks."""

from .cache_store import (
    CacheEntry,
    CacheKind,
    CacheStats,
    CacheStore,
    ExpiredCounts,
    epoch_ms,
    search_key,
)
from .debounce import DebouncedFlush

__all__ = [
    "CacheEntry",
    "CacheKind",
    "CacheStats",
    "CacheStore",
    "DebouncedFlush",
    "ExpiredCounts",
    "epoch_ms",
    "search_key",
]
