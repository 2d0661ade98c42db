"""Bounded local cache for catalog search results and resolved tracks.

Entries are kept in two in-memory mappings (searches and tracks), persisted
as JSON through a ``KeyValueStorage`` after a quiet period. The serialized
size of both mappings is kept under the configured maximum by evicting the
oldest entries first; storage quota errors are recovered by progressively
more aggressive pruning and, as a last resort, clearing the cache.
"""

from collections.abc import Callable
from enum import StrEnum
import json
import time
from typing import Any

from attrs import define

from songcheck.config import CacheConfig, get_logger
from songcheck.domain.exceptions import StorageQuotaExceededError
from songcheck.domain.repositories import KeyValueStorage

from .debounce import DebouncedFlush

logger = get_logger(__name__)


def epoch_ms() -> int:
    return int(time.time() * 1000)


def search_key(title: str, artist: str = "", album: str = "") -> str:
    """Cache key for a search: the lower-cased fields joined by ``|``."""
    return f"{title.lower()}|{(artist or '').lower()}|{(album or '').lower()}"


class CacheKind(StrEnum):
    """The two cache mappings."""

    SEARCHES = "searches"
    TRACKS = "tracks"


@define(frozen=True, slots=True)
class CacheEntry:
    """A cached payload and the epoch-ms time it was stored."""

    key: str
    payload: Any
    timestamp: int

    def to_json(self) -> dict[str, Any]:
        return {"data": self.payload, "timestamp": self.timestamp}

    @classmethod
    def from_json(cls, key: str, raw: Any) -> "CacheEntry":
        if not isinstance(raw, dict) or "data" not in raw:
            raise ValueError(f"Invalid cache entry for {key!r}")
        timestamp = raw.get("timestamp")
        if not isinstance(timestamp, int | float):
            raise ValueError(f"Invalid timestamp for {key!r}")
        return cls(key=key, payload=raw["data"], timestamp=int(timestamp))


@define(frozen=True, slots=True)
class CacheStats:
    search_count: int
    track_count: int
    approx_size_bytes: int
    enabled: bool

    @property
    def approx_size_kb(self) -> float:
        return self.approx_size_bytes / 1024


@define(frozen=True, slots=True)
class ExpiredCounts:
    searches_removed: int = 0
    tracks_removed: int = 0

    @property
    def total(self) -> int:
        return self.searches_removed + self.tracks_removed


class CacheStore:
    """Search and track cache with TTL validity and quota enforcement.

    The mappings are mutated only through this class. Every ``put`` schedules
    a debounced flush; ``close()`` writes anything still pending.
    """

    def __init__(
        self,
        config: CacheConfig,
        storage: KeyValueStorage,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self.config = config
        self.storage = storage
        self.clock = clock
        self.enabled = config.enabled
        self._entries: dict[CacheKind, dict[str, CacheEntry]] = {
            CacheKind.SEARCHES: {},
            CacheKind.TRACKS: {},
        }
        self._debounce = DebouncedFlush(self.flush, config.save_delay_ms / 1000)

    # Loading and lookups

    async def load(self) -> None:
        """Read both mappings from storage; unreadable data resets the cache."""
        try:
            loaded = {
                kind: await self._read_mapping(self._storage_key(kind)) for kind in CacheKind
            }
        except (ValueError, TypeError) as e:
            logger.error(f"Error loading cache: {e}")
            loaded = {kind: {} for kind in CacheKind}
        self._entries = loaded

        logger.info(
            f"Cache loaded: {len(self._entries[CacheKind.SEARCHES])} searches, "
            f"{len(self._entries[CacheKind.TRACKS])} tracks"
        )
        if self.enforce_quota():
            self._debounce.schedule()

    def get(self, kind: CacheKind, key: str) -> CacheEntry | None:
        return self._entries[kind].get(key)

    def is_valid(self, entry: CacheEntry | None) -> bool:
        """Entry exists, caching is enabled and the entry is younger than max age."""
        return bool(
            entry is not None
            and self.enabled
            and entry.timestamp
            and (self.clock() - entry.timestamp) < self.config.max_age_ms
        )

    def lookup(self, kind: CacheKind, key: str) -> CacheEntry | None:
        """Entry for key if it is still valid."""
        entry = self.get(kind, key)
        return entry if self.is_valid(entry) else None

    def put(self, kind: CacheKind, key: str, payload: Any) -> CacheEntry | None:
        """Store payload under key, replacing any existing entry.

        Returns None without storing anything while caching is disabled.
        """
        if not self.enabled:
            return None
        entry = CacheEntry(key=key, payload=payload, timestamp=self.clock())
        self._entries[kind][key] = entry
        self._debounce.schedule()
        return entry

    # Persistence and quota

    async def flush(self) -> None:
        """Write both mappings to storage, pruning on quota errors.

        A write that still fails after the cache has been cleared is logged,
        never raised; the cache is a best-effort layer.
        """
        self.enforce_quota()
        try:
            await self._write_all()
            return
        except StorageQuotaExceededError as e:
            logger.warning(f"Storage quota exceeded, pruning cache: {e}")

        for ratio in self.config.prune_ratios:
            self._prune(ratio)
            try:
                await self._write_all()
                logger.info(f"Cache saved after pruning {ratio:.0%} of entries")
                return
            except StorageQuotaExceededError:
                logger.warning(f"Still unable to save cache after pruning {ratio:.0%}")

        logger.error("Could not save cache even after aggressive pruning, clearing cache")
        self._clear_memory()
        try:
            await self._write_all()
        except StorageQuotaExceededError as e:
            logger.opt(exception=e).error(f"Failed to save cache after clearing: {e}")

    def enforce_quota(self) -> int:
        """Prune oldest entries while the cache is at or above the cleanup threshold.

        Prunes with the configured ratio schedule until the serialized size is
        at most ``max_size_bytes - min_remaining_bytes``; clears everything
        if the schedule is exhausted first. Returns the number of entries
        removed.
        """
        size = self.size_bytes()
        if size < self.config.cleanup_threshold_bytes:
            return 0

        logger.info(
            f"Cache size ({size / 1024:.2f}KB) exceeds cleanup threshold "
            f"({self.config.cleanup_threshold_bytes / 1024:.2f}KB)"
        )
        before = self._entry_count()
        target = self.config.target_size_bytes
        for ratio in self.config.prune_ratios:
            self._prune(ratio)
            if self.size_bytes() <= target:
                return before - self._entry_count()

        logger.warning("Pruning could not bring the cache under its limit, clearing cache")
        self._clear_memory()
        return before

    def _prune(self, ratio: float) -> None:
        """Drop the oldest ``ratio`` of entries from each mapping."""
        logger.info(f"Pruning cache to free up space (ratio: {ratio:.0%})")
        removed = {}
        for kind, entries in self._entries.items():
            # sorted() is stable: equal timestamps keep insertion order
            ordered = sorted(entries.values(), key=lambda entry: entry.timestamp)
            to_remove = int(len(ordered) * ratio)
            self._entries[kind] = {entry.key: entry for entry in ordered[to_remove:]}
            removed[kind] = to_remove

        logger.info(
            f"Pruned {removed[CacheKind.SEARCHES]} searches and "
            f"{removed[CacheKind.TRACKS]} tracks, "
            f"cache size after pruning: {self.size_bytes() / 1024:.2f}KB"
        )

    def cleanup_expired(self) -> ExpiredCounts:
        """Remove entries older than the maximum age."""
        if not self.enabled:
            return ExpiredCounts()

        now = self.clock()
        removed = {}
        for kind, entries in self._entries.items():
            kept = {
                key: entry
                for key, entry in entries.items()
                if now - entry.timestamp <= self.config.max_age_ms
            }
            removed[kind] = len(entries) - len(kept)
            self._entries[kind] = kept

        counts = ExpiredCounts(
            searches_removed=removed[CacheKind.SEARCHES],
            tracks_removed=removed[CacheKind.TRACKS],
        )
        if counts.total:
            logger.info(
                f"Cleaned {counts.searches_removed} expired search entries and "
                f"{counts.tracks_removed} expired track entries"
            )
            self._debounce.schedule()
        return counts

    async def clear(self) -> None:
        """Empty both mappings and delete their persisted copies."""
        async with self._debounce.suspended():
            self._clear_memory()
            for kind in CacheKind:
                await self.storage.remove(self._storage_key(kind))
        logger.info("Cache cleared")

    # Introspection

    def size_bytes(self) -> int:
        """UTF-8 length of the compact JSON of both mappings."""
        serialized = json.dumps(
            {kind.value: self._serialize(kind) for kind in CacheKind},
            ensure_ascii=False,
            separators=(",", ":"),
        )
        return len(serialized.encode("utf-8"))

    def stats(self) -> CacheStats:
        return CacheStats(
            search_count=len(self._entries[CacheKind.SEARCHES]),
            track_count=len(self._entries[CacheKind.TRACKS]),
            approx_size_bytes=self.size_bytes(),
            enabled=self.enabled,
        )

    def has_data(self) -> bool:
        return self._entry_count() > 0

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        logger.info(f"Cache {'enabled' if enabled else 'disabled'}")

    @property
    def flush_pending(self) -> bool:
        return self._debounce.pending

    async def close(self) -> None:
        """Write pending changes."""
        await self._debounce.flush_now()

    # Internals

    def _storage_key(self, kind: CacheKind) -> str:
        if kind is CacheKind.SEARCHES:
            return self.config.search_storage_key
        return self.config.track_storage_key

    def _serialize(self, kind: CacheKind) -> dict[str, Any]:
        return {key: entry.to_json() for key, entry in self._entries[kind].items()}

    async def _read_mapping(self, storage_key: str) -> dict[str, CacheEntry]:
        raw = await self.storage.read(storage_key)
        if not raw:
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Stored cache under {storage_key!r} is not an object")
        return {key: CacheEntry.from_json(key, value) for key, value in data.items()}

    async def _write_all(self) -> None:
        for kind in CacheKind:
            await self.storage.write(
                self._storage_key(kind),
                json.dumps(self._serialize(kind), ensure_ascii=False, separators=(",", ":")),
            )

    def _clear_memory(self) -> None:
        self._entries = {CacheKind.SEARCHES: {}, CacheKind.TRACKS: {}}

    def _entry_count(self) -> int:
        return sum(len(entries) for entries in self._entries.values())
