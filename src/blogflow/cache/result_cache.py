"""Expiring, capacity-bounded cache for expensive lookups.

Keys are ``{namespace}_{partition}_{query}``. The partition is a calendar
bucket (day, week or month) computed from the clock on every call, so
entries from a previous bucket are no longer visible even if they have not
expired.

All storage failures are absorbed: they are logged and the operation
degrades to a miss or a no-op. A caching problem never fails the lookup the
cache sits in front of.
"""

from __future__ import annotations

import copy
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from blogflow.cache.codec import EntryCodec
from blogflow.cache.stores import CacheStores, KeyValueStore
from blogflow.logging import get_logger

logger = get_logger(__name__)

StorageType = Literal["persistent", "session", "memory"]
PartitionBy = Literal["day", "week", "month"]

DAY_MS = 24 * 60 * 60 * 1000


class CacheConfig(BaseModel):
    """Result cache configuration."""

    storage: StorageType = "persistent"
    expiry_ms: int = Field(default=DAY_MS, ge=0)
    max_entries: int | None = Field(default=100, ge=1)
    namespace: str = "search_cache"
    partition_by: PartitionBy = "day"
    compression: bool = False
    encryption_key: str | None = None
    # Memory storage only: mirror writes to the persistent medium and reload from it.
    persist_on_reload: bool = True


class CacheEntry(BaseModel):
    """A stored lookup result."""

    query: str
    data: Any
    timestamp: float


@dataclass(frozen=True)
class CacheStats:
    total_entries: int
    oldest_entry: float | None
    newest_entry: float | None
    storage_type: str


def now_ms() -> float:
    return time.time() * 1000


def partition_label(moment: datetime, partition_by: PartitionBy) -> str:
    """Calendar bucket label for `moment`.

    Examples: day ``2024_3_9``, week ``2024_w10`` (ISO week), month ``2024_m3``.
    """

    if partition_by == "week":
        iso_year, iso_week, _ = moment.isocalendar()
        return f"{iso_year}_w{iso_week:02d}"
    if partition_by == "month":
        return f"{moment.year}_m{moment.month}"
    return f"{moment.year}_{moment.month}_{moment.day}"


class ResultCache:
    """Memoize idempotent lookups keyed by their query text."""

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        stores: CacheStores | None = None,
        clock: Callable[[], float] = now_ms,
    ) -> None:
        """Initialize the cache.

        Args:
            config: Cache configuration; defaults to `CacheConfig()`.
            stores: Media to read and write. Defaults to fresh in-memory stores.
            clock: Returns the current time in epoch milliseconds.
        """

        self.config = config or CacheConfig()
        self.stores = stores or CacheStores.in_memory()
        self._clock = clock
        self._codec = EntryCodec(
            compression=self.config.compression,
            encryption_key=self.config.encryption_key,
        )

        if self._mirror is not None:
            self._rehydrate()

    @property
    def prefix(self) -> str:
        moment = datetime.fromtimestamp(self._clock() / 1000)
        return f"{self.config.namespace}_{partition_label(moment, self.config.partition_by)}_"

    def cache_key(self, query: str) -> str:
        return f"{self.prefix}{query}"

    @property
    def _in_memory(self) -> bool:
        return self.config.storage == "memory"

    @property
    def _medium(self) -> KeyValueStore:
        return getattr(self.stores, self.config.storage)

    @property
    def _mirror(self) -> KeyValueStore | None:
        if self._in_memory and self.config.persist_on_reload:
            return self.stores.persistent
        return None

    def _serialize(self, entry: CacheEntry) -> str:
        return self._codec.encode(entry.model_dump_json())

    def _deserialize(self, raw: str) -> CacheEntry | None:
        try:
            return CacheEntry.model_validate_json(self._codec.decode(raw))
        except ValueError as e:
            logger.warning("Error deserializing cache entry: %s", e)
            return None

    def _rehydrate(self) -> None:
        mirror = self._mirror
        assert mirror is not None
        prefix = self.prefix
        loaded = 0
        try:
            for key in mirror.keys():
                if not key.startswith(prefix):
                    continue
                raw = mirror.get_item(key)
                entry = self._deserialize(raw) if raw else None
                if entry is not None:
                    self._medium.set_item(key, entry)
                    loaded += 1
        except Exception:
            logger.warning("Error initializing from persistent storage", exc_info=True)
            return
        logger.debug("Rehydrated memory cache", extra={"prefix": prefix, "entries": loaded})

    def _read(self, key: str) -> CacheEntry | None:
        raw = self._medium.get_item(key)
        if raw is None:
            return None
        if self._in_memory:
            return raw
        return self._deserialize(raw)

    def _write(self, key: str, entry: CacheEntry) -> None:
        if self._in_memory:
            self._medium.set_item(key, entry.model_copy(deep=True))
            mirror = self._mirror
            if mirror is not None:
                mirror.set_item(key, self._serialize(entry))
        else:
            self._medium.set_item(key, self._serialize(entry))

    def _delete(self, key: str) -> None:
        self._medium.remove_item(key)
        mirror = self._mirror
        if mirror is not None:
            mirror.remove_item(key)

    def _scan(self) -> tuple[list[tuple[str, CacheEntry]], int]:
        """Return readable entries under the prefix, deleting unreadable ones.

        Entries that no longer decode (corrupt data, or an encryption key that
        has since changed) would otherwise never expire or be evicted.
        """

        prefix = self.prefix
        entries: list[tuple[str, CacheEntry]] = []
        purged = 0
        for key in self._medium.keys():
            if not key.startswith(prefix):
                continue
            entry = self._read(key)
            if entry is None:
                self._delete(key)
                purged += 1
            else:
                entries.append((key, entry))
        if purged:
            logger.info("Purged unreadable cache entries", extra={"purged": purged})
        return entries, purged

    def _entries(self) -> list[tuple[str, CacheEntry]]:
        return self._scan()[0]

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.config.expiry_ms

    def get(self, query: str) -> Any | None:
        """Return the cached payload for `query`, or None on miss or expiry."""

        try:
            key = self.cache_key(query)
            entry = self._read(key)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()):
                self._delete(key)
                return None
            if self._in_memory:
                return copy.deepcopy(entry.data)
            return entry.data
        except Exception:
            logger.warning("Error reading from cache", extra={"query_len": len(query)}, exc_info=True)
            return None

    def set(self, query: str, data: Any) -> None:  # noqa: A003
        """Store `data` for `query` with a fresh timestamp."""

        try:
            key = self.cache_key(query)
            now = self._clock()
            if self.config.max_entries is not None:
                self._enforce_max_entries(now, incoming_key=key)
            self._write(key, CacheEntry(query=query, data=data, timestamp=now))
        except Exception:
            logger.warning("Error writing to cache", extra={"query_len": len(query)}, exc_info=True)

    def _enforce_max_entries(self, now: float, *, incoming_key: str) -> None:
        max_entries = self.config.max_entries
        assert max_entries is not None

        live: list[tuple[str, CacheEntry]] = []
        for key, entry in self._entries():
            if key == incoming_key:
                continue
            if self._is_expired(entry, now):
                self._delete(key)
            else:
                live.append((key, entry))

        live.sort(key=lambda item: item[1].timestamp)
        evicted = 0
        while len(live) >= max_entries:
            key, _ = live.pop(0)
            self._delete(key)
            evicted += 1
        if evicted:
            logger.debug("Evicted cache entries", extra={"evicted": evicted, "max_entries": max_entries})

    def remove(self, query: str) -> None:
        try:
            self._delete(self.cache_key(query))
        except Exception:
            logger.warning("Error removing from cache", exc_info=True)

    def clear(self) -> None:
        """Remove every entry under this cache's namespace and partition."""

        try:
            prefix = self.prefix
            for key in self._medium.keys():
                if key.startswith(prefix):
                    self._medium.remove_item(key)
            mirror = self._mirror
            if mirror is not None:
                for key in mirror.keys():
                    if key.startswith(prefix):
                        mirror.remove_item(key)
        except Exception:
            logger.warning("Error clearing cache", exc_info=True)

    def clear_expired(self) -> int:
        """Remove expired and unreadable entries under the prefix.

        Returns:
            How many entries were removed.
        """

        removed = 0
        try:
            now = self._clock()
            entries, removed = self._scan()
            for key, entry in entries:
                if self._is_expired(entry, now):
                    self._delete(key)
                    removed += 1
        except Exception:
            logger.warning("Error clearing expired cache", exc_info=True)
        return removed

    def get_stats(self) -> CacheStats:
        try:
            timestamps = [entry.timestamp for _, entry in self._entries()]
        except Exception:
            logger.warning("Error getting cache stats", exc_info=True)
            timestamps = []
        return CacheStats(
            total_entries=len(timestamps),
            oldest_entry=min(timestamps) if timestamps else None,
            newest_entry=max(timestamps) if timestamps else None,
            storage_type=self.config.storage,
        )
