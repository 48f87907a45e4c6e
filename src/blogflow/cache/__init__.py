"""Result cache and the key/value media behind it."""

from __future__ import annotations

from blogflow.cache.codec import EntryCodec
from blogflow.cache.result_cache import (
    CacheConfig,
    CacheEntry,
    CacheStats,
    ResultCache,
    partition_label,
)
from blogflow.cache.stores import (
    CacheStores,
    FileStore,
    KeyValueStore,
    MemoryStore,
    RedisStore,
    build_persistent_store,
    build_stores,
)

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "CacheStores",
    "EntryCodec",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "RedisStore",
    "ResultCache",
    "build_persistent_store",
    "build_stores",
    "partition_label",
]
