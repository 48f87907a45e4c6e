"""Key/value media the result cache and flow state are written to.

`KeyValueStore` has the shape of the browser Storage API: string keys,
get/set/remove, and key enumeration.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import redis

from blogflow.logging import get_logger

if TYPE_CHECKING:
    from blogflow.config import Settings

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Protocol for pluggable key/value media."""

    @abstractmethod
    def get_item(self, key: str) -> Any | None:
        """Return the value stored under `key`, or None."""

    @abstractmethod
    def set_item(self, key: str, value: Any) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete `key`. No-op if absent."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List every key in the store, in insertion order where the medium keeps one."""


class MemoryStore(KeyValueStore):
    """Process-local dict. Values are kept as-is, not serialized."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    def get_item(self, key: str) -> Any | None:
        return self._items.get(key)

    def set_item(self, key: str, value: Any) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)


class FileStore(KeyValueStore):
    """Persistent store backed by a single JSON document.

    The file is re-read on every operation so several stores (or processes)
    pointed at the same path see each other's writes. Concurrent writers are
    last-write-wins.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _dump(self, items: dict[str, str]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: Any) -> None:
        items = self._load()
        items[key] = str(value)
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._dump(items)

    def keys(self) -> list[str]:
        return list(self._load())


@dataclass
class RedisStore(KeyValueStore):
    """Persistent store kept in one Redis hash.

    Suitable for multi-instance deployments where every API worker must see
    the same cache and flow state.
    """

    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "blogflow"
    client: Any = None

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = redis.Redis.from_url(self.redis_url, decode_responses=True)
        self._hash_key = f"{self.key_prefix}:kv"

    def get_item(self, key: str) -> str | None:
        return self.client.hget(self._hash_key, key)

    def set_item(self, key: str, value: Any) -> None:
        self.client.hset(self._hash_key, key, str(value))

    def remove_item(self, key: str) -> None:
        self.client.hdel(self._hash_key, key)

    def keys(self) -> list[str]:
        return list(self.client.hkeys(self._hash_key))


@dataclass
class CacheStores:
    """The three media a result cache can be configured to use.

    `persistent` survives restarts, `session` lives as long as this bundle,
    `memory` holds unserialized entries.
    """

    persistent: KeyValueStore = field(default_factory=MemoryStore)
    session: KeyValueStore = field(default_factory=MemoryStore)
    memory: KeyValueStore = field(default_factory=MemoryStore)

    @classmethod
    def in_memory(cls) -> CacheStores:
        return cls()


def build_persistent_store(settings: Settings) -> KeyValueStore:
    """Create the persistent medium selected by `settings.state_backend`."""

    if settings.state_backend == "redis":
        logger.info("Using Redis key/value store", extra={"redis_key_prefix": settings.redis_key_prefix})
        return RedisStore(redis_url=settings.redis_url, key_prefix=settings.redis_key_prefix)
    path = settings.state_dir / "store.json"
    logger.info("Using file key/value store", extra={"path": str(path)})
    return FileStore(path)


def build_stores(settings: Settings) -> CacheStores:
    return CacheStores(persistent=build_persistent_store(settings))
