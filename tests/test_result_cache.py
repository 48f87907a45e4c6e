"""Tests for the expiring result cache."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from blogflow.cache.result_cache import CacheConfig, CacheEntry, ResultCache, partition_label
from blogflow.cache.stores import CacheStores, KeyValueStore, MemoryStore

from conftest import FakeClock

PAYLOAD = {"organicResults": [{"title": "Go by Example", "link": "https://gobyexample.com", "snippet": "", "position": 1}]}


def _cache(clock: FakeClock, stores: CacheStores | None = None, **config: Any) -> ResultCache:
    return ResultCache(CacheConfig(**config), stores=stores or CacheStores.in_memory(), clock=clock)


@pytest.mark.parametrize("storage", ["persistent", "session", "memory"])
def test_entry_expires_after_expiry(clock: FakeClock, storage: str) -> None:
    """A stored payload is visible up to `expiry_ms` and gone right after."""

    cache = _cache(clock, storage=storage, expiry_ms=1000, partition_by="day")
    cache.set("golang tutorials", PAYLOAD)

    clock.advance(999)
    assert cache.get("golang tutorials") == PAYLOAD

    clock.advance(2)
    assert cache.get("golang tutorials") is None
    assert cache.get_stats().total_entries == 0


def test_get_does_not_refresh_timestamp(clock: FakeClock) -> None:
    cache = _cache(clock, expiry_ms=1000)
    cache.set("q", PAYLOAD)

    clock.advance(600)
    assert cache.get("q") == PAYLOAD
    clock.advance(600)
    assert cache.get("q") is None


def test_set_refreshes_timestamp(clock: FakeClock) -> None:
    cache = _cache(clock, expiry_ms=1000)
    cache.set("q", PAYLOAD)
    clock.advance(600)
    cache.set("q", {"v": 2})
    clock.advance(600)

    assert cache.get("q") == {"v": 2}


def test_max_entries_keeps_most_recent(clock: FakeClock) -> None:
    """Inserting N+1 queries leaves the N most recently set ones."""

    cache = _cache(clock, max_entries=3)
    for i in range(4):
        cache.set(f"q{i}", {"i": i})
        clock.advance(10)

    assert cache.get_stats().total_entries == 3
    assert cache.get("q0") is None
    assert [cache.get(f"q{i}") for i in (1, 2, 3)] == [{"i": 1}, {"i": 2}, {"i": 3}]


def test_overwriting_a_key_does_not_evict(clock: FakeClock) -> None:
    cache = _cache(clock, max_entries=2)
    cache.set("a", 1)
    clock.advance(10)
    cache.set("b", 2)
    clock.advance(10)
    cache.set("a", 3)

    assert cache.get("a") == 3
    assert cache.get("b") == 2


def test_eviction_prefers_expired_entries(clock: FakeClock) -> None:
    cache = _cache(clock, max_entries=2, expiry_ms=100)
    cache.set("old", 1)
    clock.advance(150)
    cache.set("fresh", 2)
    cache.set("newer", 3)

    assert cache.get("fresh") == 2
    assert cache.get("newer") == 3
    assert cache.get_stats().total_entries == 2


def test_clear_only_touches_own_namespace(clock: FakeClock) -> None:
    stores = CacheStores.in_memory()
    search = _cache(clock, stores=stores, namespace="search_cache")
    other = _cache(clock, stores=stores, namespace="other_cache")
    search.set("q", 1)
    other.set("q", 2)

    search.clear()

    assert search.get("q") is None
    assert other.get("q") == 2
    assert other.get_stats().total_entries == 1


def test_partition_rollover_hides_previous_bucket(clock: FakeClock) -> None:
    cache = _cache(clock, expiry_ms=7 * 24 * 60 * 60 * 1000, partition_by="day")
    cache.set("q", 1)

    clock.advance(24 * 60 * 60 * 1000)

    assert cache.get("q") is None
    assert cache.get_stats().total_entries == 0


def test_partition_labels() -> None:
    moment = datetime(2024, 1, 1, 9, 30)

    assert partition_label(moment, "day") == "2024_1_1"
    assert partition_label(moment, "week") == "2024_w01"
    assert partition_label(moment, "month") == "2024_m1"
    # ISO week 1 of 2025 starts on Monday 2024-12-30.
    assert partition_label(datetime(2024, 12, 31), "week") == "2025_w01"


def test_cache_key_layout(clock: FakeClock) -> None:
    cache = _cache(clock, namespace="ns", partition_by="month")

    assert cache.cache_key("golang tutorials") == "ns_2024_m3_golang tutorials"


def test_clear_expired_sweeps_prefix(clock: FakeClock) -> None:
    cache = _cache(clock, expiry_ms=100)
    cache.set("a", 1)
    clock.advance(50)
    cache.set("b", 2)
    clock.advance(60)

    assert cache.clear_expired() == 1
    assert cache.get_stats().total_entries == 1
    assert cache.get("b") == 2


def test_stats_report_age_range(clock: FakeClock) -> None:
    cache = _cache(clock, storage="session")
    empty = cache.get_stats()
    assert (empty.total_entries, empty.oldest_entry, empty.newest_entry) == (0, None, None)
    assert empty.storage_type == "session"

    start = clock.now
    cache.set("a", 1)
    clock.advance(25)
    cache.set("b", 2)

    stats = cache.get_stats()
    assert stats.total_entries == 2
    assert stats.oldest_entry == start
    assert stats.newest_entry == start + 25


def test_remove_deletes_single_entry(clock: FakeClock) -> None:
    cache = _cache(clock)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.remove("a")
    cache.remove("never-set")

    assert cache.get("a") is None
    assert cache.get("b") == 2


def test_storage_selects_medium(clock: FakeClock) -> None:
    stores = CacheStores.in_memory()
    cache = _cache(clock, stores=stores, storage="session")
    cache.set("q", 1)

    assert stores.session.keys() == [cache.cache_key("q")]
    assert stores.persistent.keys() == []


def test_encoded_entries_are_opaque_and_readable(clock: FakeClock) -> None:
    stores = CacheStores.in_memory()
    writer = _cache(clock, stores=stores, compression=True, encryption_key="s3cret")
    writer.set("golang tutorials", PAYLOAD)

    raw = stores.persistent.get_item(writer.cache_key("golang tutorials"))
    assert "gobyexample" not in raw

    reader = _cache(clock, stores=stores, compression=True, encryption_key="s3cret")
    assert reader.get("golang tutorials") == PAYLOAD

    wrong_key = _cache(clock, stores=stores, compression=True, encryption_key="other")
    assert wrong_key.get("golang tutorials") is None


def test_memory_storage_keeps_entries_unserialized(clock: FakeClock) -> None:
    stores = CacheStores.in_memory()
    cache = _cache(clock, stores=stores, storage="memory", persist_on_reload=False, compression=True)
    cache.set("q", PAYLOAD)

    assert isinstance(stores.memory.get_item(cache.cache_key("q")), CacheEntry)
    assert stores.persistent.keys() == []


def test_memory_storage_rehydrates_from_persistent(clock: FakeClock) -> None:
    persistent = MemoryStore()
    first = _cache(clock, stores=CacheStores(persistent=persistent), storage="memory", encryption_key="k")
    first.set("q", PAYLOAD)
    first.set("gone", 1)
    first.remove("gone")

    restarted = _cache(clock, stores=CacheStores(persistent=persistent), storage="memory", encryption_key="k")

    assert restarted.get("q") == PAYLOAD
    assert restarted.get("gone") is None
    assert restarted.get_stats().total_entries == 1


class BrokenStore(KeyValueStore):
    """A medium whose every operation fails, like a full or unavailable store."""

    def get_item(self, key: str) -> Any | None:
        raise OSError("storage unavailable")

    def set_item(self, key: str, value: Any) -> None:
        raise OSError("quota exceeded")

    def remove_item(self, key: str) -> None:
        raise OSError("storage unavailable")

    def keys(self) -> list[str]:
        raise OSError("storage unavailable")


def test_storage_failures_are_absorbed(clock: FakeClock) -> None:
    cache = _cache(clock, stores=CacheStores(persistent=BrokenStore()))

    cache.set("q", PAYLOAD)
    assert cache.get("q") is None
    cache.remove("q")
    cache.clear()
    assert cache.clear_expired() == 0
    stats = cache.get_stats()
    assert stats.total_entries == 0
    assert stats.oldest_entry is None


def test_corrupt_entry_reads_as_miss(clock: FakeClock) -> None:
    stores = CacheStores.in_memory()
    cache = _cache(clock, stores=stores)
    stores.persistent.set_item(cache.cache_key("q"), "{not json")

    assert cache.get("q") is None
    assert cache.get_stats().total_entries == 0
    assert stores.persistent.keys() == []


def test_clear_expired_purges_entries_that_no_longer_decode(clock: FakeClock) -> None:
    stores = CacheStores.in_memory()
    old = _cache(clock, stores=stores, encryption_key="old-key")
    old.set("a", 1)
    old.set("b", 2)
    rotated = _cache(clock, stores=stores, encryption_key="new-key", max_entries=None)
    rotated.set("c", 3)
    stores.persistent.set_item("elsewhere_q", "{not json")

    assert rotated.clear_expired() == 2
    assert stores.persistent.keys() == [rotated.cache_key("c"), "elsewhere_q"]
    assert rotated.get("c") == 3


def test_memory_storage_hands_out_copies(clock: FakeClock) -> None:
    cache = _cache(clock, storage="memory", persist_on_reload=False)
    payload = {"organicResults": [{"title": "Go by Example"}]}
    cache.set("q", payload)

    payload["organicResults"].append({"title": "added after set"})
    first = cache.get("q")
    first["organicResults"][0]["title"] = "mutated by caller"

    assert cache.get("q") == {"organicResults": [{"title": "Go by Example"}]}
