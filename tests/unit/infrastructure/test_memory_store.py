"""
Unit tests for the in-memory cache store.
"""

import pytest

from mealcache.domain.cache.repository_interfaces import SCAN_START_CURSOR
from mealcache.infrastructure.memory import InMemoryCacheStore


async def scan_all(store, pattern, count):
    """Drive a full scan and return (matched keys, number of calls)."""
    keys, calls = [], 0
    cursor = SCAN_START_CURSOR
    while True:
        cursor, batch = await store.scan(cursor, pattern, count)
        calls += 1
        keys.extend(batch)
        if cursor == SCAN_START_CURSOR:
            return keys, calls


class TestGetSet:
    """Test basic reads and writes."""

    @pytest.mark.asyncio
    async def test_absent_key(self, memory_store):
        assert await memory_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_overwrites(self, memory_store):
        await memory_store.set("k", b"1")
        await memory_store.set("k", b"2")
        assert await memory_store.get("k") == b"2"

    @pytest.mark.asyncio
    async def test_str_values_are_encoded(self, memory_store):
        await memory_store.set("k", "héllo")
        assert await memory_store.get("k") == "héllo".encode("utf-8")

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, memory_store, clock):
        """Test entries disappear once their TTL elapses."""
        await memory_store.set("k", b"1", ttl_seconds=10)
        assert memory_store.ttl("k") == 10

        clock.advance(9)
        assert await memory_store.get("k") == b"1"

        clock.advance(1)
        assert await memory_store.get("k") is None
        assert memory_store.size() == 0

    @pytest.mark.asyncio
    async def test_overwrite_without_ttl_persists(self, memory_store, clock):
        await memory_store.set("k", b"1", ttl_seconds=1)
        await memory_store.set("k", b"2")
        clock.advance(100)
        assert await memory_store.get("k") == b"2"
        assert memory_store.ttl("k") is None


class TestScan:
    """Test cursor-based pattern scans."""

    @pytest.mark.asyncio
    async def test_scan_returns_all_matches(self, memory_store):
        for i in range(25):
            await memory_store.set(f"user_1_meals_{i}", b"1")
            await memory_store.set(f"user_2_meals_{i}", b"1")

        keys, calls = await scan_all(memory_store, "user_1_*", 4)

        assert sorted(keys) == sorted(f"user_1_meals_{i}" for i in range(25))
        assert calls > 1

    @pytest.mark.asyncio
    async def test_batch_may_be_empty_mid_scan(self, memory_store):
        """Test COUNT bounds keys examined, so a batch can be empty."""
        for key in ["a", "b", "c", "d"]:
            await memory_store.set(key, b"1")

        cursor, batch = await memory_store.scan(SCAN_START_CURSOR, "d", 2)

        assert batch == []
        assert cursor != SCAN_START_CURSOR

    @pytest.mark.asyncio
    async def test_keys_survive_concurrent_deletes(self, memory_store):
        """Test keys present for the whole scan are returned despite deletes."""
        for key in ["a_1", "a_2", "a_3", "a_4", "a_5", "a_6"]:
            await memory_store.set(key, b"1")

        cursor, first = await memory_store.scan(SCAN_START_CURSOR, "a_*", 2)
        await memory_store.delete_many(first)

        rest = []
        while cursor != SCAN_START_CURSOR:
            cursor, batch = await memory_store.scan(cursor, "a_*", 2)
            rest.extend(batch)

        assert sorted(first + rest) == ["a_1", "a_2", "a_3", "a_4", "a_5", "a_6"]

    @pytest.mark.asyncio
    async def test_scan_skips_expired_keys(self, memory_store, clock):
        await memory_store.set("a_1", b"1", ttl_seconds=1)
        await memory_store.set("a_2", b"1")
        clock.advance(2)

        keys, _ = await scan_all(memory_store, "a_*", 10)
        assert keys == ["a_2"]

    @pytest.mark.asyncio
    async def test_scan_empty_store(self, memory_store):
        assert await memory_store.scan(SCAN_START_CURSOR, "*", 10) == (
            SCAN_START_CURSOR,
            [],
        )

    @pytest.mark.asyncio
    async def test_invalid_cursor(self, memory_store):
        with pytest.raises(ValueError, match="Invalid scan cursor"):
            await memory_store.scan(999, "*", 10)

    @pytest.mark.asyncio
    async def test_invalid_count(self, memory_store):
        with pytest.raises(ValueError, match="Scan count must be positive"):
            await memory_store.scan(SCAN_START_CURSOR, "*", 0)


class TestDeleteMany:
    """Test bulk deletion."""

    @pytest.mark.asyncio
    async def test_counts_only_existing_keys(self, memory_store):
        await memory_store.set("a", b"1")
        await memory_store.set("b", b"1")

        assert await memory_store.delete_many(["a", "b", "missing"]) == 2
        assert memory_store.size() == 0

    @pytest.mark.asyncio
    async def test_empty_input(self, memory_store):
        assert await memory_store.delete_many([]) == 0

    @pytest.mark.asyncio
    async def test_close_clears_entries(self, memory_store):
        await memory_store.set("a", b"1")
        assert await memory_store.ping() is True

        await memory_store.close()
        assert memory_store.size() == 0


class TestAbandonedScans:
    """Test cursors of unfinished scans do not accumulate."""

    @pytest.mark.asyncio
    async def test_open_cursors_are_bounded(self, clock):
        store = InMemoryCacheStore(clock=clock, max_open_cursors=3)
        for key in ["a", "b", "c", "d"]:
            await store.set(key, b"1")

        cursors = []
        for _ in range(10):
            cursor, _ = await store.scan(SCAN_START_CURSOR, "*", 1)
            cursors.append(cursor)

        assert len(store._cursors) == 3

        # Newest cursors still resume; evicted ones are rejected
        _, batch = await store.scan(cursors[-1], "*", 1)
        assert batch == ["b"]
        with pytest.raises(ValueError, match="Invalid scan cursor"):
            await store.scan(cursors[0], "*", 1)

    def test_rejects_non_positive_cap(self):
        with pytest.raises(ValueError, match="max_open_cursors must be positive"):
            InMemoryCacheStore(max_open_cursors=0)
