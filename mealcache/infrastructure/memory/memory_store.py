"""
In-Memory Cache Store

Process-local CacheStore used for tests and local development.
Mirrors the Redis contract: lazy TTL expiry, glob-based cursor scans
and bulk deletion. The clock is injectable so expiry can be driven
deterministically.
"""

import bisect
import itertools
import logging
import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ...domain.cache.repository_interfaces import CacheStore, SCAN_START_CURSOR
from ...domain.cache.value_objects import compile_glob

logger = logging.getLogger(__name__)


class InMemoryCacheStore(CacheStore):
    """
    Dictionary-backed cache store.

    Scan cursors remember the last key visited, so keys that exist for the
    whole iteration are always returned even if others are deleted
    mid-scan. At most ``max_open_cursors`` unfinished scans are remembered;
    resuming an evicted cursor raises ValueError. COUNT bounds the keys
    examined per call, not the keys returned, so a batch may be empty while
    the scan is still running.
    """

    backend_name = "memory"

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_open_cursors: int = 1024,
    ):
        if max_open_cursors <= 0:
            raise ValueError("max_open_cursors must be positive")
        self._clock = clock
        self._max_open_cursors = max_open_cursors
        self._entries: Dict[str, Tuple[bytes, Optional[float]]] = {}
        self._cursors: Dict[int, str] = {}
        self._cursor_ids = itertools.count(1)

    def _is_live(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False

        expires_at = entry[1]
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return False
        return True

    def _live_keys(self) -> List[str]:
        return sorted(key for key in list(self._entries) if self._is_live(key))

    async def get(self, key: str) -> Optional[bytes]:
        if not self._is_live(key):
            return None
        return self._entries[key][0]

    async def set(
        self, key: str, value: bytes, ttl_seconds: Optional[int] = None
    ) -> None:
        if isinstance(value, str):
            value = value.encode("utf-8")
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        self._entries[key] = (bytes(value), expires_at)

    async def scan(
        self, cursor: int, pattern: str, count: int
    ) -> Tuple[int, List[str]]:
        if count <= 0:
            raise ValueError("Scan count must be positive")

        if cursor == SCAN_START_CURSOR:
            start_after = None
        else:
            try:
                start_after = self._cursors.pop(cursor)
            except KeyError:
                raise ValueError(f"Invalid scan cursor: {cursor}") from None

        keys = self._live_keys()
        start = 0 if start_after is None else bisect.bisect_right(keys, start_after)
        window = keys[start : start + count]

        matcher = compile_glob(pattern)
        matched = [key for key in window if matcher.fullmatch(key)]

        if start + count >= len(keys):
            return SCAN_START_CURSOR, matched

        # Abandoned scans never return their cursor; drop the oldest
        while len(self._cursors) >= self._max_open_cursors:
            del self._cursors[next(iter(self._cursors))]

        next_cursor = next(self._cursor_ids)
        self._cursors[next_cursor] = window[-1]
        return next_cursor, matched

    async def delete_many(self, keys: Sequence[str]) -> int:
        deleted = 0
        for key in keys:
            if self._is_live(key):
                del self._entries[key]
                deleted += 1
        return deleted

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()
        self._cursors.clear()

    def ttl(self, key: str) -> Optional[float]:
        """Remaining lifetime in seconds; None if absent or persistent."""
        if not self._is_live(key):
            return None
        expires_at = self._entries[key][1]
        return None if expires_at is None else expires_at - self._clock()

    def size(self) -> int:
        """Number of live entries."""
        return len(self._live_keys())
