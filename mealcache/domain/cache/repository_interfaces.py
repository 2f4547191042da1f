"""
Cache Store Interface

Abstract contract for the key-value store behind the read-through cache.
Implementations own connectivity, TTL expiry and per-operation
concurrency safety; the cache coordinator only consumes this contract.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

# Initial and terminal SCAN cursor
SCAN_START_CURSOR = 0


class CacheStore(ABC):
    """
    Abstract key-value store with native TTL and pattern scanning.

    All operations may suspend. Failures are raised as CacheStoreException
    subclasses and are never retried here.
    """

    backend_name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Return the stored blob, or None if absent or expired."""
        pass

    @abstractmethod
    async def set(
        self, key: str, value: bytes, ttl_seconds: Optional[int] = None
    ) -> None:
        """Store a blob, replacing any prior entry. No TTL means no expiry."""
        pass

    @abstractmethod
    async def scan(
        self, cursor: int, pattern: str, count: int
    ) -> Tuple[int, List[str]]:
        """
        Return one batch of keys matching a glob pattern.

        Iteration starts at SCAN_START_CURSOR and is complete when the
        returned cursor equals SCAN_START_CURSOR again.
        """
        pass

    @abstractmethod
    async def delete_many(self, keys: Sequence[str]) -> int:
        """Delete the given keys and return how many existed."""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Check store connectivity."""
        pass

    async def close(self) -> None:
        """Release store resources."""
        return None
