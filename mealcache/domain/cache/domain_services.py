"""
Cache Domain Services

Business logic for pattern-based cache invalidation.
"""

import logging
from typing import List, Union

from opentelemetry import trace

from .repository_interfaces import CacheStore, SCAN_START_CURSOR
from .value_objects import InvalidationPattern

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DEFAULT_SCAN_BATCH_SIZE = 100


class CacheInvalidationService:
    """
    Domain service for glob-pattern cache invalidation.

    Scans the whole keyspace for matches, then issues a single bulk delete.
    Not transactional: a key written after the scan finishes but before the
    delete runs survives until its TTL or the next invalidation.
    """

    def __init__(self, store: CacheStore, batch_size: int = DEFAULT_SCAN_BATCH_SIZE):
        if batch_size <= 0:
            raise ValueError("Scan batch size must be positive")
        self.store = store
        self.batch_size = batch_size

    async def collect_keys(self, pattern: Union[str, InvalidationPattern]) -> List[str]:
        """
        Collect every key matching the pattern across all scan batches.

        A key reported by more than one batch is returned once.
        """
        pattern = InvalidationPattern.coerce(pattern)
        keys: List[str] = []
        seen = set()
        batches = 0

        cursor = SCAN_START_CURSOR
        while True:
            cursor, batch = await self.store.scan(
                cursor, pattern.value, self.batch_size
            )
            batches += 1
            for key in batch:
                if key not in seen:
                    seen.add(key)
                    keys.append(key)
            if cursor == SCAN_START_CURSOR:
                break

        logger.debug(
            f"Scanned {len(keys)} keys for pattern {pattern.value}",
            extra={"pattern": pattern.value, "batches": batches, "count": len(keys)},
        )
        return keys

    async def invalidate(self, pattern: Union[str, InvalidationPattern]) -> int:
        """
        Delete all keys matching a glob pattern.

        Args:
            pattern: Glob pattern such as ``user_42_meals*``

        Returns:
            Number of keys deleted

        Raises:
            CacheStoreException: If scanning or deleting fails
        """
        pattern = InvalidationPattern.coerce(pattern)

        with tracer.start_as_current_span("cache.invalidate_pattern") as span:
            span.set_attribute("cache.pattern", pattern.value)

            try:
                keys = await self.collect_keys(pattern)
                span.set_attribute("cache.matched_keys", len(keys))

                if not keys:
                    return 0

                count = await self.store.delete_many(keys)
                span.set_attribute("cache.deleted_keys", count)

                logger.info(
                    f"Invalidated {count} cache entries for pattern {pattern.value}",
                    extra={"pattern": pattern.value, "count": count},
                )
                return count

            except Exception as e:
                logger.error(f"Failed to invalidate pattern {pattern.value}: {e}")
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                raise
