"""
Cache Manager Service

Read-through cache coordinator sitting between request handlers and the
relational data store. Provides "get or compute" with schema validation
and glob-pattern invalidation over an injected cache store.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

from opentelemetry import trace

from ...domain.cache.domain_services import (
    CacheInvalidationService,
    DEFAULT_SCAN_BATCH_SIZE,
)
from ...domain.cache.exceptions import (
    CacheShapeMismatchError,
    ComputedValueInvalidError,
)
from ...domain.cache.repository_interfaces import CacheStore
from ...domain.cache.schema import CacheSchema
from ...domain.cache.value_objects import CacheKey, InvalidationPattern, TTL
from ...monitoring.cache_metrics import CacheMetricsRecorder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

KeyLike = Union[str, CacheKey]
PatternLike = Union[str, InvalidationPattern]
TTLLike = Union[None, int, datetime, TTL]
Compute = Callable[[], Union[T, Awaitable[T]]]

_MISS = object()


class CacheManager:
    """
    Read-through cache coordinator.

    Holds no shared mutable state and takes no locks. There is no
    single-flight de-duplication: concurrent callers that miss the same key
    each run their computation and each write it, and the last write wins.
    Computations are expected to be idempotent, so the race only costs
    duplicate work.
    """

    def __init__(
        self,
        store: CacheStore,
        scan_batch_size: int = DEFAULT_SCAN_BATCH_SIZE,
        metrics: Optional[CacheMetricsRecorder] = None,
    ):
        self.store = store
        self.invalidation_service = CacheInvalidationService(store, scan_batch_size)
        self.metrics = metrics or CacheMetricsRecorder()

    async def get_or_compute(
        self,
        key: KeyLike,
        schema: Union[CacheSchema[T], Any],
        compute: Compute,
        ttl: TTLLike = None,
    ) -> T:
        """
        Return the cached value for ``key`` or compute, validate and store it.

        Args:
            key: Cache key encoding every parameter the value depends on
            schema: CacheSchema (or bare type) the value must satisfy
            compute: Zero-argument callable, sync or async, producing the value
            ttl: Seconds, TTL, absolute deadline, or None/0 for no expiry

        Returns:
            The cached or freshly computed value

        Raises:
            CacheStoreException: If the store fails on read or write
            ComputedValueInvalidError: If the computed value violates the schema
            Exception: Whatever ``compute`` raises, unchanged

        A stored entry that no longer matches the schema is treated as a
        miss and overwritten. If the caller is cancelled while ``compute`` is
        running, nothing is written.
        """
        cache_key = CacheKey.coerce(key)
        cache_schema = CacheSchema.coerce(schema)
        # Deadlines are resolved at write time, after the computation
        cache_ttl = ttl if isinstance(ttl, datetime) else TTL.coerce(ttl)

        with tracer.start_as_current_span("cache_manager.get_or_compute") as span:
            span.set_attribute("cache.key", cache_key.value)
            span.set_attribute("cache.schema", cache_schema.name)

            try:
                cached = await self._read(cache_key, cache_schema)
                if cached is not _MISS:
                    span.set_attribute("cache.hit", True)
                    self.metrics.hit()
                    return cached

                span.set_attribute("cache.hit", False)
                self.metrics.miss()

                value = await self._compute(cache_key, cache_schema, compute)

                resolved_ttl = TTL.coerce(cache_ttl)
                ttl_seconds = resolved_ttl.seconds if resolved_ttl else None
                await self.store.set(
                    cache_key.value, cache_schema.dump(value), ttl_seconds
                )

                logger.debug(
                    f"Cached computed value for {cache_key.value}",
                    extra={"key": cache_key.value, "ttl": ttl_seconds},
                )
                return value

            except asyncio.CancelledError:
                span.set_status(trace.Status(trace.StatusCode.ERROR, "cancelled"))
                raise
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                raise

    async def _read(self, key: CacheKey, schema: CacheSchema[T]) -> Any:
        """Return the parsed cached value or _MISS (absent or stale shape)."""
        raw = await self.store.get(key.value)
        if raw is None:
            return _MISS

        try:
            return schema.parse_cached(key.value, raw)
        except CacheShapeMismatchError as e:
            self.metrics.shape_mismatch(key.value)
            logger.warning(
                f"Discarding cached value for {key.value}: {e.details['reason']}",
                extra={"key": key.value, "schema": schema.name},
            )
            return _MISS

    async def _compute(
        self, key: CacheKey, schema: CacheSchema[T], compute: Compute
    ) -> T:
        try:
            with self.metrics.time_compute():
                result = compute()
                if inspect.isawaitable(result):
                    result = await result
        except Exception:
            self.metrics.compute_failed("error")
            logger.warning(
                f"Computation for {key.value} failed; nothing cached",
                extra={"key": key.value},
            )
            raise

        try:
            return schema.validate_computed(key.value, result)
        except ComputedValueInvalidError as e:
            self.metrics.compute_failed("invalid")
            logger.error(
                f"Computed value for {key.value} violates {schema.name}",
                extra={"key": key.value, "errors": e.errors},
            )
            raise

    async def get(
        self, key: KeyLike, schema: Union[CacheSchema[T], Any]
    ) -> Optional[T]:
        """
        Read a cached value without computing on miss.

        Returns:
            The parsed value, or None if the key is absent

        Raises:
            CacheShapeMismatchError: If the stored value does not match the schema
            CacheStoreException: If the store fails
        """
        cache_key = CacheKey.coerce(key)
        cache_schema = CacheSchema.coerce(schema)

        with tracer.start_as_current_span("cache_manager.get") as span:
            span.set_attribute("cache.key", cache_key.value)

            raw = await self.store.get(cache_key.value)
            span.set_attribute("cache.hit", raw is not None)
            if raw is None:
                return None
            return cache_schema.parse_cached(cache_key.value, raw)

    async def invalidate(self, pattern: PatternLike) -> int:
        """
        Evict every cached entry whose key matches a glob pattern.

        Args:
            pattern: Glob pattern, e.g. ``user_42_saved_recipes*``

        Returns:
            Number of entries removed

        Raises:
            CacheStoreException: If scanning or deleting fails
        """
        count = await self.invalidation_service.invalidate(pattern)
        self.metrics.invalidated(count)
        return count

    async def invalidate_many(self, *patterns: PatternLike) -> int:
        """
        Invalidate several patterns concurrently.

        Returns:
            Total number of entries removed
        """
        if not patterns:
            return 0

        counts = await asyncio.gather(*(self.invalidate(p) for p in patterns))
        return sum(counts)

    async def health_check(self) -> Dict[str, Any]:
        """Check store connectivity. Never raises."""
        with tracer.start_as_current_span("cache_manager.health_check") as span:
            status: Dict[str, Any] = {
                "backend": self.store.backend_name,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }

            try:
                healthy = await self.store.ping()
                status["status"] = "healthy" if healthy else "unhealthy"

            except Exception as e:
                logger.error(f"Cache store health check failed: {e}")
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                status.update({"status": "unhealthy", "error": str(e)})

            return status

    async def close(self) -> None:
        """Close the underlying store."""
        await self.store.close()
        logger.info("Cache manager closed")
