"""
Cache Metrics

Prometheus instruments for the read-through cache.
Instruments are module-level so every CacheManager shares one registration.
"""

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram
import structlog

logger = structlog.get_logger(__name__)

CACHE_LOOKUPS = Counter(
    "mealcache_lookups_total",
    "Cache lookups by outcome (hit, miss, shape_mismatch)",
    ["outcome"],
)
CACHE_COMPUTE_FAILURES = Counter(
    "mealcache_compute_failures_total",
    "Fallback computations that raised or returned invalid values",
    ["reason"],
)
CACHE_INVALIDATED_KEYS = Counter(
    "mealcache_invalidated_keys_total",
    "Keys removed by pattern invalidation",
)
CACHE_COMPUTE_DURATION = Histogram(
    "mealcache_compute_duration_seconds",
    "Time spent in fallback computations on cache misses",
)


class CacheMetricsRecorder:
    """Thin facade over the Prometheus instruments; no-op when disabled."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def hit(self) -> None:
        if self.enabled:
            CACHE_LOOKUPS.labels(outcome="hit").inc()

    def miss(self) -> None:
        if self.enabled:
            CACHE_LOOKUPS.labels(outcome="miss").inc()

    def shape_mismatch(self, key: str) -> None:
        if self.enabled:
            CACHE_LOOKUPS.labels(outcome="shape_mismatch").inc()
            logger.debug("cache_shape_mismatch_recorded", key=key)

    def compute_failed(self, reason: str) -> None:
        if self.enabled:
            CACHE_COMPUTE_FAILURES.labels(reason=reason).inc()

    def invalidated(self, count: int) -> None:
        if self.enabled and count > 0:
            CACHE_INVALIDATED_KEYS.inc(count)

    @contextmanager
    def time_compute(self) -> Iterator[None]:
        start_time = time.perf_counter()
        try:
            yield
        finally:
            if self.enabled:
                CACHE_COMPUTE_DURATION.observe(time.perf_counter() - start_time)
