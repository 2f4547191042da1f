"""
Cache composition.

Builds the configured cache store and the process-wide CacheManager.
Request handlers receive the manager from here instead of reaching for
a store singleton.
"""

import logging
from typing import Optional

from ...core.config import Settings, get_settings
from ...domain.cache.repository_interfaces import CacheStore
from ...infrastructure.memory import InMemoryCacheStore
from ...infrastructure.redis import RedisCacheStore, RedisConnectionFactory
from ...monitoring.cache_metrics import CacheMetricsRecorder
from .cache_manager import CacheManager

logger = logging.getLogger(__name__)

_cache_manager: Optional[CacheManager] = None


def create_cache_store(settings: Optional[Settings] = None) -> CacheStore:
    """Create the cache store selected by CACHE_BACKEND."""
    settings = settings or get_settings()

    if settings.CACHE_BACKEND == "memory":
        if settings.is_production:
            logger.warning("In-memory cache store is not shared between processes")
        return InMemoryCacheStore()

    return RedisCacheStore(connection_factory=RedisConnectionFactory(settings))


def create_cache_manager(settings: Optional[Settings] = None) -> CacheManager:
    """Create a CacheManager wired from settings."""
    settings = settings or get_settings()
    return CacheManager(
        store=create_cache_store(settings),
        scan_batch_size=settings.CACHE_SCAN_BATCH_SIZE,
        metrics=CacheMetricsRecorder(enabled=settings.CACHE_METRICS_ENABLED),
    )


def get_cache_manager() -> CacheManager:
    """Get the process-wide cache manager, creating it on first use."""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = create_cache_manager()
        logger.info(
            "Cache manager initialized",
            extra={"backend": _cache_manager.store.backend_name},
        )
    return _cache_manager


async def close_cache_manager() -> None:
    """Close and forget the process-wide cache manager."""
    global _cache_manager
    if _cache_manager is not None:
        manager, _cache_manager = _cache_manager, None
        await manager.close()
