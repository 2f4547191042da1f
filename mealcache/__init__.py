"""
mealcache - read-through caching layer for the recipes/meals/plans app.

Request handlers call ``get_or_compute`` to read through the cache and
``invalidate`` with a glob pattern after mutating the underlying data.
"""

from .constants import APP_VERSION
from .domain.cache.exceptions import (
    CacheException,
    CacheStoreException,
    CacheShapeMismatchError,
    ComputedValueInvalidError,
)
from .domain.cache.repository_interfaces import CacheStore
from .domain.cache.schema import CacheSchema
from .domain.cache.value_objects import CacheKey, InvalidationPattern, TTL
from .services.cache import CacheManager, get_cache_manager, close_cache_manager

__version__ = APP_VERSION

__all__ = [
    "CacheManager",
    "CacheStore",
    "CacheSchema",
    "CacheKey",
    "InvalidationPattern",
    "TTL",
    "CacheException",
    "CacheStoreException",
    "CacheShapeMismatchError",
    "ComputedValueInvalidError",
    "get_cache_manager",
    "close_cache_manager",
]
