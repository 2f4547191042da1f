"""
Read-through cache services.
"""

from .cache_manager import CacheManager
from .factory import (
    create_cache_store,
    create_cache_manager,
    get_cache_manager,
    close_cache_manager,
)

__all__ = [
    "CacheManager",
    "create_cache_store",
    "create_cache_manager",
    "get_cache_manager",
    "close_cache_manager",
]
