"""
Redis Infrastructure Module

Redis-backed cache store with pooled connections and
translation of redis-py errors into cache store exceptions.
"""

from .redis_service import RedisCacheStore
from .connection_factory import RedisConnectionFactory
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisOperationTimeoutException,
    RedisConfigurationException,
)

__all__ = [
    "RedisCacheStore",
    "RedisConnectionFactory",
    "RedisException",
    "RedisConnectionException",
    "RedisOperationTimeoutException",
    "RedisConfigurationException",
]
