"""
Redis Infrastructure Exceptions

Failures raised by the Redis cache store. All subclass CacheStoreException
so the cache coordinator lets them propagate untouched; the redis-py error
is kept as ``__cause__``.
"""

from typing import Any, Optional

from ...domain.cache.exceptions import CacheStoreException


class RedisException(CacheStoreException):
    """A Redis command or connection failed."""

    error_code = "REDIS_ERROR"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        **context: Any,
    ):
        context.update(operation=operation, key=key)
        super().__init__(
            message=message,
            error_code=self.error_code,
            details={name: v for name, v in context.items() if v is not None},
            original_error=original_error,
        )
        self.operation = operation
        self.key = key


class RedisConnectionException(RedisException):
    """Redis is unreachable, dropped the connection or rejected auth."""

    error_code = "REDIS_CONNECTION_ERROR"

    def __init__(
        self,
        message: str = "Redis connection failed",
        host: Optional[str] = None,
        port: Optional[int] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            operation=operation,
            original_error=original_error,
            host=host,
            port=port,
        )


class RedisOperationTimeoutException(RedisException):
    """A single command exceeded the socket timeout."""

    error_code = "REDIS_TIMEOUT_ERROR"

    def __init__(
        self,
        operation: str,
        timeout_seconds: Optional[float] = None,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        after = f" after {timeout_seconds}s" if timeout_seconds is not None else ""
        super().__init__(
            f"Redis {operation} timed out{after}",
            operation=operation,
            key=key,
            original_error=original_error,
            timeout_seconds=timeout_seconds,
        )


class RedisConfigurationException(RedisException):
    """REDIS_* settings cannot produce a connection pool."""

    error_code = "REDIS_CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message, original_error=original_error, config_key=config_key
        )
