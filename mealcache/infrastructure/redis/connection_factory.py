"""
Redis Connection Factory

Connection pool management for the Redis cache store.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import (
    AuthenticationError as RedisAuthError,
    RedisError,
)

from opentelemetry.instrumentation.redis import RedisInstrumentor

from ...core.config import Settings, get_settings
from .exceptions import RedisConnectionException, RedisConfigurationException

logger = logging.getLogger(__name__)


class RedisConnectionFactory:
    """
    Factory for a pooled async Redis client.

    The pool is created lazily on first use; clients share it.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._pool: Optional[ConnectionPool] = None

        parsed_url = urlparse(self.settings.REDIS_URL)
        self.host = parsed_url.hostname or "localhost"
        self.port = parsed_url.port or 6379

        # Initialize OpenTelemetry instrumentation
        try:
            instrumentor = RedisInstrumentor()
            if not instrumentor.is_instrumented_by_opentelemetry:
                instrumentor.instrument()
                logger.info("Redis OpenTelemetry instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to enable Redis OpenTelemetry instrumentation: {e}")

    def _create_pool(self) -> ConnectionPool:
        try:
            pool = ConnectionPool.from_url(
                self.settings.REDIS_URL,
                max_connections=self.settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=self.settings.REDIS_CONNECTION_TIMEOUT,
                socket_timeout=self.settings.REDIS_OPERATION_TIMEOUT,
                health_check_interval=self.settings.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=False,
            )
        except ValueError as e:
            raise RedisConfigurationException(
                message=f"Invalid Redis URL: {e}",
                config_key="REDIS_URL",
                original_error=e,
            ) from e

        logger.info(
            "Redis connection pool created",
            extra={
                "host": self.host,
                "port": self.port,
                "max_connections": self.settings.REDIS_MAX_CONNECTIONS,
            },
        )
        return pool

    def get_client(self) -> Redis:
        """Get a Redis client bound to the shared pool."""
        if self._pool is None:
            self._pool = self._create_pool()
        return Redis(connection_pool=self._pool)

    async def verify(self) -> None:
        """
        Ping Redis once to fail fast on bad configuration.

        Raises:
            RedisConnectionException: If Redis is unreachable or rejects auth
        """
        client = self.get_client()
        try:
            await client.ping()
            logger.debug("Redis connection test successful")
        except RedisAuthError as e:
            raise RedisConnectionException(
                message="Redis authentication failed",
                host=self.host,
                port=self.port,
                original_error=e,
            ) from e
        except (RedisError, OSError) as e:
            raise RedisConnectionException(
                message="Redis connection test failed",
                host=self.host,
                port=self.port,
                original_error=e,
            ) from e

    async def close(self) -> None:
        """Disconnect all pooled connections."""
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None
            logger.info("Redis connection pool closed")
