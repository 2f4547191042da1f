"""
Redis Cache Store

CacheStore implementation over redis.asyncio. Translates redis-py errors
into the cache store exception hierarchy and performs no retries.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from redis.asyncio import Redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
    RedisError,
)

from ...domain.cache.repository_interfaces import CacheStore
from .connection_factory import RedisConnectionFactory
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisOperationTimeoutException,
)

logger = logging.getLogger(__name__)


def _decode_key(key: Union[bytes, str]) -> str:
    return key.decode("utf-8") if isinstance(key, bytes) else key


class RedisCacheStore(CacheStore):
    """
    Redis-backed cache store.

    Uses SET EX for TTLs, cursor-based SCAN for pattern matching and
    UNLINK for non-blocking bulk deletion.
    """

    backend_name = "redis"

    def __init__(
        self,
        client: Optional[Redis] = None,
        connection_factory: Optional[RedisConnectionFactory] = None,
    ):
        if client is None and connection_factory is None:
            connection_factory = RedisConnectionFactory()
        self._connection_factory = connection_factory
        self._client = client

    @property
    def client(self) -> Redis:
        if self._client is None:
            self._client = self._connection_factory.get_client()
        return self._client

    @contextmanager
    def _translate_errors(
        self, operation: str, key: Optional[str] = None
    ) -> Iterator[None]:
        """Re-raise redis-py errors as cache store exceptions."""
        try:
            yield
        except RedisTimeoutError as e:
            logger.warning(
                f"Redis {operation} timed out",
                extra={"operation": operation, "key": key},
            )
            raise RedisOperationTimeoutException(
                operation=operation, key=key, original_error=e
            ) from e
        except (RedisConnectionError, ConnectionRefusedError) as e:
            logger.warning(
                f"Redis {operation} failed: connection error",
                extra={"operation": operation, "key": key},
            )
            raise RedisConnectionException(
                message=f"Redis connection failed during {operation}",
                operation=operation,
                original_error=e,
            ) from e
        except RedisError as e:
            logger.error(
                f"Redis {operation} failed: {e}",
                extra={"operation": operation, "key": key},
            )
            raise RedisException(
                message=f"Redis {operation} failed: {e}",
                operation=operation,
                key=key,
                original_error=e,
            ) from e

    async def get(self, key: str) -> Optional[bytes]:
        with self._translate_errors("get", key):
            return await self.client.get(key)

    async def set(
        self, key: str, value: bytes, ttl_seconds: Optional[int] = None
    ) -> None:
        with self._translate_errors("set", key):
            if ttl_seconds:
                await self.client.set(key, value, ex=ttl_seconds)
            else:
                await self.client.set(key, value)

    async def scan(
        self, cursor: int, pattern: str, count: int
    ) -> Tuple[int, List[str]]:
        with self._translate_errors("scan", pattern):
            next_cursor, keys = await self.client.scan(
                cursor=cursor, match=pattern, count=count
            )
        return int(next_cursor), [_decode_key(key) for key in keys]

    async def delete_many(self, keys: Sequence[str]) -> int:
        if not keys:
            return 0
        with self._translate_errors("unlink"):
            return await self.client.unlink(*keys)

    async def ping(self) -> bool:
        with self._translate_errors("ping"):
            return bool(await self.client.ping())

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._connection_factory is not None:
            await self._connection_factory.close()
