"""Small key-value stores for client-local persisted state.

The pending account-setup slot and the dashboard flash slot are the only
persisted state in this layer. Both go through `KeyValueStore` so the
reconciliation flow can be exercised without ambient storage:

  - MemoryStore  → per-process dict (tests, single-instance dev servers)
  - RedisStore   → shared Redis keyspace with optional TTL

Values are opaque strings; callers own the encoding.
"""

import abc
import logging
from typing import Optional

import redis.asyncio as redis

from storefront.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


class KeyValueStore(abc.ABC):
    """Async string store with read / write / clear."""

    @abc.abstractmethod
    async def get(self, key: str) -> str | None: ...

    @abc.abstractmethod
    async def set(self, key: str, value: str) -> None: ...

    @abc.abstractmethod
    async def delete(self, key: str) -> None: ...


class MemoryStore(KeyValueStore):
    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStore(KeyValueStore):
    """Redis-backed store.

    Args:
        client: redis.asyncio client (decode_responses=True)
        prefix: Key namespace, e.g. "storefront:" → "storefront:<key>"
        ttl: Seconds before a written value expires (0 = never)
    """

    def __init__(self, client: redis.Redis, prefix: str = "storefront:", ttl: int = 0):
        self.client = client
        self.prefix = prefix
        self.ttl = ttl

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> str | None:
        return await self.client.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        if self.ttl > 0:
            await self.client.setex(self._key(key), self.ttl, value)
        else:
            await self.client.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))


_default_store: Optional[KeyValueStore] = None


async def get_store() -> KeyValueStore:
    """Return the process-wide store selected by `pending_setup_backend`."""
    global _default_store
    if _default_store is None:
        if settings.pending_setup_backend == "redis":
            _default_store = RedisStore(
                await get_redis(), ttl=settings.pending_setup_ttl_seconds
            )
        else:
            _default_store = MemoryStore()
        logger.info(f"Using {type(_default_store).__name__} for persisted client state")
    return _default_store


async def reset_store():
    """Drop the process-wide store and its Redis connection (shutdown / tests)."""
    global _default_store
    _default_store = None
    await close_redis()
