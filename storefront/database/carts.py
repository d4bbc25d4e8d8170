"""Cart persistence: whole-cart documents stored under one key per session"""

import logging
from typing import Optional, Protocol

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class CartStore(Protocol):
    """Durable key-value store holding serialized carts"""

    async def load(self, key: str) -> Optional[str]:
        ...

    async def save(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class MemoryCartStore:
    """In-memory cart storage for development, tests, or when Redis is not configured"""

    def __init__(self):
        self.data: dict[str, str] = {}

    async def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def save(self, key: str, value: str) -> None:
        self.data[key] = value
        logger.debug(f"Cart {key} saved in memory")

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class RedisCartStore:
    """Redis-backed cart storage; every save renews the key TTL"""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 30 * 24 * 60 * 60,
        client: Optional[redis.Redis] = None,
    ):
        self.client = client or redis.Redis.from_url(url, decode_responses=True)
        self.ttl = ttl_seconds

    @staticmethod
    def _key(key: str) -> str:
        return f"cart:{key}"

    async def load(self, key: str) -> Optional[str]:
        return await self.client.get(self._key(key))

    async def save(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value, ex=self.ttl)
        logger.debug(f"Cart {key} saved to Redis (ttl={self.ttl}s)")

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))

    async def close(self) -> None:
        await self.client.aclose()
