"""Redis-backed store for sharing automatic persisted queries across processes."""

from __future__ import annotations

import redis.asyncio as redis
from redis.exceptions import RedisError

from ...logging import get_logger
from ..base import PersistedQueryStore, StoreException

logger = get_logger(__name__)


class RedisQueryStore(PersistedQueryStore):
    """Read/write store keeping each query under ``<key_prefix><hash>``."""

    read_only = False

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "pqgate:",
        ttl: int | None = None,
    ):
        self.client = client
        self.key_prefix = key_prefix
        self.ttl = ttl

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "pqgate:", ttl: int | None = None) -> RedisQueryStore:
        """Create a store with its own connection pool."""
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return cls(client, key_prefix=key_prefix, ttl=ttl)

    def _key(self, query_hash: str) -> str:
        return f"{self.key_prefix}{query_hash}"

    async def lookup(self, query_hash: str) -> str | None:
        try:
            value = await self.client.get(self._key(query_hash))
        except RedisError as e:
            logger.error(f"Redis lookup failed for {query_hash}: {e}")
            raise StoreException(f"Redis lookup failed: {e}") from e

        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def save(self, query_hash: str, query: str) -> bool:
        try:
            result = await self.client.set(self._key(query_hash), query, ex=self.ttl)
        except RedisError as e:
            raise StoreException(f"Redis save failed: {e}") from e
        return bool(result)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("Redis client closed")
