"""Fast session cache keyed by bearer token."""

from typing import Protocol

from redis.asyncio import Redis

from hairlens.core.modules.session.models import CacheEntry


class SessionCache(Protocol):
    """Disposable projection store. Entries vanish on their own once their TTL elapses."""

    async def put(self, token: str, entry: CacheEntry, ttl_seconds: int) -> None: ...

    async def get(self, token: str) -> CacheEntry | None: ...

    async def delete(self, token: str) -> None: ...


class RedisSessionCache:
    """SessionCache storing JSON projections in Redis with SET ... EX."""

    def __init__(self, redis: Redis, prefix: str = "session:") -> None:
        self._redis = redis
        self._prefix = prefix

    async def put(self, token: str, entry: CacheEntry, ttl_seconds: int) -> None:
        await self._redis.set(self._key(token), entry.model_dump_json(), ex=ttl_seconds)

    async def get(self, token: str) -> CacheEntry | None:
        value = await self._redis.get(self._key(token))
        if not value:
            return None
        return CacheEntry.model_validate_json(value)

    async def delete(self, token: str) -> None:
        await self._redis.delete(self._key(token))

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"
