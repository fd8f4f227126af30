from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from pymongo import AsyncMongoClient
from redis.asyncio import Redis

from hairlens.config import Config

if TYPE_CHECKING:
    from hairlens.core.modules.session.cache import SessionCache
    from hairlens.core.modules.session.service import SessionService
    from hairlens.core.modules.session.store import SessionStore


class Service:
    """Base class for services managed by Core."""

    def __init__(self) -> None:
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry with explicitly injected storage backends."""

    session: SessionService

    def __init__(self, config: Config, session_store: SessionStore, session_cache: SessionCache) -> None:
        from hairlens.core.modules.session.service import SessionService  # noqa: PLC0415

        self.session = SessionService(
            session_store,
            session_cache,
            default_ttl_ms=config.session_default_ttl_ms,
            cache_timeout=config.cache_timeout_seconds,
        )
        # Order matters for startup
        self._services: list[Service] = [self.session]

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, storage clients, and all service instances."""

    config: Config
    services: Services
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    redis: Redis | None

    def __init__(self, config: Config, session_store: SessionStore, session_cache: SessionCache) -> None:
        """Initialize core around already constructed storage backends."""
        self.config = config
        self.mongo_client = None
        self.redis = None
        self.services = Services(config, session_store, session_cache)
        self.services.set_core(self)

    @classmethod
    def from_config(cls, config: Config) -> Core:
        """Connect MongoDB and Redis from config and wire them into a Core."""
        from hairlens.core.modules.session.cache import RedisSessionCache  # noqa: PLC0415
        from hairlens.core.modules.session.store import MongoSessionStore  # noqa: PLC0415

        mongo_client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(
            config.database_url, uuidRepresentation="standard", tz_aware=True
        )
        database = mongo_client.get_database(urlparse(config.database_url).path[1:])
        redis = Redis.from_url(config.redis_url, decode_responses=True)

        core = cls(config, MongoSessionStore(database), RedisSessionCache(redis))
        core.mongo_client = mongo_client
        core.redis = redis
        return core

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close storage connections on shutdown."""
        await self.services.stop_all()
        if self.redis is not None:
            await self.redis.aclose()
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
