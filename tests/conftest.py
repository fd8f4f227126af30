"""Shared pytest fixtures and in-memory storage fakes."""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from hairlens.core.modules.session.models import CacheEntry, Session
from hairlens.core.modules.session.service import SessionService
from hairlens.utils import now


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += timedelta(milliseconds=ms)


class SequentialTokenGenerator:
    def __init__(self) -> None:
        self.issued = 0

    def next(self) -> str:
        self.issued += 1
        return f"token-{self.issued:04d}"


class StorageDown(ConnectionError):
    pass


class FakeSessionStore:
    """In-memory SessionStore. Methods listed in `failing` raise StorageDown."""

    def __init__(self) -> None:
        self.sessions: dict[UUID, Session] = {}
        self.failing: set[str] = set()
        self.touches: list[tuple[UUID, datetime]] = []

    def _check(self, method: str) -> None:
        if method in self.failing:
            raise StorageDown(f"{method} failed")

    async def ensure_indexes(self) -> None:
        self._check("ensure_indexes")

    async def insert(self, session: Session) -> None:
        self._check("insert")
        if any(s.token == session.token for s in self.sessions.values()):
            raise StorageDown("duplicate token")
        self.sessions[session.id] = session.model_copy()

    async def find_by_token(self, token: str, *, live_after: datetime | None = None) -> Session | None:
        self._check("find_by_token")
        for session in self.sessions.values():
            if session.token == token and (live_after is None or session.expires_at > live_after):
                return session.model_copy()
        return None

    async def update_last_accessed(self, session_id: UUID, at: datetime) -> None:
        self._check("update_last_accessed")
        self.touches.append((session_id, at))
        if session_id in self.sessions:
            self.sessions[session_id] = self.sessions[session_id].model_copy(update={"last_accessed_at": at})

    async def delete_by_token(self, token: str) -> bool:
        self._check("delete_by_token")
        for session_id, session in list(self.sessions.items()):
            if session.token == token:
                del self.sessions[session_id]
                return True
        return False

    async def delete_expired_before(self, moment: datetime) -> int:
        self._check("delete_expired_before")
        expired = [sid for sid, s in self.sessions.items() if s.expires_at < moment]
        for session_id in expired:
            del self.sessions[session_id]
        return len(expired)

    def by_token(self, token: str) -> Session | None:
        return next((s for s in self.sessions.values() if s.token == token), None)


class FakeSessionCache:
    """In-memory SessionCache honouring storage TTLs against a clock.

    Set `enforce_ttl = False` to model a cache whose eviction lags behind the
    entry's own expiry. Set `fail` to make every call raise, or `delay` to make
    every call slower than the service's cache timeout.
    """

    def __init__(self, clock: Callable[[], datetime] = now) -> None:
        self._clock = clock
        self.entries: dict[str, tuple[CacheEntry, datetime]] = {}
        self.ttls: dict[str, int] = {}
        self.enforce_ttl = True
        self.fail = False
        self.delay = 0.0

    async def _io(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise StorageDown("cache unavailable")

    async def put(self, token: str, entry: CacheEntry, ttl_seconds: int) -> None:
        await self._io()
        self.entries[token] = (entry, self._clock() + timedelta(seconds=ttl_seconds))
        self.ttls[token] = ttl_seconds

    async def get(self, token: str) -> CacheEntry | None:
        await self._io()
        return self.peek(token)

    async def delete(self, token: str) -> None:
        await self._io()
        self.entries.pop(token, None)

    def peek(self, token: str) -> CacheEntry | None:
        """Read an entry without going through failure injection."""
        item = self.entries.get(token)
        if item is None:
            return None
        entry, evict_at = item
        if self.enforce_ttl and self._clock() >= evict_at:
            del self.entries[token]
            return None
        return entry


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tokens():
    return SequentialTokenGenerator()


@pytest.fixture
def store():
    return FakeSessionStore()


@pytest.fixture
def cache(clock):
    return FakeSessionCache(clock)


@pytest.fixture
def service(store, cache, tokens, clock):
    """SessionService wired to in-memory fakes and a manual clock."""
    return SessionService(store, cache, tokens=tokens, clock=clock, cache_timeout=0.05)


class FakeRedis:
    """Subset of redis.asyncio.Redis used by RedisSessionCache."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.expiry: dict[str, int | None] = {}

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def wall_clock_cache():
    """FakeSessionCache on real time, for code paths that use the default clock."""
    return FakeSessionCache()
