import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError

from hairlens.core.core import Service
from hairlens.core.modules.session.cache import SessionCache
from hairlens.core.modules.session.models import (
    CacheEntry,
    CleanupResult,
    CreatedSession,
    Session,
    SessionToken,
    SessionValidation,
)
from hairlens.core.modules.session.store import SessionStore
from hairlens.core.modules.session.tokens import SecureTokenGenerator, TokenGenerator
from hairlens.errors import StorageUnavailableError
from hairlens.utils import now, token_prefix, truncate_to_millis

logger = structlog.get_logger(__name__)

DEFAULT_TTL_MS = 24 * 60 * 60 * 1000


class SessionService(Service):
    """Issues, validates and sweeps bearer sessions over a durable store and a fast cache.

    The durable store is authoritative. The cache is written best-effort and read
    first; any cache failure or timeout degrades to the durable path. Writes to the
    two stores are sequential and never transactional.
    """

    def __init__(
        self,
        store: SessionStore,
        cache: SessionCache,
        tokens: TokenGenerator | None = None,
        clock: Callable[[], datetime] = now,
        default_ttl_ms: int = DEFAULT_TTL_MS,
        cache_timeout: float = 0.5,
    ) -> None:
        super().__init__()
        self._store = store
        self._cache = cache
        self._tokens = tokens or SecureTokenGenerator()
        self._clock = clock
        self._default_ttl_ms = default_ttl_ms
        self._cache_timeout = cache_timeout

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._store.ensure_indexes()

    async def create_session(self, owner_id: str | None = None, ttl_ms: Any = None) -> CreatedSession:
        """Create a session; only the token and its expiry leave this method."""
        ttl = self._resolve_ttl(ttl_ms)
        created_at = truncate_to_millis(self._clock())
        try:
            expires_at = created_at + timedelta(milliseconds=ttl)
        except OverflowError:
            logger.debug("session_ttl_defaulted", requested=ttl, ttl_ms=self._default_ttl_ms)
            ttl = self._default_ttl_ms
            expires_at = created_at + timedelta(milliseconds=ttl)
        session = Session(
            owner_id=owner_id,
            token=self._tokens.next(),
            created_at=created_at,
            expires_at=expires_at,
            last_accessed_at=created_at,
        )

        try:
            await self._store.insert(session)
        except Exception as e:
            logger.exception("session_insert_failed", owner_id=owner_id)
            raise StorageUnavailableError("create") from e

        # Sub-second sessions are never cached; the durable path still serves them
        ttl_seconds = ttl // 1000
        if ttl_seconds > 0:
            await self._cache_put(session.token, session.to_cache_entry(), ttl_seconds)

        logger.debug("session_created", session_id=session.id, owner_id=owner_id, expires_at=session.expires_at)
        return CreatedSession(token=SessionToken(session.token), expires_at=session.expires_at)

    async def validate_session(self, token: str) -> SessionValidation:
        """Check a token, cache first, durable store on miss.

        An expired cache hit deletes both representations and reports EXPIRED.
        The durable lookup filters out expired rows, so an unswept expired
        session found only there reports NOT_FOUND and is left for the sweep.
        """
        moment = self._clock()

        entry = await self._cache_get(token)
        if entry is not None:
            if not entry.is_live(moment):
                await self._cache_delete(token)
                try:
                    await self._store.delete_by_token(token)
                except Exception as e:
                    raise StorageUnavailableError("validate") from e
                logger.info("session_expired", session_id=entry.session_id, token=token_prefix(token))
                return SessionValidation.expired()

            await self._touch(entry.session_id, moment)
            return SessionValidation.from_cache_entry(entry)

        try:
            session = await self._store.find_by_token(token, live_after=moment)
        except Exception as e:
            logger.exception("session_lookup_failed", token=token_prefix(token))
            raise StorageUnavailableError("validate") from e

        if session is None:
            return SessionValidation.not_found()

        await self._touch(session.id, moment)

        remaining = int((session.expires_at - moment).total_seconds())
        if remaining > 0:
            await self._cache_put(token, session.to_cache_entry(), remaining)
            logger.debug("session_cache_repopulated", session_id=session.id, ttl_seconds=remaining)

        return SessionValidation.from_cache_entry(session.to_cache_entry())

    async def invalidate_session(self, token: str) -> None:
        """Remove a session from both stores. Unknown tokens are ignored."""
        await self._cache_delete(token)
        try:
            deleted = await self._store.delete_by_token(token)
        except Exception as e:
            raise StorageUnavailableError("invalidate") from e
        if deleted:
            logger.info("session_invalidated", token=token_prefix(token))

    async def cleanup_expired(self) -> CleanupResult:
        """Delete durable sessions past their expiry. Cache entries expire on their own."""
        try:
            deleted = await self._store.delete_expired_before(self._clock())
        except Exception as e:
            logger.exception("session_cleanup_failed")
            raise StorageUnavailableError("cleanup") from e

        logger.info("sessions_cleaned_up", deleted_count=deleted)
        return CleanupResult(deleted_count=deleted)

    def _resolve_ttl(self, ttl_ms: Any) -> int:
        """Return ttl_ms when it is a positive whole number of milliseconds, the default otherwise."""
        if ttl_ms is None:
            return self._default_ttl_ms
        if isinstance(ttl_ms, int) and not isinstance(ttl_ms, bool) and ttl_ms > 0:
            return ttl_ms
        if isinstance(ttl_ms, float) and ttl_ms.is_integer() and ttl_ms > 0:
            return int(ttl_ms)
        logger.debug("session_ttl_defaulted", requested=repr(ttl_ms), ttl_ms=self._default_ttl_ms)
        return self._default_ttl_ms

    async def _touch(self, session_id: UUID, moment: datetime) -> None:
        try:
            await self._store.update_last_accessed(session_id, moment)
        except Exception as e:
            logger.exception("session_touch_failed", session_id=session_id)
            raise StorageUnavailableError("validate") from e

    async def _cache_get(self, token: str) -> CacheEntry | None:
        try:
            async with asyncio.timeout(self._cache_timeout):
                return await self._cache.get(token)
        except PydanticValidationError:
            logger.warning("session_cache_entry_malformed", token=token_prefix(token))
            await self._cache_delete(token)
        except Exception:
            logger.warning("session_cache_get_failed", token=token_prefix(token), exc_info=True)
        return None

    async def _cache_put(self, token: str, entry: CacheEntry, ttl_seconds: int) -> None:
        try:
            async with asyncio.timeout(self._cache_timeout):
                await self._cache.put(token, entry, ttl_seconds)
        except Exception:
            logger.warning("session_cache_put_failed", session_id=entry.session_id, exc_info=True)

    async def _cache_delete(self, token: str) -> None:
        try:
            async with asyncio.timeout(self._cache_timeout):
                await self._cache.delete(token)
        except Exception:
            logger.warning("session_cache_delete_failed", token=token_prefix(token), exc_info=True)
