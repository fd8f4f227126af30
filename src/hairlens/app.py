import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from hairlens.config import Config
from hairlens.core.core import Core
from hairlens.core.modules.session.models import CleanupResult, CreatedSession, SessionStatus, SessionValidation
from hairlens.errors import AccessDeniedError, InvalidSessionError, SessionExpiredError


class App:
    """Facade for all session operations used by the HTTP layer and the CLI."""

    def __init__(self, config: Config, core: Core | None = None) -> None:
        self._config = config
        self._core = core if core is not None else Core.from_config(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def create_session(self, owner_id: str | None = None, ttl_ms: Any = None) -> CreatedSession:
        """Issue a new session, anonymous when owner_id is None."""
        return await self._core.services.session.create_session(owner_id, ttl_ms)

    async def validate_session(self, token: str) -> SessionValidation:
        """Report whether a token is valid, expired, or unknown."""
        return await self._core.services.session.validate_session(token)

    async def require_session(self, token: str) -> SessionValidation:
        """Validate a token, raising SessionExpiredError or InvalidSessionError when it is not valid."""
        result = await self.validate_session(token)
        if result.status == SessionStatus.EXPIRED:
            raise SessionExpiredError
        if not result.valid:
            raise InvalidSessionError
        return result

    async def end_session(self, token: str) -> None:
        """Invalidate a session in both stores."""
        await self._core.services.session.invalidate_session(token)

    async def cleanup_expired_sessions(self, admin_key: str | None) -> CleanupResult:
        """Run the expiry sweep (admin key required)."""
        expected = self._config.admin_key
        if expected is None or admin_key is None or not secrets.compare_digest(admin_key.encode(), expected.encode()):
            raise AccessDeniedError("Admin key required")
        return await self._core.services.session.cleanup_expired()

    async def run_cleanup(self) -> CleanupResult:
        """Run the expiry sweep without an admin check, for trusted schedulers."""
        return await self._core.services.session.cleanup_expired()
