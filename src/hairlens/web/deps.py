from typing import Annotated, cast

from fastapi import Depends, Header, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer

from hairlens.app import App
from hairlens.config import Config
from hairlens.core.modules.session.models import SessionToken, SessionValidation
from hairlens.errors import InvalidSessionError

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name="session_token", auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_config(request: Request) -> Config:
    return cast(Config, request.app.state.config)


async def get_session_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
    x_session_token: Annotated[str | None, Header()] = None,
    token_cookie: Annotated[str | None, Depends(cookie_scheme)] = None,
) -> SessionToken:
    """Extract the session token from Authorization Bearer, X-Session-Token header, or cookie."""
    # Bearer token first (preferred)
    if credentials and credentials.scheme.lower() == "bearer":
        return SessionToken(credentials.credentials)
    if x_session_token:
        return SessionToken(x_session_token)
    if token_cookie:
        return SessionToken(token_cookie)
    raise InvalidSessionError("Session token required")


async def get_current_session(
    app: Annotated[App, Depends(get_app)],
    token: Annotated[SessionToken, Depends(get_session_token)],
) -> SessionValidation:
    """Require a valid session for the presented token."""
    return await app.require_session(token)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
ConfigDep = Annotated[Config, Depends(get_config)]
CurrentSessionDep = Annotated[SessionValidation, Depends(get_current_session)]
