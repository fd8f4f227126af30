import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from hairlens.errors import (
    AccessDeniedError,
    AuthenticationError,
    SessionExpiredError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, SessionExpiredError):
        status_code = 401
        error_type = "session_expired"
    elif isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "invalid_session"
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "access_denied"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def storage_error_handler(_: Request, exc: Exception) -> Response:
    """Handle durable-store outages (503), distinct from an invalid session."""
    operation = exc.operation if isinstance(exc, StorageUnavailableError) else None
    logger.warning("Session storage unavailable during %s", operation)
    return create_json_error_response(
        status_code=503, message="Could not reach session storage, try again later.", error_type="storage_unavailable"
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
