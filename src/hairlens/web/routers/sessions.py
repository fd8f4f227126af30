from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Response
from pydantic import AliasChoices, BaseModel, Field

from hairlens.web.deps import AppDep, ConfigDep, CurrentSessionDep
from hairlens.web.openapi import ErrorResponse

router = APIRouter(tags=["sessions"])


class CreateSessionRequest(BaseModel):
    """Session creation request."""

    owner_id: str | None = Field(
        None,
        validation_alias=AliasChoices("owner_id", "userId"),
        description="External user identifier; omit for an anonymous session",
    )
    ttl: Any = Field(
        None,
        description="Lifetime in milliseconds; missing or invalid values fall back to 24 hours",
    )


class CreateSessionResponse(BaseModel):
    """Issued session."""

    token: str = Field(..., description="Bearer token for subsequent requests")
    expires_at: datetime = Field(..., description="Moment the token stops being valid")


class SessionInfo(BaseModel):
    """Valid session details."""

    session_id: UUID
    owner_id: str | None
    expires_at: datetime
    valid: bool = True


@router.post(
    "/sessions",
    summary="Create session",
    description="Issue a new session token, optionally bound to an external user id.",
    operation_id="createSession",
    status_code=201,
    responses={
        201: {"description": "Session created"},
        503: {"model": ErrorResponse, "description": "Session storage unavailable"},
    },
)
async def create_session(
    request_data: CreateSessionRequest, app: AppDep, config: ConfigDep, response: Response
) -> CreateSessionResponse:
    created = await app.create_session(request_data.owner_id, request_data.ttl)

    # Set cookie for browser-based clients
    response.set_cookie(
        key="session_token",
        value=created.token,
        httponly=True,
        samesite="lax",
        secure=config.cookie_secure,
        expires=created.expires_at,
    )

    return CreateSessionResponse(token=created.token, expires_at=created.expires_at)


@router.get(
    "/sessions/current",
    summary="Get current session",
    description="Validate the token sent as bearer credential, X-Session-Token header, or cookie.",
    operation_id="getCurrentSession",
    responses={
        200: {"description": "Session is valid"},
        401: {"model": ErrorResponse, "description": "Missing, invalid, or expired session"},
        503: {"model": ErrorResponse, "description": "Session storage unavailable"},
    },
)
async def get_current_session(session: CurrentSessionDep) -> SessionInfo:
    return SessionInfo.model_validate(session.model_dump(exclude={"status"}))


@router.get(
    "/sessions/{token}",
    summary="Validate session",
    description="Check whether a session token is valid. Expired and unknown tokens are reported with different error types.",
    operation_id="validateSession",
    responses={
        200: {"description": "Session is valid"},
        401: {"model": ErrorResponse, "description": "Session expired or not found"},
        503: {"model": ErrorResponse, "description": "Session storage unavailable"},
    },
)
async def validate_session(token: str, app: AppDep) -> SessionInfo:
    session = await app.require_session(token)
    return SessionInfo.model_validate(session.model_dump(exclude={"status"}))


@router.delete(
    "/sessions/{token}",
    summary="End session",
    description="Invalidate a session token. Unknown tokens are ignored.",
    operation_id="deleteSession",
    status_code=204,
    responses={
        204: {"description": "Session ended"},
        503: {"model": ErrorResponse, "description": "Session storage unavailable"},
    },
)
async def delete_session(token: str, app: AppDep, response: Response) -> None:
    await app.end_session(token)
    response.delete_cookie("session_token")
