from typing import Annotated

from fastapi import APIRouter, Header
from pydantic import BaseModel, Field

from hairlens.web.deps import AppDep
from hairlens.web.openapi import ErrorResponse

router = APIRouter(tags=["admin"])


class CleanupResponse(BaseModel):
    deleted_count: int = Field(..., description="Number of expired sessions removed from durable storage")


@router.post(
    "/admin/sessions/cleanup",
    summary="Delete expired sessions",
    description="Remove durable session records whose expiry has passed. Requires the X-Admin-Key header.",
    operation_id="cleanupSessions",
    responses={
        200: {"description": "Sweep completed"},
        403: {"model": ErrorResponse, "description": "Missing or wrong admin key"},
        503: {"model": ErrorResponse, "description": "Session storage unavailable"},
    },
)
async def cleanup_sessions(app: AppDep, x_admin_key: Annotated[str | None, Header()] = None) -> CleanupResponse:
    result = await app.cleanup_expired_sessions(x_admin_key)
    return CleanupResponse(deleted_count=result.deleted_count)
