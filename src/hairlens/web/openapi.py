from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="HairLens Session API",
            version="1.0.0",
            summary="Session tokens for the HairLens AI hair analysis backend",
            routes=app.routes,
        )

        components = openapi_schema.setdefault("components", {})
        components["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token as bearer credential (preferred)",
            },
            "SessionTokenHeader": {
                "type": "apiKey",
                "in": "header",
                "name": "X-Session-Token",
                "description": "Session token in a custom header",
            },
            "SessionTokenCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": "session_token",
                "description": "Session token stored in cookie",
            },
        }

        # Only the current-session endpoint reads the token from credentials
        protected_endpoints = {
            ("GET", "/api/v1/sessions/current"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in protected_endpoints:
                    operation["security"] = [
                        {"BearerAuth": []},
                        {"SessionTokenHeader": []},
                        {"SessionTokenCookie": []},
                    ]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Session not found or expired", "type": "invalid_session"},
                {"message": "Your session has expired. Please create a new session.", "type": "session_expired"},
                {"message": "Could not reach session storage, try again later.", "type": "storage_unavailable"},
            ]
        }
    }
