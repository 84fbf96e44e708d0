from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from sessionapi.config import Config
from sessionapi.web.deps import CSRF_HEADER


def set_custom_openapi(app: FastAPI, config: Config) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Session API",
            version="0.1.0",
            summary="Session (login) lifecycle with CSRF-token binding",
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": config.session_cookie_name,
                "description": "Session identifier issued on login",
            },
            "CsrfToken": {
                "type": "apiKey",
                "in": "header",
                "name": CSRF_HEADER,
                "description": "CSRF token of the session, required on mutating calls",
            },
        }

        # Mutating session calls need both the cookie and the CSRF header
        openapi_schema["security"] = [{"SessionCookie": [], "CsrfToken": []}]

        public_endpoints = {
            ("POST", f"{config.api_prefix}/user/sessions"),
            ("GET", "/health"),
        }
        cookie_only_endpoints = {
            ("GET", f"{config.api_prefix}/user/sessions/current"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                key = (method.upper(), path)
                if key in public_endpoints:
                    operation["security"] = []
                elif key in cookie_only_endpoints:
                    operation["security"] = [{"SessionCookie": []}]

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
                {"message": "Invalid credentials", "type": "authentication_error"},
                {"message": "Missing or invalid CSRF token", "type": "csrf_token_error"},
                {"message": "Session not found", "type": "not_found"},
            ]
        }
    }
