from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from sessionapi.app import App
from sessionapi.core.modules.session.models import SessionId

CSRF_HEADER = "X-CSRF-Token"

# Security schemes
csrf_scheme = APIKeyHeader(name=CSRF_HEADER, auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_session_cookie(request: Request, app: Annotated[App, Depends(get_app)]) -> SessionId | None:
    """Get the session identifier from the deployment's session cookie, if present."""
    value = request.cookies.get(app.config.session_cookie_name)
    return SessionId(value) if value else None


async def get_csrf_token(token: Annotated[str | None, Depends(csrf_scheme)] = None) -> str | None:
    """Get the CSRF token from the X-CSRF-Token header, if present."""
    return token or None


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
SessionCookieDep = Annotated[SessionId | None, Depends(get_session_cookie)]
CsrfTokenDep = Annotated[str | None, Depends(get_csrf_token)]
