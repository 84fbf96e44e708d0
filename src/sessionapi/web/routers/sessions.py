from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from sessionapi.app import App
from sessionapi.core.modules.session.models import SessionEnvelope, SessionId
from sessionapi.errors import CsrfTokenError, NotFoundError
from sessionapi.web.cookies import clear_session_cookie, set_session_cookie
from sessionapi.web.deps import AppDep, CsrfTokenDep, SessionCookieDep
from sessionapi.web.error_handlers import create_json_error_response
from sessionapi.web.openapi import ErrorResponse

router = APIRouter(tags=["sessions"])


class SessionInput(BaseModel):
    """Credentials for a new session."""

    login: str = Field(..., description="Username for authentication")
    password: str = Field(..., description="Password for authentication")


class SessionCreateRequest(BaseModel):
    """Authentication request."""

    session_input: SessionInput = Field(..., alias="SessionInput")


@router.post(
    "/user/sessions",
    summary="Create session",
    description=(
        "Authenticate with login and password. A fresh login answers 201; a login that replaces the "
        "caller's own live session (sent in the session cookie) answers 200."
    ),
    operation_id="createSession",
    status_code=201,
    responses={
        200: {"description": "Existing session replaced by a new one"},
        201: {"description": "Session created"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def create_session(
    request_data: SessionCreateRequest, app: AppDep, current: SessionCookieDep, response: Response
) -> SessionEnvelope:
    credentials = request_data.session_input
    session, replaced = await app.login(credentials.login, credentials.password, current)

    if replaced:
        response.status_code = 200
    set_session_cookie(response, app.config, session.identifier)
    return SessionEnvelope(session=session)


@router.get(
    "/user/sessions/current",
    summary="Check current session",
    description="Return the session named by the session cookie. Answers 404 with an empty body without one.",
    operation_id="getCurrentSession",
    response_model=SessionEnvelope,
    responses={
        200: {"description": "Current session"},
        404: {"description": "No valid session cookie presented"},
    },
)
async def get_current_session(app: AppDep, current: SessionCookieDep) -> SessionEnvelope | Response:
    try:
        session = await app.get_current_session(current)
    except NotFoundError:
        return Response(status_code=404)
    return SessionEnvelope(session=session)


@router.post(
    "/user/sessions/{identifier}/refresh",
    summary="Refresh session",
    description="Extend the lifetime of a session. Requires the session cookie and the X-CSRF-Token header.",
    operation_id="refreshSession",
    response_model=SessionEnvelope,
    responses={
        200: {"description": "Session refreshed"},
        401: {"model": ErrorResponse, "description": "Missing or invalid CSRF token"},
        404: {"model": ErrorResponse, "description": "Session not found, the cookie is cleared if it named that session"},
    },
)
async def refresh_session(
    identifier: str, app: AppDep, current: SessionCookieDep, csrf_token: CsrfTokenDep
) -> SessionEnvelope | Response:
    try:
        _ensure_addressable(SessionId(identifier), current, csrf_token)
        session = await app.refresh_session(SessionId(identifier), csrf_token)
    except NotFoundError as exc:
        if current != identifier:
            # Not the cookie's own session, its cookie stays valid
            raise
        return _session_gone(app, exc)
    return SessionEnvelope(session=session)


@router.delete(
    "/user/sessions/{identifier}",
    summary="Delete session",
    description="Log out. Requires the session cookie and the X-CSRF-Token header. The session cookie is cleared on 204 and 404.",
    operation_id="deleteSession",
    status_code=204,
    responses={
        204: {"description": "Session deleted"},
        401: {"model": ErrorResponse, "description": "Missing or invalid CSRF token"},
        404: {"model": ErrorResponse, "description": "Session not found, the session cookie is cleared"},
    },
)
async def delete_session(identifier: str, app: AppDep, current: SessionCookieDep, csrf_token: CsrfTokenDep) -> Response:
    try:
        _ensure_addressable(SessionId(identifier), current, csrf_token)
        await app.delete_session(SessionId(identifier), csrf_token)
    except NotFoundError as exc:
        return _session_gone(app, exc)

    response = Response(status_code=204)
    clear_session_cookie(response, app.config)
    return response


def _ensure_addressable(identifier: SessionId, current: SessionId | None, csrf_token: str | None) -> None:
    """A mutating call must carry a CSRF token and may only address the session in its own cookie."""
    if not csrf_token:
        raise CsrfTokenError
    if current != identifier:
        raise NotFoundError


def _session_gone(app: App, exc: NotFoundError) -> Response:
    response = create_json_error_response(status_code=404, message=str(exc), error_type="not_found")
    clear_session_cookie(response, app.config)
    return response
