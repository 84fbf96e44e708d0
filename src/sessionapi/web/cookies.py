"""Session cookie directives."""

from datetime import UTC, datetime

from fastapi import Response

from sessionapi.config import Config

DELETED_VALUE = "deleted"
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def set_session_cookie(response: Response, config: Config, identifier: str) -> None:
    response.set_cookie(
        key=config.session_cookie_name,
        value=identifier,
        max_age=config.session_ttl,
        path="/",
        httponly=True,
        samesite="lax",
        secure=config.cookie_secure,
    )


def clear_session_cookie(response: Response, config: Config) -> None:
    """Instruct the client to discard the session cookie: `{name}=deleted; expires=<epoch>; Max-Age=0`."""
    response.set_cookie(
        key=config.session_cookie_name,
        value=DELETED_VALUE,
        max_age=0,
        expires=EPOCH,
        path="/",
        httponly=True,
        samesite="lax",
        secure=config.cookie_secure,
    )
