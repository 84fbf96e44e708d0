from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog

from sessionapi.config import Config
from sessionapi.core.core import Core
from sessionapi.core.modules.session.models import Session, SessionId, SessionView
from sessionapi.core.modules.user.models import User
from sessionapi.errors import AuthenticationError, NotFoundError

logger = structlog.get_logger(__name__)


class App:
    """Facade for session lifecycle operations, delegating to Core services."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def login(self, username: str, password: str, current_identifier: SessionId | None = None) -> tuple[SessionView, bool]:
        """Authenticate user and create a new session.

        If `current_identifier` names a live session of the same user, that session
        is deleted and the second element of the result is True.
        """
        if not self._core.services.user.verify_password(username, password):
            logger.info("login_failed", username=username)
            raise AuthenticationError("Invalid credentials")
        user = self._resolve_user(username)

        replaced = False
        if current_identifier:
            replaced = await self._drop_session_of(user, current_identifier)

        session = await self._core.services.session.create_session(user.id)
        return self._to_view(session, user), replaced

    async def get_current_session(self, identifier: SessionId | None) -> SessionView:
        """Get the session named by the request cookie."""
        if not identifier:
            raise NotFoundError
        session = await self._core.services.session.find_session(identifier)
        user = self._core.services.user.get_user(session.owner_id)
        return self._to_view(session, user)

    async def refresh_session(self, identifier: SessionId, csrf_token: str | None) -> SessionView:
        """Refresh a session (requires its CSRF token)."""
        session = await self._core.services.session.refresh_session(identifier, csrf_token)
        user = self._core.services.user.get_user(session.owner_id)
        return self._to_view(session, user)

    async def delete_session(self, identifier: SessionId, csrf_token: str | None) -> None:
        """Delete a session (requires its CSRF token)."""
        await self._core.services.session.delete_session(identifier, csrf_token)

    # === Private helpers ===
    def _resolve_user(self, username: str) -> User:
        """Resolve username to User object. Raises NotFoundError if not found."""
        return self._core.services.user.get_user_by_username(username)

    async def _drop_session_of(self, user: User, identifier: SessionId) -> bool:
        """Delete the session named by `identifier` if it is live and owned by `user`."""
        try:
            existing = await self._core.services.session.find_session(identifier)
        except NotFoundError:
            return False
        if existing.owner_id != user.id:
            return False
        try:
            await self._core.services.session.delete_session(identifier, existing.csrf_token)
        except NotFoundError:
            # Lost a race with another delete, the old session is gone either way
            return False
        return True

    def _to_view(self, session: Session, owner: User) -> SessionView:
        config = self._core.config
        return SessionView.from_domain(session, owner, config.session_cookie_name, config.api_prefix)
