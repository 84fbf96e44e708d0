import secrets
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from sessionapi.core.core import Service
from sessionapi.core.modules.session.models import Session, SessionId
from sessionapi.core.modules.session.storage import create_session_storage
from sessionapi.core.modules.user.models import User
from sessionapi.errors import CsrfTokenError, NotFoundError
from sessionapi.utils import now

logger = structlog.get_logger(__name__)

# Identifier/token collisions are retried a bounded number of times
MAX_ALLOCATION_ATTEMPTS = 5


class SessionService(Service):
    """Authoritative store and state machine for sessions.

    A session is ACTIVE from creation until it is deleted or idles past the
    configured TTL; both lead to the same terminal state in which every lookup
    reports NotFoundError.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None) -> None:
        super().__init__(database)
        self._storage = create_session_storage(database)

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._storage.on_start(self.core.config.session_ttl)

    async def create_session(self, owner_id: UUID) -> Session:
        """Allocate a new session with fresh identifier and CSRF token."""
        for _ in range(MAX_ALLOCATION_ATTEMPTS):
            session = Session(
                identifier=SessionId(secrets.token_urlsafe(32)),
                csrf_token=secrets.token_urlsafe(32),
                owner_id=owner_id,
            )
            if await self._storage.insert(session):
                logger.info("session_created", session_id=str(session.id), owner_id=str(owner_id))
                return session
            logger.warning("session_token_collision", owner_id=str(owner_id))
        raise RuntimeError("Could not allocate a unique session identifier")

    async def find_session(self, identifier: SessionId) -> Session:
        """Look up a live session. Expired records are purged on the way."""
        session = await self._storage.get(identifier)
        if session is None:
            raise NotFoundError
        if session.is_expired(self.core.config.session_ttl):
            await self._storage.delete(identifier, session.csrf_token)
            logger.info("session_expired", session_id=str(session.id))
            raise NotFoundError
        return session

    async def refresh_session(self, identifier: SessionId, csrf_token: str | None) -> Session:
        """Advance refreshed_at of a session after validating its CSRF token."""
        session = await self._find_for_update(identifier, csrf_token)
        refreshed = await self._storage.touch(identifier, session.csrf_token, now())
        if refreshed is None:
            # Deleted between lookup and update
            raise NotFoundError
        logger.debug("session_refreshed", session_id=str(session.id))
        return refreshed

    async def delete_session(self, identifier: SessionId, csrf_token: str | None) -> None:
        """Permanently remove a session after validating its CSRF token."""
        session = await self._find_for_update(identifier, csrf_token)
        if not await self._storage.delete(identifier, session.csrf_token):
            raise NotFoundError
        logger.info("session_deleted", session_id=str(session.id))

    async def get_authenticated_user(self, identifier: SessionId) -> User:
        """Resolve the owner of a live session."""
        session = await self.find_session(identifier)
        if not self.core.services.user.has_user(session.owner_id):
            raise NotFoundError
        return self.core.services.user.get_user(session.owner_id)

    async def _find_for_update(self, identifier: SessionId, csrf_token: str | None) -> Session:
        # A missing token is rejected before revealing whether the identifier exists
        if not csrf_token:
            raise CsrfTokenError
        session = await self.find_session(identifier)
        if not secrets.compare_digest(session.csrf_token.encode("utf-8"), csrf_token.encode("utf-8")):
            raise CsrfTokenError
        return session
