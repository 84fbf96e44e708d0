"""Session management models."""

from datetime import datetime, timedelta
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from sessionapi.core.db import MongoModel
from sessionapi.core.modules.user.models import User, UserReference
from sessionapi.utils import now

SessionId = NewType("SessionId", str)


class Session(MongoModel):
    """Authenticated login of one user.

    Indexed on identifier - unique, csrf_token - unique, owner_id, refreshed_at (TTL session_ttl).
    """

    identifier: SessionId
    csrf_token: str
    owner_id: UUID
    created_at: datetime = Field(default_factory=now)
    refreshed_at: datetime = Field(default_factory=now)

    def is_expired(self, ttl: int) -> bool:
        """Check whether the session has been idle longer than `ttl` seconds."""
        return self.refreshed_at + timedelta(seconds=ttl) <= now()


class SessionView(BaseModel):
    """Session information (API representation)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Name of the cookie carrying the session identifier")
    identifier: str = Field(..., description="Session identifier, sent back as the cookie value")
    csrf_token: str = Field(..., alias="csrfToken", description="Token required in X-CSRF-Token")
    href: str = Field(..., alias="_href", description="Resource locator of the session")
    user: UserReference = Field(..., alias="User", description="Session owner")
    created_at: datetime = Field(..., alias="createdAt")
    refreshed_at: datetime = Field(..., alias="refreshedAt")

    @classmethod
    def from_domain(cls, session: Session, owner: User, cookie_name: str, api_prefix: str) -> "SessionView":
        """Create view model from domain model."""
        return cls(
            name=cookie_name,
            identifier=session.identifier,
            csrf_token=session.csrf_token,
            href=session_href(api_prefix, session.identifier),
            user=UserReference.from_domain(owner, api_prefix),
            created_at=session.created_at,
            refreshed_at=session.refreshed_at,
        )


class SessionEnvelope(BaseModel):
    """Response body wrapping a session under the `Session` key."""

    model_config = ConfigDict(populate_by_name=True)

    session: SessionView = Field(..., alias="Session")


def session_href(api_prefix: str, identifier: str) -> str:
    return f"{api_prefix}/user/sessions/{identifier}"
