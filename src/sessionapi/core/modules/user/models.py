from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from sessionapi.core.db import MongoModel


class User(MongoModel):
    """Identity the credential collaborator authenticates against."""

    username: str
    password_hash: str  # bcrypt hash


class UserReference(BaseModel):
    """Reference to the session owner embedded in session responses."""

    model_config = ConfigDict(populate_by_name=True)

    href: str = Field(..., alias="_href", description="Resource locator of the user")
    id: UUID = Field(..., description="User ID")
    login: str = Field(..., description="Username")

    @classmethod
    def from_domain(cls, user: User, api_prefix: str) -> "UserReference":
        """Create view model from domain model."""
        return cls(href=f"{api_prefix}/user/users/{user.id}", id=user.id, login=user.username)
