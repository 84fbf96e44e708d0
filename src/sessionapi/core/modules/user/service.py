from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from sessionapi.core.core import Service
from sessionapi.core.modules.user.models import User
from sessionapi.core.modules.user.storage import create_user_storage
from sessionapi.core.modules.user.validators import validate_password, validate_username
from sessionapi.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Credential collaborator: verifies passwords against an in-memory cache of users."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]] | None) -> None:
        super().__init__(database)
        self._storage = create_user_storage(database)
        self._users: dict[UUID, User] = {}

    def get_user(self, user_id: UUID) -> User:
        """Get user by ID from cache."""
        if user_id not in self._users:
            raise NotFoundError(f"User '{user_id}' not found")
        return self._users[user_id]

    def get_user_by_username(self, username: str) -> User:
        """Get user by username from cache."""
        user = self._find_by_username(username)
        if user is None:
            raise NotFoundError(f"User '{username}' not found")
        return user

    def has_user(self, user_id: UUID) -> bool:
        return user_id in self._users

    def has_username(self, username: str) -> bool:
        return self._find_by_username(username) is not None

    async def create_user(self, username: str, password: str) -> User:
        """Create user with hashed password."""
        if self.has_username(username):
            raise ValidationError(f"User '{username}' already exists")

        validate_username(username)
        validate_password(password)
        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        user = User(username=username, password_hash=password_hash)
        await self._storage.insert(user)
        self._users[user.id] = user
        logger.info("user_created", user_id=str(user.id), username=username)
        return user

    def verify_password(self, username: str, password: str) -> bool:
        """Verify password against stored hash."""
        user = self._find_by_username(username)
        if user is None:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8"))

    async def ensure_admin_user_exists(self) -> None:
        """Create the bootstrap user from config if not exists."""
        config = self.core.config
        if not self.has_username(config.admin_username):
            await self.create_user(config.admin_username, config.admin_password)

    async def update_all_users_cache(self) -> None:
        """Reload all users cache from storage."""
        users = await self._storage.load_all()
        self._users = {user.id: user for user in users}

    async def on_start(self) -> None:
        """Initialize indexes, cache, and bootstrap user."""
        await self._storage.on_start()
        await self.update_all_users_cache()
        await self.ensure_admin_user_exists()
        logger.debug("user_service_started", user_count=len(self._users))

    def _find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)
