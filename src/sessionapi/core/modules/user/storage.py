"""Persistence backends for users."""

from abc import ABC, abstractmethod
from typing import Any

from pymongo.asynchronous.database import AsyncDatabase

from sessionapi.core.modules.user.models import User


class UserStorage(ABC):
    """Backend holding user records."""

    async def on_start(self) -> None:
        """Prepare the backend (indexes etc.)."""

    @abstractmethod
    async def load_all(self) -> list[User]: ...

    @abstractmethod
    async def insert(self, user: User) -> None: ...


class MongoUserStorage(UserStorage):
    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        await self._collection.create_index([("username", 1)], unique=True)

    async def load_all(self) -> list[User]:
        return [User.model_validate(item) async for item in self._collection.find()]

    async def insert(self, user: User) -> None:
        await self._collection.insert_one(user.to_mongo())


class MemoryUserStorage(UserStorage):
    def __init__(self) -> None:
        self._users: list[User] = []

    async def load_all(self) -> list[User]:
        return list(self._users)

    async def insert(self, user: User) -> None:
        self._users.append(user)


def create_user_storage(database: AsyncDatabase[dict[str, Any]] | None) -> UserStorage:
    if database is None:
        return MemoryUserStorage()
    return MongoUserStorage(database)
