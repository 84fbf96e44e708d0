"""Persistence backends for sessions.

Both backends enforce uniqueness of identifier and csrf_token at write time and
make touch/delete conditional on the pair, so racing writers resolve deterministically.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from sessionapi.core.modules.session.models import Session, SessionId


class SessionStorage(ABC):
    """Keyed store of live sessions indexed by identifier."""

    async def on_start(self, ttl: int) -> None:
        """Prepare the backend (indexes etc.)."""

    @abstractmethod
    async def insert(self, session: Session) -> bool:
        """Store a new session. Returns False if identifier or csrf_token collides."""

    @abstractmethod
    async def get(self, identifier: SessionId) -> Session | None: ...

    @abstractmethod
    async def touch(self, identifier: SessionId, csrf_token: str, refreshed_at: datetime) -> Session | None:
        """Set refreshed_at on the session matching both keys, returning the updated session."""

    @abstractmethod
    async def delete(self, identifier: SessionId, csrf_token: str) -> bool:
        """Remove the session matching both keys. Returns True only for the caller that removed it."""


class MongoSessionStorage(SessionStorage):
    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self._collection = database.get_collection("sessions")

    async def on_start(self, ttl: int) -> None:
        await self._collection.create_index([("identifier", 1)], unique=True)
        await self._collection.create_index([("csrf_token", 1)], unique=True)
        await self._collection.create_index([("owner_id", 1)])
        # TTL monitor runs lazily, SessionService still checks expiry on every lookup
        await self._collection.create_index([("refreshed_at", 1)], expireAfterSeconds=ttl)

    async def insert(self, session: Session) -> bool:
        try:
            await self._collection.insert_one(session.to_mongo())
        except DuplicateKeyError:
            return False
        return True

    async def get(self, identifier: SessionId) -> Session | None:
        return Session.from_mongo(await self._collection.find_one({"identifier": identifier}))

    async def touch(self, identifier: SessionId, csrf_token: str, refreshed_at: datetime) -> Session | None:
        document = await self._collection.find_one_and_update(
            {"identifier": identifier, "csrf_token": csrf_token},
            {"$set": {"refreshed_at": refreshed_at}},
            return_document=ReturnDocument.AFTER,
        )
        return Session.from_mongo(document)

    async def delete(self, identifier: SessionId, csrf_token: str) -> bool:
        result = await self._collection.delete_one({"identifier": identifier, "csrf_token": csrf_token})
        return result.deleted_count == 1


class MemorySessionStorage(SessionStorage):
    """In-process backend. A single lock serializes every read-modify-write."""

    def __init__(self) -> None:
        self._sessions: dict[SessionId, Session] = {}
        self._csrf_tokens: set[str] = set()
        self._lock = asyncio.Lock()
        self._ttl: int | None = None

    async def on_start(self, ttl: int) -> None:
        self._ttl = ttl

    async def insert(self, session: Session) -> bool:
        async with self._lock:
            self._purge_expired()
            if session.identifier in self._sessions or session.csrf_token in self._csrf_tokens:
                return False
            self._sessions[session.identifier] = session
            self._csrf_tokens.add(session.csrf_token)
            return True

    async def get(self, identifier: SessionId) -> Session | None:
        async with self._lock:
            return self._sessions.get(identifier)

    async def touch(self, identifier: SessionId, csrf_token: str, refreshed_at: datetime) -> Session | None:
        async with self._lock:
            session = self._sessions.get(identifier)
            if session is None or session.csrf_token != csrf_token:
                return None
            updated = session.model_copy(update={"refreshed_at": refreshed_at})
            self._sessions[identifier] = updated
            return updated

    async def delete(self, identifier: SessionId, csrf_token: str) -> bool:
        async with self._lock:
            session = self._sessions.get(identifier)
            if session is None or session.csrf_token != csrf_token:
                return False
            del self._sessions[identifier]
            self._csrf_tokens.discard(csrf_token)
            return True

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge_expired(self) -> None:
        # Caller holds the lock. Memory counterpart of the Mongo TTL index
        if self._ttl is None:
            return
        expired = [s for s in self._sessions.values() if s.is_expired(self._ttl)]
        for session in expired:
            del self._sessions[session.identifier]
            self._csrf_tokens.discard(session.csrf_token)


def create_session_storage(database: AsyncDatabase[dict[str, Any]] | None) -> SessionStorage:
    if database is None:
        return MemorySessionStorage()
    return MongoSessionStorage(database)
