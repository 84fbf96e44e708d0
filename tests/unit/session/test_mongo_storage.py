"""Tests for the MongoDB session store against a stubbed collection."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from sessionapi.core.modules.session.models import Session, SessionId
from sessionapi.core.modules.session.storage import MongoSessionStorage, create_session_storage


@pytest.fixture
def collection():
    return MagicMock()


@pytest.fixture
def storage(collection):
    database = MagicMock()
    database.get_collection.return_value = collection
    return MongoSessionStorage(database)


@pytest.fixture
def session():
    return Session(identifier=SessionId("sid-1"), csrf_token="csrf-1", owner_id=uuid4())


def test_factory_picks_mongo_with_database():
    assert isinstance(create_session_storage(MagicMock()), MongoSessionStorage)


@pytest.mark.asyncio
class TestMongoSessionStorage:
    async def test_indexes(self, storage, collection):
        """Test that identifier and csrf_token are unique and refreshed_at carries the TTL."""
        collection.create_index = AsyncMock()
        await storage.on_start(3600)

        calls = [(c.args, c.kwargs) for c in collection.create_index.await_args_list]
        assert (([("identifier", 1)],), {"unique": True}) in calls
        assert (([("csrf_token", 1)],), {"unique": True}) in calls
        assert (([("refreshed_at", 1)],), {"expireAfterSeconds": 3600}) in calls

    async def test_insert(self, storage, collection, session):
        collection.insert_one = AsyncMock()
        assert await storage.insert(session) is True
        document = collection.insert_one.await_args.args[0]
        assert document["_id"] == session.id
        assert document["identifier"] == "sid-1"

    async def test_insert_collision(self, storage, collection, session):
        collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))
        assert await storage.insert(session) is False

    async def test_get(self, storage, collection, session):
        collection.find_one = AsyncMock(side_effect=[session.to_mongo(), None])
        assert await storage.get(session.identifier) == session
        assert await storage.get(SessionId("unknown")) is None

    async def test_touch_is_conditional(self, storage, collection, session):
        collection.find_one_and_update = AsyncMock(return_value=None)
        assert await storage.touch(session.identifier, "other", session.refreshed_at) is None

        args, kwargs = collection.find_one_and_update.await_args
        assert args[0] == {"identifier": "sid-1", "csrf_token": "other"}
        assert args[1] == {"$set": {"refreshed_at": session.refreshed_at}}
        assert kwargs["return_document"] == ReturnDocument.AFTER

    async def test_delete(self, storage, collection, session):
        collection.delete_one = AsyncMock(side_effect=[MagicMock(deleted_count=1), MagicMock(deleted_count=0)])
        assert await storage.delete(session.identifier, session.csrf_token) is True
        assert await storage.delete(session.identifier, session.csrf_token) is False
        collection.delete_one.assert_awaited_with({"identifier": "sid-1", "csrf_token": "csrf-1"})
