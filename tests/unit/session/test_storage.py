"""Tests for the in-process session store."""

from datetime import timedelta
from uuid import uuid4

import pytest

from sessionapi.core.modules.session.models import Session, SessionId
from sessionapi.core.modules.session.storage import MemorySessionStorage, create_session_storage


def make_session(identifier: str = "sid-1", csrf_token: str = "csrf-1") -> Session:
    return Session(identifier=SessionId(identifier), csrf_token=csrf_token, owner_id=uuid4())


@pytest.fixture
def storage():
    return MemorySessionStorage()


def test_factory_picks_memory_without_database():
    assert isinstance(create_session_storage(None), MemorySessionStorage)


@pytest.mark.asyncio
class TestMemorySessionStorage:
    """Tests for uniqueness and conditional writes."""

    async def test_insert_and_get(self, storage):
        session = make_session()
        assert await storage.insert(session) is True
        assert await storage.get(session.identifier) == session
        assert len(storage) == 1

    async def test_duplicate_identifier_rejected(self, storage):
        await storage.insert(make_session("sid-1", "csrf-1"))
        assert await storage.insert(make_session("sid-1", "csrf-2")) is False
        assert len(storage) == 1

    async def test_duplicate_csrf_token_rejected(self, storage):
        await storage.insert(make_session("sid-1", "csrf-1"))
        assert await storage.insert(make_session("sid-2", "csrf-1")) is False

    async def test_touch_requires_matching_token(self, storage):
        session = make_session()
        await storage.insert(session)
        later = session.refreshed_at + timedelta(minutes=5)

        assert await storage.touch(session.identifier, "other", later) is None
        touched = await storage.touch(session.identifier, session.csrf_token, later)
        assert touched is not None
        assert touched.refreshed_at == later
        assert touched.created_at == session.created_at

    async def test_delete_succeeds_once(self, storage):
        session = make_session()
        await storage.insert(session)

        assert await storage.delete(session.identifier, "other") is False
        assert await storage.delete(session.identifier, session.csrf_token) is True
        assert await storage.delete(session.identifier, session.csrf_token) is False
        assert await storage.get(session.identifier) is None

    async def test_token_reusable_after_delete(self, storage):
        """Test that uniqueness only covers live sessions."""
        session = make_session()
        await storage.insert(session)
        await storage.delete(session.identifier, session.csrf_token)
        assert await storage.insert(make_session("sid-2", session.csrf_token)) is True
