"""Tests for the App facade login rules."""

import pytest

from sessionapi.errors import AuthenticationError, NotFoundError


@pytest.mark.asyncio
class TestLogin:
    async def test_bad_credentials_allocate_nothing(self, app):
        storage = app._core.services.session._storage
        with pytest.raises(AuthenticationError):
            await app.login("admin", "bad_password")
        assert len(storage) == 0

    async def test_fresh_login(self, app):
        session, replaced = await app.login("admin", "publish")
        assert replaced is False
        assert session.name == "SESSIONAPI_SID"
        assert session.href == f"/api/v2/user/sessions/{session.identifier}"

    async def test_relogin_replaces_own_session(self, app):
        first, _ = await app.login("admin", "publish")
        second, replaced = await app.login("admin", "publish", first.identifier)

        assert replaced is True
        assert second.identifier != first.identifier
        with pytest.raises(NotFoundError):
            await app.get_current_session(first.identifier)

    async def test_relogin_keeps_session_of_other_user(self, app):
        """Test that a cookie of another user's session is left alone."""
        await app._core.services.user.create_user("editor", "secret")
        editor, _ = await app.login("editor", "secret")
        admin, replaced = await app.login("admin", "publish", editor.identifier)

        assert replaced is False
        assert (await app.get_current_session(editor.identifier)).user.login == "editor"
        assert (await app.get_current_session(admin.identifier)).user.login == "admin"

    async def test_relogin_with_unknown_cookie(self, app):
        _, replaced = await app.login("admin", "publish", "unknown")
        assert replaced is False


@pytest.mark.asyncio
async def test_current_session_requires_cookie(app):
    with pytest.raises(NotFoundError):
        await app.get_current_session(None)


@pytest.mark.asyncio
async def test_current_session_single_lookup(app, monkeypatch):
    """Test that the owner is resolved from the fetched session without a second lookup."""
    session, _ = await app.login("admin", "publish")
    storage = app._core.services.session._storage
    calls = []
    original_get = storage.get

    async def counting_get(identifier):
        calls.append(identifier)
        return await original_get(identifier)

    monkeypatch.setattr(storage, "get", counting_get)
    view = await app.get_current_session(session.identifier)

    assert view.user.login == "admin"
    assert calls == [session.identifier]
