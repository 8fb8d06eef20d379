"""Tests for SessionManager."""

from __future__ import annotations

import pytest

from arbor.config import Profile
from arbor.core.errors import RepositoryError, TransportNotFoundError
from arbor.core.session import PathAwareSession, SessionManager
from arbor.store import MemoryRepository
from arbor.transport import MemoryTransport, TransportRegistry


@pytest.fixture
def repository():
    """Repository with a second workspace."""
    repository = MemoryRepository()
    repository.create_workspace("staging")
    return repository


@pytest.fixture
def manager(repository):
    """Manager over a memory transport serving the repository."""
    registry = TransportRegistry()
    registry.register(MemoryTransport(repository))
    return SessionManager(transport_registry=registry, profile=Profile(name="test"))


class TestSessionManager:
    """Tests for opening and switching sessions."""

    def test_session_opened_lazily(self, manager):
        """No session exists before the first get_session()."""
        assert not manager.has_session()
        session = manager.get_session()
        assert isinstance(session, PathAwareSession)
        assert manager.has_session()

    def test_same_session_returned(self, manager):
        """get_session() returns the same wrapper every time."""
        assert manager.get_session() is manager.get_session()

    def test_login_uses_profile(self, manager):
        """User and workspace come from the profile."""
        manager.profile.set("session", "username", "editor")
        manager.profile.set("session", "workspace", "staging")
        session = manager.get_session()
        assert session.get_user_id() == "editor"
        assert session.get_workspace().name == "staging"

    def test_unknown_transport(self, manager):
        """An unknown transport name raises TransportNotFoundError."""
        manager.profile.set("transport", "name", "carrier-pigeon")
        with pytest.raises(TransportNotFoundError, match="available: memory"):
            manager.get_session()

    def test_change_workspace(self, manager):
        """Switching keeps the wrapper, resets the cwd and updates the profile."""
        session = manager.get_session()
        session.get_root_node().add_node("content")
        session.chdir("/content")
        old_store_session = session.store_session

        manager.change_workspace("staging")

        assert manager.get_session() is session
        assert session.get_workspace().name == "staging"
        assert session.cwd == "/"
        assert not old_store_session.is_live()
        assert manager.profile.workspace == "staging"

    def test_change_to_missing_workspace(self, manager):
        """A failed switch leaves the current session usable."""
        session = manager.get_session()
        with pytest.raises(RepositoryError):
            manager.change_workspace("missing")
        assert session.is_live()
        assert session.get_workspace().name == "default"

    def test_relogin_keeps_cwd(self, manager):
        """relogin() swaps the store session but keeps the location."""
        session = manager.get_session()
        session.get_root_node().add_node("content")
        session.save()
        session.chdir("/content")
        old_store_session = session.store_session

        manager.relogin()

        assert session.store_session is not old_store_session
        assert session.cwd == "/content"
        assert session.node_exists("/content")

    def test_logout(self, manager):
        """logout() ends the session; calling it without one is harmless."""
        manager.logout()
        session = manager.get_session()
        manager.logout()
        assert not session.is_live()
