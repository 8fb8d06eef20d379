"""Session management.

SessionManager opens the session described by a profile: it picks the
transport, obtains a repository, logs in, and wraps the store session in a
PathAwareSession. The wrapper is created once; workspace changes swap the
store session inside it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arbor.core import paths
from arbor.core.session.path_aware import PathAwareSession
from arbor.core.types import Credentials

if TYPE_CHECKING:
    from arbor.config.profile import Profile
    from arbor.core.protocols import Repository, StoreSession
    from arbor.transport.registry import TransportRegistry

logger = logging.getLogger(__name__)


@dataclass
class SessionManager:
    """Open and track the shell's session.

    Example:
        >>> manager = SessionManager(registry, Profile(name="scratch"))
        >>> session = manager.get_session()
        >>> manager.change_workspace("staging")
        >>> session.get_workspace().name
        'staging'
    """

    transport_registry: TransportRegistry
    profile: Profile
    _repository: Repository | None = field(default=None, init=False)
    _session: PathAwareSession | None = field(default=None, init=False)

    def get_repository(self) -> Repository:
        """Repository of the profile's transport (created on first use).

        Raises:
            TransportNotFoundError: If the profile names an unknown transport.
        """
        if self._repository is None:
            transport = self.transport_registry.get_transport(self.profile.transport_name)
            self._repository = transport.get_repository(self.profile.transport)
            logger.debug("repository_opened: transport=%s", transport.name)
        return self._repository

    def _credentials(self) -> Credentials:
        return Credentials(
            user_id=str(self.profile.get("session", "username", "admin")),
            password=str(self.profile.get("session", "password", "")),
        )

    def _login(self, workspace: str | None) -> StoreSession:
        session = self.get_repository().login(self._credentials(), workspace)
        logger.debug("session_opened: workspace=%s", workspace or "default")
        return session

    def has_session(self) -> bool:
        return self._session is not None

    def get_session(self) -> PathAwareSession:
        """The wrapped session, logging in on first use."""
        if self._session is None:
            self._session = PathAwareSession(self._login(self.profile.workspace))
        return self._session

    def change_workspace(self, name: str) -> None:
        """Log into another workspace and reset the working location.

        The new session is opened before the old one is closed, so a failed
        login leaves the current session in place.

        Raises:
            RepositoryError: If the workspace does not exist.
        """
        new_store_session = self._login(name)
        session = self.get_session()
        session.logout()
        session.set_store_session(new_store_session)
        session.set_cwd(paths.ROOT)
        self.profile.set("session", "workspace", name)
        logger.debug("workspace_changed: name=%s", name)

    def relogin(self) -> None:
        """Replace the store session with a fresh login, keeping the cwd."""
        new_store_session = self._login(self.profile.workspace)
        session = self.get_session()
        if session.is_live():
            session.logout()
        session.set_store_session(new_store_session)

    def logout(self) -> None:
        """Log out if a session was opened."""
        if self._session is not None and self._session.is_live():
            self._session.logout()
            logger.debug("session_closed")
