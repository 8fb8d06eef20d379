"""Composition helpers for the shell's services.

Wires configuration, profile, transports and session manager together so
frontends receive one ShellContainer instead of assembling the layers
themselves.

Two modes:
    standalone: arbor owns the connection. Profiles are loaded from the
        config directory and sessions are opened through transports.
    embedded: a host application already has a store session and hands it
        to arbor; no profiles or transports are involved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from arbor.config import ConfigManager, Profile, ProfileLoader
from arbor.core.session import PathAwareSession, SessionManager
from arbor.transport import FilesystemTransport, MemoryTransport, TransportRegistry

if TYPE_CHECKING:
    from arbor.core.protocols import StoreSession

logger = logging.getLogger(__name__)


class ShellMode(Enum):
    """How the shell obtained its session."""

    STANDALONE = "standalone"
    EMBEDDED = "embedded"


def build_transport_registry() -> TransportRegistry:
    """Registry with every built-in transport."""
    registry = TransportRegistry()
    registry.register(MemoryTransport())
    registry.register(FilesystemTransport())
    return registry


@dataclass
class ShellContainer:
    """Services shared by the shell and its commands.

    Attributes:
        mode: Standalone or embedded.
        config_manager: Config directory access.
        profile: Active connection profile (None when embedded).
        profile_loader: Profile persistence (None when embedded).
        transport_registry: Available transports (None when embedded).
        session_manager: Session lifecycle (None when embedded).
    """

    mode: ShellMode
    config_manager: ConfigManager
    profile: Profile | None = None
    profile_loader: ProfileLoader | None = None
    transport_registry: TransportRegistry | None = None
    session_manager: SessionManager | None = None
    _session: PathAwareSession | None = field(default=None, repr=False)

    @property
    def session(self) -> PathAwareSession:
        """The shell session (opened lazily in standalone mode)."""
        if self._session is None:
            if self.session_manager is None:
                raise RuntimeError("Embedded container has no session")
            self._session = self.session_manager.get_session()
        return self._session

    def change_workspace(self, name: str) -> None:
        """Switch the session to another workspace.

        Raises:
            NotImplementedError: In embedded mode, where the host owns the session.
        """
        if self.session_manager is None:
            raise NotImplementedError("Workspace switching is not available in embedded mode")
        self.session_manager.change_workspace(name)

    def close(self) -> None:
        """Log out of the session if one was opened."""
        if self.session_manager is not None:
            self.session_manager.logout()
        elif self._session is not None and self._session.is_live():
            self._session.logout()


def build_container(
    profile: Profile | str | None = None,
    config_dir: str | Path | None = None,
    overrides: dict[str, dict[str, Any]] | None = None,
) -> ShellContainer:
    """Create a standalone container.

    Args:
        profile: Profile object, name of a saved profile, or None for the
            default in-memory profile.
        config_dir: Config directory (see ConfigManager).
        overrides: Settings applied on top of the profile, as
            {domain: {key: value}}; None values are ignored.

    Returns:
        Container whose session opens on first access.

    Raises:
        ProfileError: If a named profile cannot be loaded.

    Example:
        >>> container = build_container("staging")
        >>> container.session.chdir("/content")
    """
    config_manager = ConfigManager(config_dir)
    profile_loader = ProfileLoader(config_manager)

    if isinstance(profile, str):
        profile = profile_loader.load(profile)
    elif profile is None:
        profile = Profile()

    for domain, values in (overrides or {}).items():
        for key, value in values.items():
            if value is not None:
                profile.set(domain, key, value)

    registry = build_transport_registry()
    session_manager = SessionManager(transport_registry=registry, profile=profile)
    logger.debug(
        "container_built: mode=standalone, profile=%s, transport=%s",
        profile.name,
        profile.transport_name,
    )

    return ShellContainer(
        mode=ShellMode.STANDALONE,
        config_manager=config_manager,
        profile=profile,
        profile_loader=profile_loader,
        transport_registry=registry,
        session_manager=session_manager,
    )


def create_embedded(
    store_session: StoreSession | PathAwareSession,
    config_dir: str | Path | None = None,
) -> ShellContainer:
    """Create an embedded container around an open store session.

    Example:
        >>> container = create_embedded(my_app_session)
        >>> run_shell(container)
    """
    if not isinstance(store_session, PathAwareSession):
        store_session = PathAwareSession(store_session)
    logger.debug("container_built: mode=embedded")
    return ShellContainer(
        mode=ShellMode.EMBEDDED,
        config_manager=ConfigManager(config_dir),
        _session=store_session,
    )
