"""Connection profiles.

A profile names everything needed to open a session: which transport to use
(and its options), and which workspace to log into as whom.

Example profile file (profiles/local.yml):

    transport:
      name: fs
      path: /home/me/content.json
    session:
      workspace: default
      username: admin
      password: ""
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from arbor.core.errors import ProfileError
from arbor.core.validation import is_valid_name, validate_name

if TYPE_CHECKING:
    from arbor.config.manager import ConfigManager

logger = logging.getLogger(__name__)

DOMAINS = ("transport", "session")


def _default_transport() -> dict[str, Any]:
    return {"name": "memory"}


def _default_session() -> dict[str, Any]:
    return {"workspace": "default", "username": "admin", "password": ""}


@dataclass
class Profile:
    """Named connection settings.

    Attributes:
        name: Profile name (file stem under profiles/).
        transport: Transport settings; `name` selects the transport.
        session: Login settings: workspace, username, password.
    """

    name: str = "default"
    transport: dict[str, Any] = field(default_factory=_default_transport)
    session: dict[str, Any] = field(default_factory=_default_session)

    @property
    def transport_name(self) -> str:
        return str(self.transport.get("name", "memory"))

    @property
    def workspace(self) -> str | None:
        return self.session.get("workspace")

    def get(self, domain: str, key: str, default: Any = None) -> Any:
        """Read one setting.

        Raises:
            ProfileError: If the domain is unknown.
        """
        return self._domain(domain).get(key, default)

    def set(self, domain: str, key: str, value: Any) -> None:
        """Write one setting. A value of None removes it."""
        settings = self._domain(domain)
        if value is None:
            settings.pop(key, None)
        else:
            settings[key] = value

    def _domain(self, domain: str) -> dict[str, Any]:
        if domain not in DOMAINS:
            raise ProfileError(f"Unknown profile domain '{domain}' (expected {DOMAINS})")
        settings: dict[str, Any] = getattr(self, domain)
        return settings

    def to_dict(self) -> dict[str, Any]:
        """Convert to a YAML-serializable dict (name excluded)."""
        return {"transport": dict(self.transport), "session": dict(self.session)}

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any] | None) -> Profile:
        """Create from a dict read from a profile file.

        Raises:
            ProfileError: If a domain is not a mapping.
        """
        data = data or {}
        profile = cls(name=name)
        for domain in DOMAINS:
            values = data.get(domain, {})
            if not isinstance(values, dict):
                raise ProfileError(f"Profile '{name}': '{domain}' must be a mapping")
            getattr(profile, domain).update(values)
        return profile


class ProfileLoader:
    """Load and save profiles as YAML files under `<config_dir>/profiles`."""

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager

    @property
    def profiles_dir(self) -> Path:
        return self.config_manager.config_dir / "profiles"

    def _path(self, name: str) -> Path:
        return self.profiles_dir / f"{name}.yml"

    def list_profiles(self) -> list[str]:
        if not self.profiles_dir.is_dir():
            return []
        return sorted(
            path.stem for path in self.profiles_dir.glob("*.yml") if is_valid_name(path.stem)
        )

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def load(self, name: str) -> Profile:
        """Load a profile by name.

        Raises:
            ProfileError: If the profile is missing or malformed.
        """
        path = self._path(name)
        try:
            data = yaml.safe_load(path.read_text())
        except FileNotFoundError:
            raise ProfileError(f"Profile not found: {name}") from None
        except yaml.YAMLError as e:
            raise ProfileError(f"Profile '{name}' is not valid YAML: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ProfileError(f"Profile '{name}' must be a mapping")
        logger.debug("profile_loaded: name=%s, path=%s", name, path)
        return Profile.from_dict(name, data)

    def save(self, profile: Profile, overwrite: bool = True) -> Path:
        """Write a profile file.

        Raises:
            ValueError: If the profile name is invalid.
            ProfileError: If the profile exists and overwrite is False.
        """
        validate_name(profile.name, "profile")
        path = self._path(profile.name)
        if path.exists() and not overwrite:
            raise ProfileError(f"Profile already exists: {profile.name}")
        self.profiles_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(profile.to_dict(), default_flow_style=False))
        logger.debug("profile_saved: name=%s, path=%s", profile.name, path)
        return path
