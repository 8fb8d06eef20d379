"""Configuration directory and shell settings.

Layout of the configuration directory (default `~/.arbor`):

    .env            Environment overrides (ARBOR_LOG_LEVEL, ...)
    arbor.yml       Shell settings
    aliases.yml     Command aliases
    profiles/       Connection profiles (see arbor.config.profile)

Every file is optional; missing keys fall back to built-in defaults.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from arbor.core.errors import ProfileError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "ARBOR_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path.home() / ".arbor"

DEFAULT_SHELL_CONFIG: dict[str, Any] = {
    "theme": "default",
    "history_file": "history",
    "show_execution_time": False,
    "confirm_exit_with_changes": True,
}

# {arg} expands to all arguments, {argN} to the Nth one
DEFAULT_ALIASES: dict[str, str] = {
    "ll": "ls -l {arg}",
    "dir": "ls {arg}",
    "del": "rm {arg}",
    "cwd": "pwd",
    "q": "exit",
}

CONFIG_FILES: dict[str, dict[str, Any]] = {
    "arbor": DEFAULT_SHELL_CONFIG,
    "aliases": DEFAULT_ALIASES,
}


class ConfigManager:
    """Locate and read the configuration directory.

    Args:
        config_dir: Explicit directory. Defaults to ARBOR_CONFIG_DIR, then
            `~/.arbor`.
    """

    def __init__(self, config_dir: str | Path | None = None):
        resolved = config_dir or os.environ.get(CONFIG_DIR_ENV) or DEFAULT_CONFIG_DIR
        self.config_dir = Path(resolved).expanduser()
        self._cache: dict[str, dict[str, Any]] = {}

        env_file = self.config_dir / ".env"
        if env_file.is_file():
            load_dotenv(env_file, override=False)
            logger.debug("env_loaded: path=%s", env_file)

    def _path(self, name: str) -> Path:
        return self.config_dir / f"{name}.yml"

    def get_config(self, name: str) -> dict[str, Any]:
        """Read a config file merged over its defaults.

        Raises:
            ProfileError: If the file is not a valid YAML mapping.
        """
        if name not in CONFIG_FILES:
            raise KeyError(f"Unknown config file: {name}")
        if name in self._cache:
            return dict(self._cache[name])

        config = dict(CONFIG_FILES[name])
        path = self._path(name)
        if path.is_file():
            try:
                data = yaml.safe_load(path.read_text())
            except yaml.YAMLError as e:
                raise ProfileError(f"{path} is not valid YAML: {e}") from e
            if data is not None and not isinstance(data, dict):
                raise ProfileError(f"{path} must contain a mapping")
            config.update(data or {})
            logger.debug("config_loaded: name=%s, path=%s", name, path)

        self._cache[name] = config
        return dict(config)

    def get_shell_config(self) -> dict[str, Any]:
        return self.get_config("arbor")

    def get_aliases(self) -> dict[str, str]:
        return {str(k): str(v) for k, v in self.get_config("aliases").items()}

    @property
    def history_path(self) -> Path:
        """Absolute path of the shell history file."""
        history = Path(str(self.get_shell_config()["history_file"])).expanduser()
        if history.is_absolute():
            return history
        return self.config_dir / history

    def init_config(self, force: bool = False) -> list[Path]:
        """Write the default config files.

        Args:
            force: Overwrite files that already exist.

        Returns:
            Paths that were written.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        (self.config_dir / "profiles").mkdir(exist_ok=True)

        written = []
        for name, defaults in CONFIG_FILES.items():
            path = self._path(name)
            if path.exists() and not force:
                continue
            path.write_text(yaml.safe_dump(defaults, default_flow_style=False))
            written.append(path)
        self._cache.clear()
        logger.debug("config_initialized: dir=%s, written=%d", self.config_dir, len(written))
        return written
