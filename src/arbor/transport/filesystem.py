"""Filesystem transport - repository persisted to a JSON file.

The whole repository (every workspace) is loaded from the file on first use
and rewritten on each save. Writes go to a temporary file that replaces the
original, so an interrupted save leaves the previous content intact.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from arbor.core.errors import ProfileError, RepositoryError
from arbor.store.memory import MemoryRepository

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class FileRepository(MemoryRepository):
    """MemoryRepository that writes itself to a JSON file on commit."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = path
        if path.exists():
            self.load()

    def load(self) -> None:
        """Read the repository file.

        Raises:
            RepositoryError: If the file is not a valid repository dump.
        """
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise RepositoryError(f"Corrupt repository file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise RepositoryError(f"Corrupt repository file {self.path}: expected an object")
        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise RepositoryError(f"Unsupported repository file version: {version}")
        self.load_dict(data)
        logger.debug("repository_loaded: path=%s", self.path)

    def persist(self) -> None:
        data = {"version": FORMAT_VERSION, **self.to_dict()}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=False))
        os.replace(tmp_path, self.path)
        logger.debug("repository_persisted: path=%s", self.path)


class FilesystemTransport:
    """Transport serving FileRepository instances, one per file path.

    Profile settings:
        path: Repository file (required).
    """

    def __init__(self) -> None:
        self._repositories: dict[Path, FileRepository] = {}

    @property
    def name(self) -> str:
        return "fs"

    def get_repository(self, config: dict[str, Any]) -> FileRepository:
        """Open the repository file named in the profile.

        Raises:
            ProfileError: If no path is configured.
            RepositoryError: If the file exists but cannot be read.
        """
        raw_path = config.get("path")
        if not raw_path:
            raise ProfileError("The fs transport requires a 'path' setting")
        path = Path(str(raw_path)).expanduser().resolve()
        if path not in self._repositories:
            self._repositories[path] = FileRepository(path)
        return self._repositories[path]
