"""Tests for the filesystem transport."""

from __future__ import annotations

import json

import pytest

from arbor.core.errors import ProfileError, RepositoryError
from arbor.transport import FilesystemTransport
from arbor.transport.filesystem import FORMAT_VERSION, FileRepository


class TestFileRepository:
    """Tests for JSON persistence."""

    def test_missing_file_starts_empty(self, tmp_path):
        """A new path gives an empty repository and writes nothing yet."""
        path = tmp_path / "repo.json"
        repository = FileRepository(path)
        assert repository.workspace_names() == ["default"]
        assert not path.exists()

    def test_save_writes_file(self, tmp_path):
        """Saving a session persists the repository."""
        path = tmp_path / "data" / "repo.json"
        session = FileRepository(path).login()
        session.get_root_node().add_node("content").set_property("title", "Home")
        session.save()

        data = json.loads(path.read_text())
        assert data["version"] == FORMAT_VERSION
        assert "content" in data["workspaces"]["default"]["children"]
        assert not path.with_suffix(".json.tmp").exists()

    def test_reload(self, tmp_path):
        """A new repository object reads saved content and identifiers."""
        path = tmp_path / "repo.json"
        session = FileRepository(path).login()
        identifier = session.get_root_node().add_node("content").identifier
        session.save()

        reloaded = FileRepository(path).login()
        assert reloaded.get_node_by_identifier(identifier).path == "/content"

    def test_workspace_changes_persisted(self, tmp_path):
        """Creating a workspace rewrites the file."""
        path = tmp_path / "repo.json"
        FileRepository(path).create_workspace("staging")
        assert FileRepository(path).workspace_names() == ["default", "staging"]

    def test_corrupt_file(self, tmp_path):
        """Unreadable files raise RepositoryError."""
        path = tmp_path / "repo.json"
        path.write_text("{not json")
        with pytest.raises(RepositoryError, match="Corrupt"):
            FileRepository(path)

    def test_unsupported_version(self, tmp_path):
        """Files from another format version are refused."""
        path = tmp_path / "repo.json"
        path.write_text(json.dumps({"version": 99, "workspaces": {}}))
        with pytest.raises(RepositoryError, match="version"):
            FileRepository(path)


class TestFilesystemTransport:
    """Tests for the fs transport."""

    def test_requires_path(self):
        """Profiles for the fs transport must name a file."""
        with pytest.raises(ProfileError, match="path"):
            FilesystemTransport().get_repository({"name": "fs"})

    def test_one_repository_per_file(self, tmp_path):
        """The same file yields the same repository object."""
        transport = FilesystemTransport()
        first = transport.get_repository({"path": str(tmp_path / "a.json")})
        again = transport.get_repository({"path": str(tmp_path / "." / "a.json")})
        other = transport.get_repository({"path": str(tmp_path / "b.json")})
        assert first is again
        assert first is not other
        assert transport.name == "fs"
