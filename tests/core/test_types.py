"""Tests for path and identifier references."""

from arbor.core.types import Credentials, Identifier, NodePath, is_uuid, parse_ref
from arbor.store import MemoryRepository

UUID = "842e61c0-09ab-42a9-87c0-308ccc90e6f4"


class TestIsUuid:
    """Tests for UUID recognition."""

    def test_canonical_form(self):
        """8-4-4-4-12 hex groups match, in either case."""
        assert is_uuid(UUID)
        assert is_uuid(UUID.upper())

    def test_non_uuids(self):
        """Paths and near-misses do not match."""
        assert not is_uuid("/content")
        assert not is_uuid(f"/{UUID}")
        assert not is_uuid(UUID[:-1])
        assert not is_uuid(UUID.replace("-", ""))
        assert not is_uuid("")


class TestParseRef:
    """Tests for classifying raw input."""

    def test_uuid_becomes_identifier(self):
        """UUID-shaped input is an Identifier."""
        assert parse_ref(UUID) == Identifier(UUID)

    def test_other_input_becomes_path(self):
        """Everything else is a NodePath."""
        assert parse_ref("articles") == NodePath("articles")
        assert parse_ref("..") == NodePath("..")

    def test_tagged_reference_unchanged(self):
        """Already-tagged references pass through."""
        ref = NodePath(UUID)
        assert parse_ref(ref) is ref

    def test_str(self):
        """References print as their raw value."""
        assert str(Identifier(UUID)) == UUID
        assert str(NodePath("/a")) == "/a"


class TestCredentials:
    """Tests for the store-independent credentials type."""

    def test_defaults(self):
        """Anonymous login without password or attributes."""
        credentials = Credentials()
        assert credentials.user_id == "anonymous"
        assert credentials.password == ""
        assert credentials.attributes == {}

    def test_accepted_by_memory_store(self):
        """The memory store logs in with core credentials."""
        session = MemoryRepository().login(Credentials("editor", attributes={"a": 1}))
        assert session.get_user_id() == "editor"
        assert session.get_attribute("a") == 1
