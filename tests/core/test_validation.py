"""Tests for name validation."""

import pytest

from arbor.core.validation import MAX_NAME_LENGTH, is_valid_name, validate_name


class TestValidateName:
    """Tests for validate_name function."""

    def test_valid_simple_name(self):
        """Simple name should be valid."""
        validate_name("staging", "profile")  # Should not raise

    def test_valid_mixed_characters(self):
        """Letters, digits, dashes and underscores are allowed."""
        validate_name("Local_2-copy", "profile")
        validate_name("a", "workspace")

    def test_empty_name(self):
        """Empty names are rejected with the entity in the message."""
        with pytest.raises(ValueError, match="Workspace name is required"):
            validate_name("", "workspace")

    def test_too_long(self):
        """Names over the limit are rejected."""
        with pytest.raises(ValueError, match="64 characters"):
            validate_name("a" * (MAX_NAME_LENGTH + 1), "profile")

    def test_path_characters_rejected(self):
        """Names that could escape the profiles directory are rejected."""
        with pytest.raises(ValueError, match="letters, digits"):
            validate_name("../etc", "profile")
        with pytest.raises(ValueError, match="letters, digits"):
            validate_name("a/b", "profile")

    def test_leading_or_trailing_separator(self):
        """Dashes and underscores cannot start or end a name."""
        with pytest.raises(ValueError):
            validate_name("-staging", "profile")
        with pytest.raises(ValueError):
            validate_name("staging_", "profile")


class TestIsValidName:
    """Tests for is_valid_name function."""

    def test_matches_validate_name(self):
        """Returns a bool instead of raising."""
        assert is_valid_name("staging")
        assert not is_valid_name("")
        assert not is_valid_name("my profile")
        assert not is_valid_name("x" * (MAX_NAME_LENGTH + 1))
