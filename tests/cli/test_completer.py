"""Tests for ShellCompleter."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from prompt_toolkit.document import Document

from arbor.core.errors import PathNotFoundError
from arbor.frontends.cli.shell.completer import ShellCompleter


def complete(completer, text):
    """Completion texts for a document with the cursor at the end."""
    document = Document(text, cursor_position=len(text))
    return [c.text for c in completer.get_completions(document, None)]


@pytest.fixture
def fake_session():
    """Session double reporting a fixed set of names."""
    session = Mock()
    session.autocomplete.return_value = ["pages", "articles", "path"]
    return session


@pytest.fixture
def completer(fake_session):
    """Completer over a few commands and one alias."""
    return ShellCompleter(lambda: fake_session, ["ls", "cd", "cat", "cp"], ["ll"])


class TestCommandCompletion:
    """Tests for completing the first word."""

    def test_empty_line_lists_everything(self, completer):
        """An empty line offers every command and alias, sorted."""
        assert complete(completer, "") == ["cat", "cd", "cp", "ll", "ls"]

    def test_prefix(self, completer):
        """Only names starting with the typed text are offered."""
        assert complete(completer, "c") == ["cat", "cd", "cp"]

    def test_alias_included(self, completer):
        """Aliases complete like commands."""
        assert complete(completer, "l") == ["ll", "ls"]

    def test_replaces_typed_word(self, completer):
        """Completions replace the partial word."""
        document = Document("ca", cursor_position=2)
        completion = next(iter(completer.get_completions(document, None)))
        assert completion.start_position == -2

    def test_session_not_used_for_command(self, completer, fake_session):
        """Completing the command name does not touch the session."""
        complete(completer, "l")
        fake_session.autocomplete.assert_not_called()


class TestNodeCompletion:
    """Tests for completing arguments."""

    def test_after_space_lists_all_names(self, completer):
        """An empty argument offers every name at the cwd, sorted."""
        assert complete(completer, "cd ") == ["articles", "pages", "path"]

    def test_argument_prefix(self, completer, fake_session):
        """Names are filtered by the typed argument."""
        assert complete(completer, "cd pa") == ["pages", "path"]
        fake_session.autocomplete.assert_called_with("pa")

    def test_later_argument(self, completer):
        """Every argument after the command completes node names."""
        assert complete(completer, "mv pages ar") == ["articles"]

    def test_missing_cwd_gives_nothing(self, completer, fake_session):
        """A None result means no candidates."""
        fake_session.autocomplete.return_value = None
        assert complete(completer, "cd ") == []

    def test_repository_error_gives_nothing(self, completer, fake_session):
        """Repository errors are swallowed during completion."""
        fake_session.autocomplete.side_effect = PathNotFoundError("/gone")
        assert complete(completer, "cd a") == []

    def test_session_fetched_each_time(self):
        """The session callable is consulted on every completion."""
        first = Mock()
        first.autocomplete.return_value = ["one"]
        second = Mock()
        second.autocomplete.return_value = ["two"]
        sessions = iter([first, second])
        completer = ShellCompleter(lambda: next(sessions), ["ls"])

        assert complete(completer, "ls ") == ["one"]
        assert complete(completer, "ls ") == ["two"]

    def test_real_session(self, session):
        """Completion against the sample tree."""
        session.chdir("/content/articles/first")
        completer = ShellCompleter(lambda: session, ["cat"])
        assert complete(completer, "cat t") == ["tags", "title"]
