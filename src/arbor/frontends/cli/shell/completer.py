"""Tab completion for the shell.

The first word completes against command and alias names. Later words
complete against the child node and property names of the current node,
as reported by PathAwareSession.autocomplete().
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from arbor.core.errors import RepositoryError

if TYPE_CHECKING:
    from arbor.core.session import PathAwareSession

logger = logging.getLogger(__name__)


class ShellCompleter(Completer):
    """Completer for shell commands and node names.

    The session is fetched through a callable on every completion, so the
    completer keeps working after a workspace switch.

    Example:
        >>> completer = ShellCompleter(lambda: session, ["ls", "cd"])
        >>> # User types "cd art<Tab>" in /content
        >>> # Dropdown shows: articles
    """

    def __init__(
        self,
        get_session: Callable[[], PathAwareSession],
        commands: Iterable[str],
        aliases: Iterable[str] = (),
    ) -> None:
        self._get_session = get_session
        self.commands = sorted(set(commands) | set(aliases))

    def get_completions(self, document: Document, complete_event: object) -> Iterable[Completion]:
        """Generate completions for the word before the cursor.

        Args:
            document: The current document being edited.
            complete_event: The completion event (unused).

        Yields:
            Completion objects replacing the word before the cursor.
        """
        text = document.text_before_cursor
        word = document.get_word_before_cursor(WORD=True)

        # Still typing the command name
        if not text.lstrip() or " " not in text.lstrip():
            for name in self.commands:
                if name.startswith(word):
                    yield Completion(name, start_position=-len(word))
            return

        for name in self._node_names(word):
            yield Completion(name, start_position=-len(word), display=name)

    def _node_names(self, word: str) -> list[str]:
        try:
            names = self._get_session().autocomplete(word)
        except RepositoryError as e:
            logger.debug("completion_failed: error=%s", e)
            return []
        if names is None:
            return []
        return sorted(name for name in names if name.startswith(word))
