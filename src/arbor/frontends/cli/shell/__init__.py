"""Interactive shell for navigating a content repository.

Example:
    >>> from arbor import build_container
    >>> from arbor.frontends.cli.shell import run_shell
    >>> run_shell(build_container("staging"))
"""

from arbor.frontends.cli.shell.core import run_command, run_shell
from arbor.frontends.cli.shell.registry import (
    COMMANDS,
    CommandAction,
    CommandContext,
    CommandResult,
    execute_line,
    expand_alias,
)

__all__ = [
    "run_shell",
    "run_command",
    "COMMANDS",
    "CommandAction",
    "CommandContext",
    "CommandResult",
    "execute_line",
    "expand_alias",
]
