"""Interactive shell loop.

run_shell() reads lines with prompt_toolkit (history, completion) and hands
each one to execute_line(). run_command() executes a single line without a
prompt, for `arbor shell -c`.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.styles import Style
from rich.console import Console

from arbor.__version__ import __version__
from arbor.frontends.cli.shell.completer import ShellCompleter
from arbor.frontends.cli.shell.registry import (
    COMMANDS,
    CommandAction,
    CommandContext,
    execute_line,
)
from arbor.frontends.cli.shell.state import ShellState
from arbor.frontends.cli.shell.themes import get_theme

if TYPE_CHECKING:
    from arbor.compose import ShellContainer

logger = logging.getLogger(__name__)

PROMPT_STYLE = Style.from_dict(
    {
        "workspace": "ansigreen bold",
        "cwd": "ansiblue bold",
    }
)


def build_context(container: ShellContainer, console: Console | None = None) -> CommandContext:
    """Create the command context for a container.

    Args:
        container: Shell services.
        console: Console to print to. Defaults to one using the configured theme.
    """
    config = container.config_manager.get_shell_config()
    if console is None:
        console = Console(theme=get_theme(str(config.get("theme", "default"))))
    return CommandContext(
        container=container,
        console=console,
        state=ShellState(),
        aliases=container.config_manager.get_aliases(),
    )


def get_prompt(ctx: CommandContext) -> FormattedText:
    """Prompt showing `workspace:cwd> `."""
    session = ctx.session
    return FormattedText(
        [
            ("class:workspace", session.get_workspace().name),
            ("", ":"),
            ("class:cwd", session.cwd),
            ("", "> "),
        ]
    )


def _open_history(ctx: CommandContext) -> History:
    path = ctx.container.config_manager.history_path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
    except OSError as e:
        logger.warning("history_unavailable: path=%s, error=%s", path, e)
        return InMemoryHistory()
    return FileHistory(str(path))


def _run_timed(ctx: CommandContext, line: str, show_time: bool) -> CommandAction:
    start = time.perf_counter()
    result = execute_line(ctx, line)
    if show_time:
        ctx.console.print(f"[muted]({time.perf_counter() - start:.3f}s)[/]")
    return result.action


def run_command(
    container: ShellContainer, line: str, console: Console | None = None, close: bool = True
) -> int:
    """Execute one command line.

    Args:
        container: Shell services.
        line: Command line, aliases allowed.
        console: Console to print to.
        close: Log out afterwards.

    Returns:
        Exit code: 0 on success, 1 if the command reported an error.
    """
    ctx = build_context(container, console)
    try:
        execute_line(ctx, line)
    finally:
        if close:
            container.close()
    return 1 if ctx.state.last_error else 0


def run_shell(container: ShellContainer, console: Console | None = None) -> int:
    """Run the interactive shell until exit, Ctrl-D or a double Ctrl-C.

    Returns:
        Exit code (always 0; command errors do not end the shell).
    """
    ctx = build_context(container, console)
    config = container.config_manager.get_shell_config()
    show_time = bool(config.get("show_execution_time"))

    prompt_session: PromptSession[str] = PromptSession(
        history=_open_history(ctx),
        completer=ShellCompleter(lambda: ctx.session, COMMANDS, ctx.aliases),
        complete_while_typing=False,
        style=PROMPT_STYLE,
    )

    profile = container.profile
    ctx.console.print(f"[bold]arbor[/] {__version__}", style="prompt", highlight=False)
    if profile is not None:
        ctx.console.print(
            f"[muted]Profile: {profile.name} | Transport: {profile.transport_name}[/]",
            highlight=False,
        )
    ctx.console.print("[muted]Type 'help' for commands.[/]")
    ctx.console.print()

    interrupt_count = 0
    try:
        while True:
            try:
                line = prompt_session.prompt(lambda: get_prompt(ctx))
                interrupt_count = 0
            except EOFError:
                ctx.console.print()
                break
            except KeyboardInterrupt:
                interrupt_count += 1
                if interrupt_count >= 2:
                    ctx.console.print("Exiting...")
                    break
                ctx.console.print("[muted](Press Ctrl-C again to exit)[/]")
                continue

            if not line.strip():
                continue
            if _run_timed(ctx, line, show_time) == CommandAction.BREAK:
                break
    finally:
        container.close()
        logger.debug("shell_closed: commands=%d", len(ctx.state.history))

    return 0
