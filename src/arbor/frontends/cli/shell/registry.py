"""Command registry and dispatch for the shell.

This module provides:
- CommandContext: All shared state needed by command handlers
- CommandResult: Result of command execution with control flow signals
- Line handling: alias expansion and argument splitting
- Error handling decorator for repository errors
- Command registry with handler functions
"""

from __future__ import annotations

import logging
import re
import shlex
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from functools import wraps
from typing import TYPE_CHECKING, Any

from rich.text import Text

from arbor.core import paths
from arbor.core.errors import PathNotFoundError, RepositoryError
from arbor.core.finder import has_wildcard
from arbor.core.types import Identifier, parse_ref
from arbor.core.validation import validate_name
from arbor.frontends.cli.shell.display import (
    print_help,
    print_key_values,
    print_node_detail,
    print_node_listing,
    print_node_paths,
    print_property,
)
from arbor.frontends.cli.shell.state import ShellState
from arbor.store.views import (
    IMPORT_UUID_COLLISION_REMOVE_EXISTING,
    IMPORT_UUID_COLLISION_REPLACE_EXISTING,
    IMPORT_UUID_COLLISION_THROW,
    IMPORT_UUID_CREATE_NEW,
)

if TYPE_CHECKING:
    from rich.console import Console

    from arbor.compose import ShellContainer
    from arbor.core.session import PathAwareSession

logger = logging.getLogger(__name__)


class CommandAction(Enum):
    """Control flow actions from command handlers."""

    CONTINUE = auto()  # Continue shell loop
    BREAK = auto()  # Exit shell loop


@dataclass
class CommandContext:
    """All state needed by command handlers.

    Attributes:
        container: Shell services (session, profile, config).
        console: Rich console all output goes to.
        state: Mutable per-run state.
        aliases: Alias name -> expansion.
    """

    container: ShellContainer
    console: Console
    state: ShellState = field(default_factory=ShellState)
    aliases: dict[str, str] = field(default_factory=dict)

    @property
    def session(self) -> PathAwareSession:
        return self.container.session

    def error(self, message: str) -> None:
        """Print an error line and remember it as the last error."""
        self.state.last_error = message
        self.console.print(Text.assemble(("Error: ", "error"), message))


@dataclass
class CommandResult:
    """Result from a command handler."""

    action: CommandAction = CommandAction.CONTINUE
    message: str | None = None  # Optional message to display


# Type alias for command handlers
CommandHandler = Callable[[CommandContext, list[str]], CommandResult]


class UsageError(ValueError):
    """Wrong number or form of command arguments."""


# =============================================================================
# Line Handling
# =============================================================================

_ARG_PLACEHOLDER = re.compile(r"\{arg(\d*)\}")


def expand_alias(line: str, aliases: dict[str, str]) -> str:
    """Replace a leading alias with its expansion.

    `{arg}` in the expansion takes all remaining arguments, `{argN}` the
    Nth one (1-based). Placeholders without a matching argument become
    empty. Lines whose first word is not an alias are returned unchanged.

    Example:
        >>> expand_alias("ll /content", {"ll": "ls -l {arg}"})
        'ls -l /content'
    """
    stripped = line.strip()
    if not stripped:
        return stripped

    name, _, rest = stripped.partition(" ")
    if name not in aliases:
        return stripped

    rest = rest.strip()
    args = shlex.split(rest) if rest else []

    def substitute(match: re.Match[str]) -> str:
        index = match.group(1)
        if not index:
            return rest
        position = int(index) - 1
        return shlex.quote(args[position]) if 0 <= position < len(args) else ""

    expanded = _ARG_PLACEHOLDER.sub(substitute, aliases[name]).strip()
    logger.debug("alias_expanded: alias=%s, line=%s", name, expanded)
    return expanded


def parse_line(line: str) -> list[str]:
    """Split a command line shell-style.

    Raises:
        UsageError: On unbalanced quotes.
    """
    try:
        return shlex.split(line)
    except ValueError as e:
        raise UsageError(f"Cannot parse line: {e}") from e


def split_flags(args: list[str], flags: set[str]) -> tuple[list[str], set[str]]:
    """Separate known flags from positional arguments.

    Raises:
        UsageError: On an unknown option.
    """
    positional = []
    present = set()
    for arg in args:
        if arg in flags:
            present.add(arg)
        elif arg.startswith("-") and len(arg) > 1 and not arg[1].isdigit():
            raise UsageError(f"Unknown option: {arg}")
        else:
            positional.append(arg)
    return positional, present


_INT_PATTERN = re.compile(r"^[-+]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[-+]?(\d+\.\d*|\.\d+)([eE][-+]?\d+)?$")


def parse_value(text: str) -> Any:
    """Interpret a command-line word as a property value.

    Example:
        >>> parse_value("42"), parse_value("1.5"), parse_value("true")
        (42, 1.5, True)
        >>> parse_value("hello")
        'hello'
    """
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if _INT_PATTERN.match(text):
        return int(text)
    if _FLOAT_PATTERN.match(text):
        return float(text)
    return text


def _expect(args: list[str], minimum: int, maximum: int | None, usage: str) -> None:
    if len(args) < minimum or (maximum is not None and len(args) > maximum):
        raise UsageError(f"Usage: {usage}")


# =============================================================================
# Helper Functions
# =============================================================================


def handle_repository_errors(handler: CommandHandler) -> CommandHandler:
    """Decorator to report command failures consistently.

    Repository errors, bad arguments and operations the session cannot
    perform are printed as one error line; the shell keeps running.
    """

    @wraps(handler)
    def wrapper(ctx: CommandContext, args: list[str]) -> CommandResult:
        try:
            return handler(ctx, args)
        except (RepositoryError, ValueError, NotImplementedError, OSError) as e:
            logger.debug(
                "command_failed: command=%s, error=%s: %s",
                handler.__name__,
                type(e).__name__,
                e,
            )
            ctx.error(str(e))
            return CommandResult()

    return wrapper


# =============================================================================
# Command Handlers
# =============================================================================


def cmd_help(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Show help."""
    print_help(ctx.console, USAGE, ctx.aliases)
    return CommandResult()


def cmd_pwd(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Print the working location."""
    ctx.console.print(Text(ctx.session.cwd, style="node"))
    return CommandResult()


@handle_repository_errors
def cmd_cd(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Change the working location (root when no argument)."""
    _expect(args, 0, 1, "cd [path|identifier]")
    ctx.session.chdir(args[0] if args else paths.ROOT)
    return CommandResult()


@handle_repository_errors
def cmd_ls(ctx: CommandContext, args: list[str]) -> CommandResult:
    """List a node, or the nodes matching a glob."""
    positional, flags = split_flags(args, {"-l"})
    _expect(positional, 0, 1, "ls [-l] [path|glob]")
    long = "-l" in flags
    target = positional[0] if positional else "."

    if has_wildcard(target):
        if not print_node_paths(ctx.console, ctx.session.find_nodes(target), long):
            ctx.console.print("[muted]No nodes match[/]")
        return CommandResult()

    print_node_listing(ctx.console, ctx.session.lookup(target), long)
    return CommandResult()


@handle_repository_errors
def cmd_cat(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Show a node with its properties, or a property value."""
    _expect(args, 1, 1, "cat <path|identifier>")
    session = ctx.session
    ref = parse_ref(args[0])

    if isinstance(ref, Identifier) or session.node_exists(ref.value):
        print_node_detail(ctx.console, session.lookup(ref))
    elif session.property_exists(ref.value):
        print_property(ctx.console, session.get_property(ref.value))
    else:
        raise PathNotFoundError(session.get_abs_path(ref.value))
    return CommandResult()


@handle_repository_errors
def cmd_info(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Show session and repository details."""
    container = ctx.container
    session = ctx.session
    repository = session.get_repository()
    profile = container.profile

    print_key_values(
        ctx.console,
        {
            "mode": container.mode.value,
            "profile": profile.name if profile else None,
            "transport": profile.transport_name if profile else None,
            "repository": repository.get_descriptor("jcr.repository.name"),
            "version": repository.get_descriptor("jcr.repository.version"),
            "workspace": session.get_workspace().name,
            "user": session.get_user_id(),
            "cwd": session.cwd,
            "pending changes": session.has_pending_changes(),
        },
    )
    return CommandResult()


@handle_repository_errors
def cmd_mkdir(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Create a node."""
    _expect(args, 1, 2, "mkdir <path> [type]")
    session = ctx.session
    abs_path = session.get_abs_path(args[0])
    if abs_path == paths.ROOT:
        raise UsageError("Cannot create the root node")
    parent = session.get_node(paths.dirname(abs_path))
    node = parent.add_node(paths.basename(abs_path), args[1] if len(args) > 1 else None)
    ctx.console.print(Text.assemble(("Created ", "success"), (node.path, "node")))
    return CommandResult()


@handle_repository_errors
def cmd_set(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Set a property; several values make a multi-valued property."""
    _expect(args, 2, None, "set <property> <value...>")
    session = ctx.session
    abs_path = session.get_abs_path(args[0])
    node = session.get_node(paths.dirname(abs_path))
    values = [parse_value(word) for word in args[1:]]
    node.set_property(paths.basename(abs_path), values if len(values) > 1 else values[0])
    return CommandResult()


@handle_repository_errors
def cmd_unset(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Remove a property."""
    _expect(args, 1, 1, "unset <property>")
    session = ctx.session
    if not session.property_exists(args[0]):
        raise PathNotFoundError(session.get_abs_path(args[0]), "No such property")
    session.remove_item(args[0])
    return CommandResult()


@handle_repository_errors
def cmd_mv(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Move or rename a node."""
    _expect(args, 2, 2, "mv <source> <target>")
    session = ctx.session
    source = session.get_abs_path(args[0])
    target = session.get_abs_target_path(args[0], args[1])
    session.move(args[0], args[1])
    # the working location travels with a moved ancestor
    cwd = session.cwd
    if cwd == source or paths.is_ancestor(source, cwd):
        session.set_cwd(target + cwd[len(source) :])
    ctx.console.print(Text.assemble(("Moved to ", "success"), (target, "node")))
    return CommandResult()


@handle_repository_errors
def cmd_cp(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Copy a node subtree."""
    _expect(args, 2, 2, "cp <source> <target>")
    session = ctx.session
    target = session.get_abs_target_path(args[0], args[1])
    session.get_workspace().copy(session.get_abs_path(args[0]), target)
    ctx.console.print(Text.assemble(("Copied to ", "success"), (target, "node")))
    return CommandResult()


@handle_repository_errors
def cmd_rm(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Remove a node or property."""
    _expect(args, 1, 1, "rm <path>")
    session = ctx.session
    abs_path = session.get_abs_path(args[0])
    session.remove_item(abs_path)
    # keep the working location valid when it was removed with its ancestor
    if session.cwd == abs_path or paths.is_ancestor(abs_path, session.cwd):
        session.set_cwd(paths.dirname(abs_path))
    return CommandResult()


@handle_repository_errors
def cmd_find(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Find nodes by glob pattern or identifier."""
    positional, flags = split_flags(args, {"-l"})
    _expect(positional, 1, 1, "find [-l] <glob|identifier>")
    count = print_node_paths(ctx.console, ctx.session.find_nodes(positional[0]), "-l" in flags)
    if not count:
        ctx.console.print("[muted]No nodes match[/]")
    return CommandResult()


@handle_repository_errors
def cmd_exists(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Tell whether an item exists."""
    _expect(args, 1, 1, "exists <path>")
    if ctx.session.item_exists(args[0]):
        ctx.console.print("[success]yes[/]")
    else:
        ctx.console.print("[warning]no[/]")
    return CommandResult()


@handle_repository_errors
def cmd_save(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Persist pending changes."""
    ctx.session.save()
    ctx.state.exit_requested = False
    ctx.console.print("[success]Saved[/]")
    return CommandResult()


@handle_repository_errors
def cmd_refresh(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Discard pending changes (kept with --keep)."""
    positional, flags = split_flags(args, {"--keep"})
    _expect(positional, 0, 0, "refresh [--keep]")
    session = ctx.session
    session.refresh("--keep" in flags)
    if not session.node_exists(session.cwd):
        session.set_cwd(paths.ROOT)
    return CommandResult()


@handle_repository_errors
def cmd_workspace(ctx: CommandContext, args: list[str]) -> CommandResult:
    """List, switch, create or delete workspaces."""
    usage = "workspace [list | use <name> | create <name> [source] | delete <name>]"
    action = args[0] if args else "list"
    rest = args[1:]
    workspace = ctx.session.get_workspace()

    if action == "list":
        _expect(rest, 0, 0, usage)
        for name in workspace.get_accessible_workspace_names():
            marker = "*" if name == workspace.name else " "
            ctx.console.print(f"{marker} {name}", highlight=False)
    elif action == "use":
        _expect(rest, 1, 1, usage)
        if ctx.session.has_pending_changes():
            raise UsageError("Save or refresh pending changes before switching workspaces")
        ctx.container.change_workspace(rest[0])
    elif action == "create":
        _expect(rest, 1, 2, usage)
        validate_name(rest[0], "workspace")
        workspace.create_workspace(rest[0], rest[1] if len(rest) > 1 else None)
        ctx.console.print(Text.assemble(("Created workspace ", "success"), rest[0]))
    elif action == "delete":
        _expect(rest, 1, 1, usage)
        if rest[0] == workspace.name:
            raise UsageError("Cannot delete the current workspace")
        workspace.delete_workspace(rest[0])
    else:
        raise UsageError(f"Usage: {usage}")
    return CommandResult()


@handle_repository_errors
def cmd_ns(ctx: CommandContext, args: list[str]) -> CommandResult:
    """List or register namespace prefixes."""
    usage = "ns [list | set <prefix> <uri>]"
    action = args[0] if args else "list"
    rest = args[1:]
    session = ctx.session

    if action == "list":
        _expect(rest, 0, 0, usage)
        print_key_values(
            ctx.console,
            {
                prefix: session.get_namespace_uri(prefix)
                for prefix in session.get_namespace_prefixes()
                if prefix
            },
        )
    elif action == "set":
        _expect(rest, 2, 2, usage)
        session.set_namespace_prefix(rest[0], rest[1])
    else:
        raise UsageError(f"Usage: {usage}")
    return CommandResult()


@handle_repository_errors
def cmd_export(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Export a subtree as system view (default) or document view XML."""
    positional, flags = split_flags(args, {"--document", "--no-recurse"})
    _expect(positional, 2, 2, "export <path> <file> [--document] [--no-recurse]")
    session = ctx.session
    path, file_path = positional
    no_recurse = "--no-recurse" in flags

    # resolve before opening so a missing node leaves no empty file behind
    abs_path = session.get_node(path).path
    with open(file_path, "w", encoding="utf-8") as stream:
        if "--document" in flags:
            session.export_document_view(abs_path, stream, False, no_recurse)
        else:
            session.export_system_view(abs_path, stream, False, no_recurse)
    ctx.console.print(Text.assemble(("Exported to ", "success"), file_path))
    return CommandResult()


UUID_BEHAVIOR_NAMES = {
    "new": IMPORT_UUID_CREATE_NEW,
    "remove": IMPORT_UUID_COLLISION_REMOVE_EXISTING,
    "replace": IMPORT_UUID_COLLISION_REPLACE_EXISTING,
    "throw": IMPORT_UUID_COLLISION_THROW,
}


@handle_repository_errors
def cmd_import(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Import system or document view XML below a node."""
    usage = "import <parent> <file> [--uuid=new|remove|replace|throw]"
    behavior = IMPORT_UUID_CREATE_NEW
    positional = []
    for arg in args:
        if arg.startswith("--uuid="):
            name = arg.split("=", 1)[1]
            if name not in UUID_BEHAVIOR_NAMES:
                raise UsageError(f"Usage: {usage}")
            behavior = UUID_BEHAVIOR_NAMES[name]
        else:
            positional.append(arg)
    _expect(positional, 2, 2, usage)

    parent, file_path = positional
    with open(file_path, encoding="utf-8") as source:
        ctx.session.import_xml(parent, source, behavior)
    ctx.console.print(Text.assemble(("Imported ", "success"), file_path))
    return CommandResult()


def cmd_exit(ctx: CommandContext, args: list[str]) -> CommandResult:
    """Exit the shell; asks for confirmation once if changes are unsaved."""
    confirm = ctx.container.config_manager.get_shell_config().get("confirm_exit_with_changes")
    session = ctx.container.session
    unsaved = session.is_live() and session.has_pending_changes()
    if confirm and unsaved and not ctx.state.exit_requested:
        ctx.state.exit_requested = True
        ctx.console.print("[warning]There are unsaved changes. Run exit again to discard them.[/]")
        return CommandResult()
    return CommandResult(action=CommandAction.BREAK)


# =============================================================================
# Command Registry
# =============================================================================

COMMANDS: dict[str, CommandHandler] = {
    "help": cmd_help,
    "pwd": cmd_pwd,
    "cd": cmd_cd,
    "ls": cmd_ls,
    "cat": cmd_cat,
    "info": cmd_info,
    "mkdir": cmd_mkdir,
    "set": cmd_set,
    "unset": cmd_unset,
    "mv": cmd_mv,
    "cp": cmd_cp,
    "rm": cmd_rm,
    "find": cmd_find,
    "exists": cmd_exists,
    "save": cmd_save,
    "refresh": cmd_refresh,
    "workspace": cmd_workspace,
    "ns": cmd_ns,
    "export": cmd_export,
    "import": cmd_import,
    "exit": cmd_exit,
    "quit": cmd_exit,
}

# Usage line -> description, in help order
USAGE: dict[str, str] = {
    "pwd": "Print the current node path",
    "cd [path|id]": "Change the current node (`..` for the parent)",
    "ls [-l] [path|glob]": "List child nodes and properties",
    "cat <path|id>": "Show a node or a property value",
    "info": "Show session details",
    "mkdir <path> [type]": "Create a node",
    "set <prop> <value...>": "Set a property (several values make a list)",
    "unset <prop>": "Remove a property",
    "mv <src> <target>": "Move or rename a node",
    "cp <src> <target>": "Copy a node",
    "rm <path>": "Remove a node or property",
    "find [-l] <glob|id>": "Find nodes, e.g. find /content/*/draft",
    "exists <path>": "Check whether an item exists",
    "save": "Persist pending changes",
    "refresh [--keep]": "Discard pending changes",
    "workspace [list|use|create|delete]": "Manage workspaces",
    "ns [list|set <prefix> <uri>]": "Manage namespace prefixes",
    "export <path> <file> [--document]": "Export a subtree as XML",
    "import <parent> <file> [--uuid=...]": "Import XML below a node",
    "help": "Show this help",
    "exit": "Leave the shell",
}


def dispatch_command(ctx: CommandContext, args: list[str]) -> CommandResult | None:
    """Run the handler for a split command line.

    Returns:
        The handler's result, or None if the command is unknown.
    """
    if not args:
        return CommandResult()

    handler = COMMANDS.get(args[0])
    if handler is None:
        return None
    return handler(ctx, args[1:])


def execute_line(ctx: CommandContext, line: str) -> CommandResult:
    """Expand, split and dispatch one input line.

    Errors never propagate: repository errors are reported by the handlers,
    anything unexpected is logged with its traceback and reported here.
    """
    ctx.state.last_error = None
    try:
        expanded = expand_alias(line, ctx.aliases)
        args = parse_line(expanded)
    except ValueError as e:
        ctx.error(str(e))
        return CommandResult()

    if not args:
        return CommandResult()
    ctx.state.history.append(expanded)

    try:
        result = dispatch_command(ctx, args)
    except Exception as e:
        logger.exception("command_crashed: command=%s", args[0])
        ctx.error(f"{type(e).__name__}: {e}")
        return CommandResult()

    if result is None:
        ctx.error(f"Unknown command: {args[0]} (type 'help' for a list)")
        return CommandResult()

    if result.message:
        ctx.console.print(result.message)
    return result
