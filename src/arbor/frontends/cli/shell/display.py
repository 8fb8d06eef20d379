"""Display functions for the shell.

All output goes through a rich Console so themes apply; tree items use the
`node`, `property` and `value` styles.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from rich.console import Console

    from arbor.core.protocols import Node, Property

# Values longer than this are cut in short listings
VALUE_WIDTH = 60


def format_value(value: Any, width: int | None = None) -> str:
    """Render a property value on one line.

    Example:
        >>> format_value(["a", "b"])
        '[a, b]'
        >>> format_value(True)
        'true'
    """
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, list):
        text = "[" + ", ".join(format_value(item) for item in value) + "]"
    else:
        text = str(value)

    text = text.replace("\n", "\\n")
    if width is not None and len(text) > width:
        text = text[: width - 3] + "..."
    return text


def print_help(console: Console, commands: dict[str, str], aliases: dict[str, str]) -> None:
    """Print the command and alias overview.

    Args:
        console: Rich console for output.
        commands: Usage line -> description.
        aliases: Alias name -> expansion.
    """
    console.print()
    console.print("[bold]Commands:[/]")
    width = max((len(usage) for usage in commands), default=0)
    for usage, description in commands.items():
        console.print(
            f"  [bold]{escape(usage.ljust(width))}[/]  {escape(description)}", highlight=False
        )

    if aliases:
        console.print()
        console.print("[bold]Aliases:[/]")
        for name, expansion in sorted(aliases.items()):
            console.print(f"  [bold]{escape(name)}[/] = {escape(expansion)}", highlight=False)

    console.print()
    console.print("[muted]Paths are relative to the current node; identifiers work anywhere a[/]")
    console.print("[muted]single node is expected. Ctrl+C twice or Ctrl+D to leave.[/]")
    console.print()


def print_node_listing(console: Console, node: Node, long: bool = False) -> None:
    """List a node's children and properties.

    Children come first, suffixed with `/`. The long form adds node
    identifiers and shows full property values.
    """
    table = Table(show_header=long, box=None, pad_edge=False)
    table.add_column("Name")
    table.add_column("Type", style="type_name")
    table.add_column("Value")

    for child in node.get_nodes():
        value = Text(child.identifier, style="identifier") if long else Text("")
        table.add_row(Text(f"{child.name}/", style="node"), Text(child.primary_type), value)

    for name, prop in node.get_properties().items():
        text = format_value(prop.value, None if long else VALUE_WIDTH)
        table.add_row(Text(name, style="property"), Text(prop.type_name), Text(text, style="value"))

    if table.row_count:
        console.print(table)
    else:
        console.print("[muted](empty)[/]")


def print_node_paths(console: Console, nodes: Iterable[Node], long: bool = False) -> int:
    """Print one node path per line.

    Returns:
        Number of nodes printed.
    """
    count = 0
    for node in nodes:
        if long:
            console.print(
                Text.assemble(
                    (node.path, "node"),
                    "  ",
                    (node.primary_type, "type_name"),
                    "  ",
                    (node.identifier, "identifier"),
                )
            )
        else:
            console.print(Text(node.path, style="node"))
        count += 1
    return count


def print_node_detail(console: Console, node: Node) -> None:
    """Print a node's identity followed by all of its properties."""
    console.print(Text(node.path, style="node"))
    console.print(Text.assemble(("  identifier  ", "muted"), (node.identifier, "identifier")))
    console.print(Text.assemble(("  type        ", "muted"), (node.primary_type, "type_name")))

    properties = node.get_properties()
    if not properties:
        return

    console.print()
    table = Table(show_header=True, box=None, pad_edge=False)
    table.add_column("Property")
    table.add_column("Type", style="type_name")
    table.add_column("Value")
    for name, prop in properties.items():
        table.add_row(
            Text(name, style="property"),
            Text(prop.type_name),
            Text(format_value(prop.value), style="value"),
        )
    console.print(table)


def print_property(console: Console, prop: Property) -> None:
    """Print a property value; multi-valued properties one item per line."""
    if prop.is_multiple:
        for item in prop.value:  # type: ignore[union-attr]
            console.print(Text(format_value(item), style="value"))
    else:
        console.print(Text(format_value(prop.value), style="value"))


def print_key_values(console: Console, values: dict[str, Any]) -> None:
    """Print a two-column key/value table."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Key", style="muted")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(Text(key), Text(format_value(value) if value is not None else "-"))
    console.print(table)
