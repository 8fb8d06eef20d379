"""Color themes for the shell.

Shell output refers to style names instead of colors:

    node, property, value, type_name, identifier    tree items
    prompt, success, warning, error, muted          messages

A theme maps each of those names to a rich style. Choose one with
`theme:` in arbor.yml; unknown names fall back to the default.
"""

from __future__ import annotations

import logging

from rich.theme import Theme

logger = logging.getLogger(__name__)

STYLE_NAMES = (
    "node",
    "property",
    "value",
    "type_name",
    "identifier",
    "prompt",
    "success",
    "warning",
    "error",
    "muted",
)

DEFAULT_STYLES: dict[str, str] = {
    "node": "bold blue",
    "property": "cyan",
    "value": "white",
    "type_name": "dim",
    "identifier": "dim cyan",
    "prompt": "bold green",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "muted": "dim",
}

# Palette overrides; names left out keep their default style
PALETTES: dict[str, dict[str, str]] = {
    "default": {},
    "nord": {
        "node": "bold #81A1C1",
        "property": "#88C0D0",
        "value": "#ECEFF4",
        "type_name": "#616E88",
        "identifier": "#5E81AC",
        "prompt": "bold #88C0D0",
        "success": "#A3BE8C",
        "warning": "#EBCB8B",
        "error": "bold #BF616A",
        "muted": "#616E88",
    },
    "dracula": {
        "node": "bold #BD93F9",
        "property": "#8BE9FD",
        "value": "#F8F8F2",
        "type_name": "#6272A4",
        "identifier": "italic #6272A4",
        "prompt": "bold #50FA7B",
        "success": "#50FA7B",
        "warning": "#FFB86C",
        "error": "bold #FF5555",
        "muted": "#6272A4",
    },
    "mono": {
        "node": "bold",
        "property": "underline",
        "value": "default",
        "identifier": "dim",
        "prompt": "bold",
        "success": "bold",
    },
}


def create_theme(**styles: str) -> Theme:
    """Build a theme from the default styles plus overrides.

    Raises:
        ValueError: On a style name the shell does not use.

    Example:
        >>> theme = create_theme(node="bold magenta", muted="grey50")
    """
    unknown = sorted(set(styles) - set(STYLE_NAMES))
    if unknown:
        raise ValueError(f"Unknown style names: {', '.join(unknown)}")
    return Theme({**DEFAULT_STYLES, **styles})


def get_theme(name: str) -> Theme:
    """Theme for a palette name (case-insensitive)."""
    palette = PALETTES.get(name.lower())
    if palette is None:
        logger.warning("unknown_theme: name=%s, using=default", name)
        palette = PALETTES["default"]
    return create_theme(**palette)
