"""Reference types for addressing repository items.

A shell argument names a node either by path or by identifier. The
distinction is made once, where raw input enters the system, and carried
as an explicit type from there on. Credentials live here too, so the core
layer can log in without depending on a particular store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid(value: str) -> bool:
    """Check whether a string has the canonical 8-4-4-4-12 UUID form.

    Example:
        >>> is_uuid("842e61c0-09ab-42a9-87c0-308ccc90e6f4")
        True
        >>> is_uuid("/content/842e61c0")
        False
    """
    return bool(UUID_PATTERN.match(value))


@dataclass(frozen=True)
class NodePath:
    """A path reference, absolute or relative to the current location."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Identifier:
    """A store-assigned node identifier."""

    value: str

    def __str__(self) -> str:
        return self.value


PathOrId = NodePath | Identifier


def parse_ref(text: str | PathOrId) -> PathOrId:
    """Classify raw input as an identifier or a path.

    Already-tagged references are returned unchanged.

    Args:
        text: Raw user input, or an existing reference.

    Returns:
        Identifier if the text looks like a UUID, NodePath otherwise.
    """
    if isinstance(text, (NodePath, Identifier)):
        return text
    if is_uuid(text):
        return Identifier(text)
    return NodePath(text)


@dataclass
class Credentials:
    """Login credentials handed to Repository.login().

    Attributes:
        user_id: User name reported by get_user_id().
        password: Password; stores that do not authenticate ignore it.
        attributes: Arbitrary session attributes.
    """

    user_id: str = "anonymous"
    password: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
