"""Name rules for profiles and workspaces.

Profile names become file names under profiles/ and workspace names show up
in the prompt, so both share one conservative rule set: letters, digits,
dashes and underscores, starting and ending with a letter or digit.
"""

from __future__ import annotations

import re

NAME_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9_-]*[A-Za-z0-9])?$")

MAX_NAME_LENGTH = 64


def name_problem(name: str) -> str | None:
    """Describe what is wrong with a name, or None if it is acceptable."""
    if not name:
        return "is required"
    if len(name) > MAX_NAME_LENGTH:
        return f"must be at most {MAX_NAME_LENGTH} characters"
    if not NAME_PATTERN.match(name):
        return (
            "may only contain letters, digits, dashes and underscores, "
            "and must start and end with a letter or digit"
        )
    return None


def validate_name(name: str, entity: str = "name") -> None:
    """Reject unusable profile or workspace names.

    Example:
        >>> validate_name("staging", "profile")
        >>> validate_name("../etc", "profile")
        Traceback (most recent call last):
        ...
        ValueError: Profile name may only contain letters, digits, ...

    Raises:
        ValueError: Naming the entity and the broken rule.
    """
    problem = name_problem(name)
    if problem is not None:
        raise ValueError(f"{entity.capitalize()} name {problem}")


def is_valid_name(name: str) -> bool:
    return name_problem(name) is None
