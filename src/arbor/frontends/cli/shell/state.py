"""Shell state."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ShellState:
    """Mutable state of one shell run.

    Attributes:
        history: Lines executed so far (after alias expansion).
        last_error: Message of the most recent failed command, or None.
        exit_requested: Set once `exit` was refused because of unsaved changes.
    """

    history: list[str] = field(default_factory=list)
    last_error: str | None = None
    exit_requested: bool = False
