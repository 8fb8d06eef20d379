"""Transport protocol definitions.

A transport turns the `transport` section of a profile into a repository
that can hand out sessions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from arbor.core.protocols import Repository


class Transport(Protocol):
    """Factory for repositories of one backend type."""

    @property
    def name(self) -> str:
        """Name used in profiles to select this transport."""
        ...

    def get_repository(self, config: dict[str, Any]) -> Repository:
        """Create (or reuse) a repository for the given settings.

        Args:
            config: The profile's transport section.
        """
        ...
