"""Memory transport - process-local repository.

Useful for:
- Testing
- Scratch sessions that should not touch disk
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from arbor.store.memory import MemoryRepository


@dataclass
class MemoryTransport:
    """Transport that serves one in-memory repository.

    The repository lives as long as the transport, so switching workspaces
    or logging in again keeps saved content.

    Example:
        >>> transport = MemoryTransport()
        >>> session = transport.get_repository({}).login()
    """

    repository: MemoryRepository = field(default_factory=MemoryRepository)

    @property
    def name(self) -> str:
        return "memory"

    def get_repository(self, config: dict[str, Any]) -> MemoryRepository:
        return self.repository
