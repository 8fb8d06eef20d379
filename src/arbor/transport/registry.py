"""TransportRegistry - transports by name."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from arbor.core.errors import TransportNotFoundError

if TYPE_CHECKING:
    from arbor.transport.protocol import Transport

logger = logging.getLogger(__name__)


@dataclass
class TransportRegistry:
    """Registry of available transports.

    Example:
        >>> registry = TransportRegistry()
        >>> registry.register(MemoryTransport())
        >>> registry.get_transport("memory").name
        'memory'
    """

    _transports: dict[str, Transport] = field(default_factory=dict)

    def register(self, transport: Transport) -> None:
        """Register a transport, replacing one with the same name."""
        self._transports[transport.name] = transport
        logger.debug("transport_registered: name=%s", transport.name)

    def get_transport(self, name: str) -> Transport:
        """Look up a transport.

        Raises:
            TransportNotFoundError: If no transport has that name.
        """
        try:
            return self._transports[name]
        except KeyError:
            raise TransportNotFoundError(name, self.get_transport_names()) from None

    def get_transport_names(self) -> list[str]:
        return list(self._transports)

    def has_transport(self, name: str) -> bool:
        return name in self._transports
