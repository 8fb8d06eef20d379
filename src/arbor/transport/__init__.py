"""Transport - repository backends selectable by profile.

A transport turns a profile's transport settings into a repository.
Transports are looked up by name through a TransportRegistry.

Available transports:
    MemoryTransport: Process-local repository (`memory`).
    FilesystemTransport: Repository persisted to a JSON file (`fs`).

Example:
    >>> from arbor.transport import MemoryTransport, TransportRegistry
    >>>
    >>> registry = TransportRegistry()
    >>> registry.register(MemoryTransport())
    >>> repository = registry.get_transport("memory").get_repository({})
    >>> session = repository.login()
"""

from arbor.transport.filesystem import FilesystemTransport, FileRepository
from arbor.transport.memory import MemoryTransport
from arbor.transport.protocol import Transport
from arbor.transport.registry import TransportRegistry

__all__ = [
    # Protocols
    "Transport",
    "TransportRegistry",
    # Implementations
    "MemoryTransport",
    "FilesystemTransport",
    "FileRepository",
]
