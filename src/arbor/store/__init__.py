"""In-memory content repository.

The memory store is the reference backend behind the `memory` and `fs`
transports. Sessions work on a private copy of their workspace and commit
on save().

Example:
    >>> from arbor.store import Credentials, MemoryRepository
    >>> session = MemoryRepository().login(Credentials("admin"))
    >>> session.get_root_node().add_node("content")
    >>> session.save()
"""

from arbor.store.items import MemoryNode, MemoryProperty
from arbor.store.memory import (
    DEFAULT_WORKSPACE,
    Credentials,
    MemoryRepository,
    MemorySession,
    MemoryWorkspace,
)
from arbor.store.records import Record
from arbor.store.views import (
    IMPORT_UUID_COLLISION_REMOVE_EXISTING,
    IMPORT_UUID_COLLISION_REPLACE_EXISTING,
    IMPORT_UUID_COLLISION_THROW,
    IMPORT_UUID_CREATE_NEW,
)

__all__ = [
    "DEFAULT_WORKSPACE",
    "Credentials",
    "MemoryRepository",
    "MemorySession",
    "MemoryWorkspace",
    "MemoryNode",
    "MemoryProperty",
    "Record",
    "IMPORT_UUID_CREATE_NEW",
    "IMPORT_UUID_COLLISION_REMOVE_EXISTING",
    "IMPORT_UUID_COLLISION_REPLACE_EXISTING",
    "IMPORT_UUID_COLLISION_THROW",
]
