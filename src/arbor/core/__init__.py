"""Core - path resolution and addressing over a content repository.

This layer knows nothing about transports, configuration or the shell.
It defines what a store session looks like and decorates one with shell
semantics.

Key classes:
    PathAwareSession: Store session with a current working location.
    TraversalFinder: Glob search by tree traversal.
    NodePath / Identifier: Explicit path-or-identifier references.

Example:
    >>> from arbor.core import PathAwareSession
    >>> from arbor.store import MemoryRepository
    >>>
    >>> session = PathAwareSession(MemoryRepository().login())
    >>> session.get_root_node().add_node("content")
    >>> session.chdir("content")
    >>> session.cwd
    '/content'
"""

from arbor.core.errors import (
    AccessDeniedError,
    InvalidItemStateError,
    ItemExistsError,
    ItemNotFoundError,
    NotFoundError,
    PathNotFoundError,
    ProfileError,
    RepositoryError,
    TransportNotFoundError,
    UnsupportedOperationError,
)
from arbor.core.finder import TraversalFinder
from arbor.core.protocols import Finder, Node, Property, Repository, StoreSession, Workspace
from arbor.core.session import PathAwareSession, SessionManager
from arbor.core.types import Credentials, Identifier, NodePath, PathOrId, is_uuid, parse_ref

__all__ = [
    # Session
    "PathAwareSession",
    "SessionManager",
    "TraversalFinder",
    # References
    "Credentials",
    "Identifier",
    "NodePath",
    "PathOrId",
    "is_uuid",
    "parse_ref",
    # Protocols
    "Finder",
    "Node",
    "Property",
    "Repository",
    "StoreSession",
    "Workspace",
    # Errors
    "RepositoryError",
    "NotFoundError",
    "PathNotFoundError",
    "ItemNotFoundError",
    "AccessDeniedError",
    "ItemExistsError",
    "InvalidItemStateError",
    "UnsupportedOperationError",
    "TransportNotFoundError",
    "ProfileError",
]
