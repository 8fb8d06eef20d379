"""Arbor - interactive shell for hierarchical content repositories.

Arbor gives a content repository (a tree of nodes carrying typed
properties) a filesystem-like shell: a current working location, relative
paths, glob search, tab completion and workspace switching.

Layers:
    core/       Path resolution, addressing, store protocols
    store/      In-memory reference repository
    transport/  Named ways of obtaining a repository (memory, fs)
    config/     Config directory, profiles, aliases
    frontends/  The `arbor` CLI and interactive shell

Example:
    >>> from arbor import build_container
    >>> container = build_container()
    >>> session = container.session
    >>> session.get_root_node().add_node("content")
    >>> session.chdir("content")
"""

from arbor.__version__ import __version__
from arbor.compose import ShellContainer, ShellMode, build_container, create_embedded
from arbor.core import (
    AccessDeniedError,
    Identifier,
    ItemExistsError,
    ItemNotFoundError,
    NodePath,
    PathAwareSession,
    PathNotFoundError,
    RepositoryError,
    SessionManager,
)
from arbor.store import Credentials, MemoryRepository

__all__ = [
    "__version__",
    "ShellContainer",
    "ShellMode",
    "build_container",
    "create_embedded",
    "PathAwareSession",
    "SessionManager",
    "NodePath",
    "Identifier",
    "RepositoryError",
    "PathNotFoundError",
    "ItemNotFoundError",
    "AccessDeniedError",
    "ItemExistsError",
    "Credentials",
    "MemoryRepository",
]
