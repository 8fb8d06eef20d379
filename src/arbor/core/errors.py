"""Repository error taxonomy.

All store failures derive from RepositoryError so frontends can catch a
single base class at the command boundary. Lookup failures also derive from
LookupError and permission failures from PermissionError, so callers that
only care about the builtin category can catch those instead.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for errors raised by a content repository."""


class NotFoundError(RepositoryError, LookupError):
    """An item could not be resolved."""


class PathNotFoundError(NotFoundError):
    """No accessible item exists at the given absolute path."""

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"No item at path: {path}")


class ItemNotFoundError(NotFoundError):
    """No item exists with the given identifier."""

    def __init__(self, identifier: str, message: str | None = None):
        self.identifier = identifier
        super().__init__(message or f"No node with identifier: {identifier}")


class AccessDeniedError(RepositoryError, PermissionError):
    """The item exists but the session lacks permission for the action."""

    def __init__(self, path: str, actions: str = "read"):
        self.path = path
        self.actions = actions
        super().__init__(f"Access denied ({actions}): {path}")


class ItemExistsError(RepositoryError):
    """An item already exists where a new one was to be created."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Item already exists: {path}")


class InvalidItemStateError(RepositoryError):
    """The operation is not valid for the current state of the item."""


class UnsupportedOperationError(RepositoryError):
    """The repository does not implement the requested operation."""


class TransportNotFoundError(RepositoryError):
    """No transport is registered under the requested name."""

    def __init__(self, name: str, known: list[str]):
        self.name = name
        self.known = known
        names = ", ".join(sorted(known)) or "none"
        super().__init__(f"Unknown transport '{name}' (available: {names})")


class ProfileError(RepositoryError):
    """A connection profile is missing or malformed."""
