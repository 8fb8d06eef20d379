"""Store capability protocols.

These describe what arbor needs from a content repository backend. The
in-memory store implements them, and PathAwareSession both consumes and
implements StoreSession.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import IO, Any, Protocol

from arbor.core.types import Credentials

PropertyValue = str | int | float | bool | list[Any]


class Property(Protocol):
    """A named value attached to a node."""

    @property
    def name(self) -> str: ...

    @property
    def path(self) -> str: ...

    @property
    def value(self) -> PropertyValue: ...

    @property
    def type_name(self) -> str: ...

    @property
    def is_multiple(self) -> bool: ...


class Node(Protocol):
    """An addressable entry in the repository tree."""

    @property
    def name(self) -> str: ...

    @property
    def path(self) -> str: ...

    @property
    def identifier(self) -> str: ...

    @property
    def primary_type(self) -> str: ...

    def get_node_names(self) -> list[str]: ...

    def get_nodes(self, pattern: str | None = None) -> list[Node]: ...

    def get_properties(self, pattern: str | None = None) -> dict[str, Property]: ...

    def add_node(self, rel_path: str, primary_type: str | None = None) -> Node: ...

    def set_property(self, name: str, value: Any) -> Property | None: ...


class Workspace(Protocol):
    """A named tree within a repository."""

    @property
    def name(self) -> str: ...

    def get_accessible_workspace_names(self) -> list[str]: ...

    def copy(self, src_abs_path: str, dest_abs_path: str) -> None: ...

    def create_workspace(self, name: str, src_workspace: str | None = None) -> None: ...

    def delete_workspace(self, name: str) -> None: ...


class Repository(Protocol):
    """Entry point that hands out sessions."""

    def login(
        self, credentials: Credentials | None = None, workspace_name: str | None = None
    ) -> StoreSession: ...

    def get_descriptor(self, key: str) -> Any: ...


class StoreSession(Protocol):
    """The session capability a repository backend exposes.

    Every path argument is an absolute path. PathAwareSession implements the
    same protocol but additionally accepts paths relative to its cwd.
    """

    def get_repository(self) -> Repository: ...

    def get_user_id(self) -> str | None: ...

    def get_attribute_names(self) -> list[str]: ...

    def get_attribute(self, name: str) -> Any: ...

    def get_workspace(self) -> Workspace: ...

    def get_root_node(self) -> Node: ...

    def impersonate(self, credentials: Credentials) -> StoreSession: ...

    def get_node_by_identifier(self, identifier: str) -> Node: ...

    def get_nodes_by_identifier(self, identifiers: Iterable[str]) -> dict[str, Node]: ...

    def get_item(self, abs_path: str) -> Node | Property: ...

    def get_node(self, abs_path: str, depth_hint: int = -1) -> Node: ...

    def get_nodes(self, abs_paths: Iterable[str]) -> dict[str, Node]: ...

    def get_property(self, abs_path: str) -> Property: ...

    def get_properties(self, abs_paths: Iterable[str]) -> dict[str, Property]: ...

    def item_exists(self, abs_path: str) -> bool: ...

    def node_exists(self, abs_path: str) -> bool: ...

    def property_exists(self, abs_path: str) -> bool: ...

    def move(self, src_abs_path: str, dest_abs_path: str) -> None: ...

    def remove_item(self, abs_path: str) -> None: ...

    def save(self) -> None: ...

    def refresh(self, keep_changes: bool) -> None: ...

    def has_pending_changes(self) -> bool: ...

    def has_permission(self, abs_path: str, actions: str) -> bool: ...

    def check_permission(self, abs_path: str, actions: str) -> None: ...

    def has_capability(self, method_name: str, target: Any, arguments: Sequence[Any]) -> bool:
        ...

    def import_xml(self, parent_abs_path: str, source: str | IO[Any], uuid_behavior: int) -> None:
        ...

    def export_system_view(
        self, abs_path: str, stream: IO[Any], skip_binary: bool, no_recurse: bool
    ) -> None: ...

    def export_document_view(
        self, abs_path: str, stream: IO[Any], skip_binary: bool, no_recurse: bool
    ) -> None: ...

    def set_namespace_prefix(self, prefix: str, uri: str) -> None: ...

    def get_namespace_prefixes(self) -> list[str]: ...

    def get_namespace_uri(self, prefix: str) -> str: ...

    def get_namespace_prefix(self, uri: str) -> str: ...

    def logout(self) -> None: ...

    def is_live(self) -> bool: ...

    def get_access_control_manager(self) -> Any: ...

    def get_retention_manager(self) -> Any: ...


class Finder(Protocol):
    """Search strategy that resolves an absolute glob pattern to nodes."""

    def find(self, pattern: str) -> list[Node]:
        """Return nodes whose path matches the pattern, in traversal order."""
        ...
