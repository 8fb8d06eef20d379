"""In-memory content repository.

Reference implementation of the StoreSession capability. A repository holds
one record tree per workspace. Each session checks out a private copy of its
workspace tree; mutations stay in that copy (pending changes) until save()
commits it back.

Example:
    >>> repository = MemoryRepository()
    >>> session = repository.login(Credentials("admin"))
    >>> content = session.get_root_node().add_node("content")
    >>> content.set_property("title", "Hello")
    >>> session.save()
    >>> repository.login().get_property("/content/title").value
    'Hello'
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import IO, Any

from arbor.__version__ import __version__
from arbor.core import paths
from arbor.core.errors import (
    AccessDeniedError,
    InvalidItemStateError,
    ItemExistsError,
    ItemNotFoundError,
    PathNotFoundError,
    RepositoryError,
    UnsupportedOperationError,
)
from arbor.core.types import Credentials
from arbor.store import views
from arbor.store.items import MemoryNode, MemoryProperty, validate_name
from arbor.store.records import Record, new_identifier, new_root

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE = "default"

BUILTIN_NAMESPACES = {
    "": "",
    "jcr": "http://www.jcp.org/jcr/1.0",
    "nt": "http://www.jcp.org/jcr/nt/1.0",
    "mix": "http://www.jcp.org/jcr/mix/1.0",
    "rep": "internal",
    "sv": views.SV_URI,
    "xml": "http://www.w3.org/XML/1998/namespace",
}

ACTIONS = frozenset({"read", "add_node", "set_property", "remove"})


def parse_actions(actions: str) -> list[str]:
    """Split a comma-separated action list.

    Raises:
        ValueError: If an action name is unknown.
    """
    names = [action.strip() for action in actions.split(",") if action.strip()]
    for name in names:
        if name not in ACTIONS:
            raise ValueError(f"Unknown action '{name}' (expected one of {sorted(ACTIONS)})")
    return names


class MemoryRepository:
    """Repository whose workspaces live in process memory.

    Args:
        workspaces: Initial workspace trees by name. A `default` workspace
            with an empty root is created when omitted.
        denied: Access rules as {path: actions}; each action is denied on
            the path and everything below it, for every session.
    """

    def __init__(
        self,
        workspaces: dict[str, Record] | None = None,
        denied: dict[str, Iterable[str]] | None = None,
    ):
        self._workspaces: dict[str, Record] = workspaces or {DEFAULT_WORKSPACE: new_root()}
        self.denied: dict[str, frozenset[str]] = {
            path: frozenset(actions) for path, actions in (denied or {}).items()
        }
        self._descriptors: dict[str, Any] = {
            "jcr.specification.version": "2.0",
            "jcr.repository.name": "arbor memory repository",
            "jcr.repository.vendor": "arbor",
            "jcr.repository.version": __version__,
        }

    def login(
        self, credentials: Credentials | None = None, workspace_name: str | None = None
    ) -> MemorySession:
        """Open a session on a workspace.

        Raises:
            RepositoryError: If the workspace does not exist.
        """
        name = workspace_name or DEFAULT_WORKSPACE
        if name not in self._workspaces:
            raise RepositoryError(f"No such workspace: {name}")
        credentials = credentials or Credentials()
        logger.debug("login: user=%s, workspace=%s", credentials.user_id, name)
        return MemorySession(self, name, credentials)

    def get_descriptor_keys(self) -> list[str]:
        return list(self._descriptors)

    def get_descriptor(self, key: str) -> Any:
        return self._descriptors.get(key)

    # =========================================================================
    # Workspaces
    # =========================================================================

    def workspace_names(self) -> list[str]:
        return list(self._workspaces)

    def create_workspace(self, name: str, src_workspace: str | None = None) -> None:
        """Create a workspace, empty or cloned from another one.

        Raises:
            ItemExistsError: If the workspace already exists.
            RepositoryError: If the source workspace does not exist.
        """
        if name in self._workspaces:
            raise ItemExistsError(f"workspace {name}")
        if src_workspace is not None:
            if src_workspace not in self._workspaces:
                raise RepositoryError(f"No such workspace: {src_workspace}")
            self._workspaces[name] = self._workspaces[src_workspace].clone()
        else:
            self._workspaces[name] = new_root()
        logger.debug("workspace_created: name=%s, source=%s", name, src_workspace)
        self.persist()

    def delete_workspace(self, name: str) -> None:
        """Delete a workspace. The default workspace cannot be deleted."""
        if name == DEFAULT_WORKSPACE:
            raise RepositoryError("The default workspace cannot be deleted")
        if name not in self._workspaces:
            raise RepositoryError(f"No such workspace: {name}")
        del self._workspaces[name]
        logger.debug("workspace_deleted: name=%s", name)
        self.persist()

    # =========================================================================
    # Checkout / commit
    # =========================================================================

    def checkout(self, workspace_name: str) -> Record:
        """Private copy of a workspace tree."""
        try:
            return self._workspaces[workspace_name].clone()
        except KeyError:
            raise RepositoryError(f"No such workspace: {workspace_name}") from None

    def commit(self, workspace_name: str, root: Record) -> None:
        """Replace a workspace tree with a copy of the given root."""
        if workspace_name not in self._workspaces:
            raise RepositoryError(f"No such workspace: {workspace_name}")
        self._workspaces[workspace_name] = root.clone()
        self.persist()

    def persist(self) -> None:
        """Hook called after every committed change. No-op in memory."""

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "workspaces": {name: root.to_dict() for name, root in self._workspaces.items()},
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        """Replace all workspaces with the content of a to_dict() dump."""
        workspaces = {
            name: Record.from_dict("", root)
            for name, root in data.get("workspaces", {}).items()
        }
        self._workspaces = workspaces or {DEFAULT_WORKSPACE: new_root()}


class MemoryWorkspace:
    """Workspace view bound to a session."""

    def __init__(self, session: MemorySession, name: str):
        self._session = session
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def get_session(self) -> MemorySession:
        return self._session

    def get_accessible_workspace_names(self) -> list[str]:
        return self._session.get_repository().workspace_names()

    def copy(self, src_abs_path: str, dest_abs_path: str) -> None:
        """Copy a subtree within the session's working tree.

        The copy receives fresh identifiers. It becomes a pending change
        of the session, like any other mutation.

        Raises:
            PathNotFoundError: If the source or the destination parent is missing.
            ItemExistsError: If the destination already exists.
        """
        self._session._copy(src_abs_path, dest_abs_path)

    def create_workspace(self, name: str, src_workspace: str | None = None) -> None:
        self._session.get_repository().create_workspace(name, src_workspace)

    def delete_workspace(self, name: str) -> None:
        self._session.get_repository().delete_workspace(name)


class MemorySession:
    """Session on one workspace of a MemoryRepository."""

    def __init__(self, repository: MemoryRepository, workspace_name: str, credentials: Credentials):
        self._repository = repository
        self._workspace = MemoryWorkspace(self, workspace_name)
        self._credentials = credentials
        self._root = repository.checkout(workspace_name)
        self._namespaces = dict(BUILTIN_NAMESPACES)
        self._dirty = False
        self._live = True

    # =========================================================================
    # Internal helpers (used by items and workspace)
    # =========================================================================

    def _ensure_live(self) -> None:
        if not self._live:
            raise InvalidItemStateError("Session has been logged out")

    def _mark_dirty(self) -> None:
        self._dirty = True

    def _is_denied(self, path: str, action: str) -> bool:
        for rule_path, actions in self._repository.denied.items():
            if action in actions and (path == rule_path or paths.is_ancestor(rule_path, path)):
                return True
        return False

    def _readable_children(self, record: Record) -> Iterator[Record]:
        for child in record.children.values():
            if not self._is_denied(child.path, "read"):
                yield child

    def _find(self, abs_path: str) -> Record | None:
        self._ensure_live()
        if not abs_path.startswith("/"):
            raise ValueError(f"Not an absolute path: {abs_path}")
        if self._is_denied(abs_path, "read"):
            return None
        record = self._root
        for segment in paths.segments(abs_path):
            child = record.children.get(segment)
            if child is None:
                return None
            record = child
        return record

    def _require(self, abs_path: str) -> Record:
        record = self._find(abs_path)
        if record is None:
            raise PathNotFoundError(abs_path)
        return record

    def _find_identifier(self, identifier: str) -> Record | None:
        for record in self._root.walk():
            if record.identifier == identifier:
                return record
        return None

    def _copy(self, src_abs_path: str, dest_abs_path: str) -> None:
        source = self._require(src_abs_path)
        parent = self._require(paths.dirname(dest_abs_path))
        name = paths.basename(dest_abs_path)
        validate_name(name)
        self.check_permission(dest_abs_path, "add_node")
        if name in parent.children:
            raise ItemExistsError(dest_abs_path)

        copy = source.clone(new_identifiers=True)
        copy.name = name
        parent.attach(copy)
        self._mark_dirty()
        logger.debug("copy: src=%s, dest=%s", src_abs_path, dest_abs_path)

    # =========================================================================
    # Session metadata
    # =========================================================================

    def get_repository(self) -> MemoryRepository:
        return self._repository

    def get_user_id(self) -> str | None:
        return self._credentials.user_id

    def get_attribute_names(self) -> list[str]:
        return list(self._credentials.attributes)

    def get_attribute(self, name: str) -> Any:
        return self._credentials.attributes.get(name)

    def get_workspace(self) -> MemoryWorkspace:
        return self._workspace

    def impersonate(self, credentials: Credentials) -> MemorySession:
        """Open a new session for another user on the same workspace."""
        self._ensure_live()
        return self._repository.login(credentials, self._workspace.name)

    # =========================================================================
    # Reading
    # =========================================================================

    def get_root_node(self) -> MemoryNode:
        return MemoryNode(self, self._require(paths.ROOT))

    def get_node_by_identifier(self, identifier: str) -> MemoryNode:
        """Node by identifier.

        Raises:
            ItemNotFoundError: If no node has the identifier.
            AccessDeniedError: If the node exists but is not readable.
        """
        self._ensure_live()
        record = self._find_identifier(identifier)
        if record is None:
            raise ItemNotFoundError(identifier)
        if self._is_denied(record.path, "read"):
            raise AccessDeniedError(record.path, "read")
        return MemoryNode(self, record)

    def get_nodes_by_identifier(self, identifiers: Iterable[str]) -> dict[str, MemoryNode]:
        """Readable nodes for the identifiers that exist, keyed by identifier."""
        result = {}
        for identifier in identifiers:
            record = self._find_identifier(identifier)
            if record is not None and not self._is_denied(record.path, "read"):
                result[identifier] = MemoryNode(self, record)
        return result

    def get_item(self, abs_path: str) -> MemoryNode | MemoryProperty:
        """Node at the path, or else the property at the path."""
        record = self._find(abs_path)
        if record is not None:
            return MemoryNode(self, record)
        return self.get_property(abs_path)

    def get_node(self, abs_path: str, depth_hint: int = -1) -> MemoryNode:
        """Node at an absolute path.

        Raises:
            PathNotFoundError: If no readable node exists there.
        """
        return MemoryNode(self, self._require(abs_path))

    def get_nodes(self, abs_paths: Iterable[str]) -> dict[str, MemoryNode]:
        """Nodes for the paths that exist, keyed by path."""
        result = {}
        for abs_path in abs_paths:
            record = self._find(abs_path)
            if record is not None:
                result[abs_path] = MemoryNode(self, record)
        return result

    def get_property(self, abs_path: str) -> MemoryProperty:
        """Property at an absolute path.

        Raises:
            PathNotFoundError: If the parent or the property is missing.
        """
        if abs_path == paths.ROOT:
            raise PathNotFoundError(abs_path)
        parent = self._find(paths.dirname(abs_path))
        name = paths.basename(abs_path)
        if parent is None or name not in parent.properties:
            raise PathNotFoundError(abs_path)
        return MemoryProperty(self, parent, name)

    def get_properties(self, abs_paths: Iterable[str]) -> dict[str, MemoryProperty]:
        """Properties for the paths that exist, keyed by path."""
        result = {}
        for abs_path in abs_paths:
            if self.property_exists(abs_path):
                result[abs_path] = self.get_property(abs_path)
        return result

    def item_exists(self, abs_path: str) -> bool:
        return self.node_exists(abs_path) or self.property_exists(abs_path)

    def node_exists(self, abs_path: str) -> bool:
        return self._find(abs_path) is not None

    def property_exists(self, abs_path: str) -> bool:
        if abs_path == paths.ROOT:
            return False
        parent = self._find(paths.dirname(abs_path))
        return parent is not None and paths.basename(abs_path) in parent.properties

    # =========================================================================
    # Writing
    # =========================================================================

    def move(self, src_abs_path: str, dest_abs_path: str) -> None:
        """Move a node to a new absolute path.

        Raises:
            PathNotFoundError: If the source or the destination parent is missing.
            ItemExistsError: If a node already exists at the destination.
            RepositoryError: If moving the root or into the node's own subtree.
        """
        if src_abs_path == paths.ROOT:
            raise RepositoryError("The root node cannot be moved")
        if src_abs_path == dest_abs_path or paths.is_ancestor(src_abs_path, dest_abs_path):
            raise RepositoryError(f"Cannot move {src_abs_path} into itself")

        source = self._require(src_abs_path)
        parent = self._require(paths.dirname(dest_abs_path))
        name = paths.basename(dest_abs_path)
        validate_name(name)
        self.check_permission(src_abs_path, "remove")
        self.check_permission(dest_abs_path, "add_node")
        if name in parent.children:
            raise ItemExistsError(dest_abs_path)

        source.detach()
        source.name = name
        parent.attach(source)
        self._mark_dirty()
        logger.debug("move: src=%s, dest=%s", src_abs_path, dest_abs_path)

    def remove_item(self, abs_path: str) -> None:
        """Remove the node or property at a path.

        Raises:
            PathNotFoundError: If nothing exists at the path.
            RepositoryError: If the path is the root.
        """
        if abs_path == paths.ROOT:
            raise RepositoryError("The root node cannot be removed")
        self.check_permission(abs_path, "remove")

        record = self._find(abs_path)
        if record is not None:
            record.detach()
        else:
            parent = self._find(paths.dirname(abs_path))
            name = paths.basename(abs_path)
            if parent is None or name not in parent.properties:
                raise PathNotFoundError(abs_path)
            del parent.properties[name]
        self._mark_dirty()
        logger.debug("remove_item: path=%s", abs_path)

    def save(self) -> None:
        """Commit pending changes to the workspace."""
        self._ensure_live()
        self._repository.commit(self._workspace.name, self._root)
        self._dirty = False
        logger.debug("save: workspace=%s", self._workspace.name)

    def refresh(self, keep_changes: bool) -> None:
        """Discard pending changes unless keep_changes is set."""
        self._ensure_live()
        if keep_changes:
            return
        self._root = self._repository.checkout(self._workspace.name)
        self._dirty = False
        logger.debug("refresh: workspace=%s", self._workspace.name)

    def has_pending_changes(self) -> bool:
        return self._dirty

    # =========================================================================
    # Permissions
    # =========================================================================

    def has_permission(self, abs_path: str, actions: str) -> bool:
        return not any(self._is_denied(abs_path, action) for action in parse_actions(actions))

    def check_permission(self, abs_path: str, actions: str) -> None:
        """Raise AccessDeniedError unless all actions are permitted."""
        if not self.has_permission(abs_path, actions):
            raise AccessDeniedError(abs_path, actions)

    def has_capability(self, method_name: str, target: Any, arguments: Sequence[Any]) -> bool:
        return callable(getattr(self, method_name, None))

    # =========================================================================
    # Import / export
    # =========================================================================

    def import_xml(self, parent_abs_path: str, source: str | IO[Any], uuid_behavior: int) -> None:
        """Import system or document view XML below a node.

        Raises:
            PathNotFoundError: If the parent does not exist.
            ItemExistsError: On a name collision, or an identifier collision
                with IMPORT_UUID_COLLISION_THROW.
            ValueError: If uuid_behavior is unknown.
        """
        if uuid_behavior not in views.UUID_BEHAVIORS:
            raise ValueError(f"Unknown uuid behavior: {uuid_behavior}")
        self._require(parent_abs_path)
        self.check_permission(parent_abs_path, "add_node")
        imported = views.parse_import(source, self._namespaces)

        # work on a copy of the tree so a failed import leaves no trace
        original = self._root
        self._root = original.clone()
        try:
            parent = self._require(parent_abs_path)
            for record in imported:
                target = self._resolve_collisions(parent, record, uuid_behavior)
                if record.name in target.children:
                    raise ItemExistsError(paths.join(target.path, record.name))
                target.attach(record)
        except Exception:
            self._root = original
            raise
        self._mark_dirty()
        logger.debug("import_xml: parent=%s, behavior=%d", parent_abs_path, uuid_behavior)

    def _resolve_collisions(self, parent: Record, imported: Record, uuid_behavior: int) -> Record:
        """Apply uuid_behavior to an imported subtree; return where to attach it."""
        if uuid_behavior == views.IMPORT_UUID_CREATE_NEW:
            for record in imported.walk():
                record.identifier = new_identifier()
            return parent

        target = parent
        for record in list(imported.walk()):
            existing = self._find_identifier(record.identifier)
            if existing is None:
                continue
            if uuid_behavior == views.IMPORT_UUID_COLLISION_THROW:
                raise ItemExistsError(existing.path)
            if existing.parent is None:
                raise RepositoryError("Cannot replace the root node")
            if uuid_behavior == views.IMPORT_UUID_COLLISION_REPLACE_EXISTING and record is imported:
                target = existing.parent
            existing.detach()
        return target

    def export_system_view(
        self, abs_path: str, stream: IO[Any], skip_binary: bool, no_recurse: bool
    ) -> None:
        views.export_system_view(self._require(abs_path), stream, no_recurse)

    def export_document_view(
        self, abs_path: str, stream: IO[Any], skip_binary: bool, no_recurse: bool
    ) -> None:
        views.export_document_view(self._require(abs_path), stream, self._namespaces, no_recurse)

    # =========================================================================
    # Namespaces
    # =========================================================================

    def set_namespace_prefix(self, prefix: str, uri: str) -> None:
        """Map a prefix to a namespace URI for this session.

        Raises:
            RepositoryError: For reserved `xml` prefixes or an empty prefix.
        """
        if not prefix or prefix.lower().startswith("xml"):
            raise RepositoryError(f"Reserved namespace prefix: {prefix!r}")
        for existing, existing_uri in list(self._namespaces.items()):
            if existing_uri == uri:
                del self._namespaces[existing]
        self._namespaces[prefix] = uri

    def get_namespace_prefixes(self) -> list[str]:
        return list(self._namespaces)

    def get_namespace_uri(self, prefix: str) -> str:
        try:
            return self._namespaces[prefix]
        except KeyError:
            raise RepositoryError(f"Unknown namespace prefix: {prefix}") from None

    def get_namespace_prefix(self, uri: str) -> str:
        for prefix, known in self._namespaces.items():
            if known == uri:
                return prefix
        raise RepositoryError(f"Unknown namespace URI: {uri}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def logout(self) -> None:
        self._live = False
        logger.debug("logout: user=%s", self._credentials.user_id)

    def is_live(self) -> bool:
        return self._live

    def get_access_control_manager(self) -> Any:
        raise UnsupportedOperationError("Access control management is not supported")

    def get_retention_manager(self) -> Any:
        raise UnsupportedOperationError("Retention management is not supported")
