"""PathAwareSession - store session with a current working location.

Wraps a StoreSession and implements the same protocol. Every operation
that takes a path accepts it relative to the current location; the wrapper
resolves it to an absolute path before forwarding. On top of the store API
it adds shell navigation: `chdir`, completion and glob search.

Example:
    >>> session = PathAwareSession(store_session)
    >>> session.chdir("/content")
    >>> session.get_abs_path("articles")
    '/content/articles'
    >>> session.move("articles/draft", "/archive")   # /archive exists
    >>> session.node_exists("/archive/draft")
    True
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import IO, TYPE_CHECKING, Any

from arbor.core import paths
from arbor.core.errors import PathNotFoundError
from arbor.core.finder import TraversalFinder
from arbor.core.types import Identifier, PathOrId, parse_ref

if TYPE_CHECKING:
    from arbor.core.protocols import Finder, Node, Property, Repository, StoreSession, Workspace

logger = logging.getLogger(__name__)


class PathAwareSession:
    """Session wrapper that adds current-working-directory semantics.

    Attributes:
        finder: Search strategy used by find_nodes().
    """

    def __init__(self, session: StoreSession, finder: Finder | None = None):
        self._session = session
        self._cwd = paths.ROOT
        self.finder: Finder = finder or TraversalFinder(self)

    # =========================================================================
    # Wrapped session
    # =========================================================================

    @property
    def store_session(self) -> StoreSession:
        """The wrapped store session."""
        return self._session

    def set_store_session(self, session: StoreSession) -> None:
        """Replace the wrapped session, e.g. after a workspace change."""
        logger.debug("store_session_replaced: cwd=%s", self._cwd)
        self._session = session

    # =========================================================================
    # Working location
    # =========================================================================

    @property
    def cwd(self) -> str:
        """Current working location (absolute path)."""
        return self._cwd

    def get_cwd(self) -> str:
        return self._cwd

    def set_cwd(self, cwd: str) -> None:
        """Set the working location without checking that it exists."""
        self._cwd = cwd

    def get_current_node(self) -> Node:
        """Node at the working location.

        Raises:
            PathNotFoundError: If the working location no longer exists.
        """
        return self.get_node(self._cwd)

    def chdir(self, path: str | PathOrId) -> None:
        """Change the working location.

        Identifiers resolve to the path of the identified node. `..` moves
        to the parent. Anything else is resolved against the working
        location. The target is checked before the working location
        changes, so a failed call leaves it untouched.

        Args:
            path: Path, `..`, or node identifier.

        Raises:
            PathNotFoundError: If no node exists at the target path.
            ItemNotFoundError: If the identifier is unknown.
            AccessDeniedError: If the identified node is not readable.
        """
        ref = parse_ref(path)
        if isinstance(ref, Identifier):
            new_path = self._session.get_node_by_identifier(ref.value).path
        else:
            if ref.value == "..":
                new_path = paths.dirname(self._cwd)
            else:
                new_path = self.get_abs_path(ref.value)
            new_path = paths.strip_trailing(new_path)
            # raises if the target does not exist
            self._session.get_node(new_path)

        logger.debug("chdir: from=%s, to=%s", self._cwd, new_path)
        self._cwd = new_path

    def autocomplete(self, text: str, filter_prefix: bool = False) -> list[str] | None:
        """Child node and property names of the current node.

        `text` only narrows the result when filter_prefix is set; by default
        every name is returned and the caller filters.

        Args:
            text: Text being completed.
            filter_prefix: Only return names starting with text.

        Returns:
            Candidate names, or None if the working location no longer exists.
        """
        try:
            node = self._session.get_node(self._cwd)
        except PathNotFoundError:
            logger.debug("autocomplete_failed: cwd=%s, reason=not_found", self._cwd)
            return None

        names = list(node.get_node_names())
        names.extend(node.get_properties())
        if filter_prefix:
            names = [name for name in names if name.startswith(text)]
        return names

    # =========================================================================
    # Path resolution
    # =========================================================================

    def get_abs_path(self, path: str | None) -> str:
        """Resolve a path against the working location.

        Only the leading position is interpreted: `..` and `.` segments
        inside a path are passed through as names.

        Example:
            >>> session.set_cwd("/a/b")
            >>> session.get_abs_path("c")
            '/a/b/c'
            >>> session.get_abs_path("/x/")
            '/x'
            >>> session.get_abs_path(".")
            '/a/b'
        """
        if not path or path == ".":
            return self._cwd

        if path.startswith("/"):
            abs_path = path
        elif self._cwd == paths.ROOT:
            abs_path = paths.ROOT + path
        else:
            abs_path = f"{self._cwd}/{path}"

        return paths.strip_trailing(abs_path)

    def get_abs_paths(self, paths_: Iterable[str]) -> list[str]:
        """Resolve each path with get_abs_path()."""
        return [self.get_abs_path(path) for path in paths_]

    def get_abs_target_path(self, src_path: str, target_path: str) -> str:
        """Infer the destination of a move or copy.

        If a node exists at the target, the source is placed inside it under
        its own name; otherwise the target is the new full path.

        Example:
            >>> session.get_abs_target_path("/a/b", "/c")   # /c missing
            '/c'
            >>> session.get_abs_target_path("/a/b", "/c")   # /c exists
            '/c/b'
        """
        abs_target = self.get_abs_path(target_path)

        try:
            target_node = self._session.get_node(abs_target)
        except PathNotFoundError:
            return abs_target

        name = paths.basename(self.get_abs_path(src_path))
        return paths.join(target_node.path, name)

    # =========================================================================
    # Lookup and search
    # =========================================================================

    def get_node_by_path_or_identifier(self, path_or_id: str | PathOrId) -> Node:
        """Fetch a node by identifier when given one, by path otherwise.

        Raises:
            PathNotFoundError: If no accessible node exists at the path.
            ItemNotFoundError: If no node has the identifier.
            AccessDeniedError: If the identified node is not readable.
        """
        ref = parse_ref(path_or_id)
        if isinstance(ref, Identifier):
            return self._session.get_node_by_identifier(ref.value)
        return self._session.get_node(self.get_abs_path(ref.value))

    lookup = get_node_by_path_or_identifier

    def find_nodes(self, pattern_or_id: str | PathOrId) -> list[Node]:
        """Glob search relative to the working location.

        An identifier returns a one-element list with that node.
        """
        ref = parse_ref(pattern_or_id)
        if isinstance(ref, Identifier):
            return [self._session.get_node_by_identifier(ref.value)]
        return list(self.finder.find(self.get_abs_path(ref.value)))

    # =========================================================================
    # Forwarded store API
    # =========================================================================

    def get_repository(self) -> Repository:
        return self._session.get_repository()

    def get_user_id(self) -> str | None:
        return self._session.get_user_id()

    def get_attribute_names(self) -> list[str]:
        return self._session.get_attribute_names()

    def get_attribute(self, name: str) -> Any:
        return self._session.get_attribute(name)

    def get_workspace(self) -> Workspace:
        return self._session.get_workspace()

    def get_root_node(self) -> Node:
        return self._session.get_root_node()

    def impersonate(self, credentials: Any) -> StoreSession:
        return self._session.impersonate(credentials)

    def get_node_by_identifier(self, identifier: str) -> Node:
        return self._session.get_node_by_identifier(identifier)

    def get_nodes_by_identifier(self, identifiers: Iterable[str]) -> dict[str, Node]:
        return self._session.get_nodes_by_identifier(identifiers)

    def get_item(self, abs_path: str) -> Node | Property:
        return self._session.get_item(self.get_abs_path(abs_path))

    def get_node(self, abs_path: str, depth_hint: int = -1) -> Node:
        return self._session.get_node(self.get_abs_path(abs_path), depth_hint)

    def get_nodes(self, abs_paths: Iterable[str]) -> dict[str, Node]:
        return self._session.get_nodes(self.get_abs_paths(abs_paths))

    def get_property(self, abs_path: str) -> Property:
        return self._session.get_property(self.get_abs_path(abs_path))

    def get_properties(self, abs_paths: Iterable[str]) -> dict[str, Property]:
        return self._session.get_properties(self.get_abs_paths(abs_paths))

    def item_exists(self, abs_path: str) -> bool:
        return self._session.item_exists(self.get_abs_path(abs_path))

    def node_exists(self, abs_path: str) -> bool:
        return self._session.node_exists(self.get_abs_path(abs_path))

    def property_exists(self, abs_path: str) -> bool:
        return self._session.property_exists(self.get_abs_path(abs_path))

    def move(self, src_abs_path: str, dest_abs_path: str) -> None:
        return self._session.move(
            self.get_abs_path(src_abs_path),
            self.get_abs_target_path(src_abs_path, dest_abs_path),
        )

    def remove_item(self, abs_path: str) -> None:
        return self._session.remove_item(self.get_abs_path(abs_path))

    def save(self) -> None:
        return self._session.save()

    def refresh(self, keep_changes: bool) -> None:
        return self._session.refresh(keep_changes)

    def has_pending_changes(self) -> bool:
        return self._session.has_pending_changes()

    def has_permission(self, abs_path: str, actions: str) -> bool:
        return self._session.has_permission(self.get_abs_path(abs_path), actions)

    def check_permission(self, abs_path: str, actions: str) -> None:
        return self._session.check_permission(self.get_abs_path(abs_path), actions)

    def has_capability(self, method_name: str, target: Any, arguments: Sequence[Any]) -> bool:
        return self._session.has_capability(method_name, target, arguments)

    def import_xml(self, parent_abs_path: str, source: str | IO[Any], uuid_behavior: int) -> None:
        return self._session.import_xml(self.get_abs_path(parent_abs_path), source, uuid_behavior)

    def export_system_view(
        self, abs_path: str, stream: IO[Any], skip_binary: bool, no_recurse: bool
    ) -> None:
        return self._session.export_system_view(
            self.get_abs_path(abs_path), stream, skip_binary, no_recurse
        )

    def export_document_view(
        self, abs_path: str, stream: IO[Any], skip_binary: bool, no_recurse: bool
    ) -> None:
        return self._session.export_document_view(
            self.get_abs_path(abs_path), stream, skip_binary, no_recurse
        )

    def set_namespace_prefix(self, prefix: str, uri: str) -> None:
        return self._session.set_namespace_prefix(prefix, uri)

    def get_namespace_prefixes(self) -> list[str]:
        return self._session.get_namespace_prefixes()

    def get_namespace_uri(self, prefix: str) -> str:
        return self._session.get_namespace_uri(prefix)

    def get_namespace_prefix(self, uri: str) -> str:
        return self._session.get_namespace_prefix(uri)

    def logout(self) -> None:
        return self._session.logout()

    def is_live(self) -> bool:
        return self._session.is_live()

    def get_access_control_manager(self) -> Any:
        return self._session.get_access_control_manager()

    def get_retention_manager(self) -> Any:
        return self._session.get_retention_manager()
