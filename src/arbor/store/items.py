"""Node and property handles for the in-memory store."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any

from arbor.core import paths
from arbor.core.errors import ItemExistsError, ItemNotFoundError, PathNotFoundError
from arbor.store.records import (
    DEFAULT_NODE_TYPE,
    PRIMARY_TYPE,
    Record,
    type_name_of,
    validate_value,
)

if TYPE_CHECKING:
    from arbor.store.memory import MemorySession

INVALID_NAMES = frozenset({"", ".", ".."})


def validate_name(name: str) -> None:
    """Reject names that cannot be a single path segment.

    Raises:
        ValueError: If the name is empty, `.`/`..`, or contains `/`.
    """
    if name in INVALID_NAMES or "/" in name:
        raise ValueError(f"Invalid node name: {name!r}")


class MemoryNode:
    """Handle to a node in a MemorySession's working tree."""

    def __init__(self, session: MemorySession, record: Record):
        self._session = session
        self._record = record

    def __repr__(self) -> str:
        return f"MemoryNode(path={self.path!r}, identifier={self.identifier!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MemoryNode):
            return NotImplemented
        return self._record is other._record

    def __hash__(self) -> int:
        return hash(self._record.identifier)

    @property
    def session(self) -> MemorySession:
        return self._session

    @property
    def name(self) -> str:
        return self._record.name

    @property
    def path(self) -> str:
        return self._record.path

    @property
    def identifier(self) -> str:
        return self._record.identifier

    @property
    def depth(self) -> int:
        return len(paths.segments(self.path))

    @property
    def primary_type(self) -> str:
        return str(self._record.properties.get(PRIMARY_TYPE, DEFAULT_NODE_TYPE))

    @property
    def parent(self) -> MemoryNode:
        """Parent node.

        Raises:
            ItemNotFoundError: For the root node.
        """
        if self._record.parent is None:
            raise ItemNotFoundError(self.identifier, "The root node has no parent")
        return MemoryNode(self._session, self._record.parent)

    # =========================================================================
    # Children
    # =========================================================================

    def get_node(self, rel_path: str) -> MemoryNode:
        """Descendant node by relative path."""
        return self._session.get_node(paths.join(self.path, rel_path))

    def get_nodes(self, pattern: str | None = None) -> list[MemoryNode]:
        """Readable child nodes in order, optionally filtered by a glob."""
        return [
            MemoryNode(self._session, child)
            for child in self._session._readable_children(self._record)
            if pattern is None or fnmatchcase(child.name, pattern)
        ]

    def get_node_names(self) -> list[str]:
        return [child.name for child in self._session._readable_children(self._record)]

    def has_node(self, rel_path: str) -> bool:
        return self._session.node_exists(paths.join(self.path, rel_path))

    def add_node(self, rel_path: str, primary_type: str | None = None) -> MemoryNode:
        """Create a child (or deeper descendant) node.

        Args:
            rel_path: Name of the new node, or a relative path whose parent
                already exists.
            primary_type: Node type, `nt:unstructured` by default.

        Raises:
            ItemExistsError: If a node with that name already exists.
            PathNotFoundError: If the parent of a relative path is missing.
            AccessDeniedError: If adding nodes is denied here.
        """
        if "/" in rel_path.strip("/"):
            parent_rel, name = rel_path.strip("/").rsplit("/", 1)
            return self.get_node(parent_rel).add_node(name, primary_type)

        name = rel_path.strip("/")
        validate_name(name)
        target = paths.join(self.path, name)
        self._session.check_permission(target, "add_node")
        if name in self._record.children:
            raise ItemExistsError(target)

        child = self._record.attach(
            Record(name=name, properties={PRIMARY_TYPE: primary_type or DEFAULT_NODE_TYPE})
        )
        self._session._mark_dirty()
        return MemoryNode(self._session, child)

    # =========================================================================
    # Properties
    # =========================================================================

    def get_properties(self, pattern: str | None = None) -> dict[str, MemoryProperty]:
        """Properties by name, optionally filtered by a glob."""
        return {
            name: MemoryProperty(self._session, self._record, name)
            for name in self._record.properties
            if pattern is None or fnmatchcase(name, pattern)
        }

    def get_property(self, name: str) -> MemoryProperty:
        if name not in self._record.properties:
            raise PathNotFoundError(paths.join(self.path, name))
        return MemoryProperty(self._session, self._record, name)

    def get_property_value(self, name: str) -> Any:
        return self.get_property(name).value

    def has_property(self, name: str) -> bool:
        return name in self._record.properties

    def set_property(self, name: str, value: Any) -> MemoryProperty | None:
        """Set a property. A value of None removes it.

        Raises:
            ValueError: If the value type is unsupported.
            AccessDeniedError: If setting properties is denied here.
        """
        validate_name(name)
        self._session.check_permission(paths.join(self.path, name), "set_property")
        if value is None:
            self._record.properties.pop(name, None)
            self._session._mark_dirty()
            return None
        self._record.properties[name] = validate_value(value)
        self._session._mark_dirty()
        return MemoryProperty(self._session, self._record, name)

    def remove(self) -> None:
        self._session.remove_item(self.path)


class MemoryProperty:
    """Handle to a property of a node in a MemorySession's working tree."""

    def __init__(self, session: MemorySession, record: Record, name: str):
        self._session = session
        self._record = record
        self._name = name

    def __repr__(self) -> str:
        return f"MemoryProperty(path={self.path!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return paths.join(self._record.path, self._name)

    @property
    def parent(self) -> MemoryNode:
        return MemoryNode(self._session, self._record)

    @property
    def value(self) -> Any:
        try:
            value = self._record.properties[self._name]
        except KeyError:
            raise PathNotFoundError(self.path) from None
        return list(value) if isinstance(value, list) else value

    @property
    def type_name(self) -> str:
        if self._name == PRIMARY_TYPE:
            return "Name"
        return type_name_of(self.value)

    @property
    def is_multiple(self) -> bool:
        return isinstance(self.value, list)

    def remove(self) -> None:
        self._session.remove_item(self.path)
