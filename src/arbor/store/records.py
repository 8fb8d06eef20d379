"""Tree records backing the in-memory store.

A record is the raw storage form of a node: name, identifier, properties
and ordered children, linked to its parent. Sessions operate on a private
clone of a workspace's record tree and hand out MemoryNode handles that
point into it.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from arbor.core import paths

PRIMARY_TYPE = "jcr:primaryType"
DEFAULT_NODE_TYPE = "nt:unstructured"
ROOT_NODE_TYPE = "rep:root"


def new_identifier() -> str:
    """Generate a fresh node identifier."""
    return str(uuid.uuid4())


def validate_value(value: Any) -> Any:
    """Check that a property value is a scalar or a list of scalars.

    Returns:
        The value, with tuples converted to lists.

    Raises:
        ValueError: If the value has an unsupported type.
    """
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        for item in value:
            if not isinstance(item, (str, int, float, bool)):
                raise ValueError(f"Unsupported property value in list: {item!r}")
        return list(value)
    raise ValueError(f"Unsupported property value: {value!r}")


def type_name_of(value: Any) -> str:
    """Repository type name of a property value."""
    if isinstance(value, list):
        return type_name_of(value[0]) if value else "String"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, int):
        return "Long"
    if isinstance(value, float):
        return "Double"
    return "String"


@dataclass(eq=False)
class Record:
    """Storage form of a node."""

    name: str
    identifier: str = field(default_factory=new_identifier)
    properties: dict[str, Any] = field(default_factory=dict)
    children: dict[str, Record] = field(default_factory=dict)
    parent: Record | None = field(default=None, repr=False)

    @property
    def path(self) -> str:
        if self.parent is None:
            return paths.ROOT
        return paths.join(self.parent.path, self.name)

    def attach(self, child: Record) -> Record:
        """Append a child record."""
        child.parent = self
        self.children[child.name] = child
        return child

    def detach(self) -> None:
        """Remove this record from its parent."""
        if self.parent is not None:
            del self.parent.children[self.name]
            self.parent = None

    def walk(self) -> Iterator[Record]:
        """This record and all descendants, depth-first."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def clone(self, new_identifiers: bool = False) -> Record:
        """Deep copy of this subtree, detached from any parent."""
        copy = Record(
            name=self.name,
            identifier=new_identifier() if new_identifiers else self.identifier,
            properties={
                key: list(value) if isinstance(value, list) else value
                for key, value in self.properties.items()
            },
        )
        for child in self.children.values():
            copy.attach(child.clone(new_identifiers))
        return copy

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "identifier": self.identifier,
            "properties": self.properties,
            "children": {name: child.to_dict() for name, child in self.children.items()},
        }

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> Record:
        """Create from a dict produced by to_dict()."""
        record = cls(
            name=name,
            identifier=data.get("identifier") or new_identifier(),
            properties=dict(data.get("properties", {})),
        )
        for child_name, child_data in data.get("children", {}).items():
            record.attach(cls.from_dict(child_name, child_data))
        return record


def new_root() -> Record:
    """Create an empty workspace root."""
    return Record(name="", properties={PRIMARY_TYPE: ROOT_NODE_TYPE})
