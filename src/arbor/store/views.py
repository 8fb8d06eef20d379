"""System view and document view XML serialization.

System view keeps names, types, multi-value flags and identifiers
(`jcr:uuid`), so it round-trips. Document view maps nodes to elements and
properties to attributes; it is meant for reading, and imports as string
properties.
"""

from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from typing import IO, Any

from arbor.core.errors import RepositoryError
from arbor.store.records import PRIMARY_TYPE, Record, new_identifier, type_name_of

logger = logging.getLogger(__name__)

SV_URI = "http://www.jcp.org/jcr/sv/1.0"
ROOT_ELEMENT_NAME = "jcr:root"
UUID_PROPERTY = "jcr:uuid"

# uuid_behavior values for import_xml
IMPORT_UUID_CREATE_NEW = 0
IMPORT_UUID_COLLISION_REMOVE_EXISTING = 1
IMPORT_UUID_COLLISION_REPLACE_EXISTING = 2
IMPORT_UUID_COLLISION_THROW = 3

UUID_BEHAVIORS = (
    IMPORT_UUID_CREATE_NEW,
    IMPORT_UUID_COLLISION_REMOVE_EXISTING,
    IMPORT_UUID_COLLISION_REPLACE_EXISTING,
    IMPORT_UUID_COLLISION_THROW,
)


def _sv(local: str) -> str:
    return f"{{{SV_URI}}}{local}"


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_scalar(text: str, type_name: str) -> Any:
    if type_name == "Boolean":
        return text.strip().lower() == "true"
    if type_name == "Long":
        return int(text)
    if type_name == "Double":
        return float(text)
    return text


def _qualified(name: str, namespaces: dict[str, str]) -> str:
    """ElementTree tag for a possibly prefixed name."""
    prefix, sep, local = name.partition(":")
    if sep and prefix in namespaces and namespaces[prefix]:
        return f"{{{namespaces[prefix]}}}{local}"
    return name


def _unqualified(tag: str, namespaces: dict[str, str]) -> str:
    """Prefixed name for an ElementTree tag."""
    if not tag.startswith("{"):
        return tag
    uri, _, local = tag[1:].partition("}")
    for prefix, known_uri in namespaces.items():
        if known_uri == uri and prefix:
            return f"{prefix}:{local}"
    raise RepositoryError(f"Unregistered namespace in import: {uri}")


def _write(stream: IO[Any], text: str) -> None:
    if isinstance(stream, io.TextIOBase):
        stream.write(text)
    else:
        stream.write(text.encode("utf-8"))


def _register_prefixes(namespaces: dict[str, str]) -> None:
    for prefix, uri in namespaces.items():
        if prefix and uri and not prefix.lower().startswith("xml"):
            ET.register_namespace(prefix, uri)


# =============================================================================
# Export
# =============================================================================


def _system_element(record: Record, no_recurse: bool) -> ET.Element:
    name = record.name or ROOT_ELEMENT_NAME
    element = ET.Element(_sv("node"), {_sv("name"): name})

    properties = dict(record.properties)
    properties[UUID_PROPERTY] = record.identifier
    for prop_name, value in properties.items():
        type_name = "Name" if prop_name == PRIMARY_TYPE else type_name_of(value)
        attrs = {_sv("name"): prop_name, _sv("type"): type_name}
        if isinstance(value, list):
            attrs[_sv("multiple")] = "true"
        prop_element = ET.SubElement(element, _sv("property"), attrs)
        for item in value if isinstance(value, list) else [value]:
            ET.SubElement(prop_element, _sv("value")).text = _format_scalar(item)

    if not no_recurse:
        for child in record.children.values():
            element.append(_system_element(child, no_recurse))
    return element


def _document_element(
    record: Record, namespaces: dict[str, str], no_recurse: bool
) -> ET.Element:
    name = record.name or ROOT_ELEMENT_NAME
    attrs = {}
    for prop_name, value in record.properties.items():
        if isinstance(value, list):
            text = " ".join(_format_scalar(item) for item in value)
        else:
            text = _format_scalar(value)
        attrs[_qualified(prop_name, namespaces)] = text
    element = ET.Element(_qualified(name, namespaces), attrs)

    if not no_recurse:
        for child in record.children.values():
            element.append(_document_element(child, namespaces, no_recurse))
    return element


def export_system_view(record: Record, stream: IO[Any], no_recurse: bool = False) -> None:
    """Write a subtree as system view XML."""
    ET.register_namespace("sv", SV_URI)
    _write(stream, ET.tostring(_system_element(record, no_recurse), encoding="unicode"))


def export_document_view(
    record: Record,
    stream: IO[Any],
    namespaces: dict[str, str],
    no_recurse: bool = False,
) -> None:
    """Write a subtree as document view XML."""
    _register_prefixes(namespaces)
    element = _document_element(record, namespaces, no_recurse)
    _write(stream, ET.tostring(element, encoding="unicode"))


# =============================================================================
# Import
# =============================================================================


def _record_from_system(element: ET.Element) -> Record:
    name = element.get(_sv("name"))
    if not name:
        raise RepositoryError("System view node without sv:name")

    record = Record(name=name)
    for child in element:
        if child.tag == _sv("property"):
            prop_name = child.get(_sv("name"))
            if not prop_name:
                raise RepositoryError("System view property without sv:name")
            type_name = child.get(_sv("type"), "String")
            values = [_parse_scalar(v.text or "", type_name) for v in child.findall(_sv("value"))]
            multiple = child.get(_sv("multiple")) == "true"
            if prop_name == UUID_PROPERTY:
                record.identifier = str(values[0]) if values else new_identifier()
            elif multiple:
                record.properties[prop_name] = values
            elif values:
                record.properties[prop_name] = values[0]
        elif child.tag == _sv("node"):
            record.attach(_record_from_system(child))
    return record


def _record_from_document(element: ET.Element, namespaces: dict[str, str]) -> Record:
    record = Record(name=_unqualified(element.tag, namespaces))
    for attr, text in element.attrib.items():
        prop_name = _unqualified(attr, namespaces)
        if prop_name == UUID_PROPERTY:
            record.identifier = text
        else:
            record.properties[prop_name] = text
    for child in element:
        record.attach(_record_from_document(child, namespaces))
    return record


def parse_import(source: str | IO[Any], namespaces: dict[str, str]) -> list[Record]:
    """Parse system or document view XML into detached records.

    A top-level `jcr:root` element stands for the parent itself, so its
    children are returned instead.

    Args:
        source: File path or readable stream.
        namespaces: Prefix to URI map used to name document view elements.

    Returns:
        Top-level records to attach under the import parent.

    Raises:
        RepositoryError: If the XML is malformed.
    """
    try:
        root = ET.parse(source).getroot()
    except ET.ParseError as e:
        raise RepositoryError(f"Invalid XML: {e}") from e

    if root.tag == _sv("node"):
        record = _record_from_system(root)
        view = "system"
    else:
        record = _record_from_document(root, namespaces)
        view = "document"
    logger.debug("parse_import: view=%s, root=%s", view, record.name)

    if record.name == ROOT_ELEMENT_NAME:
        children = list(record.children.values())
        for child in children:
            child.detach()
        return children
    return [record]
