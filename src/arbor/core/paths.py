"""Helpers for `/`-separated repository paths."""

from __future__ import annotations

ROOT = "/"


def strip_trailing(path: str) -> str:
    """Remove trailing slashes, keeping a bare root as `/`."""
    if path == ROOT:
        return path
    return path.rstrip("/") or ROOT


def dirname(path: str) -> str:
    """Parent path. The parent of the root is the root.

    Example:
        >>> dirname("/a/b")
        '/a'
        >>> dirname("/a")
        '/'
        >>> dirname("/")
        '/'
    """
    path = strip_trailing(path)
    if path == ROOT:
        return ROOT
    parent = path.rsplit("/", 1)[0]
    return parent or ROOT


def basename(path: str) -> str:
    """Last segment of a path (empty string for the root)."""
    path = strip_trailing(path)
    if path == ROOT:
        return ""
    return path.rsplit("/", 1)[-1]


def join(parent: str, name: str) -> str:
    """Join a parent path and a child name without doubling the slash."""
    if parent == ROOT:
        return ROOT + name
    return f"{parent}/{name}"


def segments(path: str) -> list[str]:
    """Non-empty segments of an absolute path."""
    return [part for part in path.split("/") if part]


def is_ancestor(ancestor: str, path: str) -> bool:
    """True if `ancestor` is a strict ancestor of `path`."""
    if ancestor == ROOT:
        return path != ROOT
    return path.startswith(ancestor + "/")
