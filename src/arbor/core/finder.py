"""Traversal glob finder.

Resolves an absolute glob pattern such as `/content/*/articles/a*` by
walking the tree from the root one segment at a time. Literal segments are
fetched directly; wildcard segments (fnmatch syntax: `*`, `?`, `[...]`)
iterate the children of every node matched so far.
"""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from arbor.core import paths
from arbor.core.errors import PathNotFoundError

if TYPE_CHECKING:
    from arbor.core.protocols import Node, StoreSession

logger = logging.getLogger(__name__)

WILDCARD_CHARS = frozenset("*?[")


def has_wildcard(segment: str) -> bool:
    """True if the segment contains glob syntax."""
    return any(char in WILDCARD_CHARS for char in segment)


class TraversalFinder:
    """Finder that walks the node tree of a session.

    Example:
        >>> finder = TraversalFinder(session)
        >>> [node.path for node in finder.find("/content/*")]
        ['/content/articles', '/content/pages']
    """

    def __init__(self, session: StoreSession):
        self.session = session

    def find(self, pattern: str) -> list[Node]:
        """Return nodes matching an absolute glob pattern, depth-first.

        A literal segment that does not exist yields no results rather
        than an error.

        Args:
            pattern: Absolute glob pattern.

        Returns:
            Matching nodes in traversal order.
        """
        parts = paths.segments(pattern)
        root = self.session.get_node(paths.ROOT)
        results: list[Node] = []
        self._walk(root, parts, results)
        logger.debug("find: pattern=%s, matches=%d", pattern, len(results))
        return results

    def _walk(self, node: Node, parts: list[str], results: list[Node]) -> None:
        if not parts:
            results.append(node)
            return

        segment, rest = parts[0], parts[1:]
        if not has_wildcard(segment):
            try:
                child = self.session.get_node(paths.join(node.path, segment))
            except PathNotFoundError:
                return
            self._walk(child, rest, results)
            return

        for child in node.get_nodes():
            if fnmatchcase(child.name, segment):
                self._walk(child, rest, results)
