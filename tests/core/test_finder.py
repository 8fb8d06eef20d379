"""Tests for TraversalFinder."""

from arbor.core.finder import TraversalFinder, has_wildcard


def _paths(nodes):
    return [node.path for node in nodes]


class TestHasWildcard:
    """Tests for wildcard detection."""

    def test_wildcards(self):
        """*, ? and [ mark a glob segment."""
        assert has_wildcard("a*")
        assert has_wildcard("?")
        assert has_wildcard("[ab]")
        assert not has_wildcard("plain")


class TestTraversalFinder:
    """Tests for glob search over the sample tree."""

    def test_literal_path(self, store_session):
        """A pattern without wildcards finds the one node."""
        finder = TraversalFinder(store_session)
        assert _paths(finder.find("/content/articles")) == ["/content/articles"]

    def test_star_segment(self, store_session):
        """A star matches every child, in order."""
        finder = TraversalFinder(store_session)
        assert _paths(finder.find("/content/*")) == ["/content/articles", "/content/pages"]

    def test_nested_wildcards(self, store_session):
        """Wildcards at several depths are walked depth-first."""
        finder = TraversalFinder(store_session)
        assert _paths(finder.find("/*/*/f*")) == ["/content/articles/first"]

    def test_missing_literal_yields_nothing(self, store_session):
        """A missing literal segment is not an error."""
        finder = TraversalFinder(store_session)
        assert finder.find("/nowhere/*") == []

    def test_root(self, store_session):
        """The bare root pattern finds the root."""
        finder = TraversalFinder(store_session)
        assert _paths(finder.find("/")) == ["/"]

    def test_character_class(self, store_session):
        """Character classes use fnmatch semantics."""
        finder = TraversalFinder(store_session)
        assert _paths(finder.find("/[ab]*")) == ["/archive"]
