"""Pytest configuration and fixtures."""

import pytest

from arbor.core.session import PathAwareSession
from arbor.store import Credentials, MemoryRepository


@pytest.fixture
def repository():
    """Repository with a small saved tree in the default workspace.

    /content
    /content/articles
    /content/articles/first   (title="First", tags=["a", "b"])
    /content/articles/second
    /content/pages
    /archive
    """
    repository = MemoryRepository()
    session = repository.login(Credentials("admin"))
    root = session.get_root_node()

    content = root.add_node("content")
    articles = content.add_node("articles")
    first = articles.add_node("first")
    first.set_property("title", "First")
    first.set_property("tags", ["a", "b"])
    articles.add_node("second")
    content.add_node("pages")
    root.add_node("archive")

    session.save()
    session.logout()
    return repository


@pytest.fixture
def store_session(repository):
    """Fresh store session on the sample repository."""
    return repository.login(Credentials("admin"))


@pytest.fixture
def session(store_session):
    """PathAwareSession over the sample repository, cwd at the root."""
    return PathAwareSession(store_session)
