"""Sessions - cwd-aware wrapper and session lifecycle.

PathAwareSession decorates a store session with a current working location.
SessionManager logs in through the transport named by a profile and hands
out the wrapped session.

Example:
    >>> from arbor.core.session import PathAwareSession
    >>> session = PathAwareSession(store_session)
    >>> session.chdir("/content")
    >>> session.get_abs_path("articles")
    '/content/articles'
"""

from arbor.core.session.manager import SessionManager
from arbor.core.session.path_aware import PathAwareSession

__all__ = [
    "PathAwareSession",
    "SessionManager",
]
