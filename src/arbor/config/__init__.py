"""Configuration - config directory, shell settings and profiles."""

from arbor.config.manager import ConfigManager
from arbor.config.profile import Profile, ProfileLoader

__all__ = [
    "ConfigManager",
    "Profile",
    "ProfileLoader",
]
