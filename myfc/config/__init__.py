from __future__ import annotations

from .api import AuthConfig
from .bookmarks import BookmarkClientConfig
from .settings import AppConfig, RuntimeConfig, Settings, load_config

__all__ = [
    "AppConfig",
    "AuthConfig",
    "BookmarkClientConfig",
    "RuntimeConfig",
    "Settings",
    "load_config",
]
