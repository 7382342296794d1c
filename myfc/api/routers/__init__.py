"""
API route handlers.
"""

from . import bookmarks, user

__all__ = ["bookmarks", "user"]
