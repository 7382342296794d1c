"""Bookmark API adapter."""

from myfc.adapters.bookmarks.client import BookmarkApiClient
from myfc.adapters.bookmarks.errors import (
    AuthRequiredError,
    BookmarkClientError,
    BookmarkRequestError,
    BookmarkTimeoutError,
)

__all__ = [
    "AuthRequiredError",
    "BookmarkApiClient",
    "BookmarkClientError",
    "BookmarkRequestError",
    "BookmarkTimeoutError",
]
