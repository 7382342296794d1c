"""Client-side bookmark state: shared store and button view model."""

from myfc.application.bookmarks.button import BookmarkButton, ButtonSize, ButtonVariant, ButtonView
from myfc.application.bookmarks.results import (
    BookmarkButtonState,
    FailureKind,
    ToggleFailure,
    ToggleOutcome,
)
from myfc.application.bookmarks.store import BookmarkApi, BookmarkStore, StoreClosedError

__all__ = [
    "BookmarkApi",
    "BookmarkButton",
    "BookmarkButtonState",
    "BookmarkStore",
    "ButtonSize",
    "ButtonVariant",
    "ButtonView",
    "FailureKind",
    "StoreClosedError",
    "ToggleFailure",
    "ToggleOutcome",
]
