"""Structured bookmark results handed to the UI layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from myfc.adapters.bookmarks.errors import (
    AuthRequiredError,
    BookmarkRequestError,
    BookmarkTimeoutError,
)
from myfc.core.workout_ids import InvalidWorkoutIdError


class FailureKind(str, Enum):
    """Categories of toggle failures for UI handling."""

    AUTH_REQUIRED = "auth_required"  # prompt sign-in
    NETWORK = "network"  # connection dropped, retry later
    SERVER = "server"  # non-success status
    TIMEOUT = "timeout"  # forced settlement
    INVALID_ID = "invalid_id"


_MESSAGES = {
    FailureKind.AUTH_REQUIRED: "Sign in to save workouts",
    FailureKind.NETWORK: "Couldn't reach the server. Try again.",
    FailureKind.SERVER: "Couldn't update bookmark. Try again.",
    FailureKind.TIMEOUT: "Bookmark update timed out. Try again.",
    FailureKind.INVALID_ID: "This workout can't be bookmarked",
}


@dataclass(frozen=True)
class BookmarkButtonState:
    """What one button shows for one workout."""

    workout_id: str
    is_bookmarked: bool
    is_loading: bool


@dataclass(frozen=True)
class ToggleFailure:
    kind: FailureKind
    message: str
    status_code: int | None = None
    retryable: bool = False

    @classmethod
    def from_exception(cls, exc: Exception) -> ToggleFailure:
        """Classify a client error raised by a toggle."""
        if isinstance(exc, AuthRequiredError):
            return cls(FailureKind.AUTH_REQUIRED, _MESSAGES[FailureKind.AUTH_REQUIRED], 401)
        if isinstance(exc, BookmarkTimeoutError):
            return cls(FailureKind.TIMEOUT, _MESSAGES[FailureKind.TIMEOUT], retryable=True)
        if isinstance(exc, InvalidWorkoutIdError):
            return cls(FailureKind.INVALID_ID, _MESSAGES[FailureKind.INVALID_ID])
        if isinstance(exc, BookmarkRequestError) and exc.status_code is not None:
            return cls(
                FailureKind.SERVER,
                _MESSAGES[FailureKind.SERVER],
                status_code=exc.status_code,
                retryable=exc.retryable,
            )
        return cls(FailureKind.NETWORK, _MESSAGES[FailureKind.NETWORK], retryable=True)


@dataclass(frozen=True)
class ToggleOutcome:
    """Settled result of one toggle: the membership now shown, and why it failed if it did."""

    workout_id: str
    is_bookmarked: bool
    failure: ToggleFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None
