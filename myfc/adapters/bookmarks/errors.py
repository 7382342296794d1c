"""Errors raised by the bookmark API client."""

from __future__ import annotations


class BookmarkClientError(Exception):
    """Base exception for bookmark client errors."""


class AuthRequiredError(BookmarkClientError):
    """No authenticated session, or the server rejected the credentials (HTTP 401)."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)
        self.status_code = 401


class BookmarkRequestError(BookmarkClientError):
    """A bookmark request failed on the network or returned a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class BookmarkTimeoutError(BookmarkRequestError):
    """A bookmark request did not settle in time."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None, retryable=True)
