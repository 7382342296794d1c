"""Async HTTP client for the MYFC bookmark API."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import ValidationError

from myfc.adapters.bookmarks.errors import (
    AuthRequiredError,
    BookmarkClientError,
    BookmarkRequestError,
    BookmarkTimeoutError,
)
from myfc.adapters.bookmarks.models import (
    BookmarkList,
    BookmarkStatus,
    ToggleBookmarkRequest,
    unwrap_envelope,
)
from myfc.core.workout_ids import normalize_workout_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from typing import Self

    from myfc.config import BookmarkClientConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP status codes that should trigger a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.5  # seconds
DEFAULT_MAX_DELAY = 10.0  # seconds
DEFAULT_JITTER = 0.1  # 10% jitter

BOOKMARKS_PATH = "/api/bookmarks"
ALL_BOOKMARKS_PATH = "/api/bookmarks/all"

# Bookmark state must never come from an intermediate cache
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
}


def _is_retryable_error(exc: Exception) -> bool:
    """Check if an exception is retryable."""
    if isinstance(exc, BookmarkRequestError):
        return exc.retryable
    return isinstance(exc, (httpx.ConnectError, httpx.TimeoutException))


def _calculate_delay(attempt: int, base_delay: float, max_delay: float, jitter: float) -> float:
    """Calculate delay with exponential backoff and jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds
        jitter: Jitter factor (0.1 = 10% random variation)

    Returns:
        Delay in seconds
    """
    delay = min(base_delay * (2**attempt), max_delay)
    return delay + delay * jitter * random.random()


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    jitter: float = DEFAULT_JITTER,
    operation_name: str = "operation",
) -> T:
    """Execute an async function with exponential backoff retry.

    Non-retryable errors are raised immediately; the last retryable error is
    raised unchanged once attempts are exhausted.
    """
    for attempt in range(max_retries + 1):
        try:
            return await func()
        except Exception as e:
            if not _is_retryable_error(e) or attempt == max_retries:
                if attempt:
                    logger.error(
                        "bookmark_retry_exhausted",
                        extra={
                            "operation": operation_name,
                            "attempts": attempt + 1,
                            "error": str(e),
                        },
                    )
                raise

            delay = _calculate_delay(attempt, base_delay, max_delay, jitter)
            logger.warning(
                "bookmark_retry_attempt",
                extra={
                    "operation": operation_name,
                    "attempt": attempt + 1,
                    "max_retries": max_retries,
                    "delay_seconds": round(delay, 2),
                    "error": str(e),
                },
            )
            await asyncio.sleep(delay)

    raise BookmarkClientError(f"{operation_name} failed")  # pragma: no cover


class BookmarkApiClient:
    """Async HTTP client for the bookmark endpoints.

    Usage:
        async with BookmarkApiClient(api_url, access_token=token) as client:
            ids = await client.get_bookmarked_workout_ids()
    """

    def __init__(
        self,
        api_url: str,
        access_token: str | None = None,
        timeout: float = 15.0,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        retry_max_delay: float = DEFAULT_MAX_DELAY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the bookmark client.

        Args:
            api_url: Base URL of the MYFC web app (e.g. https://app.example.com)
            access_token: Bearer token of the signed-in user; ``None`` when signed out
            timeout: Per-request timeout in seconds
            max_retries: Maximum retry attempts for idempotent reads
            retry_base_delay: Base delay between retries in seconds
            retry_max_delay: Maximum delay between retries in seconds
            transport: Optional httpx transport (tests, ASGI apps)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self._access_token = access_token or None
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls, cfg: BookmarkClientConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> BookmarkApiClient:
        return cls(
            cfg.api_url,
            access_token=cfg.access_token or None,
            timeout=cfg.request_timeout_sec,
            max_retries=cfg.max_retries,
            retry_base_delay=cfg.retry_base_delay_sec,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={"Content-Type": "application/json", **NO_CACHE_HEADERS},
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise BookmarkClientError("Client not initialized. Use async context manager.")
        return self._client

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None

    def set_access_token(self, token: str | None) -> None:
        """Replace the bearer token (sign-in, refresh); ``None`` signs out."""
        self._access_token = token or None

    def _auth_headers(self) -> dict[str, str]:
        if not self._access_token:
            raise AuthRequiredError("No authenticated session")
        return {"Authorization": f"Bearer {self._access_token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the unwrapped JSON payload.

        Raises:
            AuthRequiredError: No token, or HTTP 401
            BookmarkTimeoutError: The request timed out
            BookmarkRequestError: Network failure or any other non-success status
        """
        headers = self._auth_headers()
        try:
            response = await self.client.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.TimeoutException as exc:
            raise BookmarkTimeoutError(f"{operation} timed out") from exc
        except httpx.TransportError as exc:
            raise BookmarkRequestError(f"{operation} failed: {exc}", retryable=True) from exc

        if response.status_code == 401:
            logger.info("bookmark_auth_rejected", extra={"operation": operation})
            raise AuthRequiredError()
        if response.is_error:
            raise BookmarkRequestError(
                f"{operation} failed with status {response.status_code}",
                status_code=response.status_code,
                retryable=response.status_code in RETRYABLE_STATUS_CODES,
            )

        try:
            return unwrap_envelope(response.json())
        except ValueError as exc:
            raise BookmarkRequestError(
                f"{operation} returned invalid JSON", status_code=response.status_code
            ) from exc

    async def _with_retry(self, func: Callable[[], Awaitable[T]], operation_name: str) -> T:
        return await retry_with_backoff(
            func,
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
            operation_name=operation_name,
        )

    async def get_bookmarked_workout_ids(self) -> frozenset[str]:
        """Fetch every workout id bookmarked by the current user.

        Returns:
            Normalized workout ids
        """

        async def _fetch() -> frozenset[str]:
            payload = await self._request(
                "GET", ALL_BOOKMARKS_PATH, operation="get_bookmarked_workout_ids"
            )
            try:
                return BookmarkList.model_validate(payload).workout_ids
            except ValidationError as exc:
                raise BookmarkRequestError("Malformed bookmarks response") from exc

        ids = await self._with_retry(_fetch, "get_bookmarked_workout_ids")
        logger.info("bookmarks_fetched", extra={"count": len(ids)})
        return ids

    async def toggle_bookmark(self, workout_id: str | int) -> bool:
        """Toggle the bookmark for a workout.

        Not retried: a toggle whose response was lost may already have been applied.

        Returns:
            Membership after the toggle, as reported by the server
        """
        key = normalize_workout_id(workout_id)
        body = ToggleBookmarkRequest(workout_id=key).model_dump(by_alias=True)
        payload = await self._request(
            "POST", BOOKMARKS_PATH, operation=f"toggle_bookmark({key})", json=body
        )
        status = self._parse_status(payload, key)
        logger.info(
            "bookmark_toggled",
            extra={"workout_id": key, "is_bookmarked": status.is_bookmarked},
        )
        return status.is_bookmarked

    async def get_bookmark_status(self, workout_id: str | int) -> bool:
        """Fetch the current membership of a single workout."""
        key = normalize_workout_id(workout_id)

        async def _fetch() -> bool:
            payload = await self._request(
                "GET",
                BOOKMARKS_PATH,
                operation=f"get_bookmark_status({key})",
                params={"workoutId": key},
            )
            return self._parse_status(payload, key).is_bookmarked

        return await self._with_retry(_fetch, f"get_bookmark_status({key})")

    @staticmethod
    def _parse_status(payload: Any, workout_id: str) -> BookmarkStatus:
        try:
            return BookmarkStatus.model_validate(payload)
        except ValidationError as exc:
            raise BookmarkRequestError(
                f"Malformed bookmark status response for workout {workout_id}"
            ) from exc
