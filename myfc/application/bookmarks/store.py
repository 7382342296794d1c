"""Shared client-side bookmark store.

One ``BookmarkStore`` is created per signed-in session and handed to every
bookmark button on screen. It is the only writer of bookmark membership:

* ``load`` fills the set once from the bulk endpoint; concurrent callers share
  the same in-flight request.
* ``toggle`` flips membership optimistically, sends one request per workout at a
  time, then settles to the server's answer or rolls back on failure.
* listeners are notified per workout id, so a toggle only re-renders buttons for
  that workout.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Protocol

from myfc.adapters.bookmarks.errors import BookmarkClientError, BookmarkTimeoutError
from myfc.application.bookmarks.results import (
    BookmarkButtonState,
    ToggleFailure,
    ToggleOutcome,
)
from myfc.core.async_utils import consume_task_exception
from myfc.core.workout_ids import InvalidWorkoutIdError, normalize_workout_id, normalize_workout_ids

if TYPE_CHECKING:
    from typing import Self

    from myfc.config import BookmarkClientConfig

logger = logging.getLogger(__name__)

DEFAULT_TOGGLE_TIMEOUT = 10.0
DEFAULT_LOAD_TIMEOUT = 20.0

BookmarkListener = Callable[[BookmarkButtonState], None]


class BookmarkApi(Protocol):
    """Remote bookmark operations the store depends on."""

    async def get_bookmarked_workout_ids(self) -> Iterable[str]: ...

    async def toggle_bookmark(self, workout_id: str) -> bool: ...

    async def get_bookmark_status(self, workout_id: str) -> bool: ...


class StoreClosedError(RuntimeError):
    """Raised when a closed store (signed-out session) is used."""


class BookmarkStore:
    """Single source of truth for the current user's bookmarked workouts."""

    def __init__(
        self,
        api: BookmarkApi,
        *,
        toggle_timeout: float = DEFAULT_TOGGLE_TIMEOUT,
        load_timeout: float = DEFAULT_LOAD_TIMEOUT,
    ) -> None:
        self._api = api
        self._toggle_timeout = toggle_timeout
        self._load_timeout = load_timeout
        self._ids: set[str] = set()
        self._loaded = False
        self._closed = False
        self._load_task: asyncio.Task[frozenset[str]] | None = None
        self._pending: dict[str, asyncio.Task[bool]] = {}
        self._listeners: dict[str, list[BookmarkListener]] = {}
        # Bumped on every local write so a bulk load never overwrites newer state
        self._writes: dict[str, int] = {}

    @classmethod
    def from_config(cls, api: BookmarkApi, cfg: BookmarkClientConfig) -> BookmarkStore:
        return cls(api, toggle_timeout=cfg.toggle_timeout_sec, load_timeout=cfg.load_timeout_sec)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def bookmarked_ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    @property
    def pending_ids(self) -> frozenset[str]:
        return frozenset(self._pending)

    def is_bookmarked(self, workout_id: str | int) -> bool:
        """Current membership; ``False`` while unknown."""
        return normalize_workout_id(workout_id) in self._ids

    @property
    def is_initializing(self) -> bool:
        """Whether the first bulk load is still in flight."""
        return not self._loaded and self._load_task is not None

    def is_loading(self, workout_id: str | int) -> bool:
        """Whether this workout's membership is not settled yet.

        True while a toggle for it is in flight, and for every workout while the
        initial load runs.
        """
        return normalize_workout_id(workout_id) in self._pending or self.is_initializing

    def state(self, workout_id: str | int) -> BookmarkButtonState:
        key = normalize_workout_id(workout_id)
        return BookmarkButtonState(
            workout_id=key,
            is_bookmarked=key in self._ids,
            is_loading=key in self._pending or self.is_initializing,
        )

    def subscribe(self, workout_id: str | int, listener: BookmarkListener) -> Callable[[], None]:
        """Register a listener for one workout id.

        Returns:
            A callable that removes the listener
        """
        key = normalize_workout_id(workout_id)
        listeners = self._listeners.setdefault(key, [])
        listeners.append(listener)

        def unsubscribe() -> None:
            try:
                listeners.remove(listener)
            except ValueError:
                return
            if not listeners and self._listeners.get(key) is listeners:
                del self._listeners[key]

        return unsubscribe

    async def load(self, *, force: bool = False) -> frozenset[str]:
        """Fetch the full bookmark set once.

        Concurrent calls share the in-flight request. A completed load is reused
        unless ``force`` is set.

        Raises:
            BookmarkClientError: The fetch failed; the store stays unloaded
        """
        self._ensure_open()
        if self._load_task is None:
            if self._loaded and not force:
                return self.bookmarked_ids
            self._load_task = asyncio.create_task(self._run_load())
            self._load_task.add_done_callback(consume_task_exception)
            if not self._loaded:
                self._notify_all()
        else:
            logger.debug("bookmark_load_joined")
        return await asyncio.shield(self._load_task)

    async def refresh(self) -> frozenset[str]:
        return await self.load(force=True)

    async def _run_load(self) -> frozenset[str]:
        initial = not self._loaded
        writes_at_start = dict(self._writes)
        try:
            ids = set(normalize_workout_ids(await self._fetch_all()))
        except Exception:
            self._load_task = None
            if initial:
                # Buttons leave the busy state; the next press retries the load
                self._notify_all()
            raise
        self._load_task = None

        for key in set(self._ids) | ids:
            touched = self._writes.get(key) != writes_at_start.get(key)
            if key in self._pending or touched:
                # Local state is newer than the bulk snapshot
                if key in self._ids:
                    ids.add(key)
                else:
                    ids.discard(key)

        changed = self._ids ^ ids
        self._ids = ids
        self._loaded = True
        # The first load also ends the busy state of every mounted button
        notify = changed | set(self._listeners) if initial else changed
        for key in notify:
            self._notify(key)

        logger.info("bookmarks_loaded", extra={"count": len(ids), "changed": len(changed)})
        return frozenset(ids)

    async def _fetch_all(self) -> Iterable[str]:
        try:
            async with asyncio.timeout(self._load_timeout):
                return await self._api.get_bookmarked_workout_ids()
        except TimeoutError as exc:
            logger.warning("bookmark_load_timeout", extra={"timeout": self._load_timeout})
            raise BookmarkTimeoutError("Loading bookmarks timed out") from exc
        except Exception as exc:
            logger.warning(
                "bookmark_load_failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            raise

    async def toggle(self, workout_id: str | int) -> bool:
        """Toggle one workout's bookmark.

        The flip is visible to listeners immediately. While a toggle for the same
        workout is in flight, further calls wait for it instead of sending another
        request.

        Returns:
            Membership after the server settled it

        Raises:
            BookmarkClientError: The request failed or timed out; membership was
                rolled back
            InvalidWorkoutIdError: The id cannot be normalized
        """
        self._ensure_open()
        key = normalize_workout_id(workout_id)
        task = self._pending.get(key)
        if task is None:
            previous = key in self._ids
            self._write(key, not previous)
            task = asyncio.create_task(self._run_toggle(key, previous))
            task.add_done_callback(consume_task_exception)
            self._pending[key] = task
            self._notify(key)
        else:
            logger.debug("bookmark_toggle_deduplicated", extra={"workout_id": key})
        return await asyncio.shield(task)

    async def _run_toggle(self, key: str, previous: bool) -> bool:
        try:
            async with asyncio.timeout(self._toggle_timeout):
                result = bool(await self._api.toggle_bookmark(key))
        except TimeoutError as exc:
            self._write(key, previous)
            logger.warning(
                "bookmark_toggle_timeout",
                extra={"workout_id": key, "timeout": self._toggle_timeout},
            )
            raise BookmarkTimeoutError(f"Toggling bookmark for workout {key} timed out") from exc
        except Exception as exc:
            self._write(key, previous)
            logger.warning(
                "bookmark_toggle_rolled_back",
                extra={
                    "workout_id": key,
                    "restored": previous,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise
        else:
            self._write(key, result)
            if result == previous:
                # The server disagreed with the optimistic flip, e.g. the local set was stale
                logger.info(
                    "bookmark_toggle_reconciled",
                    extra={"workout_id": key, "is_bookmarked": result},
                )
            return result
        finally:
            self._pending.pop(key, None)
            if not self._closed:
                self._notify(key)

    async def try_toggle(self, workout_id: str | int) -> ToggleOutcome:
        """Toggle without raising client errors.

        Returns:
            The settled membership, with a classified failure when the toggle
            was rolled back
        """
        try:
            key = normalize_workout_id(workout_id)
        except InvalidWorkoutIdError as exc:
            return ToggleOutcome(str(workout_id), False, ToggleFailure.from_exception(exc))

        try:
            result = await self.toggle(key)
        except BookmarkClientError as exc:
            failure = ToggleFailure.from_exception(exc)
            logger.debug(
                "bookmark_toggle_failure_reported",
                extra={"workout_id": key, "kind": failure.kind.value},
            )
            return ToggleOutcome(key, key in self._ids, failure)
        return ToggleOutcome(key, result)

    async def check(self, workout_id: str | int) -> bool:
        """Membership check for page loads, answered from the shared set."""
        key = normalize_workout_id(workout_id)
        if not self._loaded:
            await self.load()
        return key in self._ids

    async def reconcile(self, workout_id: str | int) -> bool:
        """Ask the server about one workout and write the answer into the shared set.

        Skipped when a toggle for the workout started or settled while the status
        request was in flight; the toggle's own answer is newer.
        """
        self._ensure_open()
        key = normalize_workout_id(workout_id)
        writes_before = self._writes.get(key)

        try:
            async with asyncio.timeout(self._load_timeout):
                status = bool(await self._api.get_bookmark_status(key))
        except TimeoutError as exc:
            logger.warning(
                "bookmark_status_timeout",
                extra={"workout_id": key, "timeout": self._load_timeout},
            )
            raise BookmarkTimeoutError(f"Checking bookmark for workout {key} timed out") from exc

        if key in self._pending or self._writes.get(key) != writes_before:
            logger.debug("bookmark_reconcile_skipped", extra={"workout_id": key})
            return key in self._ids

        if self._write(key, status):
            logger.info(
                "bookmark_reconciled_from_status",
                extra={"workout_id": key, "is_bookmarked": status},
            )
            self._notify(key)
        return status

    async def close(self) -> None:
        """Discard all state (sign-out / unmount) and cancel in-flight requests."""
        if self._closed:
            return
        self._closed = True
        tasks = [task for task in (self._load_task, *self._pending.values()) if task is not None]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._load_task = None
        self._pending.clear()
        self._ids.clear()
        self._writes.clear()
        self._listeners.clear()
        self._loaded = False
        logger.info("bookmark_store_closed", extra={"cancelled": len(tasks)})

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError("Bookmark store is closed")

    def _write(self, key: str, value: bool) -> bool:
        """Set membership for one id; return whether it changed."""
        self._writes[key] = self._writes.get(key, 0) + 1
        if value == (key in self._ids):
            return False
        if value:
            self._ids.add(key)
        else:
            self._ids.discard(key)
        return True

    def _notify_all(self) -> None:
        for key in list(self._listeners):
            self._notify(key)

    def _notify(self, key: str) -> None:
        listeners = self._listeners.get(key)
        if not listeners:
            return
        state = self.state(key)
        for listener in list(listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("bookmark_listener_failed", extra={"workout_id": key})
