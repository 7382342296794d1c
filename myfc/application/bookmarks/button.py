"""Bookmark button view model.

One class serves both layouts, the detail-page button and the smaller card
button; the layout is a parameter, the state always comes from the shared
:class:`BookmarkStore`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from myfc.adapters.bookmarks.errors import BookmarkClientError
from myfc.application.bookmarks.results import ToggleFailure, ToggleOutcome
from myfc.core.workout_ids import normalize_workout_id

if TYPE_CHECKING:
    from myfc.application.bookmarks.results import BookmarkButtonState
    from myfc.application.bookmarks.store import BookmarkStore

logger = logging.getLogger(__name__)

DEFAULT_ERROR_DISPLAY_SECONDS = 4.0

ADD_LABEL = "Add to bookmarks"
REMOVE_LABEL = "Remove from bookmarks"


class ButtonVariant(str, Enum):
    DETAIL = "detail"  # workout detail header
    CARD = "card"  # carousel and list cards


class ButtonSize(str, Enum):
    SM = "sm"
    MD = "md"


@dataclass(frozen=True)
class ButtonView:
    """Everything a template needs to draw one bookmark button."""

    workout_id: str
    is_bookmarked: bool
    is_loading: bool
    disabled: bool
    icon_filled: bool
    aria_label: str
    css_classes: tuple[str, ...]
    icon_classes: tuple[str, ...]
    error_message: str | None = None


def _variant_classes(variant: ButtonVariant, size: ButtonSize, light_mode: bool) -> list[str]:
    if variant is ButtonVariant.DETAIL:
        return ["text-white", "hover:text-indigo-200", "transition"]

    classes = ["transition", "rounded-full", "flex", "items-center", "justify-center"]
    if light_mode:
        classes += ["text-neutral-800", "hover:text-indigo-600"]
    else:
        classes += ["text-white", "hover:text-indigo-200"]
    classes += ["h-6", "w-6"] if size is ButtonSize.SM else ["h-8", "w-8"]
    return classes


def _icon_classes(variant: ButtonVariant, size: ButtonSize) -> tuple[str, ...]:
    if variant is ButtonVariant.DETAIL:
        return ("h-8", "w-8")
    return ("h-5", "w-5") if size is ButtonSize.SM else ("h-6", "w-6")


class BookmarkButton:
    """A mounted bookmark button bound to one workout."""

    def __init__(
        self,
        store: BookmarkStore,
        workout_id: str | int,
        *,
        variant: ButtonVariant = ButtonVariant.DETAIL,
        size: ButtonSize = ButtonSize.MD,
        light_mode: bool = False,
        extra_classes: tuple[str, ...] = (),
        error_display_seconds: float = DEFAULT_ERROR_DISPLAY_SECONDS,
        on_change: Callable[[ButtonView], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self.workout_id = normalize_workout_id(workout_id)
        self.variant = variant
        self.size = size
        self.light_mode = light_mode
        self.extra_classes = extra_classes
        self._error_display_seconds = error_display_seconds
        self._on_change = on_change
        self._clock = clock
        self._error: ToggleFailure | None = None
        self._error_expires_at = 0.0
        self._error_timer: asyncio.TimerHandle | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def mount(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self.workout_id, self._on_store_change)

    def unmount(self) -> None:
        self._cancel_error_timer()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def error(self) -> ToggleFailure | None:
        """The last toggle failure while it is still on display."""
        if self._error is not None and self._clock() >= self._error_expires_at:
            self._error = None
        return self._error

    def view(self) -> ButtonView:
        state = self._store.state(self.workout_id)
        classes = _variant_classes(self.variant, self.size, self.light_mode)
        if self.variant is ButtonVariant.CARD:
            classes.append("opacity-50" if state.is_loading else "opacity-100")
        error = self.error
        if error is not None:
            classes += ["ring-2", "ring-red-500"]
        classes.extend(self.extra_classes)

        return ButtonView(
            workout_id=self.workout_id,
            is_bookmarked=state.is_bookmarked,
            is_loading=state.is_loading,
            disabled=state.is_loading,
            icon_filled=state.is_bookmarked,
            aria_label=REMOVE_LABEL if state.is_bookmarked else ADD_LABEL,
            css_classes=tuple(classes),
            icon_classes=_icon_classes(self.variant, self.size),
            error_message=error.message if error is not None else None,
        )

    async def press(self) -> ToggleOutcome | None:
        """Handle a tap.

        Before the first successful load the tap fetches the bookmark set, so the
        toggle flips the server's membership rather than the unknown default. A
        failed load is shown like a failed toggle and retried on the next tap.

        Returns:
            The toggle outcome, or ``None`` when the tap was ignored because the
            workout's membership is still loading
        """
        if self._store.is_loading(self.workout_id):
            logger.debug("bookmark_press_ignored", extra={"workout_id": self.workout_id})
            return None

        self._clear_error()
        if not self._store.is_loaded:
            try:
                await self._store.load()
            except BookmarkClientError as exc:
                failure = ToggleFailure.from_exception(exc)
                self._show_error(failure)
                return ToggleOutcome(self.workout_id, False, failure)

        outcome = await self._store.try_toggle(self.workout_id)
        if outcome.failure is not None:
            self._show_error(outcome.failure)
        return outcome

    def _show_error(self, failure: ToggleFailure) -> None:
        self._cancel_error_timer()
        self._error = failure
        self._error_expires_at = self._clock() + self._error_display_seconds
        self._error_timer = asyncio.get_running_loop().call_later(
            self._error_display_seconds, self._expire_error
        )
        self._emit()

    def _expire_error(self) -> None:
        self._error_timer = None
        if self._error is not None:
            self._error = None
            self._emit()

    def _clear_error(self) -> None:
        self._cancel_error_timer()
        self._error = None

    def _cancel_error_timer(self) -> None:
        if self._error_timer is not None:
            self._error_timer.cancel()
            self._error_timer = None

    def _on_store_change(self, _state: BookmarkButtonState) -> None:
        self._emit()

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self.view())
