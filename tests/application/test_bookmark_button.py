"""Tests for the bookmark button view model."""

from __future__ import annotations

import asyncio

import pytest

from myfc.adapters.bookmarks.errors import BookmarkRequestError
from myfc.application.bookmarks import (
    BookmarkButton,
    ButtonSize,
    ButtonVariant,
    FailureKind,
)


def test_detail_button_initial_view(store):
    button = BookmarkButton(store, 42)

    view = button.view()

    assert view.workout_id == "42"
    assert view.is_bookmarked is False
    assert view.icon_filled is False
    assert view.disabled is False
    assert view.aria_label == "Add to bookmarks"
    assert "text-white" in view.css_classes
    assert view.icon_classes == ("h-8", "w-8")
    assert view.error_message is None


def test_card_button_layout_classes(store):
    small = BookmarkButton(
        store,
        "7",
        variant=ButtonVariant.CARD,
        size=ButtonSize.SM,
        light_mode=True,
        extra_classes=("ml-2",),
    ).view()
    medium = BookmarkButton(store, "7", variant=ButtonVariant.CARD).view()

    assert "text-neutral-800" in small.css_classes
    assert {"h-6", "w-6", "opacity-100"} <= set(small.css_classes)
    assert small.css_classes[-1] == "ml-2"
    assert small.icon_classes == ("h-5", "w-5")
    assert {"h-8", "w-8", "text-white"} <= set(medium.css_classes)
    assert medium.icon_classes == ("h-6", "w-6")


@pytest.mark.asyncio
async def test_press_toggles_and_updates_view(store):
    button = BookmarkButton(store, "42")

    outcome = await button.press()

    assert outcome is not None and outcome.ok
    view = button.view()
    assert view.is_bookmarked is True
    assert view.icon_filled is True
    assert view.aria_label == "Remove from bookmarks"


@pytest.mark.asyncio
async def test_card_shows_loading_while_toggle_in_flight(fake_api, store):
    await store.load()
    fake_api.toggle_gate = asyncio.Event()
    button = BookmarkButton(store, "42", variant=ButtonVariant.CARD)

    press = asyncio.create_task(button.press())
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    view = button.view()
    assert view.is_loading is True
    assert view.disabled is True
    assert "opacity-50" in view.css_classes
    assert await button.press() is None

    fake_api.toggle_gate.set()
    await press
    assert fake_api.toggle_calls == ["42"]


@pytest.mark.asyncio
async def test_buttons_for_same_workout_stay_consistent(store):
    await store.load()
    views_a = []
    views_b = []
    detail = BookmarkButton(store, 42, on_change=views_a.append)
    card = BookmarkButton(store, "42", variant=ButtonVariant.CARD, on_change=views_b.append)
    other = BookmarkButton(store, "43")
    detail.mount()
    card.mount()
    other.mount()

    await card.press()

    assert detail.view().is_bookmarked is True
    assert card.view().is_bookmarked is True
    assert other.view().is_bookmarked is False
    assert views_a[-1].is_bookmarked is True
    assert views_b[-1].is_bookmarked is True
    assert len(views_a) == len(views_b) == 2


@pytest.mark.asyncio
async def test_failure_shows_transient_error(fake_api, store, clock):
    fake_api.toggle_error = BookmarkRequestError("boom", status_code=500)
    views = []
    button = BookmarkButton(
        store, "42", error_display_seconds=4.0, on_change=views.append, clock=clock
    )
    button.mount()

    outcome = await button.press()

    assert outcome.failure.kind is FailureKind.SERVER
    view = button.view()
    assert view.is_bookmarked is False
    assert view.error_message == outcome.failure.message
    assert {"ring-2", "ring-red-500"} <= set(view.css_classes)
    assert views[-1].error_message == outcome.failure.message

    clock.advance(4.0)
    assert button.error is None
    assert button.view().error_message is None


@pytest.mark.asyncio
async def test_unmounted_button_gets_no_updates(store):
    views = []
    button = BookmarkButton(store, "42", on_change=views.append)
    button.mount()
    assert button.mounted
    button.unmount()
    assert not button.mounted

    await store.toggle("42")

    assert views == []
    assert button.view().is_bookmarked is True


@pytest.mark.asyncio
async def test_button_is_disabled_until_initial_load_settles(fake_api, store):
    fake_api.server_ids = {"42"}
    fake_api.load_gate = asyncio.Event()
    button = BookmarkButton(store, "42")

    load = asyncio.create_task(store.load())
    await asyncio.sleep(0)

    view = button.view()
    assert view.disabled is True
    assert view.is_loading is True
    assert await button.press() is None
    assert fake_api.toggle_calls == []

    fake_api.load_gate.set()
    await load
    view = button.view()
    assert view.disabled is False
    assert view.is_bookmarked is True
    assert view.aria_label == "Remove from bookmarks"


@pytest.mark.asyncio
async def test_press_on_unloaded_store_loads_before_toggling(fake_api, store):
    fake_api.server_ids = {"42"}
    button = BookmarkButton(store, 42)

    outcome = await button.press()

    assert outcome.ok
    assert outcome.is_bookmarked is False
    assert fake_api.load_calls == 1
    assert fake_api.toggle_calls == ["42"]
    assert fake_api.server_ids == set()


@pytest.mark.asyncio
async def test_failed_load_is_shown_and_retried_on_next_press(fake_api, store, clock):
    fake_api.load_error = BookmarkRequestError("unavailable", status_code=503)
    views = []
    button = BookmarkButton(store, "42", on_change=views.append, clock=clock)
    button.mount()

    outcome = await button.press()

    assert outcome.failure.kind is FailureKind.SERVER
    assert fake_api.toggle_calls == []
    assert views[-1].error_message == outcome.failure.message
    assert views[-1].disabled is False

    fake_api.load_error = None
    fake_api.server_ids = {"42"}
    outcome = await button.press()

    assert outcome.ok
    assert outcome.is_bookmarked is False
    assert fake_api.load_calls == 2
    assert button.error is None
    button.unmount()


@pytest.mark.asyncio
async def test_error_expiry_is_pushed_to_listeners(fake_api, store):
    fake_api.toggle_error = BookmarkRequestError("boom", status_code=500)
    views = []
    button = BookmarkButton(store, "42", error_display_seconds=0.01, on_change=views.append)
    button.mount()

    await button.press()
    assert views[-1].error_message is not None

    await asyncio.sleep(0.05)

    assert views[-1].error_message is None
    assert "ring-red-500" not in views[-1].css_classes


@pytest.mark.asyncio
async def test_unmount_cancels_pending_error_expiry(fake_api, store):
    fake_api.toggle_error = BookmarkRequestError("boom", status_code=500)
    views = []
    button = BookmarkButton(store, "42", error_display_seconds=0.01, on_change=views.append)
    button.mount()
    await button.press()
    seen = len(views)

    button.unmount()
    await asyncio.sleep(0.05)

    assert len(views) == seen
