"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import pytest

from myfc.application.bookmarks import BookmarkStore


class FakeBookmarkApi:
    """In-memory stand-in for the bookmark API.

    The bulk fetch snapshots the server set before waiting on ``load_gate`` so a
    test can hold a stale response while toggles settle.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self.server_ids: set[str] = set(ids)
        self.load_calls = 0
        self.toggle_calls: list[str] = []
        self.status_calls: list[str] = []
        self.load_gate: asyncio.Event | None = None
        self.toggle_gate: asyncio.Event | None = None
        self.load_error: Exception | None = None
        self.toggle_error: Exception | None = None
        self.toggle_result: bool | None = None
        self.status_gate: asyncio.Event | None = None
        self.status_error: Exception | None = None

    async def get_bookmarked_workout_ids(self) -> frozenset[str]:
        self.load_calls += 1
        snapshot = frozenset(self.server_ids)
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.load_error is not None:
            raise self.load_error
        return snapshot

    async def toggle_bookmark(self, workout_id: str) -> bool:
        self.toggle_calls.append(workout_id)
        if self.toggle_gate is not None:
            await self.toggle_gate.wait()
        if self.toggle_error is not None:
            raise self.toggle_error
        if self.toggle_result is not None:
            return self.toggle_result
        if workout_id in self.server_ids:
            self.server_ids.discard(workout_id)
            return False
        self.server_ids.add(workout_id)
        return True

    async def get_bookmark_status(self, workout_id: str) -> bool:
        self.status_calls.append(workout_id)
        if self.status_gate is not None:
            await self.status_gate.wait()
        if self.status_error is not None:
            raise self.status_error
        return workout_id in self.server_ids


@pytest.fixture
def fake_api() -> FakeBookmarkApi:
    return FakeBookmarkApi()


@pytest.fixture
def store(fake_api: FakeBookmarkApi) -> BookmarkStore:
    return BookmarkStore(fake_api, toggle_timeout=1.0, load_timeout=1.0)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
