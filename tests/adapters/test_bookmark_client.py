"""Tests for the bookmark HTTP client."""

from __future__ import annotations

import json

import httpx
import pytest

from myfc.adapters.bookmarks import (
    AuthRequiredError,
    BookmarkApiClient,
    BookmarkRequestError,
    BookmarkTimeoutError,
)
from myfc.adapters.bookmarks.client import retry_with_backoff
from myfc.config import BookmarkClientConfig


class Recorder:
    """MockTransport handler that replays queued responses and records requests."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def _client(handler: Recorder, token: str | None = "token-123", **kwargs) -> BookmarkApiClient:
    kwargs.setdefault("retry_base_delay", 0.0)
    return BookmarkApiClient(
        "https://myfc.test/",
        access_token=token,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_bulk_fetch_unwraps_envelope_and_normalizes_ids():
    handler = Recorder(
        httpx.Response(
            200,
            json={"success": True, "data": {"bookmarkedWorkoutIds": [1, "2", " 003 ", ""]}},
        )
    )

    async with _client(handler) as client:
        ids = await client.get_bookmarked_workout_ids()

    assert ids == frozenset({"1", "2", "3"})
    request = handler.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/api/bookmarks/all"
    assert request.headers["Authorization"] == "Bearer token-123"
    assert request.headers["Cache-Control"] == "no-cache, no-store"
    assert request.headers["Pragma"] == "no-cache"


@pytest.mark.asyncio
async def test_bulk_fetch_accepts_bare_list_of_rows():
    handler = Recorder(
        httpx.Response(200, json=[{"id": 1, "workoutId": 5}, {"id": 2, "workout_id": "6"}])
    )

    async with _client(handler) as client:
        assert await client.get_bookmarked_workout_ids() == frozenset({"5", "6"})


@pytest.mark.asyncio
async def test_bulk_fetch_retries_server_errors():
    handler = Recorder(
        httpx.Response(503),
        httpx.Response(200, json={"bookmarkedWorkoutIds": ["9"]}),
    )

    async with _client(handler, max_retries=2) as client:
        assert await client.get_bookmarked_workout_ids() == frozenset({"9"})
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_toggle_posts_normalized_id_in_body():
    handler = Recorder(
        httpx.Response(
            200, json={"success": True, "data": {"isBookmarked": True, "workoutId": "42"}}
        )
    )

    async with _client(handler) as client:
        assert await client.toggle_bookmark(42) is True

    request = handler.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/bookmarks"
    assert json.loads(request.content) == {"workoutId": "42"}


@pytest.mark.asyncio
async def test_toggle_is_never_retried():
    handler = Recorder(httpx.Response(500))

    async with _client(handler, max_retries=3) as client:
        with pytest.raises(BookmarkRequestError) as exc_info:
            await client.toggle_bookmark("42")

    assert exc_info.value.status_code == 500
    assert exc_info.value.retryable is True
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_status_sends_workout_id_query():
    handler = Recorder(httpx.Response(200, json={"isBookmarked": False}))

    async with _client(handler) as client:
        assert await client.get_bookmark_status("0042") is False

    assert handler.requests[0].url.params["workoutId"] == "42"


@pytest.mark.asyncio
async def test_unauthorized_response_raises_auth_required():
    handler = Recorder(httpx.Response(401, json={"success": False}))

    async with _client(handler, max_retries=3) as client:
        with pytest.raises(AuthRequiredError):
            await client.get_bookmarked_workout_ids()
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_missing_token_fails_without_request():
    handler = Recorder(httpx.Response(200, json={"isBookmarked": True}))

    async with _client(handler, token=None) as client:
        assert not client.is_authenticated
        with pytest.raises(AuthRequiredError):
            await client.toggle_bookmark("1")

        client.set_access_token("fresh")
        assert client.is_authenticated
        assert await client.toggle_bookmark("1") is True

    assert len(handler.requests) == 1
    assert handler.requests[0].headers["Authorization"] == "Bearer fresh"


@pytest.mark.asyncio
async def test_client_errors_are_not_retryable():
    handler = Recorder(httpx.Response(404))

    async with _client(handler, max_retries=3) as client:
        with pytest.raises(BookmarkRequestError) as exc_info:
            await client.get_bookmark_status("1")

    assert exc_info.value.status_code == 404
    assert exc_info.value.retryable is False
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_timeout_maps_to_client_timeout():
    request = httpx.Request("GET", "https://myfc.test/api/bookmarks/all")
    handler = Recorder(httpx.ReadTimeout("timed out", request=request))

    async with _client(handler, max_retries=1) as client:
        with pytest.raises(BookmarkTimeoutError):
            await client.get_bookmarked_workout_ids()
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_invalid_json_raises_request_error():
    handler = Recorder(httpx.Response(200, content=b"<html>oops</html>"))

    async with _client(handler) as client:
        with pytest.raises(BookmarkRequestError, match="invalid JSON"):
            await client.toggle_bookmark("1")


@pytest.mark.asyncio
async def test_malformed_status_payload_raises_request_error():
    handler = Recorder(httpx.Response(200, json={"unexpected": True}))

    async with _client(handler) as client:
        with pytest.raises(BookmarkRequestError, match="Malformed"):
            await client.toggle_bookmark("1")


@pytest.mark.asyncio
async def test_client_requires_context_manager():
    client = BookmarkApiClient("https://myfc.test", access_token="t")

    with pytest.raises(Exception, match="not initialized"):
        await client.get_bookmark_status("1")


@pytest.mark.asyncio
async def test_from_config_uses_configured_values():
    cfg = BookmarkClientConfig(
        api_url="https://app.myfc.test/", access_token="abc", request_timeout_sec=3, max_retries=0
    )
    handler = Recorder(httpx.Response(503))

    transport = httpx.MockTransport(handler)
    async with BookmarkApiClient.from_config(cfg, transport=transport) as client:
        assert client.api_url == "https://app.myfc.test"
        assert client.timeout == 3.0
        with pytest.raises(BookmarkRequestError):
            await client.get_bookmarked_workout_ids()
    assert len(handler.requests) == 1


@pytest.mark.asyncio
async def test_retry_with_backoff_raises_non_retryable_immediately():
    calls = 0

    async def failing():
        nonlocal calls
        calls += 1
        raise ValueError("bad input")

    with pytest.raises(ValueError):
        await retry_with_backoff(failing, max_retries=3, base_delay=0.0)
    assert calls == 1
