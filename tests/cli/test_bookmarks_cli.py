import asyncio
import json

import httpx
import pytest

from myfc.adapters.bookmarks import BookmarkApiClient
from myfc.application.bookmarks import BookmarkStore
from myfc.cli import bookmarks as cli


@pytest.fixture
def server(monkeypatch, tmp_path):
    """Route the CLI's client through a MockTransport backed by a set of ids."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "setup_json_logging", lambda *args, **kwargs: None)
    ids = {"1"}
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/bookmarks/all":
            return httpx.Response(200, json={"bookmarkedWorkoutIds": sorted(ids)})
        if request.method == "POST":
            workout_id = json.loads(request.content)["workoutId"]
            if workout_id == "500":
                return httpx.Response(500)
            ids.symmetric_difference_update({workout_id})
            return httpx.Response(
                200, json={"isBookmarked": workout_id in ids, "workoutId": workout_id}
            )
        workout_id = request.url.params["workoutId"]
        return httpx.Response(200, json={"isBookmarked": workout_id in ids})

    original = BookmarkApiClient.from_config

    def from_config(cfg, *, transport=None):
        return original(cfg, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(BookmarkApiClient, "from_config", staticmethod(from_config))
    return seen


def _output(capsys) -> dict:
    return json.loads(capsys.readouterr().out.strip().splitlines()[-1])


def test_list(server, capsys):
    assert cli.main(["--token", "t", "list"]) == 0
    assert _output(capsys) == {"bookmarkedWorkoutIds": ["1"]}


def test_toggle(server, capsys):
    assert cli.main(["--token", "t", "toggle", "002"]) == 0
    assert _output(capsys) == {"workoutId": "2", "isBookmarked": True}


def test_toggle_failure_exits_non_zero(server, capsys):
    assert cli.main(["--token", "t", "toggle", "500"]) == 1
    output = _output(capsys)
    assert output["isBookmarked"] is False
    assert output["error"]["kind"] == "server"


def test_status_fresh_uses_single_status_endpoint(server, capsys):
    assert cli.main(["--token", "t", "status", "1", "--fresh"]) == 0
    assert _output(capsys) == {"workoutId": "1", "isBookmarked": True}
    assert [request.url.path for request in server] == ["/api/bookmarks"]


def test_missing_token_fails(server, capsys, monkeypatch):
    monkeypatch.delenv("MYFC_ACCESS_TOKEN", raising=False)

    assert cli.main(["list"]) == 1
    assert "No authenticated session" in capsys.readouterr().err
    assert server == []


def test_status_fresh_timeout_exits_with_error(server, capsys, monkeypatch):
    async def hang(self, workout_id):
        await asyncio.Event().wait()

    monkeypatch.setattr(BookmarkApiClient, "get_bookmark_status", hang)
    monkeypatch.setattr(
        BookmarkStore,
        "from_config",
        classmethod(lambda cls, api, cfg: cls(api, load_timeout=0.05)),
    )

    assert cli.main(["--token", "t", "status", "1", "--fresh"]) == 1
    assert "timed out" in capsys.readouterr().err
