import threading
import urllib.error
import urllib.parse

import pytest

from dicedestiny import hiscore
from dicedestiny.hiscore import (
    BackgroundSubmitter,
    HiscoreClient,
    HiscoreEntry,
    NullSubmitter,
    SyncSubmitter,
)

ENTRY = HiscoreEntry(seed=20240101, guess_count=7, final_expression="2 + 12 * 8 / 4 - 6", player_id="player_1")


class _FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_build_url_encodes_expression():
    client = HiscoreClient("https://scores.example/", auth_token="tok")
    url = client.build_url(ENTRY)
    parsed = urllib.parse.urlsplit(url)
    assert parsed.path == "/api/v1/record-dice-match"
    query = urllib.parse.parse_qs(parsed.query)
    assert query == {
        "seed": ["20240101"],
        "guess_count": ["7"],
        "final_expression": ["2 + 12 * 8 / 4 - 6"],
        "player": ["player_1"],
        "auth": ["tok"],
    }
    # spaces and operators are percent-encoded, never "+"
    assert "final_expression=2%20%2B%2012%20%2A%208%20%2F%204%20-%206" in url


def test_build_url_without_token():
    url = HiscoreClient("https://scores.example").build_url(ENTRY)
    assert "auth=" not in url


def test_submit_success(monkeypatch):
    seen = {}

    def fake_urlopen(url, timeout):
        seen["url"], seen["timeout"] = url, timeout
        return _FakeResponse(200)

    monkeypatch.setattr(hiscore.urllib.request, "urlopen", fake_urlopen)
    client = HiscoreClient("https://scores.example", timeout=1.5)
    assert client.submit(ENTRY) is True
    assert seen["timeout"] == 1.5
    assert seen["url"].startswith("https://scores.example/api/v1/record-dice-match?")


def test_submit_non_2xx(monkeypatch):
    monkeypatch.setattr(hiscore.urllib.request, "urlopen", lambda url, timeout: _FakeResponse(302))
    assert HiscoreClient("https://scores.example").submit(ENTRY) is False


@pytest.mark.parametrize(
    "exc",
    [
        urllib.error.URLError("no route"),
        urllib.error.HTTPError("u", 500, "boom", {}, None),
        TimeoutError("slow"),
        ConnectionResetError("reset"),
    ],
)
def test_submit_failures_logged_not_raised(monkeypatch, caplog, exc):
    def fail(url, timeout):
        raise exc

    monkeypatch.setattr(hiscore.urllib.request, "urlopen", fail)
    with caplog.at_level("WARNING", logger="dicedestiny.hiscore"):
        assert HiscoreClient("https://scores.example").submit(ENTRY) is False
    assert "Hiscore submission failed" in caplog.text


def test_sync_submitter_reports_result():
    results = []
    SyncSubmitter(lambda e: True).submit(ENTRY, lambda e, ok: results.append((e, ok)))
    assert results == [(ENTRY, True)]


def test_sync_submitter_swallows_exceptions(caplog):
    def boom(entry):
        raise RuntimeError("kaboom")

    results = []
    with caplog.at_level("WARNING", logger="dicedestiny.hiscore"):
        SyncSubmitter(boom).submit(ENTRY, lambda e, ok: results.append(ok))
    assert results == [False]
    assert "Hiscore submission raised" in caplog.text


def test_background_submitter_does_not_block():
    release = threading.Event()
    done = threading.Event()
    results = []

    def slow_send(entry):
        release.wait(timeout=5)
        return True

    def on_result(entry, ok):
        results.append(ok)
        done.set()

    submitter = BackgroundSubmitter(slow_send)
    future = submitter.submit(ENTRY, on_result)
    # still running: the caller got control back immediately
    assert not future.done()
    release.set()
    assert done.wait(timeout=5)
    submitter.shutdown()
    assert results == [True]


def test_null_submitter_never_calls_back():
    results = []
    NullSubmitter().submit(ENTRY, lambda e, ok: results.append(ok))
    assert results == []
