"""Hiscore submission for solved daily puzzles.

The leaderboard lives on a remote service; this module only knows how to
call it.  A submission is fire-and-forget: :class:`BackgroundSubmitter`
runs it on a worker thread and reports the outcome through a callback.
Failures are logged and reported as ``False``; nothing is retried and
nothing propagates into the game.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.parse
import urllib.request
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Protocol

LOGGER = logging.getLogger(__name__)

__all__ = [
    "HiscoreEntry",
    "HiscoreClient",
    "Submitter",
    "SyncSubmitter",
    "BackgroundSubmitter",
    "NullSubmitter",
]

ResultCallback = Callable[["HiscoreEntry", bool], None]


@dataclass(frozen=True, slots=True)
class HiscoreEntry:
    """Payload of one submission."""

    seed: int
    guess_count: int
    final_expression: str
    player_id: str


class HiscoreClient:
    """Blocking HTTP client for the record-dice-match endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        endpoint: str = "/api/v1/record-dice-match",
        auth_token: str | None = None,
        timeout: float = 5.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.endpoint = endpoint
        self.auth_token = auth_token
        self.timeout = timeout

    def build_url(self, entry: HiscoreEntry) -> str:
        params: dict[str, str | int] = {
            "seed": entry.seed,
            "guess_count": entry.guess_count,
            "final_expression": entry.final_expression,
            "player": entry.player_id,
        }
        if self.auth_token:
            params["auth"] = self.auth_token
        query = urllib.parse.urlencode(params, quote_via=urllib.parse.quote)
        return f"{self.base_url}{self.endpoint}?{query}"

    def submit(self, entry: HiscoreEntry) -> bool:
        """Send *entry*; ``True`` on any 2xx response, ``False`` otherwise."""
        url = self.build_url(entry)
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as resp:
                ok = 200 <= resp.status < 300
        except (urllib.error.URLError, OSError) as exc:  # HTTPError, timeouts, DNS
            LOGGER.warning(
                "Hiscore submission failed: %s",
                exc,
                extra={"stage": "hiscore", "seed": entry.seed},
            )
            return False
        if ok:
            LOGGER.info(
                "Hiscore submitted",
                extra={"stage": "hiscore", "seed": entry.seed, "guess_count": entry.guess_count},
            )
        else:
            LOGGER.warning(
                "Hiscore endpoint rejected submission",
                extra={"stage": "hiscore", "seed": entry.seed},
            )
        return ok


class Submitter(Protocol):
    def submit(self, entry: HiscoreEntry, on_result: ResultCallback | None = None) -> None: ...


class SyncSubmitter:
    """Run a send function inline.  Used by tests and ``--sync-submit``."""

    def __init__(self, send: Callable[[HiscoreEntry], bool]) -> None:
        self._send = send

    def submit(self, entry: HiscoreEntry, on_result: ResultCallback | None = None) -> None:
        ok = _call_safely(self._send, entry)
        if on_result is not None:
            on_result(entry, ok)


class BackgroundSubmitter:
    """Run a send function on a single worker thread without blocking play."""

    def __init__(self, send: Callable[[HiscoreEntry], bool], *, max_workers: int = 1) -> None:
        self._send = send
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hiscore")

    def submit(self, entry: HiscoreEntry, on_result: ResultCallback | None = None) -> Future[bool]:
        future = self._executor.submit(_call_safely, self._send, entry)
        if on_result is not None:
            future.add_done_callback(lambda f: on_result(entry, f.result()))
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class NullSubmitter:
    """Drop submissions (hiscores disabled or practice-only setups)."""

    def submit(self, entry: HiscoreEntry, on_result: ResultCallback | None = None) -> None:
        LOGGER.debug("Hiscore submission disabled", extra={"stage": "hiscore", "seed": entry.seed})


def _call_safely(send: Callable[[HiscoreEntry], bool], entry: HiscoreEntry) -> bool:
    try:
        return bool(send(entry))
    except Exception:
        LOGGER.warning(
            "Hiscore submission raised",
            exc_info=True,
            extra={"stage": "hiscore", "seed": entry.seed},
        )
        return False
