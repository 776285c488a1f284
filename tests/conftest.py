# pragma: no cover
import datetime as dt
import itertools
import logging
import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH.exists():
    sys.path.insert(0, str(SRC_PATH))

from dicedestiny.game.session import PuzzleSession  # noqa: E402
from dicedestiny.hiscore import HiscoreEntry, SyncSubmitter  # noqa: E402

FIXED_DAY = dt.date(2024, 1, 1)


class RecordingSend:
    """Stand-in for the remote leaderboard that remembers every entry."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.entries: list[HiscoreEntry] = []

    def __call__(self, entry: HiscoreEntry) -> bool:
        self.entries.append(entry)
        return self.result


@pytest.fixture
def recording_send() -> RecordingSend:
    return RecordingSend()


@pytest.fixture
def tick_clock():
    """Monotonic fake clock: 1.0, 2.0, 3.0, ..."""
    counter = itertools.count(1)
    return lambda: float(next(counter))


@pytest.fixture
def make_session(recording_send, tick_clock):
    def _factory(**kwargs) -> PuzzleSession:
        kwargs.setdefault("submitter", SyncSubmitter(recording_send))
        kwargs.setdefault("player_id", "player_42")
        kwargs.setdefault("clock", tick_clock)
        kwargs.setdefault("today", lambda: FIXED_DAY)
        kwargs.setdefault("rng", np.random.default_rng(7))
        return PuzzleSession(**kwargs)

    return _factory


@pytest.fixture
def preserve_root_logger():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers
