from __future__ import annotations

import io

import pytest

import dicedestiny.cli.main as cli_main
from dicedestiny.config import HiscoreConfig
from dicedestiny.hiscore import BackgroundSubmitter, NullSubmitter, SyncSubmitter


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch, preserve_root_logger):
    monkeypatch.setattr(cli_main, "configure_logging", lambda **kwargs: None)


def test_eval_prints_distribution(capsys):
    cli_main.main(["eval", "2", "+", "4"])
    out = capsys.readouterr().out
    assert "d2 + d4" in out
    assert "0.2500" in out
    assert "mean=4.0000 outcomes=8/8" in out


def test_eval_accepts_quoted_expression(capsys):
    cli_main.main(["eval", "2 * 4"])
    assert "d2 * d4" in capsys.readouterr().out


def test_solve_reveals_target(capsys):
    cli_main.main(["solve", "--seed", "20240101"])
    assert capsys.readouterr().out.strip() == "2 + 12 * 8 / 4 - 6"


def test_show_practice(capsys):
    cli_main.main(["show", "--practice"])
    out = capsys.readouterr().out
    assert "(practice)" in out
    assert "(((d2 + d4) - d6) * d8) / d12" in out


def test_seed_and_practice_are_exclusive():
    with pytest.raises(SystemExit):
        cli_main.main(["show", "--seed", "1", "--practice"])


def test_overrides_reach_session(capsys):
    cli_main.main(["--set", "game.dice=2,4", "--set", "game.operators=+", "show", "--seed", "5"])
    out = capsys.readouterr().out
    assert "Your arrangement: d2 + d4" in out


def test_play_loop_solves(capsys, monkeypatch):
    sent = []
    monkeypatch.setattr(
        cli_main,
        "build_submitter",
        lambda cfg, sync=False: SyncSubmitter(lambda e: sent.append(e) or True),
    )
    # canonical 2 4 6 8 12 / + - * /  ->  target 2 12 8 4 6 / + * / -
    script = io.StringIO(
        "\n".join(
            [
                "help",
                "swap dice 1 4",
                "swap dice 2 3",
                "swap dice 3 4",
                "swap op 1 2",
                "swap op 2 3",
                "attempts",
                "quit",
            ]
        )
    )
    cli_main.main(["play", "--seed", "20240101", "--player", "tester"], stdin=script)
    out = capsys.readouterr().out
    assert "Solved in" in out
    assert "(((d2 + d12) * d8) / d4) - d6  distance=0.0000" in out
    assert len(sent) == 1
    assert sent[0].final_expression == "2 + 12 * 8 / 4 - 6"
    assert sent[0].player_id.startswith("player_")


def test_play_reports_bad_commands(capsys):
    script = io.StringIO("swap dice 0 9\nload 2 +\nfrobnicate\nchart\nload 4 + 2 - 6 * 8 / 12\n")
    cli_main.main(["play", "--seed", "123456789"], stdin=script)
    out = capsys.readouterr().out
    assert "error:" in out
    assert "unrecognised command" in out
    assert "loaded (((d4 + d2) - d6) * d8) / d12" in out


def test_build_submitter_variants():
    assert isinstance(cli_main.build_submitter(HiscoreConfig()), NullSubmitter)
    enabled = HiscoreConfig(enabled=True)
    assert isinstance(cli_main.build_submitter(enabled, sync=True), SyncSubmitter)
    background = cli_main.build_submitter(enabled)
    assert isinstance(background, BackgroundSubmitter)
    background.shutdown()
