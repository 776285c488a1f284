# src/dicedestiny/cli/main.py
"""
Command line interface for the :mod:`dicedestiny` package.

Sub-commands
------------
show   print a puzzle's target distribution and starting arrangement
eval   print the distribution of an expression such as ``"6 + 4 * 2"``
play   interactive play loop on stdin
solve  reveal a puzzle's target expression
"""
from __future__ import annotations

import argparse
import getpass
import logging
import platform
import sys
from pathlib import Path
from typing import Sequence, TextIO

from dicedestiny.config import AppConfig, HiscoreConfig, apply_dot_overrides, load_app_config
from dicedestiny.game.distribution import OutcomeDistribution, evaluate
from dicedestiny.game.errors import DiceDestinyError
from dicedestiny.game.expression import parse_expression
from dicedestiny.game.scoring import distance
from dicedestiny.game.session import PuzzleSession, PuzzleState
from dicedestiny.hiscore import (
    BackgroundSubmitter,
    HiscoreClient,
    NullSubmitter,
    Submitter,
    SyncSubmitter,
)
from dicedestiny.utils.logging import configure_logging
from dicedestiny.utils.random import player_id

LOGGER = logging.getLogger(__name__)

PLAY_HELP = """commands:
  swap dice I J     exchange dice at positions I and J (0-based)
  swap op I J       exchange operators at positions I and J
  load EXPR         make a previous expression current, e.g. load 6 + 4 * 2 - 8 / 12
  attempts          list attempts, best first
  chart             print target vs current probabilities
  help              show this text
  quit              leave"""

# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_puzzle_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--seed", type=int, default=None, help="Puzzle seed (default: today)")
    group.add_argument("--practice", action="store_true", help="Draw a random practice seed")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser."""
    parser = argparse.ArgumentParser(prog="dicedestiny")
    parser.add_argument("--config", type=Path, help="Path to YAML configuration")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override configuration values, e.g. game.decimals=3",
    )
    parser.add_argument("--log-level", default=None, help="Root logging level")

    sub = parser.add_subparsers(dest="command", required=True)

    show_parser = sub.add_parser("show", help="Show a puzzle's target distribution")
    _add_puzzle_args(show_parser)

    eval_parser = sub.add_parser("eval", help="Print the distribution of an expression")
    eval_parser.add_argument("expression", nargs="+", help='Expression text, e.g. "6 + 4 * 2"')

    play_parser = sub.add_parser("play", help="Play a puzzle interactively")
    _add_puzzle_args(play_parser)
    play_parser.add_argument("--player", default=None, help="Client identifier for hiscores")
    play_parser.add_argument(
        "--sync-submit",
        action="store_true",
        help="Submit hiscores inline instead of on a background thread",
    )

    solve_parser = sub.add_parser("solve", help="Reveal a puzzle's target expression")
    _add_puzzle_args(solve_parser)

    return parser


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _default_client_id() -> str:
    try:
        user = getpass.getuser()
    except (OSError, KeyError):  # no login name in some containers
        user = "anonymous"
    return f"{user}@{platform.node()}"


def build_submitter(cfg: HiscoreConfig, *, sync: bool = False) -> Submitter:
    """Pick the hiscore submitter implied by *cfg*."""
    if not cfg.enabled:
        return NullSubmitter()
    client = HiscoreClient(
        cfg.base_url,
        endpoint=cfg.endpoint,
        auth_token=cfg.auth_token,
        timeout=cfg.timeout_sec,
    )
    if sync or not cfg.background:
        return SyncSubmitter(client.submit)
    return BackgroundSubmitter(client.submit)


def format_distribution(dist: OutcomeDistribution) -> str:
    if not dist:
        return "(no admitted outcomes)"
    frame = dist.to_frame()
    return frame.to_string(index=False, float_format=lambda x: f"{x:.4f}")


def _start(session: PuzzleSession, args: argparse.Namespace) -> PuzzleState:
    if args.practice:
        return session.new_practice_puzzle()
    return session.generate_new_puzzle(args.seed)


def _describe(state: PuzzleState, out: TextIO) -> None:
    mode = "daily" if state.is_daily else "practice"
    print(f"Puzzle seed {state.seed} ({mode})", file=out)
    print("Target distribution:", file=out)
    print(format_distribution(state.target_distribution), file=out)
    print(f"Your arrangement: {state.current_expression.grouped()}", file=out)


def _print_attempts(state: PuzzleState, out: TextIO) -> None:
    if not state.attempts:
        print("no attempts yet", file=out)
        return
    for rank, attempt in enumerate(state.attempts, start=1):
        print(f"{rank:>3}. {attempt.expression:<28} distance={attempt.distance:.4f}", file=out)


def run_play(session: PuzzleSession, stdin: TextIO, out: TextIO) -> PuzzleState:
    """Drive *session* from text commands until ``quit`` or end of input."""
    state = session.state
    _describe(state, out)
    print(PLAY_HELP, file=out)
    for raw in stdin:
        parts = raw.split()
        if not parts:
            continue
        cmd, rest = parts[0].lower(), parts[1:]
        try:
            if cmd in {"quit", "exit", "q"}:
                break
            if cmd == "help":
                print(PLAY_HELP, file=out)
            elif cmd == "attempts":
                _print_attempts(session.state, out)
            elif cmd == "chart":
                print(session.chart_frame(smooth=False).to_string(index=False), file=out)
            elif cmd == "load":
                state = session.load_expression(" ".join(rest))
                print(f"loaded {state.current_expression.grouped()}", file=out)
            elif cmd == "swap" and len(rest) == 3:
                state = session.swap(int(rest[1]), int(rest[2]), rest[0])
                score = distance(state.current_distribution, state.target_distribution)
                print(
                    f"{state.current_expression.grouped()}  distance={score:.4f}",
                    file=out,
                )
                if state.solved:
                    print(f"Solved in {len(state.attempts)} attempts!", file=out)
            else:
                print(f"unrecognised command: {raw.strip()!r} (try 'help')", file=out)
        except (DiceDestinyError, IndexError, ValueError) as exc:
            print(f"error: {exc}", file=out)
    return session.state


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def load_config(args: argparse.Namespace) -> AppConfig:
    cfg = load_app_config(args.config) if args.config is not None else AppConfig()
    return apply_dot_overrides(cfg, list(args.overrides or []))


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None) -> None:
    """Entry point for the ``dicedestiny`` CLI dispatcher."""
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = load_config(args)

    configure_logging(
        level=args.log_level or cfg.logging.level,
        log_file=cfg.logging.log_file,
    )
    LOGGER.debug(
        "CLI arguments parsed",
        extra={
            "stage": "cli",
            "command": args.command,
            "config_path": str(args.config) if args.config is not None else None,
            "overrides": list(args.overrides or []),
        },
    )

    out = sys.stdout
    if args.command == "eval":
        expression = parse_expression(" ".join(args.expression))
        dist = evaluate(
            expression,
            max_abs=cfg.game.max_abs_outcome,
            decimals=cfg.game.decimals,
            max_leaves=cfg.game.max_enumeration_leaves,
        )
        print(expression.grouped(), file=out)
        print(format_distribution(dist), file=out)
        print(f"mean={dist.mean():.4f} outcomes={dist.admitted_outcomes}/{dist.total_outcomes}", file=out)
        return

    submitter: Submitter = NullSubmitter()
    if args.command == "play":
        submitter = build_submitter(cfg.hiscore, sync=args.sync_submit)
        client = args.player or cfg.hiscore.client_id or _default_client_id()
        session = PuzzleSession.from_config(cfg, submitter=submitter, player_id=player_id(client))
    else:
        session = PuzzleSession.from_config(cfg)
    state = _start(session, args)

    if args.command == "show":
        _describe(state, out)
    elif args.command == "solve":
        print(state.target_expression.text, file=out)
    elif args.command == "play":
        try:
            run_play(session, stdin if stdin is not None else sys.stdin, out)
        finally:
            if isinstance(submitter, BackgroundSubmitter):
                submitter.shutdown(wait=True)
    else:  # pragma: no cover - argparse enforces choices
        parser.error(f"unknown command {args.command!r}")
