"""Logging helpers for Dice Destiny.

The game core never configures logging itself; entry points (the CLI, tests)
call :func:`configure_logging` once and every module logs through
``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(process)d] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_level(level: str | int) -> int:
    """Normalize a level name such as ``"debug"`` or a number to a ``logging`` constant."""
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def configure_logging(*, level: str | int = "INFO", log_file: str | Path | None = None) -> None:
    """Configure root logging.

    Parameters
    ----------
    level:
        Level name (``"INFO"``) or numeric level (``logging.DEBUG``).
    log_file:
        Optional path that receives a copy of every record. Parent
        directories are created on demand.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=parse_level(level),
        handlers=handlers,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True,  # replace handlers left over from a previous call
    )


__all__ = ["configure_logging", "parse_level"]
