# src/dicedestiny/__main__.py
"""Command line entry point for ``python -m dicedestiny``.

Delegates to :func:`dicedestiny.cli.main.main`.
"""

from __future__ import annotations

from dicedestiny.cli.main import main as cli_main


def main() -> None:
    """Invoke :func:`dicedestiny.cli.main.main`."""

    cli_main()


if __name__ == "__main__":  # pragma: no cover - direct execution path
    main()
