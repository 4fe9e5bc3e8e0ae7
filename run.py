"""Entry point for launching the MorningPractice GUI or CLI."""

from __future__ import annotations

import os
import sys


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    # Check for --debug flag BEFORE any imports that use logging
    if "--debug" in args:
        os.environ["MORNINGPRACTICE_DEBUG"] = "1"
        args.remove("--debug")

    if args:
        from morningpractice.cli import main as cli_main

        return cli_main(args)
    return _launch_gui()


def _launch_gui() -> int:
    from morningpractice.app import run as run_gui

    return run_gui()


if __name__ == "__main__":
    raise SystemExit(main())
