"""MorningPractice command-line interface.

Argparse-based CLI that initializes structured logging early. Exposed via
``python -m morningpractice`` and the ``morningpractice`` console script.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import random
import sys
import time
from typing import Optional

# Suppress pygame support prompt so JSON outputs stay clean.
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from . import __app_name__, __version__
from .config import ConfigError, PracticeConfig, load_config, save_config
from .content.catalog import EXERCISES, find_exercise
from .engine.scheduling import AsyncioScheduler, ManualScheduler
from .engine.shuffler import select
from .logging_utils import LogMode, get_default_log_path, setup_logging
from .session import (
    PracticeSession,
    SessionEvent,
    SessionEventType,
    Stage,
    build_session,
    build_view,
)


def _add_logging_args(parser: argparse.ArgumentParser, *, suppress_defaults: bool = False) -> None:
    """Add the shared logging flags.

    Subcommand copies pass ``suppress_defaults`` so a flag given before the
    subcommand is not reset by the subparser's own default.
    """
    def default(value):
        return argparse.SUPPRESS if suppress_defaults else value

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=default("WARNING"),
        help="Set log level (default: WARNING)",
    )
    parser.add_argument(
        "--log-mode",
        choices=[mode.value for mode in LogMode],
        default=default(LogMode.NORMAL.value),
        help="Logging preset: quiet suppresses console info, perf forces DEBUG and tick traces",
    )
    parser.add_argument(
        "--log-file",
        default=default(str(get_default_log_path())),
        help="Path to log file (default: per-user MorningPractice directory)",
    )
    parser.add_argument(
        "--log-format",
        choices=["plain", "json"],
        default=default("plain"),
        help="Log format (plain or json)",
    )


def _build_logging_parent(*, suppress_defaults: bool = False) -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    _add_logging_args(parent, suppress_defaults=suppress_defaults)
    return parent


def _build_config_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    group = parent.add_argument_group("practice configuration")
    group.add_argument("--config", type=str, default=None, help="Path to a JSON config file")
    group.add_argument("--exercises", type=int, default=None, metavar="N", help="Number of exercises (default 10)")
    group.add_argument("--warm-up", type=int, default=None, metavar="S", help="Warm-up seconds (default 60)")
    group.add_argument("--exercise-seconds", type=int, default=None, metavar="S", help="Seconds per exercise (default 30)")
    group.add_argument("--cool-down", type=int, default=None, metavar="S", help="Cool-down seconds (default 60)")
    return parent


def _build_output_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    group = parent.add_argument_group("output")
    group.add_argument("--mute", action="store_true", help="Start muted (no narration or chime)")
    group.add_argument("--no-audio", action="store_true", help="Disable the chime backend")
    group.add_argument("--no-speech", action="store_true", help="Disable the speech backend")
    return parent


def resolve_config(args: argparse.Namespace) -> PracticeConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config = load_config(getattr(args, "config", None))
    return config.with_overrides(
        exercise_count=getattr(args, "exercises", None),
        warm_up_seconds=getattr(args, "warm_up", None),
        exercise_seconds=getattr(args, "exercise_seconds", None),
        cool_down_seconds=getattr(args, "cool_down", None),
    )


# -------- commands -----------------------------------------------------------
def cmd_catalog(args) -> int:
    if args.name:
        exercise = find_exercise(args.name)
        if exercise is None:
            print(f"Unknown exercise: {args.name}", file=sys.stderr)
            return 1
        if args.json:
            print(json.dumps(exercise.to_dict(), indent=2))
        else:
            print(exercise.name)
            print(f"    {exercise.description}")
        return 0
    if args.json:
        print(json.dumps([e.to_dict() for e in EXERCISES], indent=2))
        return 0
    for i, exercise in enumerate(EXERCISES, start=1):
        print(f"{i:2d}. {exercise.name}")
        if args.verbose:
            print(f"    {exercise.description}")
    return 0


def cmd_shuffle(args) -> int:
    config = resolve_config(args)
    count = args.count if args.count is not None else config.exercise_count
    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        chosen = select(EXERCISES, count, rng)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    if args.json:
        print(json.dumps([e.to_dict() for e in chosen], indent=2))
    else:
        for i, exercise in enumerate(chosen, start=1):
            print(f"{i:2d}. {exercise.name}")
    return 0


def cmd_config(args) -> int:
    """Print the effective configuration, or save it with ``--save``."""
    config = resolve_config(args)
    if args.save is None:
        print(json.dumps(config.to_dict(), indent=2))
        return 0
    target = save_config(config, args.save or None)
    print(f"Saved configuration to {target}")
    return 0


def cmd_voices(args) -> int:
    from .engine.narrator import detect_language_tag, select_voice
    from .engine.speech import Pyttsx3Backend

    backend = Pyttsx3Backend()
    try:
        if not backend.available:
            print("Speech backend unavailable", file=sys.stderr)
            return 1
        voices = backend.voices()
        tag = args.language or detect_language_tag()
        config = load_config(getattr(args, "config", None))
        chosen = select_voice(voices, tag, config.voice_markers)
        if args.json:
            print(json.dumps({
                "language": tag,
                "selected": chosen.id if chosen else None,
                "voices": [
                    {"id": v.id, "name": v.name, "languages": list(v.languages), "gender": v.gender}
                    for v in voices
                ],
            }, indent=2))
        else:
            for v in voices:
                marker = "*" if chosen is not None and v.id == chosen.id else " "
                langs = ",".join(v.languages) or "-"
                print(f"{marker} {v.name} [{langs}] {v.id}")
            print(f"Locale {tag}: {'using ' + chosen.name if chosen else 'platform default voice'}")
        return 0
    finally:
        backend.shutdown()


def cmd_chime(args) -> int:
    from .engine.chime import Chime

    config = resolve_config(args)
    chime = Chime(config)
    try:
        if not chime.ring():
            print("Audio unavailable; chime not played", file=sys.stderr)
            return 1
        time.sleep(config.chime_duration_s + 0.1)
        return 0
    finally:
        chime.close()


def selftest(config: Optional[PracticeConfig] = None) -> int:
    """Drive a silent session from START to COMPLETE on a virtual clock."""
    log = logging.getLogger(__name__)
    config = config or PracticeConfig()
    try:
        scheduler = ManualScheduler()
        session = PracticeSession(config, scheduler, rng=random.Random(0))
        if not session.start_practice():
            raise RuntimeError("start_practice was rejected")
        scheduler.advance(config.warm_up_seconds)
        for _ in range(session.state.total_exercises):
            if session.stage is not Stage.EXERCISE:
                raise RuntimeError(f"expected exercise stage, got {session.stage.value}")
            session.start_exercise()
            scheduler.advance(config.exercise_seconds)
        scheduler.advance(config.cool_down_seconds)
        if session.stage is not Stage.COMPLETE:
            raise RuntimeError(f"session ended in {session.stage.value}")
        session.reset_practice()
        msg = "Selftest OK: session reached COMPLETE and reset"
        log.info(msg)
        print(msg)
        return 0
    except Exception as e:
        log.error("Selftest failed: %s", e)
        print(f"Selftest failed: {e}", file=sys.stderr)
        return 1


class ConsoleRunner:
    """Headless session on an asyncio loop, printing progress to stdout.

    Args:
        session: Session to drive
        auto_go: Seconds to wait before pressing Go; None reads Enter from stdin
        show_ticks: Print the clock on every tick
    """

    def __init__(self, session: PracticeSession, *, auto_go: Optional[float], show_ticks: bool = False):
        self.session = session
        self.auto_go = auto_go
        self.show_ticks = show_ticks
        self._gate_index: Optional[int] = None
        self._done: Optional[asyncio.Future] = None
        emitter = session.event_emitter
        emitter.subscribe(SessionEventType.STATE_CHANGED, self._on_state)
        emitter.subscribe(SessionEventType.STAGE_CHANGED, self._on_stage)
        emitter.subscribe(SessionEventType.SESSION_COMPLETE, self._on_complete)
        if show_ticks:
            emitter.subscribe(SessionEventType.TICK, self._on_tick)

    def _print_view(self) -> None:
        view = build_view(self.session.state, self.session.config)
        line = f"== {view.title}"
        if view.progress:
            line += f" ({view.progress})"
        print(line, flush=True)
        if view.body:
            print(f"   {view.body}", flush=True)

    def _on_stage(self, _event: SessionEvent) -> None:
        if self.session.stage is not Stage.EXERCISE:
            self._print_view()

    def _on_tick(self, event: SessionEvent) -> None:
        view = build_view(self.session.state, self.session.config)
        print(f"   {view.clock}", flush=True)

    def _on_state(self, _event: SessionEvent) -> None:
        state = self.session.state
        view = build_view(state, self.session.config)
        if not view.can_go or self._gate_index == state.exercise_index:
            return
        self._gate_index = state.exercise_index
        self._print_view()
        if self.auto_go is not None:
            self.session.scheduler.call_later(self.auto_go, self.session.start_exercise)
        else:
            asyncio.get_running_loop().create_task(self._wait_for_enter())

    async def _wait_for_enter(self) -> None:
        print("   Press Enter for Go...", flush=True)
        await asyncio.get_running_loop().run_in_executor(None, sys.stdin.readline)
        self.session.start_exercise()

    def _on_complete(self, _event: SessionEvent) -> None:
        if self._done is not None and not self._done.done():
            self._done.set_result(0)

    async def run(self) -> int:
        self._done = asyncio.get_running_loop().create_future()
        if not self.session.start_practice():
            return 1
        return await self._done


async def _run_headless(config: PracticeConfig, args) -> int:
    scheduler = AsyncioScheduler(asyncio.get_running_loop(), time_scale=args.time_scale)
    rng = random.Random(args.seed) if args.seed is not None else None
    session = build_session(
        config,
        scheduler,
        audio=not args.no_audio,
        speech=not args.no_speech,
        muted=args.mute,
        rng=rng,
    )
    runner = ConsoleRunner(session, auto_go=args.auto_go, show_ticks=args.show_ticks)
    try:
        return await runner.run()
    finally:
        session.event_emitter.clear_all()
        session.shutdown()


def cmd_run(args) -> int:
    config = resolve_config(args)
    try:
        return asyncio.run(_run_headless(config, args))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted")
        return 130


def cmd_gui(args) -> int:
    from .app import run as run_gui

    config = resolve_config(args)
    return run_gui(config, muted=args.mute, audio=not args.no_audio, speech=not args.no_speech)


def build_parser() -> argparse.ArgumentParser:
    logging_parent = _build_logging_parent()
    config_parent = _build_config_parent()
    output_parent = _build_output_parent()
    parser = argparse.ArgumentParser(
        prog="morningpractice",
        description=f"{__app_name__} CLI",
        parents=[logging_parent],
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=False)

    sub_logging_parent = _build_logging_parent(suppress_defaults=True)

    def add_subparser(name: str, **kwargs: object) -> argparse.ArgumentParser:
        parents = list(kwargs.pop("parents", []))
        parents.insert(0, sub_logging_parent)
        return sub.add_parser(name, parents=parents, **kwargs)

    add_subparser("gui", parents=[config_parent, output_parent], help="Launch the practice window (default)")

    p_run = add_subparser("run", parents=[config_parent, output_parent], help="Run a session in the terminal")
    p_run.add_argument("--auto-go", type=float, default=None, metavar="S",
                       help="Press Go automatically S seconds after each exercise is announced")
    p_run.add_argument("--time-scale", type=float, default=1.0,
                       help="Clock speed multiplier (2.0 = twice as fast)")
    p_run.add_argument("--seed", type=int, default=None, help="Seed for exercise selection")
    p_run.add_argument("--show-ticks", action="store_true", help="Print the clock every second")

    p_cat = add_subparser("catalog", help="List the exercise catalogue")
    p_cat.add_argument("--json", action="store_true", help="Print as JSON")
    p_cat.add_argument("-v", "--verbose", action="store_true", help="Include descriptions")
    p_cat.add_argument("--name", default=None, help="Show a single exercise by name")

    p_shuffle = add_subparser("shuffle", parents=[config_parent], help="Print a random exercise selection")
    p_shuffle.add_argument("--count", type=int, default=None, help="Number of exercises (default: config)")
    p_shuffle.add_argument("--seed", type=int, default=None, help="Seed for a repeatable selection")
    p_shuffle.add_argument("--json", action="store_true", help="Print as JSON")

    p_config = add_subparser("config", parents=[config_parent], help="Show the effective configuration")
    p_config.add_argument(
        "--save",
        nargs="?",
        const="",
        default=None,
        metavar="PATH",
        help="Write it as JSON (default: per-user config file)",
    )

    p_voices = add_subparser("voices", help="List speech voices and the preferred one")
    p_voices.add_argument("--config", type=str, default=None, help="Path to a JSON config file")
    p_voices.add_argument("--language", type=str, default=None, help="Locale tag to match (default: system)")
    p_voices.add_argument("--json", action="store_true", help="Print as JSON")

    add_subparser("chime", parents=[config_parent], help="Ring the chime once")
    add_subparser("selftest", parents=[config_parent], help="Drive a silent session on a virtual clock")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging before doing any work
    if getattr(args, "log_mode", None):
        os.environ["MORNINGPRACTICE_LOG_MODE"] = args.log_mode
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        json_format=(args.log_format == "json"),
        log_mode=args.log_mode,
        add_console=True,
    )

    cmd = args.command or "gui"
    try:
        if cmd == "gui":
            if args.command is None:
                args = parser.parse_args(["gui", *(argv if argv is not None else sys.argv[1:])])
            return cmd_gui(args)
        if cmd == "run":
            return cmd_run(args)
        if cmd == "catalog":
            return cmd_catalog(args)
        if cmd == "shuffle":
            return cmd_shuffle(args)
        if cmd == "config":
            return cmd_config(args)
        if cmd == "voices":
            return cmd_voices(args)
        if cmd == "chime":
            return cmd_chime(args)
        if cmd == "selftest":
            return selftest(resolve_config(args))
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    parser.error(f"Unknown command: {cmd}")
    return 2
