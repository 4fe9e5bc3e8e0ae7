"""Logging setup shared by the GUI, the headless runner and the CLI.

One call to :func:`setup_logging` attaches a rotating log file in the
per-user directory plus an optional console stream. Calling it again only
retunes levels, so ``run.py``, ``cli.main`` and ``app.run`` may all call it.

Presets (:class:`LogMode`):
- ``quiet``: console shows warnings and errors only
- ``normal``: console follows the requested level
- ``perf``: forces DEBUG and lets per-second ``[timer.trace]`` lines through
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from .platform_paths import ensure_dir, get_user_data_dir


DEFAULT_LOG_FILENAME = "morningpractice.log"
DEBUG_ENV_VAR = "MORNINGPRACTICE_DEBUG"
TIMER_TRACE_ENV_VAR = "MORNINGPRACTICE_TIMER_TRACE"

_PLAIN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
_KV_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"
_TRUTHY = {"1", "true", "yes", "on"}

_MAX_LOG_BYTES = 1_000_000
_LOG_BACKUPS = 3


class LogMode(str, Enum):
    """Verbosity presets selectable with ``--log-mode``."""

    QUIET = "quiet"
    NORMAL = "normal"
    PERF = "perf"

    @classmethod
    def coerce(cls, value: "LogMode | str | None") -> "LogMode":
        """Map user input to a mode; unknown names fall back to NORMAL."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NORMAL


_active_mode = LogMode.NORMAL


def set_log_mode(mode: LogMode | str | None) -> LogMode:
    global _active_mode
    _active_mode = LogMode.coerce(mode)
    return _active_mode


def get_log_mode() -> LogMode:
    return _active_mode


def is_perf_logging_enabled() -> bool:
    return _active_mode is LogMode.PERF


def get_default_log_path() -> Path:
    """Log file in the per-user directory (cwd when that is not writable)."""
    try:
        folder = ensure_dir(get_user_data_dir())
    except OSError:
        folder = Path.cwd()
    return folder / DEFAULT_LOG_FILENAME


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


class _TimerTraceFilter(logging.Filter):
    """Hide ``[timer.trace]`` tick lines unless perf mode or the env flag asks for them."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            text = record.getMessage()
        except (TypeError, ValueError):
            return True
        if "[timer.trace]" not in text:
            return True
        return is_perf_logging_enabled() or _env_flag(TIMER_TRACE_ENV_VAR)


_TRACE_FILTER = _TimerTraceFilter()


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _rotating_file(path: Path, level: int, formatter: logging.Formatter) -> Optional[logging.Handler]:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8"
        )
    except OSError:
        # Unwritable location: keep console logging only
        return None
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(_TRACE_FILTER)
    return handler


def _console(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(_TRACE_FILTER)
    return handler


def _retune(logger: logging.Logger, file_level: int, console_level: int) -> None:
    for handler in logger.handlers:
        is_file = isinstance(handler, logging.FileHandler)
        is_stream = isinstance(handler, logging.StreamHandler) and not is_file
        handler.setLevel(console_level if is_stream else file_level)


def setup_logging(
    *,
    level: str | int = "INFO",
    log_file: Optional[str | Path] = None,
    json_format: bool = False,
    logger_name: Optional[str] = None,
    log_mode: LogMode | str | None = None,
    add_console: bool = True,
) -> logging.Logger:
    """Attach file and console handlers, or retune them if already present.

    Args:
        level: DEBUG/INFO/WARNING/ERROR or a numeric level; DEBUG when
            ``MORNINGPRACTICE_DEBUG`` is set
        log_file: Rotating log path (default: :func:`get_default_log_path`)
        json_format: Single-line key=value records instead of plain text
        logger_name: Configure this logger instead of the root logger
        log_mode: Preset to activate; None keeps the current one
        add_console: Also log to stderr

    Returns:
        The configured logger
    """
    if _env_flag(DEBUG_ENV_VAR):
        level = logging.DEBUG
    mode = set_log_mode(log_mode) if log_mode is not None else get_log_mode()
    file_level = _level_number(level)
    if mode is LogMode.PERF:
        file_level = min(file_level, logging.DEBUG)
    console_level = max(file_level, logging.WARNING) if mode is LogMode.QUIET else file_level

    logger = logging.getLogger(logger_name)
    logger.setLevel(file_level)

    if logger.handlers:
        _retune(logger, file_level, console_level)
        return logger

    formatter = logging.Formatter(_KV_FORMAT if json_format else _PLAIN_FORMAT, datefmt="%H:%M:%S")
    target = Path(log_file) if log_file else get_default_log_path()
    file_handler = _rotating_file(target, file_level, formatter)
    if file_handler is not None:
        logger.addHandler(file_handler)
    if add_console:
        logger.addHandler(_console(console_level, formatter))
    return logger
