"""Tests for centralized logging configuration."""

import logging
from pathlib import Path

from morningpractice.logging_utils import (
    LogMode,
    _TimerTraceFilter,
    get_default_log_path,
    get_log_mode,
    is_perf_logging_enabled,
    set_log_mode,
    setup_logging,
)


def test_setup_logging_file_and_console_handlers(tmp_path: Path):
    log_file = tmp_path / "test.log"
    logger = setup_logging(
        level="DEBUG",
        log_file=str(log_file),
        json_format=False,
        add_console=True,
        logger_name="test_logging_utils.file_console",
    )
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert log_file.exists()
    assert "hello" in log_file.read_text(encoding="utf-8")


def test_setup_logging_idempotent(tmp_path: Path):
    log_file = tmp_path / "test2.log"
    name = "test_logging_utils.idempotent"
    logger1 = setup_logging(level="INFO", log_file=str(log_file), logger_name=name)
    count = len(logger1.handlers)
    logger2 = setup_logging(level="ERROR", log_file=str(log_file), logger_name=name)
    assert logger1 is logger2
    assert len(logger2.handlers) == count
    assert logger2.level == logging.ERROR


def test_debug_env_forces_debug(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("MORNINGPRACTICE_DEBUG", "1")
    logger = setup_logging(level="ERROR", log_file=str(tmp_path / "d.log"), logger_name="test_logging_utils.debug_env")
    assert logger.level == logging.DEBUG


def test_log_mode_helpers_roundtrip():
    set_log_mode(LogMode.PERF)
    assert get_log_mode() is LogMode.PERF
    assert is_perf_logging_enabled() is True
    set_log_mode("quiet")
    assert get_log_mode() is LogMode.QUIET
    assert is_perf_logging_enabled() is False
    set_log_mode("bogus")
    assert get_log_mode() is LogMode.NORMAL


def _record(msg):
    return logging.LogRecord("x", logging.DEBUG, __file__, 1, msg, None, None)


def test_timer_trace_filter(monkeypatch):
    f = _TimerTraceFilter()
    set_log_mode(LogMode.NORMAL)
    monkeypatch.delenv("MORNINGPRACTICE_TIMER_TRACE", raising=False)
    assert f.filter(_record("[timer.trace] tick remaining=3")) is False
    assert f.filter(_record("[timer] Started 30s")) is True
    monkeypatch.setenv("MORNINGPRACTICE_TIMER_TRACE", "1")
    assert f.filter(_record("[timer.trace] tick remaining=3")) is True


def test_default_log_path_is_per_user():
    path = get_default_log_path()
    assert path.name == "morningpractice.log"
