"""Tests for bundleprune.logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bundleprune.logging import (
    DEFAULT_LOG_FILE_NAME,
    StageFilter,
    configure_logging,
    get_logger,
    resolve_log_file,
)


@pytest.fixture
def restore_root_logger():
    logger = logging.getLogger("bundleprune")
    level, propagate = logger.level, logger.propagate
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


def test_stage_filter_strips_root_prefix() -> None:
    record = logging.LogRecord(
        "bundleprune.treeshake.exports", logging.INFO, __file__, 1, "message", None, None
    )

    assert StageFilter().filter(record) is True
    assert record.stage == "treeshake.exports"


def test_console_lines_name_the_stage(restore_root_logger, capsys) -> None:
    configure_logging()

    get_logger("orchestrator").warning("bundle missing")
    get_logger("orchestrator").debug("hidden without verbose")

    err = capsys.readouterr().err
    assert "[bundleprune] WARNING orchestrator: bundle missing" in err
    assert "hidden without verbose" not in err


def test_log_file_directory_gets_default_name(restore_root_logger, tmp_path: Path) -> None:
    configure_logging(verbose=True, log_file=tmp_path)

    get_logger("analyzers.reachability").debug("fixed point reached")
    for handler in restore_root_logger.handlers:
        handler.flush()

    content = (tmp_path / DEFAULT_LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "DEBUG bundleprune.analyzers.reachability: fixed point reached" in content


def test_log_file_is_replaced_each_run(restore_root_logger, tmp_path: Path) -> None:
    target = tmp_path / "logs" / "prune.log"
    configure_logging(log_file=target)
    get_logger("cli").info("first run")
    configure_logging(log_file=target)
    get_logger("cli").info("second run")
    for handler in restore_root_logger.handlers:
        handler.flush()

    content = target.read_text(encoding="utf-8")
    assert "second run" in content
    assert "first run" not in content


def test_resolve_log_file_keeps_explicit_paths(tmp_path: Path) -> None:
    assert resolve_log_file(tmp_path / "run.log") == tmp_path / "run.log"
    assert resolve_log_file(tmp_path) == tmp_path / DEFAULT_LOG_FILE_NAME
