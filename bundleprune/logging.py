"""Logging for the optimization pass.

Each stage logs under ``bundleprune.<stage>`` (``orchestrator``,
``analyzers.reachability``, ``treeshake.exports`` and so on). Console lines
carry the stage name so output interleaved with the rest of a build stays
attributable.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "bundleprune"
DEFAULT_LOG_FILE_NAME = "bundleprune.log"

_CONSOLE_FORMAT = "[bundleprune] %(levelname)s %(stage)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class StageFilter(logging.Filter):
    """Expose the logger name below the ``bundleprune`` root as ``record.stage``."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = _LOGGER_NAME + "."
        if record.name.startswith(prefix):
            record.stage = record.name[len(prefix) :]
        else:
            record.stage = record.name
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the logger for one pipeline stage."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_log_file(log_file: Path) -> Path:
    """A directory gets ``bundleprune.log`` inside it; a file path is used as is."""
    if log_file.is_dir():
        return log_file / DEFAULT_LOG_FILE_NAME
    return log_file


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and, when ``log_file`` is given, a per-run file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(StageFilter())
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        path = resolve_log_file(Path(log_file))
        path.parent.mkdir(parents=True, exist_ok=True)
        # one optimization pass per file; the previous run's log is replaced
        file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = [
    "DEFAULT_LOG_FILE_NAME",
    "StageFilter",
    "configure_logging",
    "get_logger",
    "resolve_log_file",
]
