"""Logging configuration for MediaTrack.

Uses loguru. Records go to stderr and, unless disabled, to a daily file
under ~/.mediatrack/logs/ (rotated at 10 MB, kept 7 days, zipped).

Environment variables:
- MEDIATRACK_LOG_LEVEL: Global log level (default: INFO)
- MEDIATRACK_LOG_DB: Level override for the persistence components (db.*)
- MEDIATRACK_LOG_DIR: Log directory; set to an empty string to disable file logging
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from time import perf_counter

from loguru import logger

_DEFAULT_LOG_DIR = Path.home() / ".mediatrack" / "logs"

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]}:{function}:{line} | {message}"

_state = {"configured": False, "level": "INFO", "overrides": {}}


def _level_no(level: str) -> int | None:
    try:
        return logger.level(level).no
    except ValueError:
        return None


def _log_filter(record) -> bool:
    """Apply the per-component override if one matches, else the global level."""
    name = record["extra"].get("name", "")
    threshold = None
    for prefix, level in _state["overrides"].items():
        if level and name.startswith(prefix):
            threshold = _level_no(level)
            break
    if threshold is None:
        threshold = _level_no(_state["level"])
    return threshold is None or record["level"].no >= threshold


def configure_logging(level: str | None = None, log_dir: str | Path | None = None) -> None:
    """(Re)install the MediaTrack sinks.

    Args:
        level: Global level; defaults to MEDIATRACK_LOG_LEVEL or INFO
        log_dir: Directory for the daily file; defaults to MEDIATRACK_LOG_DIR.
            An empty string disables the file sink.
    """
    _state["level"] = (level or os.getenv("MEDIATRACK_LOG_LEVEL", "INFO")).upper()
    _state["overrides"] = {"db.": os.getenv("MEDIATRACK_LOG_DB", "").upper()}

    logger.remove()
    logger.configure(extra={"name": "mediatrack"})
    logger.add(sys.stderr, level=0, filter=_log_filter, format=_CONSOLE_FORMAT, colorize=True)

    if log_dir is None:
        log_dir = os.getenv("MEDIATRACK_LOG_DIR", str(_DEFAULT_LOG_DIR))
    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            directory / "mediatrack_{time:YYYY-MM-DD}.log",
            level="DEBUG",
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,  # Thread-safe
        )

    _state["configured"] = True


def get_logger(name: str):
    """Logger bound to a component name ("db.connection", "cli", ...).

    Installs the default sinks on first use.
    """
    if not _state["configured"]:
        configure_logging()
    return logger.bind(name=name)


@contextmanager
def log_timing(operation: str, log_instance=None, level: str = "debug"):
    """Log how long the wrapped block took.

    Yields a dict whose 'elapsed_ms' is filled in when the block exits,
    whether or not it raised.

    Example:
        with log_timing("write transaction", log, level="trace"):
            session.execute_write(work)
    """
    emit = getattr(log_instance or logger, level)
    timing = {"elapsed_ms": 0.0}
    start = perf_counter()
    try:
        yield timing
    finally:
        timing["elapsed_ms"] = (perf_counter() - start) * 1000
        emit(f"{operation}: {timing['elapsed_ms']:.1f}ms")


__all__ = ["logger", "configure_logging", "get_logger", "log_timing"]
