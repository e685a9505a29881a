"""
Logging configuration — one setup call per process.

``main.py`` calls ``setup_logging`` once; every module that does
``logger = logging.getLogger(__name__)`` inherits it.

Level precedence:
    --debug  >  --verbose  >  --quiet  >  RTS_LOG_LEVEL  >  WARNING

A log file can be added with RTS_LOG_FILE (and RTS_LOG_FILE_LEVEL).
"""

from __future__ import annotations

import logging
import os
import sys

# Console, WARNING and up: just the message
_FMT_MINIMAL = "%(message)s"

# Console, INFO: time + logger name
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# Console at DEBUG, and every file: level + file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

_DATEFMT_CONSOLE = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Library loggers that are chatty below WARNING (werkzeug logs every request)
_NOISY_LOGGERS = ("urllib3", "werkzeug")


def level_from_flags(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Resolve the console level from CLI flags and ``RTS_LOG_LEVEL``."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("RTS_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Console level name.
        log_file: Optional log file path (appended to).
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Hold noisy library loggers at WARNING
            unless the console is at DEBUG.
    """
    console_level = _parse_level(level)

    if console_level <= logging.DEBUG:
        formatter = logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_CONSOLE)
    elif console_level <= logging.INFO:
        formatter = logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_CONSOLE)
    else:
        formatter = logging.Formatter(_FMT_MINIMAL)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root_level = min(root_level, file_level)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(root_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown names fall back to WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
