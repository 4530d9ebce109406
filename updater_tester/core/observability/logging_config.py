"""
Logging configuration — one-time setup for the CLI entrypoint.

``updater_tester.main`` calls ``setup_from_env()`` before anything else
runs; modules only ever do ``logger = logging.getLogger(__name__)``.

Console level, highest precedence first:
    --debug, --verbose, $UPDATER_TESTER_LOG_LEVEL, WARNING

$UPDATER_TESTER_LOG_FILE adds a file handler whose level comes from
$UPDATER_TESTER_LOG_FILE_LEVEL (default: the console level). Console
records go to stderr; stdout carries only the report.
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "UPDATER_TESTER_LOG_LEVEL"
LOG_FILE_ENV = "UPDATER_TESTER_LOG_FILE"
LOG_FILE_LEVEL_ENV = "UPDATER_TESTER_LOG_FILE_LEVEL"

_DETAILED = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d: %(message)s"

# (highest level the format applies to, format, datefmt), checked in order
_CONSOLE_FORMATS: list[tuple[int, str, str | None]] = [
    (logging.DEBUG, _DETAILED, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(name)s: %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "updater-tester: %(levelname)s: %(message)s", None),
]

_FILE_FORMAT = (_DETAILED, "%Y-%m-%dT%H:%M:%S")


def resolve_level(debug: bool = False, verbose: bool = False) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


def _level_number(name: str | None) -> int:
    """``logging`` constant for ``name``; unknown or empty names mean WARNING."""
    value = logging.getLevelName(name.upper()) if name else None
    return value if isinstance(value, int) else logging.WARNING


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next(
        (f, d) for limit, f, d in _CONSOLE_FORMATS if level <= limit
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(*_FILE_FORMAT))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers.

    Args:
        level: Console level name.
        log_file: Also log to this file when given.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _level_number(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _level_number(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # root must let through whatever the most verbose handler wants
    root.setLevel(min(h.level for h in handlers))

    # a broken stderr or log file must not abort the run
    logging.raiseExceptions = False


def setup_from_env(debug: bool = False, verbose: bool = False) -> None:
    """Resolve levels and the optional log file, then configure logging."""
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )
