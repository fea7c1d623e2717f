"""Logging for the agent_status package.

Parsing runs once per PTY chunk, so per-chunk detail (buffer size, the rule
that fired, the chosen message) goes to a TRACE level below DEBUG. DEBUG
carries latch and status changes plus session lifecycle.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

# Below DEBUG: one record per parsed chunk
TRACE = 5
# Where `--trace` writes its timestamped log files, relative to the cwd
TRACE_DIR = "debug"
# Every module logs under this name via logging.getLogger(__name__)
LOGGER_NAME = "agent_status"

logging.addLevelName(TRACE, "TRACE")


def _trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = _trace

_CONSOLE_FMT = "%(levelname)s %(name)s: %(message)s"
_FILE_FMT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s:%(funcName)s:%(lineno)d %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _console_level(debug: bool, trace: bool, verbose: bool) -> int:
    if trace and verbose:
        return TRACE
    if debug or trace:
        return logging.DEBUG
    return logging.INFO


def _trace_file_handler() -> logging.FileHandler:
    os.makedirs(TRACE_DIR, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    # Agent glyphs (spinners, stars, tool markers) show up in records
    handler = logging.FileHandler(
        os.path.join(TRACE_DIR, f"trace-{timestamp}.log"), encoding="utf-8"
    )
    handler.setLevel(TRACE)
    handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
    return handler


def setup_logging(
    *, debug: bool, trace: bool, verbose: bool
) -> logging.Logger:
    """Configure the package logger; safe to call more than once.

    Console output is INFO by default, DEBUG with ``debug`` or ``trace``, and
    TRACE with ``trace`` plus ``verbose``. With ``trace`` every record down to
    TRACE (one line per parsed chunk) also goes to ``debug/trace-<time>.log``.
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers.clear()
    package_logger.setLevel(TRACE)

    console = logging.StreamHandler()
    console.setLevel(_console_level(debug, trace, verbose))
    console.setFormatter(logging.Formatter(_CONSOLE_FMT))
    package_logger.addHandler(console)

    if trace:
        package_logger.addHandler(_trace_file_handler())

    return package_logger
