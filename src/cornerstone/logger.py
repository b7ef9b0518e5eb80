"""Logging setup for Cornerstone with scheduling-oriented verbosity levels."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

# Levels sitting between the standard ones
CHANGES_LEVEL = 25  # Between INFO and WARNING: resolved dates, excluded edges, violations
CHECKS_LEVEL = 15  # Between DEBUG and INFO: per-node constraint checks

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

LOGGER_NAME = "cornerstone"


class ScheduleLogger(logging.Logger):
    """Logger with semantic methods matching the CLI verbosity levels.

    - changes(): level 1, anything that alters or degrades the computed schedule
    - checks(): level 2, every constraint the engine evaluates
    - debug(): level 3, forward/backward pass internals
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at verbosity level 1."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at verbosity level 2."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> ScheduleLogger:
    """Return the shared cornerstone logger.

    The logger class is installed before lookup so the first call creates a
    ScheduleLogger; later calls return the same instance.
    """
    logging.setLoggerClass(ScheduleLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, ScheduleLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the cornerstone logger for a verbosity level.

    Args:
        verbosity: 0=errors only, 1=changes, 2=checks, 3=debug
        stream: Output stream, defaults to sys.stderr
    """
    logger = get_logger()
    logger.handlers.clear()

    level_map = {
        VERBOSITY_SILENT: logging.ERROR,
        VERBOSITY_CHANGES: CHANGES_LEVEL,
        VERBOSITY_CHECKS: CHECKS_LEVEL,
        VERBOSITY_DEBUG: logging.DEBUG,
    }
    logger.setLevel(level_map.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors-only. Used between tests."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def debug_enabled() -> bool:
    """True when pass-level debug output will be emitted."""
    return get_logger().isEnabledFor(logging.DEBUG)
