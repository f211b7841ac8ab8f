"""
Logging setup for the command line and the live server.

The analytics modules never configure logging themselves; they write to the
logger injected through AnalyzerOptions (by default the "bundle_analyzer"
logger configured here).
"""
from __future__ import annotations

import logging
import sys

LOGGER_NAME = "bundle_analyzer"
CONSOLE_FMT = "%(levelname)s | %(message)s"

# "silent" sits above CRITICAL so nothing gets through
_SILENT = logging.CRITICAL + 10

_LEVEL_MAP: dict[str, int] = {
    "DEBUG":   logging.DEBUG,
    "INFO":    logging.INFO,
    "WARN":    logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR":   logging.ERROR,
    "SILENT":  _SILENT,
}

LOG_LEVELS = ["debug", "info", "warn", "error", "silent"]

_HANDLER_ATTR = "_bundle_analyzer_handler"


def parse_level(level: str | None) -> int:
    """Map a level name to its logging constant; unknown names mean INFO."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def configure_logging(level: str | None = "info") -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.

    Calling it again swaps the previous handler out instead of stacking a
    second one, so the CLI and tests can reconfigure freely.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level_int = parse_level(level)
    logger.setLevel(level_int)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level_int)
    handler.setFormatter(logging.Formatter(CONSOLE_FMT))
    setattr(handler, _HANDLER_ATTR, True)
    logger.addHandler(handler)
    return logger
