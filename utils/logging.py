"""
Logging helpers for Android USB Options.

Everything goes to stderr: stdout carries the MCP stdio transport.
"""
import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Top-level packages whose loggers we own
_PACKAGES = ("core", "tools", "utils", "server")

_handler: Optional[logging.Handler] = None


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for `name` (pass __name__)."""
    return logging.getLogger(name)


def setup_logging(level: Union[str, int] = logging.INFO, fmt: str = DEFAULT_FORMAT) -> logging.Handler:
    """Attach a single stderr handler to the package loggers. Safe to call twice."""
    global _handler

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(fmt))

    for package in _PACKAGES:
        logger = logging.getLogger(package)
        if _handler not in logger.handlers:
            logger.addHandler(_handler)
        logger.setLevel(level)
        logger.propagate = False

    return _handler
