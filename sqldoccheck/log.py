"""
Centralized logging configuration.
All modules should use `get_logger(__name__)` to obtain a logger instance.
Diagnostics go to stderr so that stdout carries only the report.
"""

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT = "sqldoccheck"
_initialized = False


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr is at emit time, so redirection is honoured."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def _init_logging() -> None:
    """Configure the package logger once."""
    global _initialized
    if _initialized:
        return
    handler = _StderrHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger(_ROOT)
    root.setLevel(logging.WARNING)
    root.addHandler(handler)
    root.propagate = False
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)


def set_level(level: str | int) -> None:
    """Set the threshold for every sqldoccheck logger."""
    _init_logging()
    logging.getLogger(_ROOT).setLevel(level)
