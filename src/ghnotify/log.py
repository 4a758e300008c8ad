"""Shared logging for ghnotify.

All components log to /tmp/ghnotify.log via Python's logging module.
Filter with grep: grep 'ghnotify.pipeline' /tmp/ghnotify.log
"""

import logging
from pathlib import Path

_LOG_PATH = Path("/tmp/ghnotify.log")

_handler = logging.FileHandler(_LOG_PATH, delay=True)
_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(message)s", datefmt="%H:%M:%S"))

_root = logging.getLogger("ghnotify")
_root.addHandler(_handler)
_root.setLevel(logging.INFO)
# don't propagate to root logger (avoids duplicate output if someone
# configures the root logger elsewhere)
_root.propagate = False


def get_logger(name: str) -> logging.Logger:
    return _root.getChild(name)


def set_debug(enabled: bool) -> None:
    """Log everything in debug mode, INFO and above otherwise."""
    _root.setLevel(logging.DEBUG if enabled else logging.INFO)
