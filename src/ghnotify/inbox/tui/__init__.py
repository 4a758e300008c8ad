"""ghnotify TUI package."""

from .app import NotifyApp
from .utils import set_terminal_title

__all__ = ["NotifyApp", "set_terminal_title"]
