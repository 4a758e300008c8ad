"""Errors that end a ghnotify run."""


class FatalError(Exception):
    """A user-facing error. The CLI prints it with an ``ERROR:`` prefix and exits 1."""
