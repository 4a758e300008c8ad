"""ghnotify inbox - fetch, enrich, filter and act on GitHub notifications."""

from .actions import mark_all_read, mark_done, mark_read, open_in_browser
from .dispatch import dispatch_batches
from .fetch import fetch_page
from .filters import ALL_CAUGHT_UP, NOTHING_TO_SHOW, FilterResult, apply, narrow
from .models import Notification, Row, SubjectType, build_row
from .pipeline import collect
from .resolve import Resolution, resolve
from .session import Session, State

__all__ = [
    # Types
    "Notification",
    "Row",
    "SubjectType",
    "FilterResult",
    "Resolution",
    "Session",
    "State",
    # Pipeline
    "fetch_page",
    "resolve",
    "build_row",
    "collect",
    "apply",
    "narrow",
    "ALL_CAUGHT_UP",
    "NOTHING_TO_SHOW",
    # Actions
    "mark_read",
    "mark_done",
    "mark_all_read",
    "open_in_browser",
    "dispatch_batches",
]
