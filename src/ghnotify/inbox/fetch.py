"""Fetch one page of notification threads."""

from .. import gh
from ..log import get_logger
from .models import Notification

# GitHub refuses per_page values above this for /notifications.
MAX_PAGE_SIZE = 50

_log = get_logger("fetch")


def fetch_page(
    page: int,
    page_size: int,
    participating: bool = False,
    include_all: bool = False,
) -> list[Notification]:
    """Fetch one page of notifications, newest activity first.

    An empty list means there is nothing left. gh failures raise GhError;
    callers are expected to abort rather than retry.
    """
    page_size = min(page_size, MAX_PAGE_SIZE)
    # https://docs.github.com/en/rest/activity/notifications#list-notifications-for-the-authenticated-user
    data = gh.api(
        "notifications",
        fields={
            "per_page": page_size,
            "page": page,
            "participating": participating,
            "all": include_all,
        },
        cache="0s",
    )
    _log.debug("page %d (per_page=%d): %d threads", page, page_size, len(data or []))
    return [Notification.from_api(item) for item in data or []]
