"""Drive the page fetcher and resolver into one ordered list of rows."""

from collections.abc import Callable
from datetime import datetime, timezone

from ..config import Options
from ..log import get_logger
from .fetch import MAX_PAGE_SIZE, fetch_page
from .models import Notification, Row, build_row
from .resolve import Resolution, resolve

Fetcher = Callable[[int, int, bool, bool], list[Notification]]
Resolver = Callable[[Notification, bool], Resolution | None]

_log = get_logger("pipeline")


def collect(
    options: Options,
    fetch: Fetcher = fetch_page,
    resolver: Resolver = resolve,
    now: datetime | None = None,
) -> list[Row]:
    """Fetch up to options.max_count notifications and turn them into rows.

    The count limits notifications fetched, not rows produced: rows whose
    subject can't be resolved are dropped and don't make room for more.
    Rows keep the order the API returned them in.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    requested = options.max_count
    rows: list[Row] = []
    fetched = 0
    page = 1

    while True:
        page_size = MAX_PAGE_SIZE
        if requested:
            page_size = min(requested - fetched, MAX_PAGE_SIZE)
        # Later pages must use the full size, or their offsets would overlap
        # with what we already have.
        request_size = page_size if page == 1 else MAX_PAGE_SIZE

        notifications = fetch(page, request_size, options.participating, options.include_all)
        if not notifications:
            break

        received = len(notifications)
        if requested and page_size < MAX_PAGE_SIZE:
            notifications = notifications[:page_size]
        fetched += len(notifications)

        for n in notifications:
            resolution = resolver(n, options.debug)
            if resolution is None:
                continue
            rows.append(build_row(n, resolution.number, resolution.type_name, now))

        _log.debug("page %d: %d received, %d fetched, %d rows", page, received, fetched, len(rows))
        if (requested and fetched >= requested) or received < request_size:
            break
        page += 1

    return rows
