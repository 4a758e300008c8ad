"""Resolve a human-meaningful number for each notification's subject.

Most subjects carry their number in the subject url, so no request is made.
Releases and discussions need a secondary lookup, which is allowed to fail:
releases are often deleted after the notification went out, and discussion
search is fuzzy. Those rows are skipped instead of failing the whole run,
except in debug mode where hiding lookup bugs would be worse.
"""

from dataclasses import dataclass

from .. import gh
from ..errors import FatalError
from ..log import get_logger
from .models import Notification, SubjectType

COMMIT_HASH_LENGTH = 7
LOOKUP_CACHE = "100h"

# https://docs.github.com/en/search-github/searching-on-github/searching-discussions
DISCUSSION_SEARCH_QUERY = """\
query ($filter: String!) {
  search(query: $filter, type: DISCUSSION, first: 1) {
    nodes { ... on Discussion { number } }
  }
}"""

_log = get_logger("resolve")


@dataclass(frozen=True)
class Resolution:
    """A resolved display number and the type to display alongside it."""

    number: str
    type_name: str


def discussion_filter(title: str, updated_month: str, repo_full_name: str) -> str:
    """Build the search string used to find a discussion by its title."""
    # A search phrase can't contain quotes; dropping them keeps the words.
    phrase = " ".join(title.replace('"', " ").split())
    parts = [f'"{phrase}" in:title']
    if updated_month:
        parts.append(f"updated:>={updated_month}")
    parts.append(f"repo:{repo_full_name}")
    return " ".join(parts)


def _resolve_release(notification: Notification, debug: bool) -> Resolution | None:
    if not notification.subject_url:
        return None
    try:
        release = gh.api(notification.subject_url, cache=LOOKUP_CACHE) or {}
    except FatalError as e:
        if debug:
            raise FatalError(f"Failed to get data from {notification.subject_url}: {e}") from e
        _log.debug("skip release %s: %s", notification.subject_url, e)
        return None

    type_name = "Pre-release" if release.get("prerelease") else "Release"
    return Resolution(release.get("tag_name") or "", type_name)


def _resolve_discussion(notification: Notification, debug: bool) -> Resolution | None:
    search = discussion_filter(
        notification.title, notification.updated_month, notification.repo_full_name
    )
    try:
        data = gh.graphql(DISCUSSION_SEARCH_QUERY, {"filter": search}, cache=LOOKUP_CACHE)
    except FatalError as e:
        if debug:
            raise
        _log.debug("skip discussion %r: %s", notification.title, e)
        return None

    nodes = [n for n in (data.get("search") or {}).get("nodes") or [] if n]
    if not nodes or nodes[0].get("number") is None:
        _log.debug("no discussion matches %s", search)
        return None
    return Resolution(f"#{nodes[0]['number']}", notification.subject_type_name)


def resolve(notification: Notification, debug: bool = False) -> Resolution | None:
    """Resolve a notification's display number; None means skip the row."""
    subject_type = notification.subject_type

    if subject_type is SubjectType.RELEASE:
        return _resolve_release(notification, debug)

    if subject_type is SubjectType.DISCUSSION:
        return _resolve_discussion(notification, debug)

    subject_id = notification.subject_id
    if not subject_id:
        return None

    if subject_type is SubjectType.COMMIT:
        return Resolution(subject_id[:COMMIT_HASH_LENGTH], notification.subject_type_name)

    return Resolution(f"#{subject_id}", notification.subject_type_name)
