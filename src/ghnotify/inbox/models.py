"""Notification threads and the rows built from them."""

from __future__ import annotations

from dataclasses import astuple, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

UNREAD = "UNREAD"
READ = "READ"
UNREAD_SYMBOL = "●"
READ_SYMBOL = "\u00a0"

_HOUR_SECONDS = 3600
_DAY_SECONDS = 86400


class SubjectType(Enum):
    """What a notification thread is about."""

    COMMIT = "Commit"
    ISSUE = "Issue"
    PULL_REQUEST = "PullRequest"
    RELEASE = "Release"
    DISCUSSION = "Discussion"
    CHECK_SUITE = "CheckSuite"
    OTHER = "Other"

    @classmethod
    def parse(cls, name: str) -> SubjectType:
        """Map an API subject type (or a display type) to a variant."""
        if name == "Pre-release":
            return cls.RELEASE
        try:
            return cls(name)
        except ValueError:
            return cls.OTHER

    @property
    def can_comment(self) -> bool:
        return self in (SubjectType.ISSUE, SubjectType.PULL_REQUEST)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 API timestamp, None if absent."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _last_segment(url: str | None) -> str | None:
    if not url:
        return None
    return url.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class Notification:
    """One thread from GET /notifications."""

    thread_id: str
    unread: bool
    subject_type: SubjectType
    subject_type_name: str
    title: str
    repo_full_name: str
    owner: str
    repo_name: str
    reason: str
    subject_url: str | None = None
    latest_comment_url: str | None = None
    updated_at: datetime | None = None
    last_read_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Notification:
        """Create a Notification from one element of the API listing."""
        subject = data.get("subject") or {}
        repository = data.get("repository") or {}
        type_name = subject.get("type") or "Other"
        full_name = repository.get("full_name", "")
        owner = (repository.get("owner") or {}).get("login") or full_name.split("/")[0]
        name = repository.get("name") or full_name.split("/")[-1]

        return cls(
            thread_id=str(data["id"]),
            unread=bool(data.get("unread")),
            subject_type=SubjectType.parse(type_name),
            subject_type_name=type_name,
            title=subject.get("title") or "",
            repo_full_name=full_name,
            owner=owner,
            repo_name=name,
            reason=data.get("reason") or "",
            subject_url=subject.get("url"),
            latest_comment_url=subject.get("latest_comment_url"),
            updated_at=parse_timestamp(data.get("updated_at")),
            last_read_at=parse_timestamp(data.get("last_read_at")),
        )

    @property
    def updated_month(self) -> str:
        """YYYY-MM of the last update, empty if unknown."""
        return self.updated_at.strftime("%Y-%m") if self.updated_at else ""

    @property
    def subject_id(self) -> str | None:
        """Trailing path segment of the subject url (number or sha)."""
        return _last_segment(self.subject_url)


def format_time_ago(when: datetime | None, now: datetime) -> str:
    """Render a timestamp as '5min ago', '3h ago' or '02/Mar 14:05'."""
    if when is None:
        return ""
    delta = (now - when).total_seconds()
    if delta < _HOUR_SECONDS:
        return f"{max(int(delta // 60), 0)}min ago"
    if delta < _DAY_SECONDS:
        return f"{int(delta // _HOUR_SECONDS)}h ago"
    return when.astimezone().strftime("%d/%b %H:%M")


def abbreviate_repo(owner: str, name: str) -> str:
    """Shorten 'owner/name' so the column stays narrow."""
    if len(owner) > 10:
        owner = owner[:9] + "…"
    if len(name) > 13:
        name = name[:12] + "…"
    return f"{owner}/{name}"


@dataclass(frozen=True)
class Row:
    """The fixed-shape unit that is displayed, filtered and acted on.

    The first five fields are diagnostic (never shown in the table); the
    remaining seven are the display columns.
    """

    timestamp: str
    thread_id: str
    state: str
    comment_id: str
    repo_full_name: str
    unread_symbol: str
    time_ago: str
    owner_name: str
    type_name: str
    number: str
    reason: str
    title: str

    @property
    def is_unread(self) -> bool:
        return self.state == UNREAD

    @property
    def subject_type(self) -> SubjectType:
        return SubjectType.parse(self.type_name)

    @property
    def bare_number(self) -> str:
        """The resolved number without its leading '#'."""
        return self.number.lstrip("#")

    def fields(self) -> tuple[str, ...]:
        return astuple(self)

    def display_cells(self) -> tuple[str, ...]:
        return self.fields()[5:]

    def serialize(self) -> str:
        """Single-line form used for pattern matching."""
        return "\t".join(self.fields()[:5]) + "\t" + " ".join(self.display_cells())


def build_row(
    notification: Notification,
    number: str,
    type_name: str,
    now: datetime | None = None,
) -> Row:
    """Flatten a notification and its resolved number into a Row."""
    if now is None:
        now = datetime.now(timezone.utc)

    return Row(
        timestamp=now.strftime("%Y-%m-%dT%H:%M:%SZ"),
        thread_id=notification.thread_id,
        state=UNREAD if notification.unread else READ,
        comment_id=_last_segment(notification.latest_comment_url) or "null",
        repo_full_name=notification.repo_full_name,
        unread_symbol=UNREAD_SYMBOL if notification.unread else READ_SYMBOL,
        time_ago=format_time_ago(notification.last_read_at or notification.updated_at, now),
        owner_name=abbreviate_repo(notification.owner, notification.repo_name),
        type_name=type_name,
        number=number,
        reason=notification.reason,
        title=notification.title,
    )
