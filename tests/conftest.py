"""Shared fixtures for building notifications and rows."""

from datetime import datetime, timezone

import pytest

from ghnotify.inbox.models import Notification, build_row

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_api_item(
    thread_id="1",
    subject_type="Issue",
    url="https://api.github.com/repos/acme/widgets/issues/42",
    title="Widgets break on Sundays",
    unread=True,
    reason="mention",
    updated_at="2024-03-10T11:30:00Z",
    latest_comment_url=None,
    full_name="acme/widgets",
):
    owner, name = full_name.split("/")
    return {
        "id": thread_id,
        "unread": unread,
        "reason": reason,
        "updated_at": updated_at,
        "last_read_at": None,
        "subject": {
            "title": title,
            "url": url,
            "latest_comment_url": latest_comment_url,
            "type": subject_type,
        },
        "repository": {"full_name": full_name, "name": name, "owner": {"login": owner}},
    }


def make_notification(**kwargs) -> Notification:
    return Notification.from_api(make_api_item(**kwargs))


def make_row(number="#42", type_name=None, **kwargs):
    notification = make_notification(**kwargs)
    return build_row(notification, number, type_name or notification.subject_type_name, NOW)


@pytest.fixture
def row_factory():
    return make_row


@pytest.fixture
def notification_factory():
    return make_notification


@pytest.fixture
def api_item_factory():
    return make_api_item
