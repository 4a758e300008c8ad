"""Tests for resolving display numbers."""

from unittest.mock import patch

import pytest

from ghnotify.errors import FatalError
from ghnotify.gh import GhError
from ghnotify.inbox.resolve import Resolution, discussion_filter, resolve

RELEASE_URL = "https://api.github.com/repos/acme/widgets/releases/123"


def test_issue_number_from_url(notification_factory):
    with patch("ghnotify.inbox.resolve.gh.api") as mock_api:
        result = resolve(notification_factory())

    assert result == Resolution("#42", "Issue")
    mock_api.assert_not_called()


def test_commit_uses_short_sha(notification_factory):
    n = notification_factory(
        subject_type="Commit",
        url="https://api.github.com/repos/acme/widgets/commits/0123456789abcdef",
    )
    assert resolve(n) == Resolution("0123456", "Commit")


def test_missing_url_is_skipped(notification_factory):
    assert resolve(notification_factory(subject_type="CheckSuite", url=None)) is None


def test_release_tag(notification_factory):
    n = notification_factory(subject_type="Release", url=RELEASE_URL)
    with patch(
        "ghnotify.inbox.resolve.gh.api", return_value={"tag_name": "v1.2.0", "prerelease": False}
    ) as mock_api:
        result = resolve(n)

    assert result == Resolution("v1.2.0", "Release")
    mock_api.assert_called_once_with(RELEASE_URL, cache="100h")


def test_prerelease_type(notification_factory):
    n = notification_factory(subject_type="Release", url=RELEASE_URL)
    with patch(
        "ghnotify.inbox.resolve.gh.api", return_value={"tag_name": "v2.0.0-rc1", "prerelease": True}
    ):
        assert resolve(n) == Resolution("v2.0.0-rc1", "Pre-release")


def test_deleted_release_is_skipped(notification_factory):
    """A release that is gone drops the row instead of failing the run."""
    n = notification_factory(subject_type="Release", url=RELEASE_URL)
    with patch("ghnotify.inbox.resolve.gh.api", side_effect=GhError(["api"], "HTTP 404")):
        assert resolve(n) is None


def test_deleted_release_fails_in_debug(notification_factory):
    n = notification_factory(subject_type="Release", url=RELEASE_URL)
    with (
        patch("ghnotify.inbox.resolve.gh.api", side_effect=GhError(["api"], "HTTP 404")),
        pytest.raises(FatalError, match="Failed to get data"),
    ):
        resolve(n, debug=True)


def test_release_without_url_is_skipped(notification_factory):
    n = notification_factory(subject_type="Release", url=None)
    with patch("ghnotify.inbox.resolve.gh.api") as mock_api:
        assert resolve(n) is None
    mock_api.assert_not_called()


def test_discussion_filter():
    assert (
        discussion_filter("Roadmap 2024", "2024-03", "acme/widgets")
        == '"Roadmap 2024" in:title updated:>=2024-03 repo:acme/widgets'
    )
    assert discussion_filter("Roadmap", "", "acme/widgets") == '"Roadmap" in:title repo:acme/widgets'


def test_discussion_filter_drops_quotes():
    """Quotes inside the title would end the search phrase early."""
    assert (
        discussion_filter('Say "hi" to  the team', "2024-03", "acme/widgets")
        == '"Say hi to the team" in:title updated:>=2024-03 repo:acme/widgets'
    )


def test_discussion_search(notification_factory):
    n = notification_factory(subject_type="Discussion", url=None, title="Roadmap 2024")
    data = {"search": {"nodes": [{"number": 17}]}}
    with patch("ghnotify.inbox.resolve.gh.graphql", return_value=data) as mock_graphql:
        result = resolve(n)

    assert result == Resolution("#17", "Discussion")
    variables = mock_graphql.call_args.args[1]
    assert variables == {"filter": '"Roadmap 2024" in:title updated:>=2024-03 repo:acme/widgets'}


def test_discussion_not_found_is_skipped(notification_factory):
    n = notification_factory(subject_type="Discussion", url=None)
    with patch("ghnotify.inbox.resolve.gh.graphql", return_value={"search": {"nodes": []}}):
        assert resolve(n) is None


def test_discussion_error_fails_in_debug(notification_factory):
    n = notification_factory(subject_type="Discussion", url=None)
    with (
        patch("ghnotify.inbox.resolve.gh.graphql", side_effect=GhError(["api"], "boom")),
        pytest.raises(GhError),
    ):
        resolve(n, debug=True)
