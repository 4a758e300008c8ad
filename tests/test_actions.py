"""Tests for row actions: read, done, browse, view, comment."""

from unittest.mock import MagicMock, patch

import pytest

from ghnotify import gh
from ghnotify.config import Options
from ghnotify.errors import FatalError
from ghnotify.inbox import actions


def test_mark_read_single_row_is_blocking(row_factory):
    """One row is a single synchronous call, no batching."""
    dispatch = MagicMock()
    with patch("ghnotify.inbox.actions.gh.api") as mock_api:
        count = actions.mark_read([row_factory(thread_id="9")], dispatch=dispatch)

    assert count == 1
    mock_api.assert_called_once_with("notifications/threads/9", method="PATCH")
    dispatch.assert_not_called()


def test_mark_read_many_rows_are_dispatched(row_factory):
    rows = [row_factory(thread_id=str(i)) for i in range(3)]
    dispatch = MagicMock()
    with patch("ghnotify.inbox.actions.gh.api") as mock_api:
        count = actions.mark_read(rows, dispatch=dispatch)

    assert count == 3
    mock_api.assert_not_called()
    calls = dispatch.call_args.args[0]
    assert calls == [
        gh.api_args(f"notifications/threads/{i}", method="PATCH", silent=True) for i in range(3)
    ]


def test_read_rows_are_skipped(row_factory):
    """Rows already read aren't sent again."""
    rows = [row_factory(thread_id="1"), row_factory(thread_id="2", unread=False)]
    dispatch = MagicMock()
    with patch("ghnotify.inbox.actions.gh.api") as mock_api:
        count = actions.mark_read(rows, dispatch=dispatch)

    assert count == 1
    mock_api.assert_called_once_with("notifications/threads/1", method="PATCH")
    dispatch.assert_not_called()


def test_mark_done_uses_delete(row_factory):
    rows = [row_factory(thread_id=str(i)) for i in range(2)]
    dispatch = MagicMock()

    actions.mark_done(rows, dispatch=dispatch)

    calls = dispatch.call_args.args[0]
    assert all("DELETE" in argv for argv in calls)


def test_mark_read_nothing_unread(row_factory):
    dispatch = MagicMock()
    with patch("ghnotify.inbox.actions.gh.api") as mock_api:
        assert actions.mark_read([row_factory(unread=False)], dispatch=dispatch) == 0
    mock_api.assert_not_called()
    dispatch.assert_not_called()


def test_mark_all_read_uses_fetch_time(row_factory):
    rows = [row_factory()]
    with patch("ghnotify.inbox.actions.gh.api") as mock_api:
        actions.mark_all_read(rows, Options())

    mock_api.assert_called_once_with(
        "notifications",
        method="PUT",
        fields={"read": True},
        raw_fields={"last_read_at": "2024-03-10T12:00:00Z"},
    )


@pytest.mark.parametrize(
    "options,query",
    [(Options(exclude="bot"), ""), (Options(include="fix"), ""), (Options(), "widgets")],
)
def test_mark_all_read_refused_while_filtering(row_factory, options, query):
    """Any active filter refuses the bulk update before a request is made."""
    with (
        patch("ghnotify.inbox.actions.gh.api") as mock_api,
        pytest.raises(FatalError, match="filter is active"),
    ):
        actions.mark_all_read([row_factory()], options, query=query)

    mock_api.assert_not_called()


def test_comment_refused_on_release(row_factory):
    row = row_factory(subject_type="Release", number="v1.0.0")
    with (
        patch("ghnotify.inbox.actions.gh.run") as mock_run,
        pytest.raises(FatalError, match="not 'Release'"),
    ):
        actions.comment(row, "nice")

    mock_run.assert_not_called()


def test_comment_on_issue(row_factory):
    with patch("ghnotify.inbox.actions.gh.run") as mock_run:
        actions.comment(row_factory(), "Looking into it")

    mock_run.assert_called_once_with(
        ["issue", "comment", "42", "--repo", "acme/widgets", "--body", "Looking into it"]
    )


def test_browser_issue_without_comment(row_factory):
    open_url = MagicMock()
    with patch("ghnotify.inbox.actions.gh.run") as mock_run:
        actions.open_in_browser(row_factory(), open_url=open_url)

    mock_run.assert_called_once_with(["issue", "view", "42", "--web", "--repo", "acme/widgets"])
    open_url.assert_not_called()


def test_browser_issue_jumps_to_comment(row_factory, monkeypatch):
    monkeypatch.delenv("GH_HOST", raising=False)
    row = row_factory(
        latest_comment_url="https://api.github.com/repos/acme/widgets/issues/comments/999"
    )
    open_url = MagicMock()

    actions.open_in_browser(row, open_url=open_url)

    open_url.assert_called_once_with(
        "https://github.com/acme/widgets/issues/42#issuecomment-999"
    )


def test_browser_check_suite(row_factory, monkeypatch):
    monkeypatch.setenv("GH_HOST", "github.example.com")
    row = row_factory(subject_type="CheckSuite", number="")
    open_url = MagicMock()

    actions.open_in_browser(row, open_url=open_url)

    open_url.assert_called_once_with("https://github.example.com/acme/widgets/actions")


def test_browser_discussion(row_factory, monkeypatch):
    monkeypatch.delenv("GH_HOST", raising=False)
    row = row_factory(subject_type="Discussion", url=None, number="#17")
    open_url = MagicMock()

    actions.open_in_browser(row, open_url=open_url)

    open_url.assert_called_once_with("https://github.com/acme/widgets/discussions/17")


def test_browser_commit_and_release(row_factory):
    commit = row_factory(subject_type="Commit", number="0123456")
    release = row_factory(subject_type="Release", number="v1.0.0")
    with patch("ghnotify.inbox.actions.gh.run") as mock_run:
        actions.open_in_browser(commit, open_url=MagicMock())
        actions.open_in_browser(release, open_url=MagicMock())

    assert mock_run.call_args_list[0].args[0] == ["browse", "0123456", "--repo", "acme/widgets"]
    assert mock_run.call_args_list[1].args[0] == [
        "release",
        "view",
        "v1.0.0",
        "--web",
        "--repo",
        "acme/widgets",
    ]


def test_view_pull_request(row_factory):
    row = row_factory(subject_type="PullRequest")
    with patch("ghnotify.inbox.actions.gh.run", return_value="PR body") as mock_run:
        assert actions.view_text(row) == "PR body"

    mock_run.assert_called_once_with(
        ["pr", "view", "42", "--repo", "acme/widgets", "--comments"], tty=True
    )


def test_view_discussion(row_factory):
    row = row_factory(subject_type="Discussion", url=None, number="#17")
    data = {
        "repository": {
            "discussion": {
                "title": "Roadmap",
                "url": "https://github.com/acme/widgets/discussions/17",
                "body": "What's next?",
                "author": {"login": "octo"},
                "comments": {"nodes": [{"author": None, "createdAt": "2024", "body": "+1"}]},
            }
        }
    }
    with patch("ghnotify.inbox.actions.gh.graphql", return_value=data) as mock_graphql:
        text = actions.view_text(row)

    assert text.startswith("Roadmap\nocto")
    assert "+1" in text
    assert mock_graphql.call_args.kwargs["fields"] == {"number": "17"}


def test_diff_only_for_pull_requests(row_factory):
    with pytest.raises(FatalError, match="only available for PullRequests"):
        actions.diff_text(row_factory())


def test_patch_is_not_highlighted(row_factory):
    row = row_factory(subject_type="PullRequest")
    with (
        patch("ghnotify.inbox.actions.gh.run", return_value="From abc") as mock_run,
        patch("ghnotify.inbox.actions.highlight_diff") as mock_highlight,
    ):
        assert actions.diff_text(row, patch=True) == "From abc"

    assert mock_run.call_args.args[0][-1] == "--patch"
    mock_highlight.assert_not_called()


def test_highlight_diff_without_tools():
    with patch("ghnotify.inbox.actions.shutil.which", return_value=None):
        assert actions.highlight_diff("+a\n-b\n") == "+a\n-b\n"
