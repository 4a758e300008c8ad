"""Tests for the command line entry point."""

import subprocess
import sys
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from ghnotify.cli import main
from ghnotify.config import Config


@contextmanager
def _environment(rows=()):
    """Default config, gh present, and a canned fetch."""
    with (
        patch("ghnotify.inbox.cli.load_config", return_value=Config()),
        patch("ghnotify.inbox.cli.gh.require_gh") as mock_require,
        patch("ghnotify.inbox.cli.collect", return_value=list(rows)) as mock_collect,
        patch("ghnotify.gh.api") as mock_api,
    ):
        yield mock_require, mock_collect, mock_api


def test_mark_all_read_with_pattern_is_refused(capsys):
    """-r with -e exits 1 before any request is made."""
    with _environment() as (mock_require, mock_collect, mock_api):
        with pytest.raises(SystemExit) as exc:
            main(["-r", "-e", "dependabot"])

    assert exc.value.code == 1
    assert capsys.readouterr().err.startswith("ERROR: Can't mark all notifications as read")
    mock_api.assert_not_called()
    mock_require.assert_not_called()
    mock_collect.assert_not_called()


def test_mark_all_read(capsys):
    with (
        _environment(),
        patch("ghnotify.inbox.cli.actions.mark_all_read") as mock_mark,
    ):
        main(["-r"])

    assert mock_mark.call_count == 1
    assert "marked as read" in capsys.readouterr().out


def test_toggle_subscription(capsys):
    url = "https://github.com/acme/widgets/issues/42"
    with _environment() as (_, mock_collect, _api):
        with patch(
            "ghnotify.inbox.cli.toggle_subscription", return_value="UNSUBSCRIBED"
        ) as mock_toggle:
            main(["-u", url])

    mock_toggle.assert_called_once_with(url)
    mock_collect.assert_not_called()
    assert capsys.readouterr().out.strip() == "Updated subscription to UNSUBSCRIBED"


def test_nothing_unread_is_all_caught_up(capsys):
    with _environment():
        main(["-s"])

    assert capsys.readouterr().out.strip() == "All caught up!"


def test_nothing_matching_is_nothing_to_show(row_factory, capsys):
    with _environment([row_factory()]):
        main(["-s", "-f", "no-such-repo"])

    assert capsys.readouterr().out.strip() == "Nothing to show."


def test_static_output(row_factory, capsys):
    rows = [
        row_factory(thread_id="1", title="Fix flaky test"),
        row_factory(thread_id="2", title="Bump deps", full_name="acme/gadgets"),
    ]
    with _environment(rows):
        main(["-s", "-e", "gadgets"])

    out = capsys.readouterr().out
    assert "Fix flaky test" in out
    assert "Bump deps" not in out
    # Diagnostic fields stay hidden
    assert "2024-03-10T12:00:00Z" not in out
    assert "UNREAD" not in out


def test_num_is_passed_through(row_factory):
    with _environment([row_factory()]) as (_, mock_collect, _api):
        main(["-s", "-n", "7", "-p"])

    options = mock_collect.call_args.args[0]
    assert options.max_count == 7
    assert options.participating is True


def test_invalid_regex(capsys):
    with _environment() as (_, mock_collect, _api):
        with pytest.raises(SystemExit) as exc:
            main(["-f", "("])

    assert exc.value.code == 1
    assert "Invalid regular expression for -f" in capsys.readouterr().err
    mock_collect.assert_not_called()


def test_negative_num(capsys):
    with _environment():
        with pytest.raises(SystemExit) as exc:
            main(["-n", "-3"])

    assert exc.value.code == 1


def test_config_path(capsys):
    with patch("ghnotify.cli.get_config_path", return_value="/tmp/ghnotify/config.toml"):
        main(["config", "path"])

    assert capsys.readouterr().out.strip() == "/tmp/ghnotify/config.toml"


def test_static_output_one_line_per_row(row_factory, capsys):
    """Long titles stay on their row's line when stdout isn't a terminal."""
    title = "A rather long notification title that goes on and on for a while"
    rows = [row_factory(thread_id=str(i), title=f"{title} {i}") for i in range(3)]
    with _environment(rows):
        main(["-s"])

    lines = capsys.readouterr().out.strip("\n").splitlines()
    assert len(lines) == 3
    assert all(len(line) > 80 for line in lines)
    assert [line.split()[-1] for line in lines] == ["0", "1", "2"]


def test_static_output_columns_aligned(row_factory, capsys):
    rows = [
        row_factory(thread_id="1", title="First", full_name="acme/widgets"),
        row_factory(thread_id="2", title="Second", full_name="a/b"),
    ]
    with _environment(rows):
        main(["-s"])

    first, second = capsys.readouterr().out.strip("\n").splitlines()
    assert first.index("First") == second.index("Second")


def test_listing_modules_dont_import_textual():
    """Static and bulk commands load without the TUI toolkit."""
    code = "import sys, ghnotify.cli; print('textual' in sys.modules)"
    result = subprocess.run(
        [sys.executable, "-c", code], capture_output=True, text=True, check=True
    )
    assert result.stdout.strip() == "False"
