"""Side effects triggered from the list: read, done, browse, view, comment."""

import os
import shlex
import shutil
import subprocess
import webbrowser
from collections.abc import Callable
from datetime import datetime, timezone

from .. import gh
from ..config import Options
from ..errors import FatalError
from ..log import get_logger
from .dispatch import dispatch_batches
from .models import Row, SubjectType

DISCUSSION_QUERY = """\
query ($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    discussion(number: $number) {
      title
      url
      body
      author { login }
      comments(last: 20) { nodes { author { login } createdAt body } }
    }
  }
}"""

_DIFF_HIGHLIGHTERS = (["delta"], ["diff-so-fancy"])

_log = get_logger("actions")


def _thread_path(thread_id: str) -> str:
    return f"notifications/threads/{thread_id}"


def _web_base(row: Row) -> str:
    host = os.environ.get("GH_HOST", "github.com")
    return f"https://{host}/{row.repo_full_name}"


# --- Read / done ---


def mark_all_read(rows: list[Row], options: Options, query: str = "") -> None:
    """Mark every notification up to the fetch time as read.

    Refused while anything hides rows from view: "all" would include
    notifications the user can't see.
    """
    if options.has_patterns or query.strip():
        raise FatalError(
            "Can't mark all notifications as read while a filter is active, "
            "as it would also mark hidden notifications as read."
        )

    if rows:
        cutoff = rows[0].timestamp
    else:
        cutoff = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    # https://docs.github.com/en/rest/activity/notifications#mark-notifications-as-read
    gh.api("notifications", method="PUT", fields={"read": True}, raw_fields={"last_read_at": cutoff})
    _log.info("mark_all_read: up to %s", cutoff)


def _update_threads(
    rows: list[Row],
    method: str,
    dispatch: Callable[[list[list[str]]], int],
) -> int:
    thread_ids = [row.thread_id for row in rows if row.is_unread]

    if len(thread_ids) == 1:
        gh.api(_thread_path(thread_ids[0]), method=method)
    elif thread_ids:
        dispatch([gh.api_args(_thread_path(t), method=method, silent=True) for t in thread_ids])

    _log.info("%s: %d threads", method, len(thread_ids))
    return len(thread_ids)


def mark_read(
    rows: list[Row], dispatch: Callable[[list[list[str]]], int] = dispatch_batches
) -> int:
    """Mark the unread rows as read. Returns how many were targeted."""
    return _update_threads(rows, "PATCH", dispatch)


def mark_done(
    rows: list[Row], dispatch: Callable[[list[list[str]]], int] = dispatch_batches
) -> int:
    """Mark the unread rows as done (removes them from the inbox)."""
    return _update_threads(rows, "DELETE", dispatch)


# --- Browse ---


def open_in_browser(row: Row, open_url: Callable[[str], bool] = webbrowser.open) -> None:
    """Open the notification's subject in the default browser."""
    subject_type = row.subject_type
    repo = row.repo_full_name
    number = row.bare_number

    if subject_type is SubjectType.CHECK_SUITE:
        open_url(f"{_web_base(row)}/actions")
    elif subject_type is SubjectType.COMMIT:
        gh.run(["browse", row.number, "--repo", repo])
    elif subject_type is SubjectType.DISCUSSION:
        open_url(f"{_web_base(row)}/discussions/{number}")
    elif subject_type in (SubjectType.ISSUE, SubjectType.PULL_REQUEST):
        if row.comment_id in ("null", number):
            gh.run(["issue", "view", number, "--web", "--repo", repo])
        else:
            open_url(f"{_web_base(row)}/issues/{number}#issuecomment-{row.comment_id}")
    elif subject_type is SubjectType.RELEASE:
        gh.run(["release", "view", row.number, "--web", "--repo", repo])
    else:
        gh.run(["repo", "view", "--web", repo])


# --- View ---


def highlight_diff(text: str) -> str:
    """Pipe a diff through the first installed highlighter, if any."""
    for argv in _DIFF_HIGHLIGHTERS:
        if shutil.which(argv[0]) is None:
            continue
        try:
            result = subprocess.run(argv, input=text, capture_output=True, text=True, check=True)
        except (subprocess.CalledProcessError, OSError):
            continue
        return result.stdout
    return text


def _discussion_text(row: Row) -> str:
    owner, _, name = row.repo_full_name.partition("/")
    data = gh.graphql(
        DISCUSSION_QUERY,
        {"owner": owner, "name": name},
        fields={"number": row.bare_number},
    )
    discussion = (data.get("repository") or {}).get("discussion")
    if not discussion:
        raise FatalError(f"Discussion {row.number} not found in {row.repo_full_name}")

    author = (discussion.get("author") or {}).get("login", "ghost")
    lines = [discussion["title"], f"{author} • {discussion['url']}", "", discussion["body"]]
    for comment in (discussion.get("comments") or {}).get("nodes") or []:
        who = (comment.get("author") or {}).get("login", "ghost")
        lines += ["", f"── {who} • {comment['createdAt']}", comment["body"]]
    return "\n".join(lines)


def view_text(row: Row) -> str:
    """Full content of the notification's subject, for the preview or pager."""
    subject_type = row.subject_type
    repo = row.repo_full_name

    if subject_type is SubjectType.COMMIT:
        diff = gh.api_text(f"repos/{repo}/commits/{row.number}", accept=gh.DIFF_MEDIA_TYPE)
        return highlight_diff(diff)
    if subject_type is SubjectType.ISSUE:
        return gh.run(["issue", "view", row.bare_number, "--repo", repo, "--comments"], tty=True)
    if subject_type is SubjectType.PULL_REQUEST:
        return gh.run(["pr", "view", row.bare_number, "--repo", repo, "--comments"], tty=True)
    if subject_type is SubjectType.RELEASE:
        return gh.run(["release", "view", row.number, "--repo", repo], tty=True)
    if subject_type is SubjectType.DISCUSSION:
        return _discussion_text(row)
    return gh.run(["repo", "view", repo], tty=True)


def diff_text(row: Row, patch: bool = False) -> str:
    """The pull request's diff (or patch). Only pull requests have one."""
    if row.subject_type is not SubjectType.PULL_REQUEST:
        raise FatalError(f"Diffs are only available for PullRequests, not '{row.type_name}'.")
    args = ["pr", "diff", row.bare_number, "--repo", row.repo_full_name]
    if patch:
        args.append("--patch")
        return gh.run(args, tty=True)
    return highlight_diff(gh.run(args))


def page(text: str) -> None:
    """Show text in the user's pager. Must run with the terminal released."""
    pager = shlex.split(os.environ.get("PAGER") or "less -R")
    try:
        subprocess.run(pager, input=text, text=True, check=False)
    except FileNotFoundError as e:
        raise FatalError(f"Pager not found: {pager[0]}") from e


# --- Comment ---


def ensure_commentable(row: Row) -> None:
    """Refuse rows that can't take a comment, before anything is sent."""
    if not row.subject_type.can_comment:
        raise FatalError(
            f"Writing comments is only supported for Issues and PullRequests, not '{row.type_name}'."
        )


def comment(row: Row, body: str) -> None:
    """Post a comment on an issue or pull request."""
    ensure_commentable(row)
    gh.run(["issue", "comment", row.bare_number, "--repo", row.repo_full_name, "--body", body])
    _log.info("comment: %s%s", row.repo_full_name, row.number)
