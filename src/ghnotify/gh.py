"""Thin wrapper around the gh CLI.

Every remote call goes through `gh`, so authentication, host selection and
response caching stay gh's concern.
"""

import json
import os
import re
import shutil
import subprocess
from typing import Any

from .errors import FatalError
from .log import get_logger

# https://docs.github.com/en/rest/overview/api-versions
REST_API_VERSION = "X-GitHub-Api-Version:2022-11-28"
DIFF_MEDIA_TYPE = "Accept:application/vnd.github.diff"
MIN_GH_VERSION = (2, 0, 0)

_log = get_logger("gh")


class GhError(FatalError):
    """A gh invocation exited non-zero."""

    def __init__(self, args: list[str], stderr: str) -> None:
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"gh {' '.join(args[:4])} failed{detail}")


def parse_version(text: str) -> tuple[int, ...] | None:
    """Parse the first 'X.Y.Z' in text into (X, Y, Z)."""
    match = re.search(r"(\d+)\.(\d+)\.(\d+)", text)
    if match:
        return tuple(int(x) for x in match.groups())
    return None


def require_gh() -> None:
    """Fail unless a recent enough gh is on PATH."""
    if shutil.which("gh") is None:
        raise FatalError("gh is not installed. See https://cli.github.com/")

    version = parse_version(run(["--version"]))
    if version is None or version < MIN_GH_VERSION:
        wanted = ".".join(str(x) for x in MIN_GH_VERSION)
        raise FatalError(f"gh {wanted} or newer is required")


def run(args: list[str], *, tty: bool = False) -> str:
    """Run gh and return its stdout.

    With tty=True gh renders as if attached to a terminal (colors, wrapping),
    which is what the preview pane and pager want.
    """
    env = None
    if tty:
        env = {**os.environ, "GH_FORCE_TTY": "100%", "GH_PAGER": "cat"}

    _log.debug("run: gh %s", " ".join(args))
    try:
        result = subprocess.run(
            ["gh", *args],
            capture_output=True,
            text=True,
            check=True,
            env=env,
        )
    except FileNotFoundError as e:
        raise FatalError("gh is not installed. See https://cli.github.com/") from e
    except subprocess.CalledProcessError as e:
        raise GhError(args, e.stderr or "") from e
    return result.stdout


def _field_args(fields: dict[str, Any] | None, raw_fields: dict[str, str] | None) -> list[str]:
    args: list[str] = []
    for key, value in (fields or {}).items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        args += ["--field", f"{key}={value}"]
    for key, value in (raw_fields or {}).items():
        args += ["--raw-field", f"{key}={value}"]
    return args


def api_args(
    path: str,
    *,
    method: str = "GET",
    fields: dict[str, Any] | None = None,
    raw_fields: dict[str, str] | None = None,
    cache: str | None = None,
    silent: bool = False,
) -> list[str]:
    """Build the argv (without the leading 'gh') for a REST call."""
    args = ["api", "--header", REST_API_VERSION, "--method", method, path]
    if cache:
        args.append(f"--cache={cache}")
    if silent:
        args.append("--silent")
    return args + _field_args(fields, raw_fields)


def api(
    path: str,
    *,
    method: str = "GET",
    fields: dict[str, Any] | None = None,
    raw_fields: dict[str, str] | None = None,
    cache: str | None = None,
) -> Any:
    """Call a REST endpoint and return the decoded JSON body (None if empty)."""
    out = run(api_args(path, method=method, fields=fields, raw_fields=raw_fields, cache=cache))
    if not out.strip():
        return None
    try:
        return json.loads(out)
    except json.JSONDecodeError as e:
        raise FatalError(f"Unexpected response from {path}: {e}") from e


def api_text(path: str, *, accept: str) -> str:
    """Call a REST endpoint with a custom media type and return the raw body."""
    return run(["api", "--header", REST_API_VERSION, "--header", accept, path])


def graphql(
    query: str,
    variables: dict[str, str] | None = None,
    fields: dict[str, Any] | None = None,
    cache: str | None = None,
) -> Any:
    """Run a GraphQL query and return its ``data`` member.

    gh exits non-zero when the response carries errors, which surfaces here
    as GhError.
    """
    args = ["api", "graphql"]
    if cache:
        args.append(f"--cache={cache}")
    args += _field_args(fields, {"query": query, **(variables or {})})
    out = run(args)
    try:
        payload = json.loads(out)
    except json.JSONDecodeError as e:
        raise FatalError(f"Unexpected GraphQL response: {e}") from e
    return payload.get("data") or {}


def launch(args: list[str]) -> subprocess.Popen | None:
    """Start gh without waiting for it.

    The child gets its own session so quitting the UI doesn't take in-flight
    calls down with it. Returns None if the process couldn't be spawned.
    """
    try:
        return subprocess.Popen(
            ["gh", *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        _log.error("launch failed: gh %s: %s", " ".join(args), e)
        return None
