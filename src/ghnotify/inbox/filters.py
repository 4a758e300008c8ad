"""Pattern filtering over rows, and the live query matcher."""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import Row

ALL_CAUGHT_UP = "All caught up!"
NOTHING_TO_SHOW = "Nothing to show."


@dataclass(frozen=True)
class FilterResult:
    """Rows that survived filtering, or a message to show in their place."""

    rows: list[Row] = field(default_factory=list)
    message: str | None = None


def compile_pattern(pattern: str | None) -> re.Pattern[str] | None:
    """Compile a user supplied regex; empty means no pattern."""
    if not pattern:
        return None
    return re.compile(pattern)


def apply(
    rows: Iterable[Row],
    exclude: str | None = None,
    include: str | None = None,
    *,
    is_reload: bool = False,
    query: str = "",
) -> FilterResult:
    """Drop rows matching exclude, then keep rows matching include.

    Exclusion wins when a row matches both. An empty reload with nothing
    filtering the list means everything was dealt with, so it carries the
    "all caught up" message instead of an empty table.
    """
    exclude_re = compile_pattern(exclude)
    include_re = compile_pattern(include)

    kept = []
    for row in rows:
        text = row.serialize()
        if exclude_re is not None and exclude_re.search(text):
            continue
        if include_re is not None and not include_re.search(text):
            continue
        kept.append(row)

    filtering = bool(exclude_re or include_re or query.strip())
    if not kept and is_reload and not filtering:
        return FilterResult([], ALL_CAUGHT_UP)
    return FilterResult(kept)


def _fuzzy_contains(text: str, term: str) -> bool:
    """True if term's characters appear in text in order."""
    it = iter(text)
    return all(ch in it for ch in term)


def matches_query(text: str, query: str) -> bool:
    """fzf-style matching of a live query against a row's text.

    Whitespace separated terms must all match, case-insensitively. A plain
    term matches as a fuzzy subsequence, 'term as an exact substring, and
    !term excludes rows containing it.
    """
    text = text.lower()
    for term in query.lower().split():
        if term.startswith("!"):
            if term[1:] and term[1:] in text:
                return False
        elif term.startswith("'"):
            if term[1:] not in text:
                return False
        elif not _fuzzy_contains(text, term):
            return False
    return True


def narrow(rows: Iterable[Row], query: str) -> list[Row]:
    """Rows whose display text matches the live query."""
    if not query.strip():
        return list(rows)
    return [row for row in rows if matches_query(" ".join(row.display_cells()), query)]
