"""The notification listing command: static table, interactive TUI, bulk ops."""

import argparse
import re
import sys

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text

from .. import gh
from ..config import Config, Options, debug_from_env, load_config
from ..errors import FatalError
from ..log import get_logger, set_debug
from ..subscription import toggle_subscription
from . import actions, filters
from .models import Row
from .pipeline import collect

_log = get_logger("cli")

# Styles of the padded display columns; the title follows unstyled.
_STATIC_STYLES = ("magenta", "bright_black", "cyan", "yellow", "bold", "bright_black")


def add_arguments(parser: argparse.ArgumentParser) -> None:
    """Flags for listing notifications (they live on the root parser)."""
    parser.add_argument(
        "-a", "--all", action="store_true", help="show all (read/ unread) notifications"
    )
    parser.add_argument(
        "-e", "--exclude", metavar="REGEX", help="exclude notifications matching a string"
    )
    parser.add_argument(
        "-f", "--filter", metavar="REGEX", help="filter notifications matching a string"
    )
    parser.add_argument(
        "-n",
        "--num",
        type=int,
        default=0,
        metavar="NUM",
        help="max number of notifications to show (default: all)",
    )
    parser.add_argument(
        "-p",
        "--participating",
        action="store_true",
        help="show only participating or mention notifications",
    )
    parser.add_argument(
        "-r", "--mark-read", action="store_true", help="mark all notifications as read"
    )
    parser.add_argument("-s", "--static", action="store_true", help="print a static display")
    parser.add_argument(
        "-u",
        "--url",
        metavar="URL",
        help="(un)subscribe a URL, useful for issues/prs of interest",
    )
    parser.add_argument(
        "-w",
        "--preview",
        action="store_true",
        help="display the preview window in interactive mode",
    )


def build_options(args: argparse.Namespace, config: Config) -> Options:
    """Freeze flags and config into the Options passed to every component."""
    return Options(
        exclude=args.exclude or None,
        include=args.filter or None,
        max_count=args.num,
        participating=args.participating,
        include_all=args.all,
        debug=config.debug or debug_from_env(),
        preview=args.preview or config.tui.preview,
        tui=config.tui,
    )


def validate(options: Options) -> None:
    if options.max_count < 0:
        raise FatalError(f"-n expects a non-negative number, got {options.max_count}")
    for flag, pattern in (("-e", options.exclude), ("-f", options.include)):
        try:
            filters.compile_pattern(pattern)
        except re.error as e:
            raise FatalError(f"Invalid regular expression for {flag}: {e}") from e


def print_static(rows: list[Row]) -> None:
    """Print one line per row, leading diagnostic columns stripped.

    Lines are never wrapped, whatever the terminal width, so the output stays
    usable with grep and wc -l.
    """
    console = Console(highlight=False)
    cells = [row.display_cells() for row in rows]
    widths = [max(cell_len(c[i]) for c in cells) for i in range(len(_STATIC_STYLES))]

    for row_cells in cells:
        line = Text()
        for value, style, width in zip(row_cells, _STATIC_STYLES, widths):
            line.append(value + " " * (width - cell_len(value)), style=style)
            line.append(" ")
        line.append(row_cells[-1])
        console.print(line, soft_wrap=True)


def cmd_notify(args: argparse.Namespace) -> None:
    """List notifications, or run one of the bulk operations."""
    options = build_options(args, load_config())
    set_debug(options.debug)
    validate(options)

    if args.mark_read and options.has_patterns:
        raise FatalError(
            "Can't mark all notifications as read when either the '-e' or '-f' flag "
            "was used, as it would also mark notifications as read that are filtered out."
        )

    gh.require_gh()

    if args.url:
        state = toggle_subscription(args.url)
        print(f"Updated subscription to {state}")
        return

    if args.mark_read:
        actions.mark_all_read([], options)
        print("All notifications have been marked as read.")
        return

    rows = collect(options)
    result = filters.apply(rows, options.exclude, options.include)
    _log.info("fetched %d rows, %d after filters", len(rows), len(result.rows))

    if not result.rows:
        print(filters.NOTHING_TO_SHOW if options.has_patterns else filters.ALL_CAUGHT_UP)
        return

    if args.static:
        print_static(result.rows)
        return

    from .tui.app import main as tui_main

    session = tui_main(options, result)
    if session.exit_message:
        print(session.exit_message, file=sys.stderr if session.exit_code else sys.stdout)
    if session.exit_code:
        sys.exit(session.exit_code)
