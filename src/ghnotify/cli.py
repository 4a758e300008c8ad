"""CLI entry point for ghnotify.

ghnotify lists your GitHub notifications in the terminal. With no
subcommand it opens the interactive list; flags switch to a static table or
to one of the bulk operations. Subcommands:
- config: manage the config file
"""

import argparse
import sys

from .config import ensure_config_exists, get_config_path
from .errors import FatalError
from .inbox import cli as inbox_cli


def cmd_config_init(args: argparse.Namespace) -> None:
    """Initialize config file with defaults."""
    config_path = ensure_config_exists()
    print(f"Config file at: {config_path}")


def cmd_config_path(args: argparse.Namespace) -> None:
    """Print config file path."""
    print(get_config_path())


def cmd_config_show(args: argparse.Namespace) -> None:
    """Show current config."""
    config_path = get_config_path()
    if config_path.exists():
        print(config_path.read_text())
    else:
        print(f"No config file at {config_path}")
        print("Run 'ghnotify config init' to create one.")


def setup_config_parser(subparsers: argparse._SubParsersAction) -> None:
    """Set up the config subcommand."""
    config_parser = subparsers.add_parser(
        "config",
        help="Manage ghnotify configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    # config init
    init_parser = config_subparsers.add_parser("init", help="Create default config file")
    init_parser.set_defaults(func=cmd_config_init)

    # config path
    path_parser = config_subparsers.add_parser("path", help="Print config file path")
    path_parser.set_defaults(func=cmd_config_path)

    # config show
    show_parser = config_subparsers.add_parser("show", help="Show current config")
    show_parser.set_defaults(func=cmd_config_show)

    config_parser.set_defaults(func=cmd_config_show, config_command=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghnotify",
        description="Browse, filter and triage GitHub notifications in the terminal",
    )
    inbox_cli.add_arguments(parser)
    parser.set_defaults(func=inbox_cli.cmd_notify)

    subparsers = parser.add_subparsers(dest="command")
    setup_config_parser(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        args.func(args)
    except FatalError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
