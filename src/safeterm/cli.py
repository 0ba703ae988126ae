"""Command-line interface for the safeterm viewer."""

import argparse
import sys
from pathlib import Path


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse, or None to use sys.argv

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="safeterm",
        description="View command output and files with control characters made visible",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m safeterm -- ls --color=always     Run a command and view its output
  python -m safeterm --file build.log         View a file
  python -m safeterm --simple -- make         Sanitized output without the TUI
  python -m safeterm --no-ansi --file dump    Escape colour codes too
        """,
    )

    # Sources
    parser.add_argument(
        "--file",
        dest="files",
        action="append",
        type=Path,
        default=[],
        metavar="PATH",
        help="File to view (repeatable)",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run, after --",
    )

    # Escaping
    parser.add_argument(
        "--no-ansi",
        action="store_true",
        help="Escape ANSI colour sequences instead of rendering them",
    )

    # UI mode
    parser.add_argument(
        "--simple",
        action="store_true",
        help="Use simple output instead of TUI",
    )

    # Logging
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write debug records to the log file",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Log file (the process ID is added to its name)",
    )
    parser.add_argument(
        "--no-transcript",
        action="store_true",
        help="Do not write a transcript of the session",
    )

    namespace = parser.parse_args(args)
    if namespace.command and namespace.command[0] == "--":
        namespace.command = namespace.command[1:]
    return namespace


def should_use_tui(args: argparse.Namespace) -> bool:
    """Determine whether to use Textual TUI.

    Returns False if:
    - User requested simple output (--simple)
    - Not running in a TTY (CI, piped output)
    """
    if args.simple:
        return False
    if not sys.stdout.isatty():
        return False
    return True
