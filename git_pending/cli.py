#!/usr/bin/env python3
"""
Scan a directory tree for git repositories with pending work:
staged, modified, untracked or conflicted files, unpushed commits and stashes.

Exit code:
  0 - no repos with pending work (or none found)
  1 - at least one repo with pending work, or the path does not exist
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from git_pending import __version__
from git_pending.colors import paint, should_use_color
from git_pending.report import exit_code, format_report, format_summary, report_to_json, summarize
from git_pending.status import collect_all
from git_pending.walker import DEFAULT_DEPTH, find_git_repos

EPILOG = """\
examples:
  git-pending                  Search current directory
  git-pending ~/projects       Search specific directory
  git-pending -d 5 ~/code      Search with depth of 5
  git-pending -a               Show all repos including clean ones
"""


def configure_logging(quiet: bool, verbose: bool) -> None:
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def tolerate_unencodable_output(stream: TextIO) -> None:
    """Print "?" for glyphs the stream's encoding cannot represent instead of failing."""
    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors="replace")


def parse_depth(value: str) -> int:
    """Depth from the command line; anything that is not a non-negative integer means the default."""
    try:
        depth = int(value)
    except (TypeError, ValueError):
        return DEFAULT_DEPTH
    if depth < 0:
        return DEFAULT_DEPTH
    return depth


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value}")
    return number


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-pending",
        description="Find git repositories with pending changes.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Directory to scan (default: current working directory).",
    )
    parser.add_argument(
        "-a",
        "--all",
        dest="show_all",
        action="store_true",
        help="Show all repositories, including clean ones.",
    )
    parser.add_argument(
        "-d",
        "--depth",
        type=parse_depth,
        nargs="?",
        const=DEFAULT_DEPTH,
        default=DEFAULT_DEPTH,
        metavar="N",
        help="Maximum directory depth to search (default: %(default)s).",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=positive_int,
        default=1,
        metavar="N",
        help="Inspect up to N repositories in parallel (default: %(default)s).",
    )
    parser.add_argument(
        "--timeout",
        type=positive_float,
        default=None,
        metavar="SECONDS",
        help="Give up on a single git query after this many seconds (default: no limit).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON report instead of text.",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Colorize output (default: %(default)s).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode: warnings and errors only.",
    )
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose mode: detailed debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    configure_logging(quiet=args.quiet, verbose=args.verbose)
    tolerate_unencodable_output(sys.stdout)
    tolerate_unencodable_output(sys.stderr)
    use_color = not args.json and should_use_color(args.color, sys.stdout)

    root = Path(args.path).resolve() if args.path is not None else Path.cwd()
    if not root.exists():
        print(paint(f"Error: Path does not exist: {root}", "red", use_color), file=sys.stderr)
        return 1

    if not args.json:
        print(f"\n{paint('Scanning for git repositories in:', 'bold', use_color)} {root}\n")

    repos = find_git_repos(root, args.depth)
    logging.debug("Found %d git repos under %s (depth %d)", len(repos), root, args.depth)

    statuses = collect_all(repos, jobs=args.jobs, timeout=args.timeout)
    summary = summarize(statuses)

    if args.json:
        print(report_to_json(root, statuses, summary))
        return exit_code(summary)

    if not repos:
        print(f"{paint('No git repositories found.', 'yellow', use_color)}\n")
        return 0

    report = format_report(statuses, root, show_all=args.show_all, use_color=use_color)
    if report:
        print(report)
    print(format_summary(summary, use_color))

    return exit_code(summary)


if __name__ == "__main__":
    raise SystemExit(main())
