"""
Command-line interface for git-autofixup.

This module is responsible for argument parsing, logging setup and
mapping run outcomes and errors onto exit codes; the work itself is
delegated to the planner module.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import DEFAULT_CONTEXT_LINES, Config
from .domain import AssignmentOutcome
from .errors import AutofixupError
from .logging_utils import configure_logging
from .planner import run_autofixup

# Exit codes reported with --exit-code.
_DETAILED_EXIT_CODES = {
    AssignmentOutcome.ALL: 0,
    AssignmentOutcome.SOME: 1,
    AssignmentOutcome.NONE: 2,
    AssignmentOutcome.NOTHING: 3,
}
_ERROR_EXIT_CODE = 1
_DETAILED_ERROR_EXIT_CODE = 255


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-autofixup",
        description=(
            "Create fixup commits for topic branches by assigning working "
            "tree hunks to the commits blamed for the lines they change."
        ),
        epilog=(
            "strictness levels: "
            "0: exactly one topic branch commit blamed in hunk context; "
            "1: changed lines adjacent to exactly one topic branch commit; "
            "2: changed lines surrounded by exactly one topic branch commit"
        ),
    )

    parser.add_argument(
        "upstream",
        help="Revision the topic branch starts from; only later commits get fixups.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (use up to 2 times).",
    )
    parser.add_argument(
        "-c",
        "--context",
        type=int,
        default=DEFAULT_CONTEXT_LINES,
        metavar="N",
        help="Number of diff context lines (default: %(default)s).",
    )
    parser.add_argument(
        "-s",
        "--strict",
        type=int,
        default=0,
        metavar="N",
        help="Strictness level 0, 1 or 2 (default: %(default)s).",
    )
    parser.add_argument(
        "-e",
        "--exit-code",
        action="store_true",
        help=(
            "Use detailed exit codes: 0 all hunks assigned, 1 some assigned, "
            "2 none assigned, 3 nothing to assign, 255 error."
        ),
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    config = Config(
        upstream=args.upstream,
        context_lines=args.context,
        strictness=args.strict,
        exit_code=args.exit_code,
        verbosity=args.verbose,
    )

    configure_logging(verbosity=config.verbosity)

    try:
        outcome = run_autofixup(config)
    except KeyboardInterrupt:
        # Graceful shutdown on Ctrl+C
        return 130
    except AutofixupError as exc:
        print(f"git-autofixup: error: {exc}", file=sys.stderr)
        return _DETAILED_ERROR_EXIT_CODE if config.exit_code else _ERROR_EXIT_CODE

    if config.exit_code:
        return _DETAILED_EXIT_CODES[outcome]
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
