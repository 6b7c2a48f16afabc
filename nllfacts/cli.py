#!/usr/bin/env python3
"""nllfacts/cli.py — command-line entry point.

Usage examples
--------------
    # Borrow-check a program written in the mini-language
    python -m nllfacts check program.txt

    # Borrow-check facts dumped by the compiler, with a chosen strategy
    python -m nllfacts check nll-facts/main -a location-insensitive

    # Also print borrow_live_at and subset tuples, with debug logging
    python -m nllfacts -vv check prog.txt --show-tuples

Exit codes
----------
    0   No borrow errors.
    1   One or more ``(point, loan)`` errors were found.
    2   Infrastructure failure (missing input, parse/load error, bad option).
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence, TextIO

from . import __version__
from .engine import Algorithm, compute
from .errors import NllFactsError, ParseError
from .facts import AllFacts
from .intern import InternerTables
from .output import Output
from .program import parse_from_program
from .tab_delim import load_tab_delimited_facts

_log = logging.getLogger("nllfacts")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``nllfacts`` logger: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("nllfacts")
    root.setLevel(level)
    root.addHandler(handler)


def load_input(path: Path, tables: InternerTables) -> AllFacts:
    """A directory is a facts dump; anything else is program text."""
    if path.is_dir():
        _log.info("loading tab-delimited facts from %s", path)
        return load_tab_delimited_facts(tables, path)
    _log.info("parsing program %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"cannot read program: {exc}") from exc
    return parse_from_program(text, tables)


def _write_tuples(out: TextIO, output: Output, tables: InternerTables) -> None:
    points, loans, regions = tables.points, tables.loans, tables.regions

    out.write("# borrow_live_at\n")
    rows = sorted(
        (points.untern(p), loans.untern(l))
        for p, held in output.borrow_live_at.items()
        for l in held
    )
    for row in rows:
        out.write("\t".join(row) + "\n")

    out.write("# subset\n")
    subset_rows = sorted(
        (points.untern(p), regions.untern(r1), regions.untern(r2))
        for p, subsets in output.subset.items()
        for r1, targets in subsets.items()
        for r2 in targets
    )
    for row in subset_rows:
        out.write("\t".join(row) + "\n")


def _cmd_check(args: argparse.Namespace) -> int:
    path = Path(args.input).expanduser()
    if not path.exists():
        _log.error("input not found: %s", path)
        return EXIT_INFRA
    try:
        algorithm = Algorithm.from_name(args.algorithm)
    except ValueError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    tables = InternerTables()
    try:
        facts = load_input(path, tables)
    except NllFactsError as exc:
        _log.error("%s: %s", path, exc)
        return EXIT_INFRA

    output = compute(facts, algorithm, dump_enabled=args.show_tuples)
    if not args.skip_timing:
        sys.stderr.write(f"{path.name}: {algorithm.value} took {output.elapsed_seconds:.3f}s\n")

    out = sys.stdout
    out.write("# errors\n")
    for point, loan in sorted(
        (tables.points.untern(p), tables.loans.untern(l)) for p, l in output.error_tuples()
    ):
        out.write(f"{point}\t{loan}\n")
    if args.show_tuples:
        _write_tuples(out, output, tables)

    return EXIT_ERROR if output.has_errors() else EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nllfacts",
        description="Fact-based borrow checking over regions, loans and points.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              nllfacts check program.txt
              nllfacts check nll-facts/main -a hybrid --show-tuples
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    p_check = subparsers.add_parser(
        "check",
        help="Borrow-check a program file or a facts directory.",
    )
    p_check.add_argument(
        "input",
        metavar="INPUT",
        help="Program file, or directory of <relation>.facts files.",
    )
    p_check.add_argument(
        "-a", "--algorithm",
        default=Algorithm.NAIVE.value,
        help="Naive, LocationInsensitive, Optimized or Hybrid (default: Naive).",
    )
    p_check.add_argument(
        "--show-tuples",
        action="store_true",
        help="Also print borrow_live_at and subset tuples.",
    )
    p_check.add_argument(
        "--skip-timing",
        action="store_true",
        help="Do not report the analysis time.",
    )
    p_check.set_defaults(func=_cmd_check)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
