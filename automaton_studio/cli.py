from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence, Tuple

from .errors import InterpreterError
from .graphviz import write_dot
from .interpreter import BANNER, AutomatonInterpreter, BatchResult, check_script

logger = logging.getLogger(__name__)

PROMPT = ">>> "
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build and run DFA/NFA automata with a small command language."
    )
    parser.add_argument(
        "scripts",
        nargs="*",
        help="Command scripts to run, in order, on a single interpreter.",
    )
    parser.add_argument(
        "-c",
        "--command",
        help="Command text to run after the scripts, e.g. \"create dfa a,b; add x\".",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report whether each script would run without errors.",
    )
    parser.add_argument(
        "--export",
        metavar="PATH",
        help="Write the replayable command log to PATH once everything ran.",
    )
    parser.add_argument(
        "--dot",
        metavar="PATH",
        help="Write the final automaton as a Graphviz DOT file.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print confirmation messages, only errors.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Logging verbosity (default: WARNING).",
    )
    return parser.parse_args(argv)


def run(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        sources = _collect_sources(args)
        if args.check:
            return _check_sources(sources)

        interp = AutomatonInterpreter()
        if sources:
            if not _run_sources(interp, sources, quiet=args.quiet):
                return 1
        else:
            _repl(interp, quiet=args.quiet)
        _write_outputs(interp, args)
    except KeyboardInterrupt:
        print("\nAborted by user.", file=sys.stderr)
        return 130
    except (InterpreterError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def _collect_sources(args: argparse.Namespace) -> List[Tuple[str, str]]:
    sources: List[Tuple[str, str]] = []
    for script in args.scripts:
        with open(script, "r", encoding="utf-8") as handle:
            sources.append((script, handle.read()))
    if args.command:
        sources.append(("<command>", args.command))
    return sources


def _check_sources(sources: Sequence[Tuple[str, str]]) -> int:
    if not sources:
        print("Error: --check needs a script or --command.", file=sys.stderr)
        return 1
    failures = 0
    for name, code in sources:
        result = check_script(code)
        if result.success:
            print(f"{name}: OK")
        else:
            failures += 1
            print(f"{name}: {result.message}", file=sys.stderr)
    return 1 if failures else 0


def _run_sources(
    interp: AutomatonInterpreter, sources: Sequence[Tuple[str, str]], *, quiet: bool
) -> bool:
    for name, code in sources:
        if interp.is_closed:
            logger.info("Interpreter closed, skipping %s", name)
            break
        logger.info("Running %s", name)
        result = interp.execute_batch(code)
        _print_result(result, quiet=quiet)
        if not result.success:
            print(f"\tin {name}", file=sys.stderr)
            return False
    return True


def _repl(interp: AutomatonInterpreter, *, quiet: bool) -> None:
    print(BANNER)
    while not interp.is_closed:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return
        if not line.strip():
            continue
        _print_result(interp.execute_batch(line), quiet=quiet)


def _print_result(result: BatchResult, *, quiet: bool) -> None:
    if not quiet:
        for message in result.messages:
            print(message)
    if not result.success:
        print(result.message, file=sys.stderr)


def _write_outputs(interp: AutomatonInterpreter, args: argparse.Namespace) -> None:
    if not (args.export or args.dot):
        return
    if interp.is_closed:
        print("Interpreter was closed; nothing to write.", file=sys.stderr)
        return
    if args.export:
        count = interp.export_file(args.export)
        if not args.quiet:
            print(f"Exported {count} command(s) to {Path(args.export).resolve()}")
    if args.dot:
        if interp.automaton is None:
            print("No automaton defined; DOT file not written.", file=sys.stderr)
            return
        path = write_dot(interp.automaton, args.dot)
        if not args.quiet:
            print(f"DOT file written: {path}")
