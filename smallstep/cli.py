#!/usr/bin/env python3
"""
smallstep Command-Line Interface

Runs the demonstration programs and prints their reduction traces, or
lists the rules of a semantics in mathematical notation.

Usage:
    smallstep                           # Run every example
    smallstep write-then-read           # Run one example
    smallstep nested-add -s additions   # Run under another semantics
    smallstep --list                    # List examples
    smallstep --rules -s null-write     # Show a rule table
    smallstep --rules --vertical        # Premise/bar/conclusion layout
    smallstep sequence -f json          # Machine-readable trace

Custom semantics:
    A Python file defining SEMANTICS (a smallstep.Semantics) can be passed
    to -s by path, or by name if it lives in ./semantics or
    ~/.config/smallstep/semantics.
"""

import argparse
import importlib.util
import json
import logging
import sys
from itertools import islice
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from . import __version__
from .engine import Evaluation, Evaluator, Trace
from .errors import EvaluationError
from .program import Program
from .programs import EXAMPLES, Example
from .semantics import BUILTIN_SEMANTICS, Semantics

logger = logging.getLogger(__name__)

FORMATS = ["table", "rules", "compact", "chain", "json"]

# Standard semantics search paths
SEMANTICS_SEARCH_PATHS = [
    Path("./semantics"),
    Path.home() / ".config" / "smallstep" / "semantics",
]


def load_custom_semantics(name_or_path: str) -> Optional[Semantics]:
    """
    Load a custom semantics from a Python file.

    The file should define a SEMANTICS object.

    Args:
        name_or_path: Either a path to a .py file, or a name to search for

    Returns:
        The SEMANTICS object from the file, or None if not found
    """
    path = Path(name_or_path)

    # If it's an explicit path
    if path.suffix == ".py" or "/" in name_or_path or "\\" in name_or_path:
        if not path.exists():
            return None
        search_paths = [path]
    else:
        # Search for name.py in standard locations
        search_paths = []
        for search_dir in SEMANTICS_SEARCH_PATHS:
            candidate = search_dir / f"{name_or_path}.py"
            if candidate.exists():
                search_paths.append(candidate)

    for semantics_path in search_paths:
        try:
            spec = importlib.util.spec_from_file_location("custom_semantics", semantics_path)
            if spec and spec.loader:
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)
                semantics = getattr(module, "SEMANTICS", None)
                if isinstance(semantics, Semantics):
                    return semantics
                logger.warning("%s does not define a Semantics named SEMANTICS", semantics_path)
        except Exception as e:
            logger.warning("Error loading semantics from %s: %s", semantics_path, e)

    return None


def resolve_semantics(name: str) -> Optional[Semantics]:
    """Look up a built-in semantics by name, falling back to custom files."""
    name_lower = name.lower()
    if name_lower in BUILTIN_SEMANTICS:
        return BUILTIN_SEMANTICS[name_lower]
    return load_custom_semantics(name)


def evaluate_bounded(evaluator: Evaluator, program: Program,
                     max_steps: Optional[int]) -> Tuple[Evaluation, bool]:
    """
    Evaluate with an optional cap on top-level steps.

    Returns:
        (evaluation, finished) where finished is False if the cap was hit
        before a normal form or an error.
    """
    if max_steps is None:
        result = evaluator.evaluate(program)
        return result, True

    trace = Trace(program)
    current = program
    try:
        for reduction in islice(evaluator.iterate(program), max_steps):
            trace.add_step(reduction)
            current = reduction.after
    except EvaluationError as e:
        return Evaluation(current, trace, e), True
    finished = bool(trace) and trace[-1].is_terminal
    return Evaluation(current, trace), finished


class ExampleRunner:
    """Runs catalogue examples and prints their traces."""

    def __init__(self, semantics: Optional[Semantics] = None, style: str = "table",
                 max_steps: Optional[int] = None, out=None):
        self.semantics = semantics
        self.style = style
        self.max_steps = max_steps
        self.out = out if out is not None else sys.stdout

    def print(self, text: str = ""):
        print(text, file=self.out)

    def run_example(self, name: str, example: Example) -> Tuple[Evaluation, bool]:
        semantics = self.semantics if self.semantics is not None else example.semantics
        evaluator = Evaluator(semantics)
        program = Program(example.term, example.environment)
        logger.info("running %s under %s", name, semantics.name or "custom semantics")
        return evaluate_bounded(evaluator, program, self.max_steps)

    def run(self, names: List[str]) -> int:
        """
        Run the named examples.

        Returns:
            Exit code (0 if every example reached a normal form)
        """
        unknown = [name for name in names if name not in EXAMPLES]
        if unknown:
            print(f"Unknown example: {', '.join(unknown)}", file=sys.stderr)
            return 1

        status = 0
        results: Dict[str, Dict] = {}
        for name in names:
            example = EXAMPLES[name]
            result, finished = self.run_example(name, example)
            if not result.ok or not finished:
                status = 1

            if self.style == "json":
                data = result.to_dict()
                data["finished"] = finished
                results[name] = data
                continue

            self.print(f"# {name}: {example.description}")
            self.print(result.format(self.style))
            if not finished:
                self.print(f"Stopped after {self.max_steps} steps")
            self.print()

        if self.style == "json":
            self.print(json.dumps(results, indent=2, ensure_ascii=False))
        return status

    def list_examples(self) -> int:
        width = max(len(name) for name in EXAMPLES)
        for name, example in EXAMPLES.items():
            self.print(f"{name:<{width}}  {example.description}")
        return 0

    def list_rules(self, semantics: Semantics, vertical: bool = False) -> int:
        if self.style == "json":
            self.print(json.dumps(semantics.to_dict(), indent=2, ensure_ascii=False))
            return 0
        separator = "\n\n" if vertical else "\n"
        self.print(separator.join(semantics.list_rules(vertical=vertical)))
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smallstep",
        description="smallstep - small-step operational semantics by term rewriting",
        epilog="Examples:\n"
               "  smallstep                         Run every example\n"
               "  smallstep write-then-read         Run one example\n"
               "  smallstep nested-add -s additions Run under another semantics\n"
               "  smallstep --rules --vertical      Show the default rules\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "examples",
        nargs="*",
        help="Examples to run (default: all)"
    )

    parser.add_argument(
        "-s", "--semantics",
        help="Semantics to use (" + ", ".join(BUILTIN_SEMANTICS) + ", or path.py); "
             "defaults to each example's own"
    )

    parser.add_argument(
        "-f", "--format",
        default="table",
        choices=FORMATS,
        help="Trace output format"
    )

    parser.add_argument(
        "--max-steps",
        type=int,
        help="Stop after this many top-level steps"
    )

    parser.add_argument(
        "-l", "--list",
        action="store_true",
        help="List available examples"
    )

    parser.add_argument(
        "-r", "--rules",
        action="store_true",
        help="Print the rules of the semantics"
    )

    parser.add_argument(
        "--vertical",
        action="store_true",
        help="Print rules with the premise above a bar"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log evaluation progress to stderr (-vv for every step)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        level = logging.DEBUG if args.verbose > 1 else logging.INFO
        logging.basicConfig(level=level, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")

    semantics = None
    if args.semantics:
        semantics = resolve_semantics(args.semantics)
        if semantics is None:
            print(f"Unknown semantics: {args.semantics}", file=sys.stderr)
            return 1

    if args.max_steps is not None and args.max_steps < 1:
        print("Error: --max-steps must be at least 1", file=sys.stderr)
        return 1

    runner = ExampleRunner(semantics=semantics, style=args.format, max_steps=args.max_steps)

    if args.list:
        return runner.list_examples()

    if args.rules:
        return runner.list_rules(semantics or BUILTIN_SEMANTICS["default"], vertical=args.vertical)

    return runner.run(args.examples or list(EXAMPLES))


if __name__ == "__main__":
    sys.exit(main())
