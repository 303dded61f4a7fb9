"""
Evaluation driver and traces for smallstep.

The driver repeatedly takes single steps on a Program. Each step asks the
semantics for the first applicable rule and applies it, producing a
Reduction. Evaluation stops when the identity rule fires (the term is in
normal form) or when a step raises an EvaluationError. Either way the
reductions taken so far are kept in a Trace.

Examples:
    from smallstep import Evaluator, Add, ReadVariable, WriteVariable, Number

    evaluator = Evaluator()
    result = evaluator(Add(WriteVariable("a", Number(3)), ReadVariable("a")))
    result.program           # => «6», a:«3»
    print(result.trace.format())
    # «(a = 3) + a»  | <x, σ> → <x', σ'> : <x + y, σ> → <x' + y, σ'>
    #   «a = 3»      | <x = v, σ> → <v, σ[x ↦ v]>
    #   «3», a:«3»   |
    # ...

There is no step limit: a rule set that never reaches a normal form makes
evaluate() run forever. Use iterate() with itertools.islice to bound it.
"""

import logging
from collections import Counter
from typing import Dict, Iterator, List, Mapping, NamedTuple, Optional, Tuple, Union

from .environment import Environment
from .errors import EvaluationError
from .program import Program, Reduction
from .rules import format_rule
from .semantics import DEFAULT_SEMANTICS, Semantics
from .terms import Term

logger = logging.getLogger(__name__)


class TraceRow(NamedTuple):
    """One line of a flattened trace: nesting depth, program, rule notation."""

    depth: int
    program: Program
    notation: str


class Trace:
    """
    The reductions taken while evaluating a program.

    Provides multiple formatting options:
        - format("table"): nested proof-tree listing (default)
        - format("rules"): just the rule names applied
        - format("compact"): single line summary
        - format("chain"): program after each step
        - to_dict(): JSON-serializable dictionary
    """

    def __init__(self, initial: Optional[Program] = None):
        self.steps: List[Reduction] = []
        self.initial: Optional[Program] = initial
        self.final: Optional[Program] = initial

    def add_step(self, reduction: Reduction):
        self.steps.append(reduction)
        self.final = reduction.after

    def rows(self) -> List[TraceRow]:
        """
        Flatten the reductions depth-first.

        Each reduction contributes a row for the program it started from
        with the notation of its rule, then the rows of its children one
        level deeper, then one closing row showing the last child's result
        with blank notation.
        """
        rows: List[TraceRow] = []
        for reduction in self.steps:
            rows.extend(flatten(reduction))
        return rows

    def format(self, style: str = "table") -> str:
        """
        Format the trace in different styles.

        Args:
            style: One of "table", "rules", "compact", "chain"

        Returns:
            Formatted string representation of the trace.
        """
        if style == "rules":
            names = self.rules_applied()
            return " -> ".join(names) if names else "(no rules applied)"

        elif style == "compact":
            return f"{self.initial} --[{', '.join(self.rules_applied())}]--> {self.final}"

        elif style == "chain":
            parts = [str(self.initial)]
            for step in self.steps:
                if step.is_terminal:
                    continue
                parts.append(f"  --({step.rule.name})-->")
                parts.append(str(step.after))
            return "\n".join(parts)

        elif style == "table":
            return format_rows(self.rows())

        raise ValueError(f"Unknown trace style: {style}. "
                         f"Valid options: table, rules, compact, chain")

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"Trace({len(self.steps)} steps)"

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Reduction]:
        """Iterate over top-level reductions."""
        return iter(self.steps)

    def __getitem__(self, index: int) -> Reduction:
        return self.steps[index]

    def __bool__(self) -> bool:
        """True if any step was taken."""
        return len(self.steps) > 0

    def to_dict(self) -> Dict:
        """Convert trace to dictionary for JSON serialization."""
        return {
            "initial": self.initial.to_dict() if self.initial else None,
            "final": self.final.to_dict() if self.final else None,
            "steps": [step.to_dict() for step in self.steps],
            "step_count": len(self.steps),
        }

    def rules_applied(self) -> List[str]:
        """Names of the top-level rules in order of application."""
        return [step.rule.name for step in self.steps if not step.is_terminal]

    def rule_counts(self) -> Dict[str, int]:
        """Count how many times each rule fired, nested steps included."""
        counts: Counter = Counter()

        def walk(reduction: Reduction):
            if not reduction.is_terminal:
                counts[reduction.rule.name] += 1
            for child in reduction.children:
                walk(child)

        for step in self.steps:
            walk(step)
        return dict(counts)

    def summary(self) -> str:
        """Get a brief summary of the evaluation."""
        counts = self.rule_counts()
        if not counts:
            return "No reductions performed"
        most_used = max(counts.items(), key=lambda x: x[1])
        return (f"{len(self.rules_applied())} steps using {len(counts)} unique rules. "
                f"Most used: {most_used[0]} ({most_used[1]}x)")


def flatten(reduction: Reduction, depth: int = 0) -> List[TraceRow]:
    """Flatten one reduction and its children into trace rows."""
    notation = "" if reduction.is_terminal else format_rule(reduction.rule)
    rows = [TraceRow(depth, reduction.before, notation)]
    for child in reduction.children:
        rows.extend(flatten(child, depth + 1))
    if reduction.children:
        rows.append(TraceRow(depth + 1, reduction.children[-1].after, ""))
    return rows


def format_rows(rows: List[TraceRow], indent: str = "  ") -> str:
    """Lay rows out in two columns: indented program | rule notation."""
    lines = [(indent * row.depth + str(row.program), row.notation) for row in rows]
    if not lines:
        return ""
    width = max(len(left) for left, _ in lines)
    return "\n".join(f"{left:<{width}} | {right}" for left, right in lines)


class Evaluation:
    """
    Outcome of evaluating a program.

    Attributes:
        program: Final program on success, or the program whose step
            failed on error
        trace: Reductions taken, in order
        error: The EvaluationError that stopped evaluation, or None

    Unpacks as (final_program, trace) on success and as (trace, error)
    on failure.
    """

    def __init__(self, program: Program, trace: Trace,
                 error: Optional[EvaluationError] = None):
        self.program = program
        self.trace = trace
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def term(self) -> Term:
        return self.program.term

    @property
    def environment(self) -> Environment:
        return self.program.environment

    def unwrap(self) -> Program:
        """Return the final program, or raise the error that stopped evaluation."""
        if self.error is not None:
            raise self.error
        return self.program

    def __iter__(self):
        if self.ok:
            return iter((self.program, self.trace))
        return iter((self.trace, self.error))

    def rows(self) -> List[TraceRow]:
        """Trace rows, followed by an error row when evaluation failed."""
        rows = self.trace.rows()
        if self.error is not None:
            rows.append(TraceRow(0, self.program, str(self.error)))
        return rows

    def format(self, style: str = "table") -> str:
        if style == "table":
            return format_rows(self.rows())
        text = self.trace.format(style)
        if self.error is not None:
            text += f"\nError: {self.error}"
        return text

    def to_dict(self) -> Dict:
        result = self.trace.to_dict()
        result["ok"] = self.ok
        result["error"] = None
        if self.error is not None:
            result["error"] = {"type": type(self.error).__name__, "message": str(self.error)}
            result["failed_at"] = self.program.to_dict()
        return result

    def __repr__(self) -> str:
        if self.ok:
            return f"Evaluation({self.program}, {len(self.trace)} steps)"
        return f"Evaluation(failed: {self.error}, {len(self.trace)} steps)"


class Evaluator:
    """
    Drives programs to normal form under a Semantics.

    Example:
        evaluator = Evaluator(NULL_WRITE_SEMANTICS)
        result = evaluator.evaluate(Sequence(WriteVariable("a", Number(3)),
                                             ReadVariable("a")))
        result.term              # => Number(3)
    """

    def __init__(self, semantics: Optional[Semantics] = None):
        self.semantics = semantics if semantics is not None else DEFAULT_SEMANTICS

    def step(self, program: Program) -> Reduction:
        """
        Take one step: dispatch a rule and apply it.

        Rules that reduce a sub-term call back into step() for that child.

        Raises:
            EvaluationError: If no rule applies or the chosen rule fails.
        """
        term, environment = program
        rule = self.semantics.dispatch(term, environment)
        after, children = rule.apply(term, environment, self.step)
        return Reduction(program, after, rule, children)

    def iterate(self, program: Program) -> Iterator[Reduction]:
        """
        Yield each reduction until the term reaches normal form.

        The identity reduction is yielded last. Errors propagate to the
        caller after the reductions that preceded them.
        """
        while True:
            reduction = self.step(program)
            yield reduction
            if reduction.is_terminal:
                return
            program = reduction.after

    def evaluate(self, term: Union[Term, Program],
                 environment: Optional[Mapping] = None) -> Evaluation:
        """
        Reduce a term until it is in normal form or a step fails.

        Args:
            term: Term to evaluate, or a ready-made Program
            environment: Initial bindings (ignored when a Program is given)

        Returns:
            Evaluation holding the final (or failing) program, the trace,
            and the error if one stopped evaluation.
        """
        program = term if isinstance(term, Program) else Program(term, environment)
        trace = Trace(program)
        logger.debug("evaluating %s", program)

        current = program
        try:
            for reduction in self.iterate(program):
                logger.debug("step %d: %s", len(trace) + 1, reduction)
                trace.add_step(reduction)
                current = reduction.after
        except EvaluationError as e:
            logger.debug("evaluation failed after %d steps at %s: %s", len(trace), current, e)
            return Evaluation(current, trace, e)

        return Evaluation(current, trace)

    def __call__(self, term: Union[Term, Program],
                 environment: Optional[Mapping] = None) -> Evaluation:
        """Make evaluator callable: evaluator(term) is evaluator.evaluate(term)."""
        return self.evaluate(term, environment)

    def __repr__(self) -> str:
        return f"Evaluator({self.semantics!r})"


_default_evaluator = Evaluator()


def step(program: Program, semantics: Optional[Semantics] = None) -> Reduction:
    """Take one step under the given (or default) semantics."""
    evaluator = Evaluator(semantics) if semantics is not None else _default_evaluator
    return evaluator.step(program)


def evaluate(term: Union[Term, Program], environment: Optional[Mapping] = None,
             semantics: Optional[Semantics] = None) -> Evaluation:
    """Evaluate a term under the given (or default) semantics."""
    evaluator = Evaluator(semantics) if semantics is not None else _default_evaluator
    return evaluator.evaluate(term, environment)
