"""
Evaluation errors for smallstep.

Every failure the engine can report is one of these. Rules and the
dispatcher raise them deliberately; the evaluation driver is the only
place that catches them, and it hands them back alongside the trace
accumulated so far.
"""

from typing import Any, Optional


class EvaluationError(Exception):
    """Base class for errors raised while reducing a program."""

    def __init__(self, message: str, term: Any = None, environment: Any = None):
        super().__init__(message)
        self.term = term
        self.environment = environment


class UndefinedVariable(EvaluationError, LookupError):
    """A variable read found no binding in the environment."""

    def __init__(self, name: str, environment: Any = None):
        super().__init__(f"undefined variable: {name!r}", environment=environment)
        self.name = name

    def __eq__(self, other):
        if isinstance(other, UndefinedVariable):
            return self.name == other.name
        return NotImplemented

    def __hash__(self):
        return hash(("UndefinedVariable", self.name))


class NoApplicableRule(EvaluationError):
    """The dispatcher exhausted a variant's rule list without a match."""

    def __init__(self, term: Any, environment: Any = None):
        super().__init__(f"no rule applies to «{term}»", term=term, environment=environment)


class TypeMismatch(EvaluationError, TypeError):
    """A terminal rule was handed a child of the wrong shape."""

    def __init__(self, term: Any, expected: str, actual: Optional[Any] = None,
                 environment: Any = None):
        found = f"«{actual}»" if actual is not None else "nothing"
        super().__init__(
            f"expected {expected} in «{term}», found {found}",
            term=term, environment=environment,
        )
        self.expected = expected
        self.actual = actual
