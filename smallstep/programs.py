"""
Catalogue of demonstration programs.

Each entry is a term, its starting environment and the semantics it is
meant to be run under, chosen to show one aspect of the rule set: nested
reduction, environment reads and writes, and the cases where a rule set
is too weak or evaluation order changes the outcome.
"""

from typing import Dict, NamedTuple, Optional

from .environment import EMPTY, Environment
from .semantics import (
    ADDITIONS_SEMANTICS, DEFAULT_SEMANTICS, ENV_PRESERVING_SEMANTICS,
    NULL_WRITE_SEMANTICS, READ_DEFAULT_SEMANTICS, RIGHT_TO_LEFT_SEMANTICS,
    Semantics,
)
from .terms import Add, Number, ReadVariable, Sequence, Term, WriteVariable


class Example(NamedTuple):
    term: Term
    environment: Environment = EMPTY
    semantics: Semantics = DEFAULT_SEMANTICS
    description: Optional[str] = None


_write_a = WriteVariable("a", Number(3))

EXAMPLES: Dict[str, Example] = {
    "number": Example(
        Number(10),
        description="A value reduces only by the identity rule",
    ),
    "add": Example(
        Add(Number(1), Number(2)),
        description="Literal addition",
    ),
    "nested-add": Example(
        Add(Number(1), Add(Number(2), Number(3))),
        description="The right operand is reduced before the sum is taken",
    ),
    "additions-only": Example(
        Add(Number(1), Add(Number(2), Number(3))),
        semantics=ADDITIONS_SEMANTICS,
        description="Without operand rules a nested addition is stuck",
    ),
    "read": Example(
        ReadVariable("a"),
        Environment(a=Number(4)),
        description="Reading a bound variable",
    ),
    "read-expression": Example(
        Add(ReadVariable("a"), Number(2)),
        Environment(a=Add(Number(4), Number(3))),
        description="The environment may hold an unreduced expression",
    ),
    "write": Example(
        _write_a,
        semantics=NULL_WRITE_SEMANTICS,
        description="Writing reduces to ∅ under the null policy",
    ),
    "write-in-add": Example(
        Add(_write_a, Number(2)),
        semantics=NULL_WRITE_SEMANTICS,
        description="∅ cannot be added",
    ),
    "sequence": Example(
        Sequence(_write_a, ReadVariable("a")),
        semantics=NULL_WRITE_SEMANTICS,
        description="A sequence makes a written value readable",
    ),
    "dropped-write": Example(
        Add(_write_a, ReadVariable("a")),
        semantics=ENV_PRESERVING_SEMANTICS,
        description="Operand rules that keep the parent environment lose the write",
    ),
    "write-then-read": Example(
        Add(_write_a, ReadVariable("a")),
        description="Writes nest inside additions and are seen by the right operand",
    ),
    "read-then-write": Example(
        Add(ReadVariable("a"), _write_a),
        description="Left-to-right order reads before the write happens",
    ),
    "right-to-left": Example(
        Add(_write_a, ReadVariable("a")),
        semantics=RIGHT_TO_LEFT_SEMANTICS,
        description="Reducing the right operand first makes the read fail",
    ),
    "read-default": Example(
        Add(ReadVariable("a"), ReadVariable("b")),
        Environment(a=Number(4)),
        semantics=READ_DEFAULT_SEMANTICS,
        description="Unbound variables read as 0",
    ),
}
