"""
smallstep - Small-step operational semantics by term rewriting

Define an expression language by attaching an ordered list of rewrite
rules to each kind of term, then watch programs reduce one step at a time.

Quick Start:
    from smallstep import evaluate, Add, ReadVariable, WriteVariable, Number

    result = evaluate(Add(WriteVariable("a", Number(3)), ReadVariable("a")))
    result.term          # => Number(6)
    print(result.trace)
    # «(a = 3) + a»  | <x, σ> → <x', σ'> : <x + y, σ> → <x' + y, σ'>
    #   «a = 3»      | <x = v, σ> → <v, σ[x ↦ v]>
    #   «3», a:«3»   |
    # «3 + a», a:«3» | <y, σ> → <y', σ'> : <x + y, σ> → <x + y', σ'>
    #   «a», a:«3»   | <x, σ> → <σ(x), σ> if x ∈ dom(σ)
    #   «3», a:«3»   |
    # «3 + 3», a:«3» | <x + y, σ> → <z, σ> if z is the sum of x and y
    # «6», a:«3»     |

Notation:
    <e, σ>        - a program: expression e in environment σ
    σ(x)          - the value of x in σ
    σ[x ↦ v]      - σ with x bound to v
    x ∈ dom(σ)    - x is bound in σ
    A : B         - if A reduces as shown, then so does B

Semantics:
    default         - writes reduce to their value, left-to-right
    null-write      - writes reduce to ∅
    read-default    - unbound variables read as 0
    env-preserving  - Add drops environment changes made by its operands
    right-to-left   - Add reduces its right operand first
    additions       - only literal additions
"""

__version__ = "0.1.0"
__author__ = "spinoza"

# Terms and state
from .terms import (
    TermKind,
    Term,
    Number,
    Null,
    Add,
    ReadVariable,
    WriteVariable,
    Sequence,
    quote,
    to_data,
    is_value,
)
from .environment import Environment, EMPTY
from .program import Program, Reduction
from .errors import (
    EvaluationError,
    UndefinedVariable,
    NoApplicableRule,
    TypeMismatch,
)

# Rules and semantics
from .rules import (
    Rule,
    TerminalRule,
    ReduceChild,
    ReduceChildWithEnv,
    AddValues,
    ReadFromEnv,
    WriteToEnv,
    WritePolicy,
    SelectChild,
    ReduceConstant,
    IDENTITY,
    format_rule,
    format_rule_vertical,
)
from .semantics import (
    Semantics,
    build_semantics,
    DEFAULT_SEMANTICS,
    NULL_WRITE_SEMANTICS,
    READ_DEFAULT_SEMANTICS,
    ENV_PRESERVING_SEMANTICS,
    RIGHT_TO_LEFT_SEMANTICS,
    ADDITIONS_SEMANTICS,
    BUILTIN_SEMANTICS,
)

# Evaluation
from .engine import (
    Evaluator,
    Evaluation,
    Trace,
    TraceRow,
    step,
    evaluate,
    flatten,
    format_rows,
)

# Demonstration programs
from .programs import EXAMPLES, Example

# Public API
__all__ = [
    # Version
    "__version__",
    # Terms
    "TermKind",
    "Term",
    "Number",
    "Null",
    "Add",
    "ReadVariable",
    "WriteVariable",
    "Sequence",
    "quote",
    "to_data",
    "is_value",
    # State
    "Environment",
    "EMPTY",
    "Program",
    "Reduction",
    # Errors
    "EvaluationError",
    "UndefinedVariable",
    "NoApplicableRule",
    "TypeMismatch",
    # Rules
    "Rule",
    "TerminalRule",
    "ReduceChild",
    "ReduceChildWithEnv",
    "AddValues",
    "ReadFromEnv",
    "WriteToEnv",
    "WritePolicy",
    "SelectChild",
    "ReduceConstant",
    "IDENTITY",
    "format_rule",
    "format_rule_vertical",
    # Semantics
    "Semantics",
    "build_semantics",
    "DEFAULT_SEMANTICS",
    "NULL_WRITE_SEMANTICS",
    "READ_DEFAULT_SEMANTICS",
    "ENV_PRESERVING_SEMANTICS",
    "RIGHT_TO_LEFT_SEMANTICS",
    "ADDITIONS_SEMANTICS",
    "BUILTIN_SEMANTICS",
    # Evaluation
    "Evaluator",
    "Evaluation",
    "Trace",
    "TraceRow",
    "step",
    "evaluate",
    "flatten",
    "format_rows",
    # Examples
    "EXAMPLES",
    "Example",
]
