"""
Rewrite rules for smallstep.

A rule is one case of the small-step semantics, bound to exactly one term
variant. It supplies:

    applies(term, environment)       - may this rule fire?
    apply(term, environment, step)   - (Program, [child Reduction, ...])

plus three notation fragments used only for display:

    antecedent  - premise above the line, e.g. <x, σ> → <x', σ'>
    transition  - the rewrite itself, e.g. <x + y, σ> → <x' + y, σ'>
    clause      - side condition, e.g. if z is the sum of x and y

Two shapes recur across variants:

    ReduceChild(n) / ReduceChildWithEnv(n)
        Take one step on the child at position n and rebuild the parent
        around the result. The WithEnv form carries the child's resulting
        environment up to the parent; the plain form keeps the parent's.

    TerminalRule
        A direct transform of the term and environment with no recursion:
        AddValues, ReadFromEnv, WriteToEnv, SelectChild, ReduceConstant.

Notation is rendered by format_rule():
    "<transition> <clause>"                  when antecedent is empty
    "<antecedent> : <transition> <clause>"   otherwise
"""

from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Type

from .environment import Environment
from .errors import TypeMismatch
from .program import Program, Reduction
from .terms import Null, Number, Term


# Single-step callable handed to rules that recurse into sub-terms
StepFunc = Callable[[Program], Reduction]
RuleResult = Tuple[Program, List[Reduction]]


class WritePolicy(Enum):
    """What a variable write reduces to."""

    VALUE = "value"  # the written value, so writes nest inside expressions
    NULL = "null"    # the ∅ marker


class Rule:
    """Base class for rules bound to one term variant."""

    name = "rule"
    is_identity = False

    def __init__(self, term_type: Optional[Type[Term]]):
        self.term_type = term_type

    @property
    def kind(self):
        """TermKind of the variant this rule belongs to."""
        return self.term_type.kind if self.term_type is not None else None

    def applies(self, term: Term, environment: Environment) -> bool:
        return True

    def apply(self, term: Term, environment: Environment, step: StepFunc) -> RuleResult:
        raise NotImplementedError

    # Notation fragments
    @property
    def antecedent(self) -> str:
        return ""

    @property
    def transition(self) -> str:
        return ""

    @property
    def clause(self) -> str:
        return ""

    def _params(self) -> Tuple:
        return ()

    def _key(self) -> Tuple:
        return (type(self), self.term_type) + self._params()

    def __eq__(self, other):
        if isinstance(other, Rule):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self):
        return hash(self._key())

    def __str__(self) -> str:
        return format_rule(self)

    def __repr__(self) -> str:
        args = [self.term_type.__name__ if self.term_type else "None"]
        args += [repr(p) for p in self._params()]
        return f"{type(self).__name__}({', '.join(args)})"


def _prime(label: str) -> str:
    return f"{label}'"


# ============================================================
# Structural rules
# ============================================================

class ReduceChild(Rule):
    """
    Reduce the child at position n by one step, keeping the parent's
    environment. Any environment change made by the child is dropped.
    """

    def __init__(self, term_type: Type[Term], n: int):
        super().__init__(term_type)
        if n not in term_type.child_positions:
            raise ValueError(f"{term_type.__name__} has no child at position {n}")
        self.n = n

    @property
    def name(self) -> str:
        return f"reduce-arg[{self.n}]"

    def _params(self) -> Tuple:
        return (self.n,)

    def applies(self, term: Term, environment: Environment) -> bool:
        child = term[self.n]
        return isinstance(child, Term) and child.reducible

    def _child_step(self, term: Term, environment: Environment,
                    step: StepFunc) -> Tuple[Term, Reduction]:
        sub = step(Program(term[self.n], environment))
        children = term.children()
        children[term.child_positions.index(self.n)] = sub.after.term
        return term.rebuild(children), sub

    def apply(self, term: Term, environment: Environment, step: StepFunc) -> RuleResult:
        rebuilt, sub = self._child_step(term, environment, step)
        return Program(rebuilt, environment), [sub]

    def _primed_prototype(self) -> Term:
        labels = [
            _prime(label) if i == self.n else label
            for i, label in enumerate(self.term_type.labels)
        ]
        return self.term_type(*labels)

    @property
    def antecedent(self) -> str:
        label = self.term_type.labels[self.n]
        return f"<{label}, σ> → <{_prime(label)}, σ>"

    @property
    def transition(self) -> str:
        return f"<{self.term_type.prototype()}, σ> → <{self._primed_prototype()}, σ>"


class ReduceChildWithEnv(ReduceChild):
    """
    Reduce the child at position n by one step and let the environment it
    produced become the parent's environment, so side effects of reducing
    one operand are visible to the next.
    """

    @property
    def name(self) -> str:
        return f"reduce-arg-env[{self.n}]"

    def apply(self, term: Term, environment: Environment, step: StepFunc) -> RuleResult:
        rebuilt, sub = self._child_step(term, environment, step)
        return Program(rebuilt, sub.after.environment), [sub]

    @property
    def antecedent(self) -> str:
        label = self.term_type.labels[self.n]
        return f"<{label}, σ> → <{_prime(label)}, σ'>"

    @property
    def transition(self) -> str:
        return f"<{self.term_type.prototype()}, σ> → <{self._primed_prototype()}, σ'>"


# ============================================================
# Terminal rules
# ============================================================

class TerminalRule(Rule):
    """A rule that rewrites in one step without touching sub-terms."""

    def transform(self, term: Term, environment: Environment) -> Program:
        raise NotImplementedError

    def apply(self, term: Term, environment: Environment, step: StepFunc) -> RuleResult:
        return self.transform(term, environment), []


class AddValues(TerminalRule):
    """Sum two numeric literals once both operands are values."""

    name = "add-values"

    def applies(self, term: Term, environment: Environment) -> bool:
        return all(isinstance(c, Term) and not c.reducible for c in term.children())

    def transform(self, term: Term, environment: Environment) -> Program:
        left, right = term.children()
        for operand in (left, right):
            if not isinstance(operand, Number):
                raise TypeMismatch(term, "a number", operand, environment=environment)
            value = operand.value
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeMismatch(term, "an integer literal", operand, environment=environment)
        return Program(Number(left.value + right.value), environment)

    @property
    def transition(self) -> str:
        return f"<{self.term_type.prototype()}, σ> → <z, σ>"

    @property
    def clause(self) -> str:
        x, y = self.term_type.labels
        return f"if z is the sum of {x} and {y}"


class ReadFromEnv(TerminalRule):
    """
    Replace a variable with the term bound to it.

    Unguarded, the rule always applies and a missing name raises
    UndefinedVariable. Guarded, it applies only when the name is bound,
    leaving later rules in the list to handle unbound names.
    """

    name = "read-env"

    def __init__(self, term_type: Type[Term], guarded: bool = False):
        super().__init__(term_type)
        self.guarded = guarded

    def _params(self) -> Tuple:
        return (self.guarded,)

    def applies(self, term: Term, environment: Environment) -> bool:
        return not self.guarded or term.name in environment

    def transform(self, term: Term, environment: Environment) -> Program:
        return Program(environment.lookup(term.name), environment)

    @property
    def antecedent(self) -> str:
        if self.guarded:
            return f"{self.term_type.labels[0]} ∈ dom(σ)"
        return ""

    @property
    def transition(self) -> str:
        proto = self.term_type.prototype()
        return f"<{proto}, σ> → <σ({proto}), σ>"

    @property
    def clause(self) -> str:
        if self.guarded:
            return ""
        return f"if {self.term_type.labels[0]} ∈ dom(σ)"


class WriteToEnv(TerminalRule):
    """Bind the written value and reduce to it (or to ∅ under WritePolicy.NULL)."""

    name = "write-env"

    def __init__(self, term_type: Type[Term], yields: WritePolicy = WritePolicy.VALUE):
        super().__init__(term_type)
        self.yields = WritePolicy(yields)

    def _params(self) -> Tuple:
        return (self.yields,)

    def transform(self, term: Term, environment: Environment) -> Program:
        result = term.value if self.yields is WritePolicy.VALUE else Null()
        return Program(result, environment.bind(term.name, term.value))

    @property
    def transition(self) -> str:
        x, v = self.term_type.labels
        result = v if self.yields is WritePolicy.VALUE else Null()
        return f"<{self.term_type.prototype()}, σ> → <{result}, σ[{x} ↦ {v}]>"


class SelectChild(TerminalRule):
    """Discard the term and continue with its child at position n."""

    def __init__(self, term_type: Type[Term], n: int):
        super().__init__(term_type)
        if n not in term_type.child_positions:
            raise ValueError(f"{term_type.__name__} has no child at position {n}")
        self.n = n

    @property
    def name(self) -> str:
        return f"select-arg[{self.n}]"

    def _params(self) -> Tuple:
        return (self.n,)

    def transform(self, term: Term, environment: Environment) -> Program:
        return Program(term[self.n], environment)

    @property
    def transition(self) -> str:
        return f"<{self.term_type.prototype()}, σ> → <{self.term_type.labels[self.n]}, σ>"


class ReduceConstant(TerminalRule):
    """Reduce to a fixed term, e.g. a default value for unbound variables."""

    name = "reduce-constant"

    def __init__(self, term_type: Type[Term], constant: Term):
        super().__init__(term_type)
        self.constant = constant

    def _params(self) -> Tuple:
        return (self.constant,)

    def transform(self, term: Term, environment: Environment) -> Program:
        return Program(self.constant, environment)

    @property
    def transition(self) -> str:
        return f"<{self.term_type.prototype()}, σ> → <{self.constant}, σ>"


class _Identity(Rule):
    """Implicit rule for irreducible terms: the program maps to itself."""

    name = "identity"
    is_identity = True

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        super().__init__(None)

    def applies(self, term: Any, environment: Environment) -> bool:
        return not (isinstance(term, Term) and term.reducible)

    def apply(self, term: Any, environment: Environment, step: StepFunc) -> RuleResult:
        return Program(term, environment), []

    def __repr__(self) -> str:
        return "IDENTITY"


# Singleton instance
IDENTITY = _Identity()


# ============================================================
# Notation
# ============================================================

def format_rule(rule: Rule) -> str:
    """
    Render a rule on one line.

    Examples:
        <x + y, σ> → <z, σ> if z is the sum of x and y
        <x, σ> → <x', σ'> : <x + y, σ> → <x' + y, σ'>
    """
    if not rule.antecedent:
        return f"{rule.transition} {rule.clause}"
    return f"{rule.antecedent} : {rule.transition} {rule.clause}"


def format_rule_vertical(rule: Rule) -> str:
    """
    Render a rule with the premise above a bar and the side clause beside it:

        <x, σ> → <x', σ>
        ――――――――――――――――――――――――
        <x + y, σ> → <x' + y, σ>
    """
    bar = "―" * len(rule.transition) + " " + rule.clause
    return "\n".join([rule.antecedent, bar, rule.transition])
