"""
Term model for smallstep.

A running program is a term paired with an environment. Terms come in a
closed set of variants, each tagged with a TermKind:

    Values (irreducible):
        Number(value)            - integer literal, shown as 3
        Null()                   - unit marker, shown as ∅

    Expressions (reducible):
        Add(left, right)         - shown as x + y
        ReadVariable(name)       - shown as x
        WriteVariable(name, value) - shown as x = v
        Sequence(first, second)  - shown as x; y

Whether a variant is reducible is fixed on the class, never per instance.
Each reducible variant lists the field positions holding sub-terms that
rules may reduce, and can rebuild itself from a new list of children, so
structural rules work for any variant without variant-specific code.

Examples:
    term = Add(Number(1), Add(Number(2), Number(3)))
    str(term)            # => "1 + (2 + 3)"
    quote(term)          # => "«1 + (2 + 3)»"
    term.children()      # => [Number(1), Add(Number(2), Number(3))]
    term.rebuild([Number(1), Number(5)])   # => Add(Number(1), Number(5))
    Add.prototype()      # => Add('x', 'y'), shown as "x + y"
"""

from enum import Enum
from typing import Any, List, Tuple


class TermKind(Enum):
    """Tag identifying a term variant."""

    NUMBER = "number"
    NULL = "null"
    ADD = "add"
    READ = "read"
    WRITE = "write"
    SEQUENCE = "sequence"


def _operand(x: Any) -> str:
    """Show an operand, parenthesised when it has more than one field."""
    if isinstance(x, Term) and len(x.fields) > 1:
        return f"({x})"
    return str(x)


class Term:
    """
    Base class for all term variants.

    Subclasses declare:
        kind            - their TermKind tag
        reducible       - False for values, True for expressions
        fields          - names of the positional fields
        child_positions - positions of fields holding reducible sub-terms
        labels          - meta-variable names used by rule notation

    Instances are immutable and compare structurally.
    """

    __slots__ = ()

    kind: TermKind
    reducible: bool = False
    fields: Tuple[str, ...] = ()
    child_positions: Tuple[int, ...] = ()
    labels: Tuple[str, ...] = ()

    def __init__(self, *args):
        if len(args) != len(self.fields):
            raise TypeError(
                f"{type(self).__name__} takes {len(self.fields)} "
                f"argument(s) ({len(args)} given)"
            )
        for name, value in zip(self.fields, args):
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def astuple(self) -> Tuple:
        """Return all field values in declaration order."""
        return tuple(getattr(self, name) for name in self.fields)

    def __getitem__(self, n: int) -> Any:
        """Positional field access: term[0]."""
        return getattr(self, self.fields[n])

    def children(self) -> List[Any]:
        """Return the sub-terms at this variant's child positions."""
        return [self[n] for n in self.child_positions]

    def rebuild(self, children: List[Any]) -> 'Term':
        """
        Rebuild this variant from a new list of children.

        The list lines up with child_positions; fields that are not
        children (such as a variable name) are carried over unchanged.
        """
        if len(children) != len(self.child_positions):
            raise ValueError(
                f"{type(self).__name__} has {len(self.child_positions)} "
                f"children, got {len(children)}"
            )
        args = list(self.astuple())
        for n, child in zip(self.child_positions, children):
            args[n] = child
        return type(self)(*args)

    @classmethod
    def prototype(cls) -> 'Term':
        """Meta-instance built from labels, e.g. Add.prototype() shows as x + y."""
        return cls(*cls.labels)

    def to_data(self) -> Any:
        """JSON-friendly nested list encoding."""
        raise NotImplementedError

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.astuple() == other.astuple()

    def __hash__(self):
        return hash((type(self).__name__, self.astuple()))

    def __repr__(self) -> str:
        args = ", ".join(repr(a) for a in self.astuple())
        return f"{type(self).__name__}({args})"


# ============================================================
# Values
# ============================================================

class Number(Term):
    """Integer literal."""

    __slots__ = ("value",)
    kind = TermKind.NUMBER
    fields = ("value",)
    labels = ("n",)

    def __str__(self) -> str:
        return str(self.value)

    def to_data(self) -> Any:
        return self.value


class Null(Term):
    """Unit marker, produced by writes under the null policy."""

    __slots__ = ()
    kind = TermKind.NULL

    def __str__(self) -> str:
        return "∅"

    def to_data(self) -> Any:
        return None


# ============================================================
# Expressions
# ============================================================

class Add(Term):
    __slots__ = ("left", "right")
    kind = TermKind.ADD
    reducible = True
    fields = ("left", "right")
    child_positions = (0, 1)
    labels = ("x", "y")

    def __str__(self) -> str:
        return " + ".join(_operand(x) for x in (self.left, self.right))

    def to_data(self) -> Any:
        return ["+", to_data(self.left), to_data(self.right)]


class ReadVariable(Term):
    __slots__ = ("name",)
    kind = TermKind.READ
    reducible = True
    fields = ("name",)
    labels = ("x",)

    def __str__(self) -> str:
        return str(self.name)

    def to_data(self) -> Any:
        return ["read", self.name]


class WriteVariable(Term):
    """
    Assignment of a term to a name.

    The value is stored as given; writing an unreduced expression stores
    the expression itself.
    """

    __slots__ = ("name", "value")
    kind = TermKind.WRITE
    reducible = True
    fields = ("name", "value")
    child_positions = (1,)
    labels = ("x", "v")

    def __str__(self) -> str:
        return f"{self.name} = {self.value}"

    def to_data(self) -> Any:
        return ["write", self.name, to_data(self.value)]


class Sequence(Term):
    __slots__ = ("first", "second")
    kind = TermKind.SEQUENCE
    reducible = True
    fields = ("first", "second")
    child_positions = (0, 1)
    labels = ("x", "y")

    def __str__(self) -> str:
        return f"{self.first}; {self.second}"

    def to_data(self) -> Any:
        return ["seq", to_data(self.first), to_data(self.second)]


def quote(term: Any) -> str:
    """Show a term in guillemets: quote(Number(3)) => "«3»"."""
    return f"«{term}»"


def to_data(term: Any) -> Any:
    """Encode a term (or a notation label) as nested lists."""
    if isinstance(term, Term):
        return term.to_data()
    return term


def is_value(term: Any) -> bool:
    """True for irreducible terms."""
    return isinstance(term, Term) and not term.reducible
