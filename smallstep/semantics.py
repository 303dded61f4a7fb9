"""
Rule tables and dispatch for smallstep.

A Semantics is an immutable registration table from TermKind to the
ordered list of rules for that variant. Dispatch scans the list in order
and picks the first rule that applies; there is no backtracking, so the
order of the list is part of the language being defined.

For multi-child variants the child rules come first, lowest position
first, then the terminal rule. That fixes left-to-right evaluation of
Add: the left operand is reduced fully before the right is attempted.

Examples:
    from smallstep import DEFAULT_SEMANTICS, EMPTY, Add, Number

    rule = DEFAULT_SEMANTICS.dispatch(Add(Number(1), Number(2)), EMPTY)
    rule.name                     # => "add-values"

    # Custom tables are built the same way as the built-in ones
    lazy = DEFAULT_SEMANTICS.with_rules(
        TermKind.READ, [ReadFromEnv(ReadVariable, guarded=True),
                        ReduceConstant(ReadVariable, Number(0))])
"""

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .environment import Environment
from .errors import NoApplicableRule
from .rules import (
    IDENTITY, AddValues, ReadFromEnv, ReduceChild, ReduceChildWithEnv,
    ReduceConstant, Rule, SelectChild, WritePolicy, WriteToEnv,
    format_rule, format_rule_vertical,
)
from .terms import Add, Number, ReadVariable, Sequence, Term, TermKind, WriteVariable

RuleTable = Mapping[TermKind, Iterable[Rule]]


class Semantics:
    """
    Ordered rule lists keyed by term variant.

    Args:
        table: Mapping of TermKind to the rules for that variant, in
            dispatch order.
        name: Optional label shown in listings.

    Raises:
        ValueError: If a rule list is empty or holds a rule bound to a
            different variant.
    """

    def __init__(self, table: Optional[RuleTable] = None, name: Optional[str] = None):
        rules: Dict[TermKind, Tuple[Rule, ...]] = {}
        for kind, kind_rules in (table or {}).items():
            kind = TermKind(kind)
            kind_rules = tuple(kind_rules)
            if not kind_rules:
                raise ValueError(f"Empty rule list for {kind.value}")
            for rule in kind_rules:
                if rule.kind is not kind:
                    raise ValueError(
                        f"Rule {rule!r} belongs to {rule.kind.value if rule.kind else None}, "
                        f"not {kind.value}"
                    )
            rules[kind] = kind_rules
        self._rules = rules
        self.name = name

    def rules_for(self, kind: TermKind) -> Tuple[Rule, ...]:
        """Rules registered for a variant (empty if none)."""
        return self._rules.get(TermKind(kind), ())

    def dispatch(self, term: Term, environment: Environment) -> Rule:
        """
        Select the rule for a term.

        Irreducible terms always get the identity rule. Otherwise the first
        applicable rule in the variant's list is returned.

        Raises:
            NoApplicableRule: If no registered rule applies.
        """
        if not (isinstance(term, Term) and term.reducible):
            return IDENTITY
        for rule in self._rules.get(term.kind, ()):
            if rule.applies(term, environment):
                return rule
        raise NoApplicableRule(term, environment)

    def with_rules(self, kind: TermKind, rules: Iterable[Rule],
                   name: Optional[str] = None) -> 'Semantics':
        """Return a copy with the rule list for one variant replaced."""
        table = dict(self._rules)
        table[TermKind(kind)] = tuple(rules)
        return Semantics(table, name=name)

    def __or__(self, other: 'Semantics') -> 'Semantics':
        """Combine tables: variants defined on the right replace the left."""
        table = dict(self._rules)
        table.update(other._rules)
        return Semantics(table)

    def kinds(self) -> List[TermKind]:
        return list(self._rules)

    def __iter__(self) -> Iterator[Tuple[TermKind, Tuple[Rule, ...]]]:
        """Iterate over (kind, rules) pairs in registration order."""
        return iter(self._rules.items())

    def __contains__(self, kind: TermKind) -> bool:
        return kind in self._rules

    def __len__(self) -> int:
        """Total number of rules."""
        return sum(len(r) for r in self._rules.values())

    def __eq__(self, other):
        if isinstance(other, Semantics):
            return self._rules == other._rules
        return NotImplemented

    def __hash__(self):
        return hash(tuple(self._rules.items()))

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"Semantics({label}{len(self)} rules)"

    def list_rules(self, vertical: bool = False) -> List[str]:
        """Render every rule in dispatch order."""
        render = format_rule_vertical if vertical else format_rule
        return [render(rule) for rules in self._rules.values() for rule in rules]

    def to_dict(self) -> Dict:
        """Export the table with each rule's notation fragments."""
        result = {
            kind.value: [
                {
                    "name": rule.name,
                    "antecedent": rule.antecedent,
                    "transition": rule.transition,
                    "clause": rule.clause,
                }
                for rule in rules
            ]
            for kind, rules in self._rules.items()
        }
        return {"name": self.name, "rules": result}


# ============================================================
# Built-in semantics
# ============================================================

def build_semantics(
    write_policy: WritePolicy = WritePolicy.VALUE,
    default_read: Optional[Term] = None,
    left_to_right: bool = True,
    propagate_environment: bool = True,
    name: Optional[str] = None,
) -> Semantics:
    """
    Build the rule table for the demonstrated language.

    Args:
        write_policy: What a write reduces to (the value, or ∅).
        default_read: If given, unbound variables read as this term
            instead of raising UndefinedVariable.
        left_to_right: Reduce Add's left operand before its right one.
        propagate_environment: Let environment changes made while reducing
            an operand reach the enclosing term. When False, Add drops them.
        name: Label for listings.
    """
    reduce_add = ReduceChildWithEnv if propagate_environment else ReduceChild
    positions = Add.child_positions if left_to_right else tuple(reversed(Add.child_positions))

    if default_read is None:
        read_rules = [ReadFromEnv(ReadVariable)]
    else:
        read_rules = [
            ReadFromEnv(ReadVariable, guarded=True),
            ReduceConstant(ReadVariable, default_read),
        ]

    return Semantics({
        TermKind.ADD: [reduce_add(Add, n) for n in positions] + [AddValues(Add)],
        TermKind.READ: read_rules,
        TermKind.WRITE: [WriteToEnv(WriteVariable, write_policy)],
        TermKind.SEQUENCE: [ReduceChildWithEnv(Sequence, 0), SelectChild(Sequence, 1)],
    }, name=name)


# Writes reduce to the written value, environments flow left to right
DEFAULT_SEMANTICS = build_semantics(name="default")

# Writes reduce to ∅, so they cannot be used inside an addition
NULL_WRITE_SEMANTICS = build_semantics(write_policy=WritePolicy.NULL, name="null-write")

# Unbound variables read as 0
READ_DEFAULT_SEMANTICS = build_semantics(default_read=Number(0), name="read-default")

# Add reduces operands without keeping their environment changes
ENV_PRESERVING_SEMANTICS = build_semantics(propagate_environment=False, name="env-preserving")

# Add reduces its right operand first
RIGHT_TO_LEFT_SEMANTICS = build_semantics(left_to_right=False, name="right-to-left")

# Only literal additions; nested expressions have no rule
ADDITIONS_SEMANTICS = Semantics({TermKind.ADD: [AddValues(Add)]}, name="additions")

BUILTIN_SEMANTICS: Dict[str, Semantics] = {
    s.name: s for s in (
        DEFAULT_SEMANTICS,
        NULL_WRITE_SEMANTICS,
        READ_DEFAULT_SEMANTICS,
        ENV_PRESERVING_SEMANTICS,
        RIGHT_TO_LEFT_SEMANTICS,
        ADDITIONS_SEMANTICS,
    )
}
