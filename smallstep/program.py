"""
Machine state and step records for smallstep.

A Program pairs a term with the environment it runs in. A Reduction
records one rewrite: the program before, the program after, the rule that
fired, and any single steps taken on sub-terms while applying it. Nested
reductions form the proof tree shown by trace listings.
"""

from typing import Any, Dict, Optional, Tuple

from .environment import EMPTY, Environment
from .terms import quote, to_data


class Program:
    """Immutable (term, environment) pair."""

    __slots__ = ("term", "environment")

    def __init__(self, term: Any, environment: Optional[Environment] = None):
        object.__setattr__(self, "term", term)
        object.__setattr__(self, "environment", Environment.of(environment))

    def __setattr__(self, name, value):
        raise AttributeError("Program is immutable")

    def __eq__(self, other):
        if isinstance(other, Program):
            return self.term == other.term and self.environment == other.environment
        return NotImplemented

    def __hash__(self):
        return hash((self.term, self.environment))

    def __iter__(self):
        """Unpack as (term, environment)."""
        return iter((self.term, self.environment))

    def __str__(self) -> str:
        """Show as «a = 3», a:«3» (term, then each binding)."""
        text = quote(self.term)
        if self.environment:
            text += f", {self.environment}"
        return text

    def __repr__(self) -> str:
        return f"Program({self.term!r}, {self.environment!r})"

    def to_dict(self) -> Dict:
        return {
            "term": to_data(self.term),
            "environment": {name: to_data(t) for name, t in self.environment.items()},
        }


class Reduction:
    """
    Record of one applied rule.

    Attributes:
        before: Program the rule was applied to
        after: Program it produced
        rule: The rule that fired
        children: Single steps of sub-terms taken while applying the rule
    """

    __slots__ = ("before", "after", "rule", "children")

    def __init__(self, before: Program, after: Program, rule: Any,
                 children: Tuple['Reduction', ...] = ()):
        object.__setattr__(self, "before", before)
        object.__setattr__(self, "after", after)
        object.__setattr__(self, "rule", rule)
        object.__setattr__(self, "children", tuple(children))

    def __setattr__(self, name, value):
        raise AttributeError("Reduction is immutable")

    @property
    def is_terminal(self) -> bool:
        """True for the identity step that marks a normal form."""
        return getattr(self.rule, "is_identity", False)

    def __eq__(self, other):
        if isinstance(other, Reduction):
            return (self.before == other.before and self.after == other.after
                    and self.rule == other.rule and self.children == other.children)
        return NotImplemented

    def __hash__(self):
        return hash((self.before, self.after, self.rule, self.children))

    def __repr__(self) -> str:
        return f"{self.rule.name}: {self.before} → {self.after}"

    def to_dict(self) -> Dict:
        """Convert to a dictionary for serialization."""
        return {
            "rule": self.rule.name,
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }
