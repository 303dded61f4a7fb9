"""
Environments for smallstep.

An Environment maps variable names to terms. It is immutable: bind()
returns a new environment and leaves the receiver alone, so any rule
still holding the old environment keeps seeing the old bindings.

Bindings live in an immutables.Map (a hash array mapped trie), so bind()
copies only the path to the changed entry and shares the rest with the
environment it came from. Rebinding a name replaces its entry instead of
stacking a new one.

Examples:
    env = Environment(a=Number(4))
    env.lookup("a")           # => Number(4)
    env2 = env.bind("b", Number(2))
    "b" in env                # => False
    env2 == {"a": Number(4), "b": Number(2)}   # => True
    env.lookup("z")           # raises UndefinedVariable("z")
"""

from collections.abc import Mapping
from typing import Any, Iterator, Optional

from immutables import Map

from .errors import UndefinedVariable
from .terms import quote


class Environment(Mapping):
    """Immutable name -> term mapping with functional update."""

    __slots__ = ("_map", "_order")

    def __init__(self, bindings: Optional[Mapping] = None, **kwargs):
        """Initialize from an optional mapping and/or keyword bindings."""
        layer = dict(bindings or {})
        layer.update(kwargs)
        object.__setattr__(self, "_map", Map(layer))
        # Position of each name's first binding, for display
        object.__setattr__(self, "_order", Map({name: i for i, name in enumerate(layer)}))

    @classmethod
    def _from_maps(cls, bindings: Map, order: Map) -> 'Environment':
        env = cls.__new__(cls)
        object.__setattr__(env, "_map", bindings)
        object.__setattr__(env, "_order", order)
        return env

    @classmethod
    def of(cls, bindings: Optional[Mapping] = None) -> 'Environment':
        """Coerce a mapping (or None) to an Environment."""
        if isinstance(bindings, Environment):
            return bindings
        if not bindings:
            return EMPTY
        return cls(bindings)

    def __setattr__(self, name, value):
        raise AttributeError("Environment is immutable; use bind()")

    def lookup(self, name: str) -> Any:
        """Return the term bound to name, or raise UndefinedVariable."""
        try:
            return self._map[name]
        except KeyError:
            raise UndefinedVariable(name, environment=self) from None

    def bind(self, name: str, term: Any) -> 'Environment':
        """Return a new environment where name maps to term."""
        order = self._order
        if name not in order:
            order = order.set(name, len(order))
        return self._from_maps(self._map.set(name, term), order)

    def __getitem__(self, name: str) -> Any:
        return self._map[name]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._map, key=self._order.__getitem__))

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, name: object) -> bool:
        return name in self._map

    def to_dict(self) -> dict:
        """Convert to a plain dictionary."""
        return dict(self.items())

    def __eq__(self, other):
        if isinstance(other, Environment):
            return self._map == other._map
        if isinstance(other, Mapping):
            return dict(self._map.items()) == dict(other.items())
        return NotImplemented

    def __hash__(self):
        return hash(self._map)

    def __str__(self) -> str:
        return ", ".join(f"{name}:{quote(term)}" for name, term in self.items())

    def __repr__(self) -> str:
        return f"Environment({self.to_dict()!r})"


# Shared empty environment
EMPTY = Environment()
