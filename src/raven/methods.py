"""The closed set of methods callable on arrays and strings."""

from __future__ import annotations

from enum import Enum


class Method(Enum):
    PUSH = "push"
    POP = "pop"
    SLICE = "slice"
    JOIN = "join"
    SPLIT = "split"
    REPLACE = "replace"

    @classmethod
    def from_name(cls, name: str) -> Method | None:
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def mutates(self) -> bool:
        """Whether the method writes its result back to a place receiver."""
        return self in (Method.PUSH, Method.POP)


ARRAY_METHODS = frozenset({Method.PUSH, Method.POP, Method.SLICE, Method.JOIN})
STRING_METHODS = frozenset({Method.SLICE, Method.SPLIT, Method.REPLACE})

# Arity of each method, excluding the receiver
ARITY: dict[Method, int] = {
    Method.PUSH: 1,
    Method.POP: 0,
    Method.SLICE: 2,
    Method.JOIN: 1,
    Method.SPLIT: 1,
    Method.REPLACE: 2,
}
