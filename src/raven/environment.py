"""Variable frames and addressable places for the Raven interpreter."""

from __future__ import annotations

from dataclasses import dataclass

from raven.errors import RavenRuntimeError
from raven.source import Span
from raven.values import ArrayValue, StructValue, Value


class Environment:
    """One frame of variable bindings. Lookups fall back to the parent frame.

    Writes always land in this frame, so a function frame can shadow a
    global but never changes the binding the caller sees.
    """

    def __init__(self, parent: Environment | None = None, name: str = "") -> None:
        self.parent = parent
        self.name = name
        self._values: dict[str, Value] = {}

    def define(self, name: str, value: Value) -> None:
        self._values[name] = value

    def lookup(self, name: str) -> Value | None:
        value = self._values.get(name)
        if value is not None:
            return value
        if self.parent is not None:
            return self.parent.lookup(name)
        return None

    def assign(self, name: str, value: Value) -> bool:
        """Rebind a visible name in this frame. False when the name is unknown."""
        if self.lookup(name) is None:
            return False
        self._values[name] = value
        return True


# ── Places ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class FieldStep:
    name: str

    def get(self, container: Value, span: Span) -> Value:
        if not isinstance(container, StructValue):
            raise RavenRuntimeError(
                f"Cannot access field '{self.name}' on {container.type_name()}", span,
            )
        value = container.get(self.name)
        if value is None:
            raise RavenRuntimeError(
                f"Struct '{container.name}' has no field '{self.name}'", span,
            )
        return value

    def set(self, container: Value, value: Value, span: Span) -> Value:
        self.get(container, span)
        return container.with_field(self.name, value)


@dataclass(frozen=True)
class IndexStep:
    index: int

    def get(self, container: Value, span: Span) -> Value:
        if not isinstance(container, ArrayValue):
            raise RavenRuntimeError(
                f"Cannot assign through an index of {container.type_name()}", span,
                hint="Only array elements can be assigned",
            )
        if not 0 <= self.index < len(container):
            raise RavenRuntimeError(
                f"Index {self.index} out of bounds for array of length {len(container)}",
                span,
            )
        return container.elements[self.index]

    def set(self, container: Value, value: Value, span: Span) -> Value:
        self.get(container, span)
        return container.with_element(self.index, value)


@dataclass(frozen=True)
class Place:
    """An addressable location: a variable, optionally followed by field and
    index steps (``p.pos.x``, ``grid[1][2]``)."""

    root: str
    steps: tuple[FieldStep | IndexStep, ...]
    span: Span

    def then(self, step: FieldStep | IndexStep, span: Span) -> Place:
        return Place(self.root, self.steps + (step,), span)

    def read(self, env: Environment) -> Value:
        value = env.lookup(self.root)
        if value is None:
            raise RavenRuntimeError(f"Undefined variable '{self.root}'", self.span)
        for step in self.steps:
            value = step.get(value, self.span)
        return value

    def write(self, env: Environment, value: Value) -> None:
        current = env.lookup(self.root)
        if current is None:
            raise RavenRuntimeError(
                f"Undefined variable '{self.root}'", self.span,
                hint=f"Declare it first with 'let {self.root} = ...;'",
            )
        env.assign(self.root, self._rebuild(current, self.steps, value))

    def _rebuild(self, current: Value, steps: tuple[FieldStep | IndexStep, ...], value: Value) -> Value:
        if not steps:
            return value
        step, rest = steps[0], steps[1:]
        child = step.get(current, self.span)
        return step.set(current, self._rebuild(child, rest, value), self.span)
