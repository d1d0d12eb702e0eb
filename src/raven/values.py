"""Runtime values for the Raven interpreter.

Values are immutable. Arrays and structs are value types: "mutating" one
builds a new value, which the interpreter writes back through a ``Place``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace


class Value:
    """A runtime value with a display form and a type name."""

    def type_name(self) -> str:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError

    def nested_string(self) -> str:
        """Display form when shown inside an array or struct."""
        return self.to_string()


@dataclass(frozen=True)
class IntValue(Value):
    value: int

    def type_name(self) -> str:
        return "int"

    def to_string(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FloatValue(Value):
    value: float

    def type_name(self) -> str:
        return "float"

    def to_string(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class BoolValue(Value):
    value: bool

    def type_name(self) -> str:
        return "bool"

    def to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class StringValue(Value):
    value: str

    def type_name(self) -> str:
        return "String"

    def to_string(self) -> str:
        return self.value

    def nested_string(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class ArrayValue(Value):
    elements: tuple[Value, ...]
    # Name of the element type, when known; empty arrays carry it from context
    element_type: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.element_type is None and self.elements:
            object.__setattr__(self, "element_type", self.elements[0].type_name())

    def type_name(self) -> str:
        return f"{self.element_type or 'any'}[]"

    def to_string(self) -> str:
        inner = ", ".join(v.nested_string() for v in self.elements)
        return f"[{inner}]"

    def __len__(self) -> int:
        return len(self.elements)

    def with_element(self, index: int, value: Value) -> ArrayValue:
        elements = list(self.elements)
        elements[index] = value
        return replace(self, elements=tuple(elements))

    def pushed(self, value: Value) -> ArrayValue:
        return ArrayValue(self.elements + (value,), self.element_type or value.type_name())

    def popped(self) -> tuple[ArrayValue, Value]:
        return replace(self, elements=self.elements[:-1]), self.elements[-1]


@dataclass(frozen=True)
class StructValue(Value):
    name: str
    fields: tuple[tuple[str, Value], ...]

    def type_name(self) -> str:
        return self.name

    def to_string(self) -> str:
        inner = ", ".join(f"{k}: {v.nested_string()}" for k, v in self.fields)
        return f"{self.name} {{ {inner} }}"

    def get(self, name: str) -> Value | None:
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def with_field(self, name: str, value: Value) -> StructValue:
        fields = tuple((k, value if k == name else v) for k, v in self.fields)
        return replace(self, fields=fields)


@dataclass(frozen=True)
class EnumValue(Value):
    enum: str
    variant: str

    def type_name(self) -> str:
        return self.enum

    def to_string(self) -> str:
        return f"{self.enum}::{self.variant}"


@dataclass(frozen=True)
class ModuleValue(Value):
    """A module bound by a plain import. ``path`` keys the loaded module."""

    name: str
    path: str

    def type_name(self) -> str:
        return "module"

    def to_string(self) -> str:
        return f"<module {self.name}>"


@dataclass(frozen=True)
class VoidValue(Value):
    def type_name(self) -> str:
        return "void"

    def to_string(self) -> str:
        return "void"


VOID = VoidValue()
TRUE = BoolValue(True)
FALSE = BoolValue(False)


def from_bool(flag: bool) -> BoolValue:
    return TRUE if flag else FALSE


# Integers are 64-bit signed
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
