"""Resolved type representations for the Raven type system.

These are distinct from AST ``TypeRef`` nodes (which are syntactic).
Resolved types are produced by the checker.
"""

from __future__ import annotations

from dataclasses import dataclass

# ── Resolved types ──────────────────────────────────────────────


@dataclass(frozen=True)
class PrimitiveType:
    name: str


@dataclass(frozen=True)
class VoidType:
    pass


@dataclass(frozen=True)
class ArrayType:
    element: Type


@dataclass(frozen=True)
class StructType:
    name: str


@dataclass(frozen=True)
class EnumType:
    name: str


@dataclass(frozen=True)
class ModuleType:
    name: str


@dataclass(frozen=True)
class AnyType:
    """Accepts every non-void type; only used in builtin signatures."""
    pass


Type = (
    PrimitiveType | VoidType | ArrayType | StructType
    | EnumType | ModuleType | AnyType
)


# ── Built-in type constants ─────────────────────────────────────

INT = PrimitiveType("int")
FLOAT = PrimitiveType("float")
BOOL = PrimitiveType("bool")
STRING = PrimitiveType("String")
VOID = VoidType()
ANY = AnyType()

PRIMITIVES: dict[str, Type] = {
    "int": INT,
    "float": FLOAT,
    "bool": BOOL,
    "String": STRING,
    "void": VOID,
}


# ── Type utilities ──────────────────────────────────────────────


def type_name(ty: Type) -> str:
    """Human-readable name, matching the runtime ``type()`` builtin."""
    if isinstance(ty, PrimitiveType):
        return ty.name
    if isinstance(ty, VoidType):
        return "void"
    if isinstance(ty, ArrayType):
        return f"{type_name(ty.element)}[]"
    if isinstance(ty, (StructType, EnumType)):
        return ty.name
    if isinstance(ty, ModuleType):
        return "module"
    if isinstance(ty, AnyType):
        return "any"
    return str(ty)


def is_numeric(ty: Type) -> bool:
    return ty == INT or ty == FLOAT


def numeric_widen(a: Type, b: Type) -> Type | None:
    """int op int is int, any float with a numeric partner is float."""
    if not (is_numeric(a) and is_numeric(b)):
        return None
    if a == FLOAT or b == FLOAT:
        return FLOAT
    return INT


def types_compatible(expected: Type, actual: Type) -> bool:
    """Strict equality, except that ``ANY`` matches every non-void type."""
    if isinstance(expected, AnyType):
        return not isinstance(actual, VoidType)
    return expected == actual
