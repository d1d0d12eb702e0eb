"""AST node definitions for the Raven language.

Nodes are frozen dataclasses. The tree is built once by the parser and then
only read, by the type checker and by the interpreter.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from raven.source import Span

# ── Operators ────────────────────────────────────────────────────


class BinaryOp(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    GREATER = ">"
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    AND = "&&"
    OR = "||"

    @property
    def precedence(self) -> int:
        return PRECEDENCE[self]


class UnaryOp(Enum):
    NEGATE = "-"
    NOT = "!"


PRECEDENCE: dict[BinaryOp, int] = {
    BinaryOp.OR: 1,
    BinaryOp.AND: 2,
    BinaryOp.EQUAL: 3,
    BinaryOp.NOT_EQUAL: 3,
    BinaryOp.LESS: 4,
    BinaryOp.GREATER: 4,
    BinaryOp.LESS_EQUAL: 4,
    BinaryOp.GREATER_EQUAL: 4,
    BinaryOp.ADD: 5,
    BinaryOp.SUBTRACT: 5,
    BinaryOp.MULTIPLY: 6,
    BinaryOp.DIVIDE: 6,
    BinaryOp.MODULO: 6,
}

ARITHMETIC_OPS = frozenset({
    BinaryOp.ADD, BinaryOp.SUBTRACT, BinaryOp.MULTIPLY,
    BinaryOp.DIVIDE, BinaryOp.MODULO,
})
EQUALITY_OPS = frozenset({BinaryOp.EQUAL, BinaryOp.NOT_EQUAL})
RELATIONAL_OPS = frozenset({
    BinaryOp.LESS, BinaryOp.GREATER, BinaryOp.LESS_EQUAL, BinaryOp.GREATER_EQUAL,
})
LOGICAL_OPS = frozenset({BinaryOp.AND, BinaryOp.OR})


# ── Type annotations ─────────────────────────────────────────────


@dataclass(frozen=True)
class TypeRef:
    """A written type: ``int``, ``String[]``, ``Point``."""

    name: str
    is_array: bool
    span: Span

    def __str__(self) -> str:
        return f"{self.name}[]" if self.is_array else self.name


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class IntegerLit:
    value: int
    span: Span


@dataclass(frozen=True)
class FloatLit:
    value: float
    span: Span


@dataclass(frozen=True)
class BooleanLit:
    value: bool
    span: Span


@dataclass(frozen=True)
class StringLit:
    value: str
    span: Span


@dataclass(frozen=True)
class Identifier:
    name: str
    span: Span


@dataclass(frozen=True)
class UnaryExpr:
    op: UnaryOp
    operand: Expr
    span: Span


@dataclass(frozen=True)
class BinaryExpr:
    left: Expr
    op: BinaryOp
    right: Expr
    span: Span


@dataclass(frozen=True)
class CallExpr:
    name: str
    args: list[Expr]
    span: Span


@dataclass(frozen=True)
class ArrayLiteral:
    elements: list[Expr]
    span: Span


@dataclass(frozen=True)
class IndexExpr:
    target: Expr
    index: Expr
    span: Span


@dataclass(frozen=True)
class MethodCallExpr:
    receiver: Expr
    method: str
    args: list[Expr]
    span: Span


@dataclass(frozen=True)
class FieldAccess:
    obj: Expr
    field: str
    span: Span


@dataclass(frozen=True)
class StructInit:
    name: str
    fields: list[tuple[str, Expr]]
    span: Span


@dataclass(frozen=True)
class EnumVariant:
    enum: str
    variant: str
    span: Span


Expr = Union[
    IntegerLit, FloatLit, BooleanLit, StringLit, Identifier,
    UnaryExpr, BinaryExpr, CallExpr, ArrayLiteral, IndexExpr,
    MethodCallExpr, FieldAccess, StructInit, EnumVariant,
]

# Expressions that may appear on the left of '=' or as a persistent receiver
ASSIGNABLE = (Identifier, FieldAccess, IndexExpr)


# ── Auxiliary declarations ───────────────────────────────────────


@dataclass(frozen=True)
class Param:
    name: str
    type_ref: TypeRef
    span: Span


@dataclass(frozen=True)
class FieldDecl:
    name: str
    type_ref: TypeRef
    span: Span


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Block:
    statements: list[Stmt]
    span: Span


@dataclass(frozen=True)
class VarDecl:
    name: str
    type_ref: TypeRef | None  # None for untyped ``let x = ...``
    value: Expr
    span: Span


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    return_type: TypeRef
    params: list[Param]
    body: Block
    span: Span


@dataclass(frozen=True)
class StructDecl:
    name: str
    fields: list[FieldDecl]
    span: Span


@dataclass(frozen=True)
class EnumDecl:
    name: str
    variants: list[str]
    span: Span


@dataclass(frozen=True)
class ForLoop:
    init: VarDecl
    condition: Expr
    increment: Assignment
    body: Block
    span: Span


@dataclass(frozen=True)
class WhileLoop:
    condition: Expr
    body: Block
    span: Span


@dataclass(frozen=True)
class Assignment:
    target: Expr
    value: Expr
    span: Span


@dataclass(frozen=True)
class IfStmt:
    condition: Expr
    then_block: Block
    else_if: IfStmt | None
    else_block: Block | None
    span: Span


@dataclass(frozen=True)
class PrintStmt:
    args: list[Expr]
    span: Span


@dataclass(frozen=True)
class CallStmt:
    """A function or method call evaluated for its effect."""

    call: CallExpr | MethodCallExpr
    span: Span


@dataclass(frozen=True)
class ExprStmt:
    expr: Expr
    span: Span


@dataclass(frozen=True)
class ReturnStmt:
    value: Expr | None
    span: Span


@dataclass(frozen=True)
class ImportStmt:
    path: str
    alias: str | None
    span: Span


@dataclass(frozen=True)
class ImportSelective:
    path: str
    names: list[str]
    span: Span


@dataclass(frozen=True)
class ExportStmt:
    stmt: Stmt
    span: Span


Stmt = Union[
    Block, VarDecl, FunctionDecl, StructDecl, EnumDecl, ForLoop, WhileLoop,
    Assignment, IfStmt, PrintStmt, CallStmt, ExprStmt, ReturnStmt,
    ImportStmt, ImportSelective, ExportStmt,
]

Node = Union[Stmt, Expr]


def declared_name(stmt: Stmt) -> str | None:
    """Name bound by a top-level declaration, if any."""
    if isinstance(stmt, (VarDecl, FunctionDecl, StructDecl, EnumDecl)):
        return stmt.name
    if isinstance(stmt, ExportStmt):
        return declared_name(stmt.stmt)
    return None
