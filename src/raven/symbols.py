"""Symbol table with lexical scoping for the Raven type checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from raven.source import Span
from raven.types import Type


class SymbolKind(Enum):
    VARIABLE = auto()
    PARAMETER = auto()
    MODULE = auto()


@dataclass
class Symbol:
    name: str
    kind: SymbolKind
    resolved_type: Type
    span: Span


@dataclass
class FunctionSignature:
    name: str
    param_names: list[str]
    param_types: list[Type]
    return_type: Type
    span: Span


@dataclass
class StructInfo:
    name: str
    fields: dict[str, Type] = field(default_factory=dict)
    span: Span = field(default_factory=Span.dummy)


@dataclass
class EnumInfo:
    name: str
    variants: list[str] = field(default_factory=list)
    span: Span = field(default_factory=Span.dummy)


class Scope:
    """A single lexical scope level."""

    def __init__(self, parent: Scope | None = None, name: str = "") -> None:
        self.parent = parent
        self.name = name
        self._symbols: dict[str, Symbol] = {}

    def define(self, symbol: Symbol) -> Symbol | None:
        """Define a symbol in this scope, replacing and returning any previous one."""
        existing = self._symbols.get(symbol.name)
        self._symbols[symbol.name] = symbol
        return existing

    def lookup(self, name: str) -> Symbol | None:
        """Look up a name in this scope and all parent scopes."""
        sym = self._symbols.get(name)
        if sym is not None:
            return sym
        if self.parent is not None:
            return self.parent.lookup(name)
        return None

    def lookup_local(self, name: str) -> Symbol | None:
        """Look up a name in this scope only (not parents)."""
        return self._symbols.get(name)


class SymbolTable:
    """Variables in a scope chain plus the function, struct and enum tables."""

    def __init__(self) -> None:
        self._scope_stack: list[Scope] = [Scope(name="module")]
        self.functions: dict[str, FunctionSignature] = {}
        self.structs: dict[str, StructInfo] = {}
        self.enums: dict[str, EnumInfo] = {}

    @property
    def current_scope(self) -> Scope:
        return self._scope_stack[-1]

    @property
    def module_scope(self) -> Scope:
        return self._scope_stack[0]

    def push_scope(self, name: str = "") -> None:
        # Function scopes see module globals, never the caller's locals
        self._scope_stack.append(Scope(parent=self.module_scope, name=name))

    def pop_scope(self) -> Scope:
        if len(self._scope_stack) <= 1:
            raise RuntimeError("cannot pop module scope")
        return self._scope_stack.pop()

    def define(self, symbol: Symbol) -> Symbol | None:
        """Define a symbol in the current scope. Returns the replaced one."""
        return self.current_scope.define(symbol)

    def lookup(self, name: str) -> Symbol | None:
        """Look up a name in the current scope chain."""
        return self.current_scope.lookup(name)

    def define_function(self, sig: FunctionSignature) -> None:
        self.functions[sig.name] = sig

    def resolve_function(self, name: str) -> FunctionSignature | None:
        return self.functions.get(name)

    def define_struct(self, info: StructInfo) -> None:
        self.structs[info.name] = info

    def define_enum(self, info: EnumInfo) -> None:
        self.enums[info.name] = info
