"""Builtin functions: signatures for the checker, implementations for the
interpreter, and the ``{}`` placeholder formatting shared by ``print`` and
``format``."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from raven.errors import RavenRuntimeError
from raven.source import Span
from raven.types import ANY, BOOL, INT, STRING, VOID, Type
from raven.values import (
    ArrayValue,
    EnumValue,
    IntValue,
    StringValue,
    Value,
    VOID as VOID_VALUE,
    from_bool,
)

if TYPE_CHECKING:
    from raven.interpreter import Interpreter

PLACEHOLDER = "{}"


@dataclass(frozen=True)
class BuiltinSignature:
    name: str
    param_types: tuple[Type, ...]
    return_type: Type
    required: int | None = None  # fewer than len(param_types) when trailing params are optional
    variadic: bool = False  # any number of extra arguments of any type

    @property
    def min_args(self) -> int:
        return len(self.param_types) if self.required is None else self.required

    @property
    def max_args(self) -> int | None:
        return None if self.variadic else len(self.param_types)

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    def arity_text(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"


# ``len`` and ``enum_from_string`` get extra rules in the checker
SIGNATURES: dict[str, BuiltinSignature] = {
    "len": BuiltinSignature("len", (ANY,), INT),
    "type": BuiltinSignature("type", (ANY,), STRING),
    "input": BuiltinSignature("input", (STRING,), STRING, required=0),
    "read_file": BuiltinSignature("read_file", (STRING,), STRING),
    "write_file": BuiltinSignature("write_file", (STRING, ANY), VOID),
    "append_file": BuiltinSignature("append_file", (STRING, ANY), VOID),
    "file_exists": BuiltinSignature("file_exists", (STRING,), BOOL),
    "format": BuiltinSignature("format", (STRING,), STRING, variadic=True),
    "enum_from_string": BuiltinSignature("enum_from_string", (STRING, STRING), ANY),
}


# ── Formatting ──────────────────────────────────────────────────


def expand_newlines(text: str) -> str:
    """Turn the two characters ``\\n`` into a real newline."""
    return text.replace("\\n", "\n")


def count_placeholders(template: str) -> int:
    return template.count(PLACEHOLDER)


def substitute(template: str, args: list[Value], span: Span, what: str) -> str:
    """Replace each ``{}`` in order with the display form of the next argument."""
    expected = count_placeholders(template)
    if expected != len(args):
        raise RavenRuntimeError(
            f"{what}: format string has {expected} placeholder(s) "
            f"but {len(args)} argument(s) were given",
            span,
            hint="Use one '{}' per argument",
        )
    parts = template.split(PLACEHOLDER)
    out = [parts[0]]
    for arg, part in zip(args, parts[1:]):
        out.append(arg.to_string())
        out.append(part)
    return "".join(out)


def print_text(args: list[Value], span: Span) -> str:
    """Text written by ``print(args...)``, without the trailing newline."""
    if not args:
        return ""
    if len(args) == 1:
        return expand_newlines(args[0].to_string())
    template = args[0]
    if not isinstance(template, StringValue):
        raise RavenRuntimeError(
            f"print: the first of several arguments must be a String, got {template.type_name()}",
            span,
        )
    return expand_newlines(substitute(template.value, args[1:], span, "print"))


# ── Implementations ─────────────────────────────────────────────


def _string_arg(value: Value, name: str, span: Span) -> str:
    if not isinstance(value, StringValue):
        raise RavenRuntimeError(f"{name}() expects a String, got {value.type_name()}", span)
    return value.value


def _len(interp: Interpreter, args: list[Value], span: Span) -> Value:
    target = args[0]
    if isinstance(target, StringValue):
        return IntValue(len(target.value))
    if isinstance(target, ArrayValue):
        return IntValue(len(target))
    raise RavenRuntimeError(f"len() expects an array or String, got {target.type_name()}", span)


def _type(interp: Interpreter, args: list[Value], span: Span) -> Value:
    return StringValue(args[0].type_name())


def _input(interp: Interpreter, args: list[Value], span: Span) -> Value:
    if args:
        interp.stdout.write(_string_arg(args[0], "input", span))
        interp.stdout.flush()
    line = interp.stdin.readline()
    return StringValue(line.removesuffix("\n").removesuffix("\r"))


def _read_file(interp: Interpreter, args: list[Value], span: Span) -> Value:
    path = _string_arg(args[0], "read_file", span)
    try:
        return StringValue(Path(path).read_text(encoding="utf-8"))
    except OSError as err:
        raise RavenRuntimeError(f"Cannot read file '{path}': {err.strerror or err}", span) from err


def _write(path: str, content: Value, mode: str, span: Span) -> Value:
    try:
        with open(path, mode, encoding="utf-8") as f:
            f.write(expand_newlines(content.to_string()))
    except OSError as err:
        raise RavenRuntimeError(f"Cannot write file '{path}': {err.strerror or err}", span) from err
    return VOID_VALUE


def _write_file(interp: Interpreter, args: list[Value], span: Span) -> Value:
    return _write(_string_arg(args[0], "write_file", span), args[1], "w", span)


def _append_file(interp: Interpreter, args: list[Value], span: Span) -> Value:
    return _write(_string_arg(args[0], "append_file", span), args[1], "a", span)


def _file_exists(interp: Interpreter, args: list[Value], span: Span) -> Value:
    return from_bool(Path(_string_arg(args[0], "file_exists", span)).exists())


def _format(interp: Interpreter, args: list[Value], span: Span) -> Value:
    template = _string_arg(args[0], "format", span)
    return StringValue(expand_newlines(substitute(template, args[1:], span, "format")))


def _enum_from_string(interp: Interpreter, args: list[Value], span: Span) -> Value:
    enum = _string_arg(args[0], "enum_from_string", span)
    variant = _string_arg(args[1], "enum_from_string", span)
    variants = interp.enums.get(enum)
    if variants is None:
        raise RavenRuntimeError(f"Unknown enum '{enum}'", span)
    if variant not in variants:
        raise RavenRuntimeError(
            f"Enum '{enum}' has no variant '{variant}'", span,
            hint=f"Valid variants: {', '.join(variants)}",
        )
    return EnumValue(enum, variant)


Implementation = Callable[["Interpreter", list[Value], Span], Value]

IMPLEMENTATIONS: dict[str, Implementation] = {
    "len": _len,
    "type": _type,
    "input": _input,
    "read_file": _read_file,
    "write_file": _write_file,
    "append_file": _append_file,
    "file_exists": _file_exists,
    "format": _format,
    "enum_from_string": _enum_from_string,
}


def is_builtin(name: str) -> bool:
    return name in SIGNATURES


def call_builtin(interp: Interpreter, name: str, args: list[Value], span: Span) -> Value:
    sig = SIGNATURES[name]
    if not sig.accepts(len(args)):
        raise RavenRuntimeError(
            f"{name}() takes {sig.arity_text()} argument(s) but {len(args)} were given", span,
        )
    return IMPLEMENTATIONS[name](interp, args, span)
