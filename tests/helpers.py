"""Shared test helpers for the Raven test suite."""

from __future__ import annotations

import io

import pytest

from raven.ast_nodes import Block
from raven.checker import Checker
from raven.errors import ParseError, RavenRuntimeError, TypeCheckError
from raven.interpreter import Interpreter
from raven.lexer import Lexer
from raven.parser import Parser
from raven.types import Type
from raven.values import Value


def parse(source: str) -> Block:
    """Parse source, returning the top-level block."""
    return Parser(Lexer(source, "<test>")).parse()


def parse_fails(source: str, fragment: str = "") -> ParseError:
    """Parse source, asserting a parse error whose message contains ``fragment``."""
    with pytest.raises(ParseError) as info:
        parse(source)
    assert fragment in info.value.message, info.value.message
    return info.value


def check(source: str) -> Type:
    """Parse and check source, asserting no errors. Returns the program type."""
    return Checker(filename="<test>", source=source).check(parse(source))


def check_fails(source: str, fragment: str = "") -> TypeCheckError:
    """Parse and check source, asserting a type error containing ``fragment``."""
    with pytest.raises(TypeCheckError) as info:
        check(source)
    assert fragment in info.value.message, info.value.message
    return info.value


def run(source: str, stdin: str = "", *, type_check: bool = True) -> tuple[Interpreter, str]:
    """Check and run source. Returns the interpreter and everything printed."""
    program = parse(source)
    if type_check:
        Checker(filename="<test>", source=source).check(program)
    out = io.StringIO()
    interp = Interpreter(
        filename="<test>", source=source, stdin=io.StringIO(stdin), stdout=out,
    )
    interp.run(program)
    return interp, out.getvalue()


def output(source: str, stdin: str = "") -> str:
    """Check and run source, returning what it printed."""
    return run(source, stdin)[1]


def run_fails(source: str, fragment: str = "", *, type_check: bool = True) -> RavenRuntimeError:
    """Check and run source, asserting a runtime error containing ``fragment``."""
    with pytest.raises(RavenRuntimeError) as info:
        run(source, type_check=type_check)
    assert fragment in info.value.message, info.value.message
    return info.value


def var(interp: Interpreter, name: str) -> Value:
    """Global variable of a finished run."""
    value = interp.globals.lookup(name)
    assert value is not None, f"no variable {name!r}"
    return value
