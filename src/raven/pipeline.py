"""Glue between the stages: lex, parse, check and run source text."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

from raven.ast_nodes import Block
from raven.checker import Checker
from raven.config import RavenConfig
from raven.errors import RavenError, RavenRuntimeError, TypeCheckError
from raven.interpreter import Interpreter
from raven.lexer import Lexer
from raven.modules import ModuleGraph
from raven.parser import Parser
from raven.tokens import Token
from raven.types import Type
from raven.values import Value

log = logging.getLogger(__name__)


def lex_source(source: str, filename: str = "<stdin>") -> list[Token]:
    return Lexer(source, filename).lex()


def parse_source(source: str, filename: str = "<stdin>") -> Block:
    log.debug("parsing %s", filename)
    return Parser(Lexer(source, filename)).parse()


def _module_graph(error: type[RavenError], config: RavenConfig, base_dir: Path) -> ModuleGraph:
    return ModuleGraph(
        error,
        lib_dir=config.modules.lib_dir,
        extension=config.modules.extension,
        root=config.root or base_dir,
    )


def check_source(
    source: str,
    filename: str = "<stdin>",
    *,
    base_dir: Path | None = None,
    config: RavenConfig | None = None,
) -> Type:
    """Parse and type-check ``source``; returns the program's type."""
    config = config or RavenConfig()
    base_dir = base_dir or Path.cwd()
    program = parse_source(source, filename)
    log.debug("checking %s", filename)
    checker = Checker(
        filename=filename,
        source=source,
        base_dir=base_dir,
        modules=_module_graph(TypeCheckError, config, base_dir),
    )
    return checker.check(program)


class Session:
    """A checker and interpreter that keep their state across ``feed`` calls.

    Backs both whole-file runs (one ``feed``) and the REPL (one per line).
    """

    def __init__(
        self,
        filename: str = "<stdin>",
        *,
        base_dir: Path | None = None,
        config: RavenConfig | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.filename = filename
        self.config = config or RavenConfig()
        base_dir = base_dir or Path.cwd()
        self.type_check = self.config.run.type_check
        self.checker = Checker(
            filename=filename,
            base_dir=base_dir,
            modules=_module_graph(TypeCheckError, self.config, base_dir),
        )
        self.interpreter = Interpreter(
            filename=filename,
            base_dir=base_dir,
            modules=_module_graph(RavenRuntimeError, self.config, base_dir),
            stdin=stdin,
            stdout=stdout,
        )

    def parse(self, source: str) -> Block:
        return parse_source(source, self.filename)

    def check(self, source: str, program: Block | None = None) -> Type:
        if program is None:
            program = self.parse(source)
        log.debug("checking %s", self.filename)
        self.checker.source = source
        return self.checker.check(program)

    def feed(self, source: str) -> Value:
        """Parse, check (unless disabled) and run ``source``."""
        program = self.parse(source)
        if self.type_check:
            self.check(source, program)
        log.debug("running %s", self.filename)
        self.interpreter.source = source
        return self.interpreter.run(program)


def run_source(
    source: str,
    filename: str = "<stdin>",
    *,
    base_dir: Path | None = None,
    config: RavenConfig | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> Interpreter:
    """Run a whole program and return the interpreter for inspection."""
    session = Session(
        filename, base_dir=base_dir, config=config, stdin=stdin, stdout=stdout,
    )
    session.feed(source)
    return session.interpreter
