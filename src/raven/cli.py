"""Raven interpreter CLI."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

import click

from raven import __version__
from raven.ast_nodes import TypeRef
from raven.config import RavenConfig, config_for
from raven.errors import RavenError
from raven.pipeline import Session, lex_source, parse_source
from raven.source import SourceFile
from raven.values import VoidValue

_REPL_HELP = """\
Available commands:
  exit/quit - Exit the REPL
  help      - Show this help
  clear     - Clear the interpreter state
  Any valid Raven statement, e.g. let x: int = 2 + 3;"""


class _EchoStream:
    """Write-only stream that sends program output through ``click.echo``."""

    def write(self, text: str) -> int:
        click.echo(text, nl=False)
        return len(text)

    def flush(self) -> None:
        pass


def _report(err: RavenError, *, color: bool) -> None:
    click.echo(err.render(color=color), err=True)


def _read_source(file: str) -> str:
    return SourceFile.read(Path(file)).content


@click.group()
@click.version_option(__version__, prog_name="raven")
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline and module loading steps.")
def main(verbose: bool) -> None:
    """The Raven programming language interpreter."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _run_file(file: str, *, check_only: bool, show_ast: bool, no_color: bool) -> None:
    path = Path(file)
    config = config_for(path)
    color = config.diagnostics.color and not no_color
    source = _read_source(file)
    session = Session(
        str(path), base_dir=path.resolve().parent, config=config, stdout=_EchoStream(),
    )

    try:
        program = session.parse(source)
        if show_ast:
            _dump_ast(program, 0)
        if check_only or config.run.type_check:
            session.check(source, program)
        if check_only:
            click.echo(f"checked {path.name}: no errors")
            return
        session.interpreter.source = source
        session.interpreter.run(program)
    except RavenError as e:
        _report(e, color=color)
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--check", "check_only", is_flag=True, help="Only check syntax and types.")
@click.option("--show-ast", is_flag=True, help="Print the syntax tree before running.")
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")
def run(file: str, check_only: bool, show_ast: bool, no_color: bool) -> None:
    """Check and run a Raven source file."""
    _run_file(file, check_only=check_only, show_ast=show_ast, no_color=no_color)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")
def check(file: str, no_color: bool) -> None:
    """Type-check a Raven source file without running it."""
    _run_file(file, check_only=True, show_ast=False, no_color=no_color)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """View the AST of a Raven source file."""
    try:
        program = parse_source(_read_source(file), str(file))
    except RavenError as e:
        _report(e, color=config_for(Path(file)).diagnostics.color)
        raise SystemExit(1)

    _dump_ast(program, 0)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def tokens(file: str) -> None:
    """List the tokens of a Raven source file."""
    for tok in lex_source(_read_source(file), str(file)):
        click.echo(f"{tok.span}\t{tok.kind.name}\t{tok.value!r}")


@main.command()
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")
def repl(no_color: bool) -> None:
    """Start an interactive Raven session."""
    config = config_for()
    color = config.diagnostics.color and not no_color
    session = _new_session(config)

    click.echo(f"Raven {__version__} REPL")
    click.echo("Type 'exit' or 'quit' to exit, 'help' for help")

    while True:
        try:
            line = click.prompt("raven>", default="", show_default=False, prompt_suffix=" ")
        except click.Abort:
            click.echo()
            break

        line = line.strip()
        if line in ("exit", "quit"):
            click.echo("Goodbye!")
            break
        if line == "help":
            click.echo(_REPL_HELP)
            continue
        if line == "clear":
            session = _new_session(config)
            click.echo("Interpreter state cleared")
            continue
        if not line:
            continue

        try:
            value = session.feed(line)
        except RavenError as e:
            _report(e, color=color)
            continue
        if not isinstance(value, VoidValue):
            click.echo(value.to_string())


def _new_session(config: RavenConfig) -> Session:
    return Session("<repl>", base_dir=Path.cwd(), config=config, stdout=_EchoStream())


def _dump_ast(node: object, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__"):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        click.echo(f"{indent}{name}")
        for field_name in fields:
            if field_name == "span":
                continue
            value = getattr(node, field_name)
            if isinstance(value, list):
                if value:
                    click.echo(f"{indent}  {field_name}:")
                    for item in value:
                        _dump_ast(item, depth + 2)
                else:
                    click.echo(f"{indent}  {field_name}: []")
            elif isinstance(value, TypeRef):
                click.echo(f"{indent}  {field_name}: {value}")
            elif hasattr(value, "__dataclass_fields__"):
                click.echo(f"{indent}  {field_name}:")
                _dump_ast(value, depth + 2)
            elif isinstance(value, Enum):
                click.echo(f"{indent}  {field_name}: {value.value}")
            elif value is not None:
                click.echo(f"{indent}  {field_name}: {value!r}")
    elif isinstance(node, tuple):
        # struct literal field: (name, expr)
        label, value = node
        click.echo(f"{indent}{label}:")
        _dump_ast(value, depth + 1)
    else:
        click.echo(f"{indent}{name}: {node!r}")
