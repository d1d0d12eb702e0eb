"""Tests for the Raven CLI, config, and error rendering."""

from __future__ import annotations

import typing

import click
import pytest
from click.testing import CliRunner

from raven import __version__
from raven.checker import Checker
from raven.cli import main
from raven.config import RavenConfig, config_for, find_config, load_config
from raven.errors import (
    Diagnostic,
    DiagnosticRenderer,
    ErrorKind,
    LexError,
    RavenRuntimeError,
    TypeCheckError,
)
from raven.interpreter import Interpreter
from raven.parser import Parser
from raven.source import SourceFile, Span


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_project(tmp_path):
    """Create a minimal raven project in a temp dir."""
    toml = tmp_path / "raven.toml"
    toml.write_text(
        '[package]\nname = "testproj"\nversion = "1.0.0"\n'
        '[modules]\nlib_dir = "vendor"\n'
        "[diagnostics]\ncolor = false\n"
    )
    (tmp_path / "main.rv").write_text('let x: int = 2 + 3 * 4;\nprint("x = {}", x);\n')
    return tmp_path


def write(tmp_path, source: str, name: str = "prog.rv") -> str:
    path = tmp_path / name
    path.write_text(source)
    return str(path)


# --- CLI tests ---


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Raven" in result.output
        for command in ("run", "check", "view", "tokens", "repl"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_run(self, runner, tmp_project):
        result = runner.invoke(main, ["run", str(tmp_project / "main.rv")])
        assert result.exit_code == 0
        assert result.output == "x = 14\n"

    def test_program_output_goes_through_click(self, runner, tmp_project, monkeypatch):
        echoed = []
        original = click.echo

        def record(message=None, *args, **kwargs):
            echoed.append(message)
            return original(message, *args, **kwargs)

        monkeypatch.setattr(click, "echo", record)
        result = runner.invoke(main, ["run", str(tmp_project / "main.rv")])
        assert result.exit_code == 0
        assert "x = 14\n" in echoed

    def test_input_prompt_shares_output(self, runner, tmp_path):
        path = write(tmp_path, 'let name: String = input("name? "); print("hi {}", name);')
        result = runner.invoke(main, ["run", path], input="Ada\n")
        assert result.exit_code == 0
        assert result.output == "name? hi Ada\n"

    def test_run_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["run", str(tmp_path / "nope.rv")])
        assert result.exit_code != 0

    def test_run_check_flag(self, runner, tmp_project):
        result = runner.invoke(main, ["run", "--check", str(tmp_project / "main.rv")])
        assert result.exit_code == 0
        assert result.output == "checked main.rv: no errors\n"

    def test_check_command(self, runner, tmp_project):
        result = runner.invoke(main, ["check", str(tmp_project / "main.rv")])
        assert result.exit_code == 0
        assert "no errors" in result.output

    def test_check_reports_type_error(self, runner, tmp_path):
        path = write(tmp_path, "let x: int = 1;\nlet y: bool = x;\n")
        result = runner.invoke(main, ["check", "--no-color", path])
        assert result.exit_code == 1
        assert "error[type]: Type mismatch in declaration of 'y'" in result.output
        assert "prog.rv:2:15" in result.output

    def test_type_error_stops_before_running(self, runner, tmp_path):
        path = write(tmp_path, 'print("started");\nlet x: int = "s";\n')
        result = runner.invoke(main, ["run", "--no-color", path])
        assert result.exit_code == 1
        assert "started" not in result.output

    def test_runtime_error(self, runner, tmp_path):
        path = write(tmp_path, 'print("before");\nlet z: int = 1 / 0;\nprint("after");\n')
        result = runner.invoke(main, ["run", "--no-color", path])
        assert result.exit_code == 1
        assert "before" in result.output
        assert "after" not in result.output
        assert "error[runtime]: Division by zero" in result.output
        assert " 2 | let z: int = 1 / 0;" in result.output

    def test_parse_error_has_hint(self, runner, tmp_path):
        path = write(tmp_path, "let x: int = 5\nprint(x);\n")
        result = runner.invoke(main, ["run", "--no-color", path])
        assert result.exit_code == 1
        assert "error[parse]: Expected ';' after variable declaration" in result.output
        assert "= help: Add ';' at the end of the statement" in result.output

    def test_lex_error(self, runner, tmp_path):
        path = write(tmp_path, "let x: int = 1 @ 2;\n")
        result = runner.invoke(main, ["run", "--no-color", path])
        assert result.exit_code == 1
        assert "error[lex]: Illegal character '@'" in result.output

    def test_color_output(self, runner, tmp_path):
        path = write(tmp_path, "let z: int = 1 / 0;\n")
        result = runner.invoke(main, ["run", path])
        assert result.exit_code == 1
        assert "\033[" in result.output

    def test_no_color_flag(self, runner, tmp_path):
        path = write(tmp_path, "let z: int = 1 / 0;\n")
        result = runner.invoke(main, ["run", "--no-color", path])
        assert "\033[" not in result.output

    def test_color_disabled_in_config(self, runner, tmp_project):
        path = write(tmp_project, "let z: int = 1 / 0;\n")
        result = runner.invoke(main, ["run", path])
        assert result.exit_code == 1
        assert "\033[" not in result.output

    def test_config_disables_type_check(self, runner, tmp_path):
        (tmp_path / "raven.toml").write_text("[run]\ntype_check = false\n")
        path = write(tmp_path, 'let x: int = "loose";\nprint(x);\n')
        result = runner.invoke(main, ["run", path])
        assert result.exit_code == 0
        assert result.output == "loose\n"

    def test_config_lib_dir_used_for_imports(self, runner, tmp_project):
        vendor = tmp_project / "vendor"
        vendor.mkdir()
        (vendor / "greet.rv").write_text('fun hi() -> String { return "hi"; }\n')
        path = write(tmp_project, "import greet;\nprint(greet.hi());\n")
        result = runner.invoke(main, ["run", path])
        assert result.exit_code == 0
        assert result.output == "hi\n"

    def test_show_ast(self, runner, tmp_project):
        result = runner.invoke(main, ["run", "--show-ast", str(tmp_project / "main.rv")])
        assert result.exit_code == 0
        assert result.output.startswith("Block\n")
        assert "VarDecl" in result.output
        assert result.output.endswith("x = 14\n")

    def test_view(self, runner, tmp_path):
        path = write(tmp_path, "struct P { x: int }\nlet p: P = P { x: 1 };\n")
        result = runner.invoke(main, ["view", path])
        assert result.exit_code == 0
        assert "StructDecl" in result.output
        assert "StructInit" in result.output
        assert "type_ref: P" in result.output
        assert "x:" in result.output

    def test_view_parse_error(self, runner, tmp_path):
        path = write(tmp_path, "let = 1;\n")
        result = runner.invoke(main, ["view", path])
        assert result.exit_code == 1
        assert "Expected identifier after 'let'" in result.output

    def test_tokens(self, runner, tmp_path):
        path = write(tmp_path, "let x = 1;")
        result = runner.invoke(main, ["tokens", path])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "1:1\tLET\t'let'"
        assert lines[1] == "1:5\tIDENTIFIER\t'x'"
        assert lines[-1].split("\t")[1] == "EOF"

    def test_verbose(self, runner, tmp_project):
        result = runner.invoke(main, ["--verbose", "run", str(tmp_project / "main.rv")])
        assert result.exit_code == 0
        assert "x = 14" in result.output


class TestRepl:
    @pytest.fixture(autouse=True)
    def in_tmp(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

    def repl(self, runner, lines: list[str]):
        return runner.invoke(main, ["repl", "--no-color"], input="\n".join(lines) + "\n")

    def test_banner_and_exit(self, runner):
        result = self.repl(runner, ["exit"])
        assert result.exit_code == 0
        assert f"Raven {__version__} REPL" in result.output
        assert "Goodbye!" in result.output

    def test_state_persists(self, runner):
        result = self.repl(runner, ["let x: int = 2 + 3;", "x * 2;", "quit"])
        assert "10" in result.output.splitlines()

    def test_functions_persist(self, runner):
        result = self.repl(runner, [
            "fun sq(n: int) -> int { return n * n; }",
            "sq(7);",
            "exit",
        ])
        assert "49" in result.output

    def test_error_does_not_reset_state(self, runner):
        result = self.repl(runner, [
            'let name: String = "ada";',
            "let bad: int = name;",
            'name + "!";',
            "exit",
        ])
        assert "error[type]" in result.output
        assert "ada!" in result.output

    def test_print_in_repl(self, runner):
        result = self.repl(runner, ['print("{}-{}", 1, 2);', "exit"])
        assert "1-2" in result.output

    def test_void_results_not_echoed(self, runner):
        result = self.repl(runner, ["let x: int = 1;", "exit"])
        assert "void" not in result.output

    def test_help(self, runner):
        result = self.repl(runner, ["help", "exit"])
        assert "Available commands" in result.output

    def test_clear(self, runner):
        result = self.repl(runner, ["let x: int = 1;", "clear", "x;", "exit"])
        assert "Interpreter state cleared" in result.output
        assert "Undefined variable 'x'" in result.output

    def test_end_of_input_exits(self, runner):
        result = runner.invoke(main, ["repl"], input="let x: int = 1;\n")
        assert result.exit_code == 0


# --- Config tests ---


class TestConfig:
    def test_load_config(self, tmp_project):
        config = load_config(tmp_project / "raven.toml")
        assert config.package.name == "testproj"
        assert config.package.version == "1.0.0"
        assert config.modules.lib_dir == "vendor"
        assert config.modules.extension == ".rv"
        assert config.diagnostics.color is False
        assert config.run.type_check is True
        assert config.root == tmp_project

    def test_load_config_defaults(self, tmp_path):
        toml = tmp_path / "raven.toml"
        toml.write_text("[package]\n")
        config = load_config(toml)
        assert config.package.name == "untitled"
        assert config.modules.lib_dir == "lib"
        assert config.diagnostics.color is True

    def test_unknown_keys_ignored(self, tmp_path):
        toml = tmp_path / "raven.toml"
        toml.write_text('[package]\nname = "p"\nauthor = "someone"\n[extra]\nflag = true\n')
        assert load_config(toml).package.name == "p"

    def test_find_config(self, tmp_project):
        # find_config from a subdirectory should find raven.toml in parent
        sub = tmp_project / "src"
        sub.mkdir()
        found = find_config(sub)
        assert found == tmp_project.resolve() / "raven.toml"

    def test_find_config_from_file(self, tmp_project):
        assert find_config(tmp_project / "main.rv") == tmp_project.resolve() / "raven.toml"

    def test_find_config_not_found(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(FileNotFoundError, match="No raven.toml found"):
            find_config(empty)

    def test_config_for_defaults(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert config_for(empty) == RavenConfig()


# --- Error rendering tests ---


SOURCE = "let x: int = true;\n"


class TestDiagnostics:
    def test_render_full_shape(self):
        diag = Diagnostic(
            kind=ErrorKind.TYPE,
            message="Type mismatch",
            span=Span(0, 13, 13, 4),
            source=SOURCE,
            filename="main.rv",
            hint="Use a bool variable",
        )
        output = DiagnosticRenderer(color=False).render(diag)
        assert output == (
            "error[type]: Type mismatch\n"
            "  --> main.rv:1:14\n"
            "    |\n"
            " 1 | let x: int = true;\n"
            "    |              ^^^^\n"
            "   = help: Use a bool variable"
        )

    def test_render_without_source_or_hint(self):
        diag = Diagnostic(ErrorKind.RUNTIME, "Division by zero", Span(4, 2, 40, 5))
        output = DiagnosticRenderer(color=False).render(diag)
        assert output == "error[runtime]: Division by zero\n  --> <stdin>:5:3"

    def test_render_with_color(self):
        diag = Diagnostic(ErrorKind.PARSE, "oops", Span(0, 0, 0, 1), source="x")
        output = DiagnosticRenderer(color=True).render(diag)
        assert "\033[1;31m" in output
        assert "oops" in output

    def test_carets_clip_to_line(self):
        diag = Diagnostic(ErrorKind.PARSE, "long", Span(0, 1, 1, 100), source="abc\ndef")
        lines = DiagnosticRenderer(color=False).render(diag).splitlines()
        assert lines[-1] == "    |  ^^"

    def test_caret_past_end_of_line(self):
        source = "let x: int = 1\nprint(x);"
        diag = Diagnostic(ErrorKind.PARSE, "Expected ';'", Span(0, 14, 14, 1), source=source)
        lines = DiagnosticRenderer(color=False).render(diag).splitlines()
        assert lines[3] == " 1 | let x: int = 1"
        assert lines[4] == "    | " + " " * 14 + "^"

    def test_wide_line_numbers(self):
        source = "\n" * 11 + "bad"
        diag = Diagnostic(ErrorKind.PARSE, "e", Span(11, 0, 11, 3), source=source)
        lines = DiagnosticRenderer(color=False).render(diag).splitlines()
        assert lines[2] == "     |"
        assert lines[3] == " 12 | bad"
        assert lines[4] == "     | ^^^"

    def test_error_kinds(self):
        assert LexError("m").diagnostic.kind == ErrorKind.LEX
        assert TypeCheckError("m").diagnostic.kind == ErrorKind.TYPE
        assert RavenRuntimeError("m").render().startswith("error[runtime]: m")

    def test_attach_fills_only_missing(self):
        err = TypeCheckError("m", Span(0, 0, 0, 1), filename="a.rv")
        err.attach("source", "b.rv")
        assert err.diagnostic.filename == "a.rv"
        assert err.diagnostic.source == "source"

    def test_error_str_is_message(self):
        assert str(RavenRuntimeError("Division by zero")) == "Division by zero"

    @pytest.mark.parametrize("stage", [Parser, Checker, Interpreter])
    def test_error_helpers_never_return(self, stage):
        assert typing.get_type_hints(stage._error)["return"] is typing.NoReturn


# --- Source tests ---


class TestSource:
    def test_source_file(self, tmp_path):
        f = tmp_path / "test.rv"
        f.write_text("line one\nline two\nline three\n")
        sf = SourceFile.read(f)
        assert sf.path == f
        assert sf.line_at(0) == "line one"
        assert sf.line_at(2) == "line three"
        assert sf.line_at(-1) == ""
        assert sf.line_at(99) == ""

    def test_span_text(self):
        sf = SourceFile("hello world\nagain")
        assert sf.span_text(Span(0, 6, 6, 5)) == "world"
        assert sf.span_text(Span(0, 6, 6, 12)).splitlines() == ["world", "again"]

    def test_has_line(self):
        sf = SourceFile("one\ntwo")
        assert sf.has_line(1)
        assert not sf.has_line(2)
        assert not sf.has_line(-1)
        assert sf.path is None

    def test_span_str(self):
        assert str(Span(9, 4, 120, 3)) == "10:5"

    def test_span_merge(self):
        a = Span(0, 2, 2, 3)
        b = Span(1, 0, 10, 4)
        assert a.merge(b) == Span(0, 2, 2, 12)
        assert b.merge(a) == Span(0, 2, 2, 12)

    def test_dummy_span(self):
        assert Span.dummy() == Span(0, 0, 0, 0)
        assert Span.dummy().end == 0
