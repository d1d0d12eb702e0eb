"""Tests for imports, exports and module loading."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from raven.config import RavenConfig
from raven.errors import ParseError, RavenRuntimeError, TypeCheckError
from raven.modules import ModuleGraph, exported_names, module_stem
from raven.pipeline import Session, check_source, run_source
from raven.source import Span
from tests.helpers import parse

MATH = """\
export let PI: float = 3.14;
export fun square(x: int) -> int { return x * x; }
export struct Vec { x: int, y: int }
fun helper() -> int { return 1; }
let secret: int = 7;
"""

PLAIN = """\
let greeting: String = "hello";
fun shout(s: String) -> String { return s + "!"; }
"""


@pytest.fixture
def project(tmp_path):
    """A directory with a few modules next to each other and under lib/."""
    (tmp_path / "math.rv").write_text(MATH)
    (tmp_path / "plain.rv").write_text(PLAIN)
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "strings.rv").write_text('fun wrap(s: String) -> String { return "[" + s + "]"; }\n')
    return tmp_path


def run_in(directory: Path, source: str) -> str:
    """Check and run ``source`` as if it lived in ``directory``; returns output."""
    out = io.StringIO()
    run_source(source, str(directory / "main.rv"), base_dir=directory, stdout=out)
    return out.getvalue()


class TestImports:
    def test_plain_import_binds_stem(self, project):
        assert run_in(project, 'import "math.rv"; print(math.square(4));') == "16\n"

    def test_import_by_bare_name(self, project):
        assert run_in(project, "import math; print(math.PI);") == "3.14\n"

    def test_import_with_alias(self, project):
        assert run_in(project, 'import m from "math"; print(m.square(3));') == "9\n"

    def test_selective_import(self, project):
        assert run_in(project, 'import { square, PI } from "math"; print("{} {}", square(2), PI);') == "4 3.14\n"

    def test_structs_come_along(self, project):
        source = 'import { square } from "math"; let v: Vec = Vec { x: 1, y: 2 }; print(v);'
        assert run_in(project, source) == "Vec { x: 1, y: 2 }\n"

    def test_lib_directory_is_searched_first(self, project):
        assert run_in(project, 'import strings; print(strings.wrap("a"));') == "[a]\n"

    def test_module_value_display(self, project):
        assert run_in(project, "import math; print(math); print(type(math));") == "<module math>\nmodule\n"

    def test_module_without_exports_is_public(self, project):
        source = 'import { greeting, shout } from "plain"; print(shout(greeting));'
        assert run_in(project, source) == "hello!\n"

    def test_module_functions_see_their_own_globals(self, tmp_path):
        (tmp_path / "counter.rv").write_text(
            "let start: int = 100;\nfun next(n: int) -> int { return start + n; }\n"
        )
        assert run_in(tmp_path, 'import counter; print(counter.next(1));') == "101\n"

    def test_module_output_goes_to_same_stream(self, tmp_path):
        (tmp_path / "noisy.rv").write_text('print("loading");\n')
        assert run_in(tmp_path, 'import noisy; print("done");') == "loading\ndone\n"

    def test_module_runs_once(self, tmp_path):
        (tmp_path / "once.rv").write_text('print("loaded");\nlet x: int = 1;\n')
        source = 'import once; import o2 from "once"; import { x } from "once"; print(x);'
        assert run_in(tmp_path, source) == "loaded\n1\n"

    def test_nested_import_resolves_relative_to_module(self, tmp_path):
        pkg = tmp_path / "pkg"
        pkg.mkdir()
        (pkg / "inner.rv").write_text("fun value() -> int { return 5; }\n")
        (pkg / "outer.rv").write_text('import inner;\nfun twice() -> int { return inner.value() * 2; }\n')
        assert run_in(tmp_path, 'import outer from "pkg/outer"; print(outer.twice());') == "10\n"


class TestExports:
    def test_unexported_function_hidden(self, project):
        with pytest.raises(TypeCheckError, match="no exported function 'helper'"):
            run_in(project, "import math; math.helper();")

    def test_unexported_variable_hidden(self, project):
        with pytest.raises(TypeCheckError, match="no exported variable 'secret'"):
            run_in(project, "import math; print(math.secret);")

    def test_selective_import_of_unexported(self, project):
        with pytest.raises(TypeCheckError, match="'helper' is not exported"):
            run_in(project, 'import { helper } from "math";')

    def test_selective_import_of_missing_member(self, project):
        with pytest.raises(TypeCheckError, match="has no member 'nothing'"):
            run_in(project, 'import { nothing } from "plain";')

    def test_runtime_filter_without_checker(self, project):
        config = RavenConfig()
        config.run.type_check = False
        session = Session(str(project / "main.rv"), base_dir=project, config=config, stdout=io.StringIO())
        with pytest.raises(RavenRuntimeError, match="no exported function 'helper'"):
            session.feed("import math; math.helper();")

    def test_exported_names(self):
        assert exported_names(parse(MATH)) == frozenset({"PI", "square", "Vec"})

    def test_no_exports_means_none(self):
        assert exported_names(parse(PLAIN)) is None


class TestModuleErrors:
    def test_missing_module(self, tmp_path):
        with pytest.raises(TypeCheckError, match="Module 'nowhere' not found"):
            run_in(tmp_path, "import nowhere;")

    def test_circular_import(self, tmp_path):
        (tmp_path / "a.rv").write_text("import b;\nlet x: int = 1;\n")
        (tmp_path / "b.rv").write_text("import a;\nlet y: int = 2;\n")
        with pytest.raises(TypeCheckError, match="Circular import") as info:
            run_in(tmp_path, "import a;")
        assert "a.rv -> b.rv -> a.rv" in info.value.diagnostic.hint

    def test_self_import(self, tmp_path):
        (tmp_path / "me.rv").write_text("import me;\n")
        with pytest.raises(TypeCheckError, match="Circular import"):
            run_in(tmp_path, "import me;")

    def test_error_in_module_names_module_file(self, tmp_path):
        (tmp_path / "bad.rv").write_text("let x: int = true;\n")
        with pytest.raises(TypeCheckError) as info:
            run_in(tmp_path, "import bad;")
        diag = info.value.diagnostic
        assert diag.filename.endswith("bad.rv")
        assert diag.source == "let x: int = true;\n"

    def test_parse_error_in_module(self, tmp_path):
        (tmp_path / "broken.rv").write_text("let = ;\n")
        with pytest.raises(ParseError) as info:
            run_in(tmp_path, "import broken;")
        assert info.value.diagnostic.filename.endswith("broken.rv")

    def test_runtime_error_in_module_function(self, tmp_path):
        (tmp_path / "div.rv").write_text("fun inv(n: int) -> int {\n    return 1 / n;\n}\n")
        with pytest.raises(RavenRuntimeError, match="Division by zero") as info:
            run_in(tmp_path, "import div; div.inv(0);")
        diag = info.value.diagnostic
        assert diag.filename.endswith("div.rv")
        assert diag.span.line == 1

    def test_check_source_reports_module_errors(self, tmp_path):
        (tmp_path / "m.rv").write_text("export fun f() -> int { return 1; }\n")
        with pytest.raises(TypeCheckError, match="Type mismatch"):
            check_source('import m; let s: String = m.f();', base_dir=tmp_path)


class TestModuleGraph:
    def test_module_stem(self):
        assert module_stem("lib/geometry.rv") == "geometry"
        assert module_stem("geometry") == "geometry"

    def test_resolve_prefers_lib(self, project):
        graph = ModuleGraph(TypeCheckError)
        assert graph.resolve("strings", project) == project / "lib" / "strings.rv"

    def test_resolve_falls_back_to_base_dir(self, project):
        graph = ModuleGraph(TypeCheckError)
        assert graph.resolve("math", project) == project / "math.rv"

    def test_resolve_explicit_extension(self, project):
        graph = ModuleGraph(TypeCheckError)
        assert graph.resolve("lib/strings.rv", project) == project / "lib" / "strings.rv"

    def test_resolve_from_project_root(self, project):
        sub = project / "src"
        sub.mkdir()
        graph = ModuleGraph(TypeCheckError, root=project)
        assert graph.resolve("strings", sub) == project / "lib" / "strings.rv"

    def test_custom_lib_and_extension(self, tmp_path):
        (tmp_path / "vendor").mkdir()
        (tmp_path / "vendor" / "util.raven").write_text("let u: int = 1;\n")
        graph = ModuleGraph(TypeCheckError, lib_dir="vendor", extension=".raven")
        assert graph.resolve("util", tmp_path) == tmp_path / "vendor" / "util.raven"

    def test_load_builds_once_and_caches(self, project):
        graph: ModuleGraph[str] = ModuleGraph(TypeCheckError)
        calls = []

        def build(parsed):
            calls.append(parsed.name)
            return parsed.name.upper()

        first = graph.load("math", project, build, Span.dummy())
        second = graph.load("math.rv", project, build, Span.dummy())
        assert first == second == "MATH"
        assert calls == ["math"]
        assert graph.get(project.resolve() / "math.rv") == "MATH"

    def test_load_logs_resolution(self, project, caplog):
        graph: ModuleGraph[str] = ModuleGraph(TypeCheckError)
        with caplog.at_level(logging.DEBUG, logger="raven.modules"):
            graph.load("math", project, lambda parsed: parsed.name, Span.dummy())
            graph.load("math", project, lambda parsed: parsed.name, Span.dummy())
        messages = [r.getMessage() for r in caplog.records]
        assert any("loading" in m for m in messages)
        assert any("cache hit" in m for m in messages)

    def test_load_error_uses_owner_error_class(self, tmp_path):
        graph = ModuleGraph(RavenRuntimeError)
        with pytest.raises(RavenRuntimeError, match="not found"):
            graph.load("ghost", tmp_path, lambda parsed: parsed, Span.dummy())
