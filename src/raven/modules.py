"""Module resolution and loading for ``import``.

The checker and the interpreter each own a ``ModuleGraph``. The graph turns
an import name into a file, parses it once, and hands the parsed module to a
builder supplied by its owner (a nested checker or interpreter). Results are
cached by canonical path; a module that is imported again while it is still
loading is a circular import.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

from raven.ast_nodes import Block, ExportStmt, declared_name
from raven.errors import RavenError
from raven.parser import parse
from raven.source import Span

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ParsedModule:
    name: str
    path: Path
    source: str
    program: Block
    exports: frozenset[str] | None  # None: nothing is marked, everything is public

    def is_public(self, name: str) -> bool:
        return self.exports is None or name in self.exports


def exported_names(program: Block) -> frozenset[str] | None:
    """Names marked with ``export``, or None when the module marks none."""
    names = [
        declared_name(stmt)
        for stmt in program.statements
        if isinstance(stmt, ExportStmt)
    ]
    if not names:
        return None
    return frozenset(n for n in names if n is not None)


def module_stem(name: str, extension: str = ".rv") -> str:
    """Binding name for a plain import: ``"lib/geometry.rv"`` -> ``geometry``."""
    return Path(name.removesuffix(extension)).name


class ModuleGraph(Generic[T]):
    """Resolves, parses and caches imported modules."""

    def __init__(
        self,
        error: type[RavenError],
        *,
        lib_dir: str = "lib",
        extension: str = ".rv",
        root: Path | None = None,
    ) -> None:
        self.error = error
        self.lib_dir = lib_dir
        self.extension = extension
        self.root = root
        self._cache: dict[Path, T] = {}
        self._loading: list[Path] = []

    def resolve(self, name: str, base_dir: Path) -> Path:
        """Find the file for an import name.

        A name already ending in the extension is used as written. Otherwise
        the library directory is searched first, then the importing file's
        directory.
        """
        if name.endswith(self.extension):
            return base_dir / name
        filename = name + self.extension
        for lib_base in dict.fromkeys(p for p in (self.root, base_dir) if p is not None):
            candidate = lib_base / self.lib_dir / filename
            if candidate.is_file():
                return candidate
        return base_dir / filename

    def get(self, path: str | Path) -> T | None:
        return self._cache.get(Path(path))

    def load(
        self,
        name: str,
        base_dir: Path,
        build: Callable[[ParsedModule], T],
        span: Span,
    ) -> T:
        """Load module ``name`` imported from ``base_dir``, building it once."""
        path = self.resolve(name, base_dir).resolve()

        cached = self._cache.get(path)
        if cached is not None:
            log.debug("module %s: cache hit (%s)", name, path)
            return cached

        if path in self._loading:
            chain = self._loading[self._loading.index(path):] + [path]
            raise self.error(
                f"Circular import of module '{name}'", span,
                hint="Import chain: " + " -> ".join(p.name for p in chain),
            )

        if not path.is_file():
            raise self.error(
                f"Module '{name}' not found", span,
                hint=f"Looked for {path}",
            )

        log.debug("module %s: loading %s", name, path)
        source = path.read_text(encoding="utf-8")
        program = parse(source, str(path))
        parsed = ParsedModule(
            name=module_stem(name, self.extension),
            path=path,
            source=source,
            program=program,
            exports=exported_names(program),
        )

        self._loading.append(path)
        try:
            result = build(parsed)
        finally:
            self._loading.pop()

        self._cache[path] = result
        log.debug("module %s: loaded", name)
        return result
