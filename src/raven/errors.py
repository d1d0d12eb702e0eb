"""Rust-style colored diagnostic rendering and the Raven error hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from raven.source import SourceFile, Span


class ErrorKind(Enum):
    LEX = "lex"
    PARSE = "parse"
    TYPE = "type"
    RUNTIME = "runtime"


# ANSI color codes
_RED = "\033[1;31m"
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_CYAN = "\033[1;36m"
_RESET = "\033[0m"

DEFAULT_FILENAME = "<stdin>"


@dataclass(frozen=True)
class Diagnostic:
    """A single error with its location and optional rendering context."""

    kind: ErrorKind
    message: str
    span: Span
    source: str | None = None
    filename: str | None = None
    hint: str | None = None

    def with_source(self, source: str) -> Diagnostic:
        return replace(self, source=source)

    def with_filename(self, filename: str) -> Diagnostic:
        return replace(self, filename=filename)

    @property
    def location(self) -> str:
        name = self.filename or DEFAULT_FILENAME
        return f"{name}:{self.span.line + 1}:{self.span.column + 1}"


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []

        # Header: error[parse]: message
        lines.append(
            f"{self._c(_RED)}error[{diag.kind.value}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )
        lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {diag.location}")

        src = SourceFile(diag.source) if diag.source is not None else None
        span = diag.span
        if src is not None and src.has_line(span.line):
            line_num = str(span.line + 1)
            gutter = " " * len(line_num)
            lines.append(f"   {gutter}{self._c(_BLUE)}|{self._c(_RESET)}")
            lines.append(
                f" {self._c(_BLUE)}{line_num}{self._c(_RESET)} "
                f"{self._c(_BLUE)}|{self._c(_RESET)} {src.line_at(span.line)}"
            )
            # Carets stop at the end of the first line of a multi-line span
            covered = src.span_text(span).splitlines()
            carets = "^" * max(1, len(covered[0]) if covered else 0)
            padding = " " * span.column
            lines.append(
                f"   {gutter}{self._c(_BLUE)}|{self._c(_RESET)} "
                f"{padding}{self._c(_RED)}{carets}{self._c(_RESET)}"
            )

        if diag.hint:
            lines.append(f"   {self._c(_CYAN)}= help:{self._c(_RESET)} {diag.hint}")

        return "\n".join(lines)


class RavenError(Exception):
    """Base class of every error the pipeline raises; carries one diagnostic."""

    kind = ErrorKind.PARSE

    def __init__(
        self,
        message: str,
        span: Span | None = None,
        *,
        hint: str | None = None,
        source: str | None = None,
        filename: str | None = None,
    ) -> None:
        self.diagnostic = Diagnostic(
            kind=self.kind,
            message=message,
            span=span or Span.dummy(),
            source=source,
            filename=filename,
            hint=hint,
        )
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def span(self) -> Span:
        return self.diagnostic.span

    def attach(self, source: str | None, filename: str | None) -> RavenError:
        """Fill in source text and filename unless already known."""
        diag = self.diagnostic
        if diag.source is None and source is not None:
            diag = diag.with_source(source)
        if diag.filename is None and filename is not None:
            diag = diag.with_filename(filename)
        self.diagnostic = diag
        return self

    def render(self, *, color: bool = False) -> str:
        return DiagnosticRenderer(color=color).render(self.diagnostic)


class LexError(RavenError):
    kind = ErrorKind.LEX


class ParseError(RavenError):
    kind = ErrorKind.PARSE


class TypeCheckError(RavenError):
    kind = ErrorKind.TYPE


class RavenRuntimeError(RavenError):
    kind = ErrorKind.RUNTIME
