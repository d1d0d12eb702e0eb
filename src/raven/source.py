"""Source file representation and span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Span:
    """A range within a source text.

    All fields are zero-based. ``offset`` counts code points from the start
    of the source string, ``length`` is the number of code points covered.
    """

    line: int
    column: int
    offset: int
    length: int

    @classmethod
    def dummy(cls) -> Span:
        """Span used for synthesized errors with no real location."""
        return cls(0, 0, 0, 0)

    @property
    def end(self) -> int:
        return self.offset + self.length

    def merge(self, other: Span) -> Span:
        """Smallest span covering both ``self`` and ``other``."""
        first = self if self.offset <= other.offset else other
        start = min(self.offset, other.offset)
        end = max(self.end, other.end)
        return Span(first.line, first.column, start, end - start)

    def __str__(self) -> str:
        return f"{self.line + 1}:{self.column + 1}"


class SourceFile:
    """Source text with line access for diagnostics."""

    def __init__(self, content: str, path: Path | None = None) -> None:
        self.path = path
        self.content = content
        self.lines = content.splitlines()

    @classmethod
    def read(cls, path: Path) -> SourceFile:
        return cls(path.read_text(encoding="utf-8"), path)

    def line_at(self, n: int) -> str:
        """Return the 0-indexed line, or empty string if out of range."""
        if 0 <= n < len(self.lines):
            return self.lines[n]
        return ""

    def has_line(self, n: int) -> bool:
        return 0 <= n < len(self.lines)

    def span_text(self, span: Span) -> str:
        """Extract the text covered by a span."""
        return self.content[span.offset : span.end]
