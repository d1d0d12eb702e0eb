"""Lexer for the Raven programming language.

Produces tokens on demand from source text. The parser pulls one token at a
time with ``next_token()`` and looks one token ahead with ``peek_token()``,
which runs on a copy of the cursor and leaves the lexer untouched.
"""

from __future__ import annotations

import copy

from raven.source import Span
from raven.tokens import (
    KEYWORDS,
    ONE_CHAR_TOKENS,
    TWO_CHAR_OPERATORS,
    Token,
    TokenKind,
)


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


class Lexer:
    """Tokenizes Raven source code."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 0
        self.col = 0

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list, EOF included."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.kind == TokenKind.EOF:
                return tokens

    # ── Cursor ───────────────────────────────────────────────────

    def peek(self, offset: int = 1) -> str:
        """Character ``offset`` places after the cursor, or '\\0' past the end."""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def peek_token(self) -> Token:
        """Return the next token without consuming it."""
        return copy.copy(self).next_token()

    def _current(self) -> str:
        return self.source[self.pos] if self.pos < len(self.source) else '\0'

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 0
        else:
            self.col += 1
        return ch

    def _make(self, kind: TokenKind, value: str, start: tuple[int, int, int]) -> Token:
        offset, line, col = start
        return Token(kind, value, Span(line, col, offset, self.pos - offset))

    # ── Trivia ───────────────────────────────────────────────────

    def _skip_trivia(self) -> None:
        """Skip whitespace, // line comments and /* block */ comments."""
        while not self._at_end():
            ch = self._current()
            if ch.isspace():
                self._advance()
            elif ch == '/' and self.peek() == '/':
                while not self._at_end() and self._current() != '\n':
                    self._advance()
            elif ch == '/' and self.peek() == '*':
                self._advance()
                self._advance()
                while not self._at_end():
                    if self._current() == '*' and self.peek() == '/':
                        self._advance()
                        self._advance()
                        break
                    self._advance()
            else:
                return

    # ── Tokens ───────────────────────────────────────────────────

    def next_token(self) -> Token:
        """Consume and return exactly one token. EOF repeats once reached."""
        self._skip_trivia()
        start = (self.pos, self.line, self.col)

        if self._at_end():
            return self._make(TokenKind.EOF, "", start)

        ch = self._current()
        if ch == '"':
            return self._lex_string(start)
        if _is_digit(ch):
            return self._lex_number(start)
        if ch.isalpha() or ch == '_':
            return self._lex_identifier(start)

        two = self.source[self.pos:self.pos + 2]
        if two in TWO_CHAR_OPERATORS:
            self._advance()
            self._advance()
            return self._make(TWO_CHAR_OPERATORS[two], two, start)

        self._advance()
        kind = ONE_CHAR_TOKENS.get(ch, TokenKind.ILLEGAL)
        return self._make(kind, ch, start)

    def _lex_string(self, start: tuple[int, int, int]) -> Token:
        self._advance()  # skip opening "
        text = []
        while not self._at_end() and self._current() != '"':
            text.append(self._advance())
        if self._at_end():
            return self._make(TokenKind.ILLEGAL, '"' + ''.join(text), start)
        self._advance()  # skip closing "
        return self._make(TokenKind.STRING_LIT, ''.join(text), start)

    def _lex_number(self, start: tuple[int, int, int]) -> Token:
        text = []
        while not self._at_end() and _is_digit(self._current()):
            text.append(self._advance())

        # A single decimal point, only when a digit follows it
        if self._current() == '.' and _is_digit(self.peek()):
            text.append(self._advance())
            while not self._at_end() and _is_digit(self._current()):
                text.append(self._advance())
            return self._make(TokenKind.FLOAT_LIT, ''.join(text), start)
        return self._make(TokenKind.INTEGER_LIT, ''.join(text), start)

    def _lex_identifier(self, start: tuple[int, int, int]) -> Token:
        text = []
        while not self._at_end() and (self._current().isalnum() or self._current() == '_'):
            text.append(self._advance())
        word = ''.join(text)
        return self._make(KEYWORDS.get(word, TokenKind.IDENTIFIER), word, start)
