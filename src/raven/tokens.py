"""Token kinds and token representation for the Raven lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from raven.source import Span


class TokenKind(Enum):
    # Keywords
    LET = auto()
    FUN = auto()
    RETURN = auto()
    IF = auto()
    ELSEIF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    IMPORT = auto()
    EXPORT = auto()
    FROM = auto()
    STRUCT = auto()
    ENUM = auto()
    PRINT = auto()

    # Type keywords
    INT_TYPE = auto()
    FLOAT_TYPE = auto()
    BOOL_TYPE = auto()
    STRING_TYPE = auto()
    VOID_TYPE = auto()

    # Literals
    INTEGER_LIT = auto()
    FLOAT_LIT = auto()
    STRING_LIT = auto()
    BOOLEAN_LIT = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()
    LESS = auto()
    GREATER = auto()
    LESS_EQUAL = auto()
    GREATER_EQUAL = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    ASSIGN = auto()
    ARROW = auto()
    DOT_DOT = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COMMA = auto()
    COLON = auto()
    SEMICOLON = auto()
    DOT = auto()

    # Special
    ILLEGAL = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span


KEYWORDS: dict[str, TokenKind] = {
    "let": TokenKind.LET,
    "fun": TokenKind.FUN,
    "return": TokenKind.RETURN,
    "if": TokenKind.IF,
    "elseif": TokenKind.ELSEIF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "for": TokenKind.FOR,
    "import": TokenKind.IMPORT,
    "export": TokenKind.EXPORT,
    "from": TokenKind.FROM,
    "struct": TokenKind.STRUCT,
    "enum": TokenKind.ENUM,
    "print": TokenKind.PRINT,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
    "int": TokenKind.INT_TYPE,
    "float": TokenKind.FLOAT_TYPE,
    "bool": TokenKind.BOOL_TYPE,
    "String": TokenKind.STRING_TYPE,
    "string": TokenKind.STRING_TYPE,
    "void": TokenKind.VOID_TYPE,
    "true": TokenKind.BOOLEAN_LIT,
    "false": TokenKind.BOOLEAN_LIT,
}

TYPE_KEYWORDS: frozenset[TokenKind] = frozenset({
    TokenKind.INT_TYPE,
    TokenKind.FLOAT_TYPE,
    TokenKind.BOOL_TYPE,
    TokenKind.STRING_TYPE,
    TokenKind.VOID_TYPE,
})

# Two-character operators, checked before their one-character prefix.
TWO_CHAR_OPERATORS: dict[str, TokenKind] = {
    "==": TokenKind.EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_EQUAL,
    ">=": TokenKind.GREATER_EQUAL,
    "&&": TokenKind.AND,
    "||": TokenKind.OR,
    "->": TokenKind.ARROW,
    "..": TokenKind.DOT_DOT,
}

ONE_CHAR_TOKENS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "<": TokenKind.LESS,
    ">": TokenKind.GREATER,
    "!": TokenKind.NOT,
    "=": TokenKind.ASSIGN,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
    ";": TokenKind.SEMICOLON,
    ".": TokenKind.DOT,
}
