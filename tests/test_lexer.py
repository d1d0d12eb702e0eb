"""Tests for the Raven lexer."""

from __future__ import annotations

from raven.lexer import Lexer
from raven.tokens import TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, value) pairs, excluding EOF."""
    tokens = Lexer(source).lex()
    return [(t.kind, t.value) for t in tokens if t.kind != TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    tokens = Lexer(source).lex()
    return [t.kind for t in tokens if t.kind != TokenKind.EOF]


class TestLexerBasic:
    def test_empty_source(self):
        tokens = Lexer("").lex()
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF

    def test_identifier(self):
        assert lex("hello") == [(TokenKind.IDENTIFIER, "hello")]

    def test_underscore_identifier(self):
        assert lex("_tmp_1") == [(TokenKind.IDENTIFIER, "_tmp_1")]

    def test_keywords(self):
        expected = {
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
        }
        for word, kind in expected.items():
            assert kinds(word) == [kind], word

    def test_type_keywords(self):
        assert kinds("int float bool String string void") == [
            TokenKind.INT_TYPE,
            TokenKind.FLOAT_TYPE,
            TokenKind.BOOL_TYPE,
            TokenKind.STRING_TYPE,
            TokenKind.STRING_TYPE,
            TokenKind.VOID_TYPE,
        ]

    def test_word_operators(self):
        assert kinds("and or not") == [TokenKind.AND, TokenKind.OR, TokenKind.NOT]

    def test_boolean_literals(self):
        assert lex("true false") == [
            (TokenKind.BOOLEAN_LIT, "true"),
            (TokenKind.BOOLEAN_LIT, "false"),
        ]

    def test_keyword_prefix_is_identifier(self):
        assert lex("letter") == [(TokenKind.IDENTIFIER, "letter")]


class TestLexerNumbers:
    def test_integer(self):
        assert lex("42") == [(TokenKind.INTEGER_LIT, "42")]

    def test_float(self):
        assert lex("3.14") == [(TokenKind.FLOAT_LIT, "3.14")]

    def test_dot_without_digit_is_not_float(self):
        assert kinds("1.x") == [TokenKind.INTEGER_LIT, TokenKind.DOT, TokenKind.IDENTIFIER]

    def test_range_operator_after_integer(self):
        assert kinds("1..2") == [TokenKind.INTEGER_LIT, TokenKind.DOT_DOT, TokenKind.INTEGER_LIT]

    def test_single_decimal_point(self):
        assert kinds("1.2.3") == [TokenKind.FLOAT_LIT, TokenKind.DOT, TokenKind.INTEGER_LIT]


class TestLexerStrings:
    def test_simple_string(self):
        assert lex('"hello"') == [(TokenKind.STRING_LIT, "hello")]

    def test_empty_string(self):
        assert lex('""') == [(TokenKind.STRING_LIT, "")]

    def test_backslash_n_is_kept_verbatim(self):
        assert lex(r'"a\nb"') == [(TokenKind.STRING_LIT, "a\\nb")]

    def test_unterminated_string_is_illegal(self):
        result = lex('"abc')
        assert result == [(TokenKind.ILLEGAL, '"abc')]


class TestLexerOperators:
    def test_two_char_operators(self):
        assert kinds("== != <= >= && || -> ..") == [
            TokenKind.EQUAL,
            TokenKind.NOT_EQUAL,
            TokenKind.LESS_EQUAL,
            TokenKind.GREATER_EQUAL,
            TokenKind.AND,
            TokenKind.OR,
            TokenKind.ARROW,
            TokenKind.DOT_DOT,
        ]

    def test_one_char_fallbacks(self):
        assert kinds("= ! < > - .") == [
            TokenKind.ASSIGN,
            TokenKind.NOT,
            TokenKind.LESS,
            TokenKind.GREATER,
            TokenKind.MINUS,
            TokenKind.DOT,
        ]

    def test_arithmetic(self):
        assert kinds("+ - * / %") == [
            TokenKind.PLUS,
            TokenKind.MINUS,
            TokenKind.STAR,
            TokenKind.SLASH,
            TokenKind.PERCENT,
        ]

    def test_punctuation(self):
        assert kinds("( ) { } [ ] , : ;") == [
            TokenKind.LPAREN,
            TokenKind.RPAREN,
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            TokenKind.LBRACKET,
            TokenKind.RBRACKET,
            TokenKind.COMMA,
            TokenKind.COLON,
            TokenKind.SEMICOLON,
        ]

    def test_enum_path_is_two_colons(self):
        assert kinds("Color::Red") == [
            TokenKind.IDENTIFIER,
            TokenKind.COLON,
            TokenKind.COLON,
            TokenKind.IDENTIFIER,
        ]

    def test_illegal_character(self):
        assert lex("@") == [(TokenKind.ILLEGAL, "@")]

    def test_illegal_does_not_stop_lexing(self):
        assert kinds("a # b") == [TokenKind.IDENTIFIER, TokenKind.ILLEGAL, TokenKind.IDENTIFIER]


class TestLexerTrivia:
    def test_line_comment(self):
        assert lex("x // comment\ny") == [
            (TokenKind.IDENTIFIER, "x"),
            (TokenKind.IDENTIFIER, "y"),
        ]

    def test_block_comment(self):
        assert lex("x /* multi\nline */ y") == [
            (TokenKind.IDENTIFIER, "x"),
            (TokenKind.IDENTIFIER, "y"),
        ]

    def test_unterminated_block_comment_runs_to_end(self):
        assert lex("x /* never closed") == [(TokenKind.IDENTIFIER, "x")]

    def test_division_is_not_a_comment(self):
        assert kinds("a / b") == [TokenKind.IDENTIFIER, TokenKind.SLASH, TokenKind.IDENTIFIER]


class TestLexerSpans:
    def test_spans_track_lines_and_columns(self):
        tokens = Lexer("let x\n  = 5;").lex()
        eq = tokens[2]
        assert eq.kind == TokenKind.ASSIGN
        assert (eq.span.line, eq.span.column) == (1, 2)
        assert eq.span.offset == 8

    def test_span_length(self):
        tok = Lexer('  "abc"').lex()[0]
        assert tok.span.offset == 2
        assert tok.span.length == 5

    def test_span_str_is_one_based(self):
        tok = Lexer("\n  foo").lex()[0]
        assert str(tok.span) == "2:3"

    def test_offsets_count_code_points(self):
        tokens = Lexer('"é" x').lex()
        assert tokens[1].span.offset == 4


class TestLexerCursor:
    def test_eof_repeats(self):
        lexer = Lexer("x")
        assert lexer.next_token().kind == TokenKind.IDENTIFIER
        assert lexer.next_token().kind == TokenKind.EOF
        assert lexer.next_token().kind == TokenKind.EOF

    def test_peek_token_does_not_consume(self):
        lexer = Lexer("a b")
        peeked = lexer.peek_token()
        assert peeked.value == "a"
        assert lexer.next_token() == peeked
        assert lexer.next_token().value == "b"

    def test_peek_character(self):
        lexer = Lexer("ab")
        assert lexer.peek() == "b"
        assert lexer.peek(5) == "\0"

    def test_lexing_is_deterministic(self):
        source = 'fun f(n: int) -> int { return n * 2; } print("{}", f(3));'
        assert Lexer(source).lex() == Lexer(source).lex()
