"""Parser for the Raven programming language.

Pulls tokens lazily from a ``Lexer`` and builds the AST using recursive
descent for statements and precedence climbing for binary expressions.
Parsing stops at the first error; there is no recovery mode.
"""

from __future__ import annotations

from typing import NoReturn

from raven.ast_nodes import (
    ASSIGNABLE,
    ArrayLiteral,
    Assignment,
    BinaryExpr,
    BinaryOp,
    Block,
    BooleanLit,
    CallExpr,
    CallStmt,
    EnumDecl,
    EnumVariant,
    ExportStmt,
    Expr,
    ExprStmt,
    FieldAccess,
    FieldDecl,
    FloatLit,
    ForLoop,
    FunctionDecl,
    Identifier,
    IfStmt,
    ImportSelective,
    ImportStmt,
    IndexExpr,
    IntegerLit,
    MethodCallExpr,
    Param,
    PrintStmt,
    ReturnStmt,
    Stmt,
    StringLit,
    StructDecl,
    StructInit,
    TypeRef,
    UnaryExpr,
    UnaryOp,
    VarDecl,
    WhileLoop,
)
from raven.errors import LexError, ParseError
from raven.lexer import Lexer
from raven.source import Span
from raven.tokens import TYPE_KEYWORDS, Token, TokenKind
from raven.values import I64_MAX

_BINARY_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.PLUS: BinaryOp.ADD,
    TokenKind.MINUS: BinaryOp.SUBTRACT,
    TokenKind.STAR: BinaryOp.MULTIPLY,
    TokenKind.SLASH: BinaryOp.DIVIDE,
    TokenKind.PERCENT: BinaryOp.MODULO,
    TokenKind.EQUAL: BinaryOp.EQUAL,
    TokenKind.NOT_EQUAL: BinaryOp.NOT_EQUAL,
    TokenKind.LESS: BinaryOp.LESS,
    TokenKind.GREATER: BinaryOp.GREATER,
    TokenKind.LESS_EQUAL: BinaryOp.LESS_EQUAL,
    TokenKind.GREATER_EQUAL: BinaryOp.GREATER_EQUAL,
    TokenKind.AND: BinaryOp.AND,
    TokenKind.OR: BinaryOp.OR,
}

_UNARY_OPS: dict[TokenKind, UnaryOp] = {
    TokenKind.MINUS: UnaryOp.NEGATE,
    TokenKind.NOT: UnaryOp.NOT,
}

_TYPE_NAMES: dict[TokenKind, str] = {
    TokenKind.INT_TYPE: "int",
    TokenKind.FLOAT_TYPE: "float",
    TokenKind.BOOL_TYPE: "bool",
    TokenKind.STRING_TYPE: "String",
    TokenKind.VOID_TYPE: "void",
}

_DECLARATIONS: dict[TokenKind, str] = {
    TokenKind.FUN: "function",
    TokenKind.STRUCT: "struct",
    TokenKind.ENUM: "enum",
    TokenKind.IMPORT: "import",
    TokenKind.EXPORT: "export",
}


class Parser:
    """Parses the token stream of a ``Lexer`` into a Raven AST."""

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.filename = lexer.filename
        self.current = lexer.next_token()
        self.previous: Token | None = None

    # ── Token access ─────────────────────────────────────────────

    def _at(self, kind: TokenKind) -> bool:
        return self.current.kind == kind

    def _at_any(self, *kinds: TokenKind) -> bool:
        return self.current.kind in kinds

    def _peek(self) -> Token:
        """The token after the current one."""
        return self.lexer.peek_token()

    def _advance(self) -> Token:
        tok = self.current
        self.previous = tok
        self.current = self.lexer.next_token()
        return tok

    def _expect(self, kind: TokenKind, message: str, hint: str | None = None) -> Token:
        if self.current.kind == kind:
            return self._advance()
        self._error(message, self.current.span, hint)

    def _expect_terminator(self, what: str) -> Token:
        """Expect ';' after a statement, pointing at the end of the statement."""
        if self._at(TokenKind.SEMICOLON):
            return self._advance()
        span = self.current.span
        prev = self.previous
        if prev is not None and span.line > prev.span.line:
            # The ';' belongs at the end of the previous line
            span = Span(prev.span.line, prev.span.column + prev.span.length, prev.span.end, 1)
        self._error(
            f"Expected ';' after {what}", span,
            "Add ';' at the end of the statement",
        )

    def _error(self, message: str, span: Span, hint: str | None = None) -> NoReturn:
        tok = self.current
        source = self.lexer.source
        if tok.kind == TokenKind.ILLEGAL:
            if tok.value.startswith('"'):
                raise LexError(
                    "Unterminated string literal", tok.span,
                    hint='Close the string with \'"\'',
                    source=source, filename=self.filename,
                )
            raise LexError(
                f"Illegal character {tok.value!r}", tok.span,
                source=source, filename=self.filename,
            )
        raise ParseError(message, span, hint=hint, source=source, filename=self.filename)

    @staticmethod
    def _describe(tok: Token) -> str:
        if tok.kind == TokenKind.EOF:
            return "end of input"
        return repr(tok.value)

    # ── Top level ────────────────────────────────────────────────

    def parse(self) -> Block:
        """Parse the whole token stream into one top-level block."""
        statements: list[Stmt] = []
        while not self._at(TokenKind.EOF):
            statements.append(self._parse_statement(top_level=True))
        end = self.current.span
        return Block(statements, Span(0, 0, 0, end.offset))

    def _parse_statement(self, *, top_level: bool) -> Stmt:
        tok = self.current
        kind = tok.kind

        if kind in _DECLARATIONS and not top_level:
            self._error(
                f"{_DECLARATIONS[kind].capitalize()} declarations are only allowed at the top level",
                tok.span,
                "Move the declaration out of the enclosing block",
            )

        if kind == TokenKind.LET:
            return self._parse_var_decl()
        if kind == TokenKind.FUN:
            return self._parse_function_decl()
        if kind == TokenKind.STRUCT:
            return self._parse_struct_decl()
        if kind == TokenKind.ENUM:
            return self._parse_enum_decl()
        if kind == TokenKind.IMPORT:
            return self._parse_import()
        if kind == TokenKind.EXPORT:
            return self._parse_export()
        if kind == TokenKind.IF:
            return self._parse_if()
        if kind == TokenKind.WHILE:
            return self._parse_while()
        if kind == TokenKind.FOR:
            return self._parse_for()
        if kind == TokenKind.RETURN:
            return self._parse_return()
        if kind == TokenKind.PRINT:
            return self._parse_print()
        if kind == TokenKind.LBRACE:
            return self._parse_block()
        return self._parse_expression_statement()

    # ── Declarations ─────────────────────────────────────────────

    def _parse_type(self) -> TypeRef:
        tok = self.current
        if tok.kind in TYPE_KEYWORDS:
            name = _TYPE_NAMES[tok.kind]
        elif tok.kind == TokenKind.IDENTIFIER:
            name = tok.value
        else:
            self._error(
                f"Expected a type, got {self._describe(tok)}", tok.span,
                "Use int, float, bool, String, a struct or enum name, or an array type like int[]",
            )
        self._advance()
        span = tok.span
        is_array = False
        if self._at(TokenKind.LBRACKET) and name != "void":
            self._advance()
            end = self._expect(TokenKind.RBRACKET, "Expected ']' after array type", "Write array types as type[]")
            span = span.merge(end.span)
            is_array = True
        return TypeRef(name, is_array, span)

    @staticmethod
    def _zero_value(type_ref: TypeRef) -> Expr | None:
        span = type_ref.span
        if type_ref.is_array:
            return ArrayLiteral([], span)
        match type_ref.name:
            case "int":
                return IntegerLit(0, span)
            case "float":
                return FloatLit(0.0, span)
            case "bool":
                return BooleanLit(False, span)
            case "String":
                return StringLit("", span)
        return None

    def _parse_var_decl(self) -> VarDecl:
        start = self._advance().span  # 'let'
        name_tok = self._expect(
            TokenKind.IDENTIFIER, "Expected identifier after 'let'",
            "Use: let name: type = value;",
        )

        type_ref: TypeRef | None = None
        if self._at(TokenKind.COLON):
            self._advance()
            type_ref = self._parse_type()
            if type_ref.name == "void":
                self._error(
                    f"Variable '{name_tok.value}' cannot have type 'void'", type_ref.span,
                )

        if self._at(TokenKind.ASSIGN):
            self._advance()
            value = self._parse_expression()
        elif type_ref is not None:
            zero = self._zero_value(type_ref)
            if zero is None:
                self._error(
                    f"Variable '{name_tok.value}' of type '{type_ref}' needs an initializer",
                    type_ref.span,
                    f"Struct and enum variables must be initialized: let {name_tok.value}: {type_ref} = ...;",
                )
            value = zero
        else:
            self._error(
                "Expected ':' or '=' after variable name", self.current.span,
                "Use: let name: type = value;",
            )

        end = self._expect_terminator("variable declaration")
        return VarDecl(name_tok.value, type_ref, value, start.merge(end.span))

    def _parse_function_decl(self) -> FunctionDecl:
        start = self._advance().span  # 'fun'
        name_tok = self._expect(
            TokenKind.IDENTIFIER, "Expected function name after 'fun'",
            "Provide a function name",
        )
        self._expect(
            TokenKind.LPAREN, "Expected '(' after function name",
            "Add '(' to start the parameter list",
        )

        params: list[Param] = []
        while not self._at(TokenKind.RPAREN):
            if params:
                self._expect(
                    TokenKind.COMMA, "Expected ',' or ')' in parameter list",
                    "Separate parameters with ','",
                )
            p_tok = self._expect(
                TokenKind.IDENTIFIER, "Expected parameter name",
                "Provide a parameter name",
            )
            self._expect(
                TokenKind.COLON, "Expected ':' after parameter name",
                "Add ':' followed by the parameter type",
            )
            type_ref = self._parse_type()
            params.append(Param(p_tok.value, type_ref, p_tok.span.merge(type_ref.span)))
        self._expect(
            TokenKind.RPAREN, "Expected ')' after parameters",
            "Close the parameter list with ')'",
        )

        if self._at(TokenKind.ARROW):
            self._advance()
            return_type = self._parse_type()
        else:
            return_type = TypeRef("void", False, name_tok.span)

        body = self._parse_block("function body")
        return FunctionDecl(name_tok.value, return_type, params, body, start.merge(body.span))

    def _parse_struct_decl(self) -> StructDecl:
        start = self._advance().span  # 'struct'
        name_tok = self._expect(TokenKind.IDENTIFIER, "Expected struct name after 'struct'")
        self._expect(
            TokenKind.LBRACE, "Expected '{' after struct name",
            "Use: struct Name { field: type, ... }",
        )
        fields: list[FieldDecl] = []
        while not self._at(TokenKind.RBRACE):
            f_tok = self._expect(TokenKind.IDENTIFIER, "Expected field name in struct declaration")
            self._expect(
                TokenKind.COLON, "Expected ':' after field name",
                "Add ':' followed by the field type",
            )
            type_ref = self._parse_type()
            fields.append(FieldDecl(f_tok.value, type_ref, f_tok.span.merge(type_ref.span)))
            if not self._at(TokenKind.COMMA):
                break
            self._advance()
        end = self._expect(
            TokenKind.RBRACE, "Expected '}' to close struct declaration",
            "Separate fields with ','",
        )
        if self._at(TokenKind.SEMICOLON):
            end = self._advance()
        return StructDecl(name_tok.value, fields, start.merge(end.span))

    def _parse_enum_decl(self) -> EnumDecl:
        start = self._advance().span  # 'enum'
        name_tok = self._expect(TokenKind.IDENTIFIER, "Expected enum name after 'enum'")
        self._expect(
            TokenKind.LBRACE, "Expected '{' after enum name",
            "Use: enum Name { VariantA, VariantB }",
        )
        variants: list[str] = []
        while not self._at(TokenKind.RBRACE):
            variants.append(
                self._expect(TokenKind.IDENTIFIER, "Expected variant name in enum declaration").value
            )
            if not self._at(TokenKind.COMMA):
                break
            self._advance()
        end = self._expect(
            TokenKind.RBRACE, "Expected '}' to close enum declaration",
            "Separate variants with ','",
        )
        if self._at(TokenKind.SEMICOLON):
            end = self._advance()
        return EnumDecl(name_tok.value, variants, start.merge(end.span))

    def _parse_import(self) -> ImportSelective | ImportStmt:
        start = self._advance().span  # 'import'

        if self._at(TokenKind.LBRACE):
            self._advance()
            names = [self._expect(TokenKind.IDENTIFIER, "Expected identifier in import list").value]
            while self._at(TokenKind.COMMA):
                self._advance()
                names.append(
                    self._expect(
                        TokenKind.IDENTIFIER, "Expected identifier after ',' in import list",
                    ).value
                )
            self._expect(TokenKind.RBRACE, "Expected '}' after import list")
            self._expect(
                TokenKind.FROM, "Expected 'from' after import list",
                'Use: import { name } from "module";',
            )
            path = self._expect(
                TokenKind.STRING_LIT, "Expected module path (string) after 'from'",
            ).value
            end = self._expect_terminator("import statement")
            return ImportSelective(path, names, start.merge(end.span))

        if self._at(TokenKind.STRING_LIT):
            path = self._advance().value
            end = self._expect_terminator("import statement")
            return ImportStmt(path, None, start.merge(end.span))

        if self._at(TokenKind.IDENTIFIER):
            name = self._advance().value
            if self._at(TokenKind.FROM):
                self._advance()
                path = self._expect(
                    TokenKind.STRING_LIT, "Expected module path (string) after 'from'",
                ).value
                end = self._expect_terminator("import statement")
                return ImportStmt(path, name, start.merge(end.span))
            end = self._expect_terminator("import statement")
            return ImportStmt(name, None, start.merge(end.span))

        self._error(
            "Expected module name or identifier after 'import'", self.current.span,
            'Use: import name from "module"; or import { a, b } from "module";',
        )

    def _parse_export(self) -> ExportStmt:
        start = self._advance().span  # 'export'
        kind = self.current.kind
        if kind == TokenKind.LET:
            stmt: Stmt = self._parse_var_decl()
        elif kind == TokenKind.FUN:
            stmt = self._parse_function_decl()
        elif kind == TokenKind.STRUCT:
            stmt = self._parse_struct_decl()
        elif kind == TokenKind.ENUM:
            stmt = self._parse_enum_decl()
        else:
            self._error(
                "Expected 'let', 'fun', 'struct' or 'enum' after 'export'", self.current.span,
            )
        return ExportStmt(stmt, start.merge(stmt.span))

    # ── Statements ───────────────────────────────────────────────

    def _parse_block(self, what: str = "block") -> Block:
        start = self._expect(
            TokenKind.LBRACE, f"Expected '{{' to start {what}",
            f"Add '{{' to start the {what}",
        ).span
        statements: list[Stmt] = []
        while not self._at_any(TokenKind.RBRACE, TokenKind.EOF):
            statements.append(self._parse_statement(top_level=False))
        end = self._expect(
            TokenKind.RBRACE, f"Expected '}}' to close {what}",
            f"Add '}}' to close the {what}",
        )
        return Block(statements, start.merge(end.span))

    def _parse_condition(self, keyword: str) -> Expr:
        self._expect(
            TokenKind.LPAREN, f"Expected '(' after '{keyword}'",
            f"Use: {keyword} (condition) {{ ... }}",
        )
        condition = self._parse_expression()
        self._expect(
            TokenKind.RPAREN, f"Expected ')' after {keyword} condition",
            "Close the condition with ')'",
        )
        return condition

    def _parse_if(self) -> IfStmt:
        keyword = self._advance()  # 'if' or 'elseif'
        condition = self._parse_condition(keyword.value)
        then_block = self._parse_block(f"{keyword.value} block")
        end = then_block.span

        else_if: IfStmt | None = None
        else_block: Block | None = None
        if self._at(TokenKind.ELSEIF):
            else_if = self._parse_if()
            end = else_if.span
        elif self._at(TokenKind.ELSE):
            self._advance()
            if self._at(TokenKind.IF):
                else_if = self._parse_if()
                end = else_if.span
            else:
                else_block = self._parse_block("else block")
                end = else_block.span

        return IfStmt(condition, then_block, else_if, else_block, keyword.span.merge(end))

    def _parse_while(self) -> WhileLoop:
        start = self._advance().span  # 'while'
        condition = self._parse_condition("while")
        body = self._parse_block("while body")
        return WhileLoop(condition, body, start.merge(body.span))

    def _parse_for(self) -> ForLoop:
        start = self._advance().span  # 'for'
        self._expect(
            TokenKind.LPAREN, "Expected '(' after 'for'",
            "Use: for (let i: int = 0; i < 10; i = i + 1) { ... }",
        )
        if not self._at(TokenKind.LET):
            self._error(
                "Expected variable declaration in for loop initialization", self.current.span,
                "Use 'let' to declare the loop variable",
            )
        init = self._parse_var_decl()
        condition = self._parse_expression()
        self._expect(
            TokenKind.SEMICOLON, "Expected ';' after for loop condition",
            "Add ';' after the condition",
        )

        target = self._parse_expression()
        if not self._at(TokenKind.ASSIGN) or not isinstance(target, ASSIGNABLE):
            self._error(
                "Expected assignment in for loop increment", self.current.span,
                "Provide an assignment like: i = i + 1",
            )
        self._advance()  # '='
        value = self._parse_expression()
        increment = Assignment(target, value, target.span.merge(value.span))

        self._expect(
            TokenKind.RPAREN, "Expected ')' after for loop header",
            "Close the for loop header with ')'",
        )
        body = self._parse_block("for body")
        return ForLoop(init, condition, increment, body, start.merge(body.span))

    def _parse_return(self) -> ReturnStmt:
        start = self._advance().span  # 'return'
        value: Expr | None = None
        if not self._at(TokenKind.SEMICOLON):
            value = self._parse_expression()
        end = self._expect_terminator("return statement")
        return ReturnStmt(value, start.merge(end.span))

    def _parse_print(self) -> PrintStmt:
        start = self._advance().span  # 'print'
        if not self._at(TokenKind.LPAREN):
            self._error(
                "Expected '(' after 'print'", self.current.span,
                "Use: print(expression);",
            )
        args, _ = self._parse_arguments("print arguments")
        end = self._expect_terminator("print statement")
        return PrintStmt(args, start.merge(end.span))

    def _parse_expression_statement(self) -> Stmt:
        expr = self._parse_expression()

        if self._at(TokenKind.ASSIGN):
            if not isinstance(expr, ASSIGNABLE):
                self._error(
                    "Invalid assignment target", expr.span,
                    "Only variables, fields and array elements can be assigned",
                )
            self._advance()
            value = self._parse_expression()
            end = self._expect_terminator("assignment")
            return Assignment(expr, value, expr.span.merge(end.span))

        if self._at(TokenKind.SEMICOLON):
            end = self._advance()
            span = expr.span.merge(end.span)
            if isinstance(expr, (CallExpr, MethodCallExpr)):
                return CallStmt(expr, span)
            return ExprStmt(expr, span)

        self._error(
            f"Unexpected {self._describe(self.current)} after expression", self.current.span,
            "End the statement with ';' or assign with '='",
        )

    # ── Expressions ──────────────────────────────────────────────

    def _parse_expression(self) -> Expr:
        return self._parse_binary(0)

    def _parse_binary(self, min_precedence: int) -> Expr:
        """Precedence climbing; right operands use a floor one above the operator."""
        left = self._parse_unary()

        while self.current.kind in _BINARY_OPS:
            op = _BINARY_OPS[self.current.kind]
            if op.precedence < min_precedence:
                break
            self._advance()
            right = self._parse_binary(op.precedence + 1)
            left = BinaryExpr(left, op, right, left.span.merge(right.span))

        return left

    def _parse_unary(self) -> Expr:
        tok = self.current
        if tok.kind in _UNARY_OPS:
            self._advance()
            operand = self._parse_unary()
            return UnaryExpr(_UNARY_OPS[tok.kind], operand, tok.span.merge(operand.span))
        return self._parse_postfix(self._parse_primary())

    def _parse_postfix(self, expr: Expr) -> Expr:
        """Consume any chain of .method(args), .field and [index] suffixes."""
        while True:
            if self._at(TokenKind.DOT):
                self._advance()
                name_tok = self._expect(
                    TokenKind.IDENTIFIER, "Expected method or field name after '.'",
                )
                if self._at(TokenKind.LPAREN):
                    args, end = self._parse_arguments("method arguments")
                    expr = MethodCallExpr(expr, name_tok.value, args, expr.span.merge(end.span))
                else:
                    expr = FieldAccess(expr, name_tok.value, expr.span.merge(name_tok.span))
            elif self._at(TokenKind.LBRACKET):
                self._advance()
                index = self._parse_expression()
                end = self._expect(
                    TokenKind.RBRACKET, "Expected ']' after array index",
                    "Close the index with ']'",
                )
                expr = IndexExpr(expr, index, expr.span.merge(end.span))
            else:
                return expr

    def _parse_primary(self) -> Expr:
        tok = self.current
        kind = tok.kind

        if kind == TokenKind.INTEGER_LIT:
            self._advance()
            value = int(tok.value)
            if value > I64_MAX:
                self._error(
                    f"Integer literal {tok.value} is out of range", tok.span,
                    "Integers are 64-bit signed",
                )
            return IntegerLit(value, tok.span)

        if kind == TokenKind.FLOAT_LIT:
            self._advance()
            return FloatLit(float(tok.value), tok.span)

        if kind == TokenKind.STRING_LIT:
            self._advance()
            return StringLit(tok.value, tok.span)

        if kind == TokenKind.BOOLEAN_LIT:
            self._advance()
            return BooleanLit(tok.value == "true", tok.span)

        if kind == TokenKind.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(
                TokenKind.RPAREN, "Expected ')' after expression",
                "Close the parenthesis with ')'",
            )
            return expr

        if kind == TokenKind.LBRACKET:
            return self._parse_array_literal()

        if kind == TokenKind.IDENTIFIER:
            self._advance()
            if self._at(TokenKind.LPAREN):
                args, end = self._parse_arguments("function arguments")
                return CallExpr(tok.value, args, tok.span.merge(end.span))
            if self._at(TokenKind.COLON) and self._peek().kind == TokenKind.COLON:
                return self._parse_enum_variant(tok)
            if self._at(TokenKind.LBRACE):
                return self._parse_struct_init(tok)
            return Identifier(tok.value, tok.span)

        self._error(
            f"Unexpected {self._describe(tok)} in expression", tok.span,
            "Expected a literal, a name, '(' or '['",
        )

    def _parse_arguments(self, what: str) -> tuple[list[Expr], Token]:
        self._advance()  # '('
        args: list[Expr] = []
        while not self._at(TokenKind.RPAREN):
            if args:
                self._expect(
                    TokenKind.COMMA, f"Expected ',' or ')' in {what}",
                    "Separate arguments with ','",
                )
            args.append(self._parse_expression())
        end = self._expect(
            TokenKind.RPAREN, f"Expected ')' after {what}",
            "Close the argument list with ')'",
        )
        return args, end

    def _parse_array_literal(self) -> ArrayLiteral:
        start = self._advance().span  # '['
        elements: list[Expr] = []
        while not self._at(TokenKind.RBRACKET):
            if elements:
                self._expect(
                    TokenKind.COMMA, "Expected ',' or ']' in array literal",
                    "Separate elements with ','",
                )
            elements.append(self._parse_expression())
        end = self._expect(TokenKind.RBRACKET, "Expected ']' after array elements")
        return ArrayLiteral(elements, start.merge(end.span))

    def _parse_enum_variant(self, name_tok: Token) -> EnumVariant:
        self._advance()  # ':'
        self._advance()  # ':'
        variant = self._expect(
            TokenKind.IDENTIFIER, "Expected variant name after '::'",
            "Use: EnumName::Variant",
        )
        return EnumVariant(name_tok.value, variant.value, name_tok.span.merge(variant.span))

    def _parse_struct_init(self, name_tok: Token) -> StructInit:
        self._advance()  # '{'
        fields: list[tuple[str, Expr]] = []
        while not self._at(TokenKind.RBRACE):
            f_tok = self._expect(
                TokenKind.IDENTIFIER, f"Expected field name in '{name_tok.value}' literal",
                f"Use: {name_tok.value} {{ field: value, ... }}",
            )
            self._expect(TokenKind.COLON, f"Expected ':' after field '{f_tok.value}'")
            fields.append((f_tok.value, self._parse_expression()))
            if not self._at(TokenKind.COMMA):
                break
            self._advance()
        end = self._expect(
            TokenKind.RBRACE, f"Expected '}}' to close '{name_tok.value}' literal",
            "Separate fields with ','",
        )
        return StructInit(name_tok.value, fields, name_tok.span.merge(end.span))


def parse(source: str, filename: str = "<stdin>") -> Block:
    """Lex and parse ``source`` into its top-level block."""
    return Parser(Lexer(source, filename)).parse()
