"""Static type checker for the Raven language.

Walks the AST in order. Declarations are registered as they are reached:
a function is registered before its body is checked (so it may recurse),
and a struct or enum must be declared before it is used as a type. The
first error aborts the check with a ``TypeCheckError`` carrying the span of
the offending node.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

from raven.ast_nodes import (
    ARITHMETIC_OPS,
    EQUALITY_OPS,
    LOGICAL_OPS,
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
    Node,
    PrintStmt,
    ReturnStmt,
    StringLit,
    StructDecl,
    StructInit,
    TypeRef,
    UnaryExpr,
    UnaryOp,
    VarDecl,
    WhileLoop,
)
from raven.builtins import SIGNATURES, BuiltinSignature, count_placeholders
from raven.errors import RavenError, TypeCheckError
from raven.methods import ARITY, ARRAY_METHODS, STRING_METHODS, Method
from raven.modules import ModuleGraph, ParsedModule, module_stem
from raven.source import Span
from raven.symbols import (
    EnumInfo,
    FunctionSignature,
    StructInfo,
    Symbol,
    SymbolKind,
    SymbolTable,
)
from raven.types import (
    BOOL,
    FLOAT,
    INT,
    PRIMITIVES,
    STRING,
    VOID,
    ArrayType,
    EnumType,
    ModuleType,
    StructType,
    Type,
    VoidType,
    numeric_widen,
    type_name,
    types_compatible,
)


@dataclass
class ModuleInfo:
    """What the checker knows about an imported module."""

    parsed: ParsedModule
    symbols: SymbolTable

    def function(self, name: str) -> FunctionSignature | None:
        if not self.parsed.is_public(name):
            return None
        return self.symbols.functions.get(name)

    def variable(self, name: str) -> Symbol | None:
        if not self.parsed.is_public(name):
            return None
        sym = self.symbols.module_scope.lookup_local(name)
        if sym is None or sym.kind != SymbolKind.VARIABLE:
            return None
        return sym


class Checker:
    """Type checker for one source file (and, recursively, its imports)."""

    def __init__(
        self,
        *,
        filename: str = "<stdin>",
        source: str | None = None,
        base_dir: Path | None = None,
        modules: ModuleGraph[ModuleInfo] | None = None,
    ) -> None:
        self.symbols = SymbolTable()
        self.filename = filename
        self.source = source
        self.base_dir = base_dir or Path.cwd()
        self.modules: ModuleGraph[ModuleInfo] = modules or ModuleGraph(TypeCheckError)
        self.imported: dict[str, ModuleInfo] = {}
        self._return_type: Type | None = None

    # ── Public API ──────────────────────────────────────────────

    def check(self, node: Node) -> Type:
        """Check a program, statement or expression and return its type.

        A block yields the type of its last statement; declarations yield the
        declared type; other statements yield ``void``.
        """
        try:
            return self._check_node(node)
        except RavenError as err:
            raise err.attach(self.source, self.filename)

    # ── Error helpers ───────────────────────────────────────────

    def _error(self, message: str, span: Span, hint: str | None = None) -> NoReturn:
        raise TypeCheckError(message, span, hint=hint)

    def _expect_type(self, expected: Type, actual: Type, span: Span, what: str) -> None:
        if not types_compatible(expected, actual):
            self._error(
                f"Type mismatch in {what}: expected {type_name(expected)}, "
                f"found {type_name(actual)}",
                span,
            )

    # ── Statements ──────────────────────────────────────────────

    def _check_node(self, node: Node) -> Type:
        if isinstance(node, Block):
            return self._check_block(node)
        if isinstance(node, VarDecl):
            return self._check_var_decl(node)
        if isinstance(node, FunctionDecl):
            return self._check_function(node)
        if isinstance(node, StructDecl):
            return self._check_struct(node)
        if isinstance(node, EnumDecl):
            return self._check_enum(node)
        if isinstance(node, Assignment):
            return self._check_assignment(node)
        if isinstance(node, IfStmt):
            return self._check_if(node)
        if isinstance(node, WhileLoop):
            self._expect_condition(node.condition, "while")
            self._check_block(node.body)
            return VOID
        if isinstance(node, ForLoop):
            return self._check_for(node)
        if isinstance(node, PrintStmt):
            return self._check_print(node)
        if isinstance(node, ReturnStmt):
            return self._check_return(node)
        if isinstance(node, CallStmt):
            return self._infer_expr(node.call)
        if isinstance(node, ExprStmt):
            return self._infer_expr(node.expr)
        if isinstance(node, ImportStmt):
            return self._check_import(node)
        if isinstance(node, ImportSelective):
            return self._check_import_selective(node)
        if isinstance(node, ExportStmt):
            return self._check_node(node.stmt)
        return self._infer_expr(node)

    def _check_block(self, block: Block) -> Type:
        result: Type = VOID
        for stmt in block.statements:
            result = self._check_node(stmt)
        return result

    def _check_var_decl(self, vd: VarDecl) -> Type:
        expected = self._resolve_type_ref(vd.type_ref) if vd.type_ref is not None else None
        actual = self._infer_expr(vd.value, expected)
        if isinstance(actual, VoidType):
            self._error(
                f"Cannot initialize '{vd.name}' with a void value", vd.value.span,
                "The expression does not produce a value",
            )
        if expected is not None:
            self._expect_type(expected, actual, vd.value.span, f"declaration of '{vd.name}'")
        resolved = expected if expected is not None else actual
        self.symbols.define(Symbol(vd.name, SymbolKind.VARIABLE, resolved, vd.span))
        return resolved

    def _check_function(self, fd: FunctionDecl) -> Type:
        seen: set[str] = set()
        param_types: list[Type] = []
        for param in fd.params:
            if param.name in seen:
                self._error(
                    f"Duplicate parameter '{param.name}' in function '{fd.name}'", param.span,
                )
            seen.add(param.name)
            ty = self._resolve_type_ref(param.type_ref)
            if isinstance(ty, VoidType):
                self._error(f"Parameter '{param.name}' cannot have type void", param.span)
            param_types.append(ty)
        return_type = self._resolve_type_ref(fd.return_type)

        # Registered before the body so the function can call itself
        self.symbols.define_function(FunctionSignature(
            name=fd.name,
            param_names=[p.name for p in fd.params],
            param_types=param_types,
            return_type=return_type,
            span=fd.span,
        ))

        self.symbols.push_scope(fd.name)
        saved = self._return_type
        self._return_type = return_type
        try:
            for param, ty in zip(fd.params, param_types):
                self.symbols.define(Symbol(param.name, SymbolKind.PARAMETER, ty, param.span))
            self._check_block(fd.body)
        finally:
            self._return_type = saved
            self.symbols.pop_scope()
        return VOID

    def _check_struct(self, sd: StructDecl) -> Type:
        fields: dict[str, Type] = {}
        for fdecl in sd.fields:
            if fdecl.name in fields:
                self._error(f"Duplicate field '{fdecl.name}' in struct '{sd.name}'", fdecl.span)
            ty = self._resolve_type_ref(fdecl.type_ref)
            if isinstance(ty, VoidType):
                self._error(f"Field '{fdecl.name}' cannot have type void", fdecl.span)
            fields[fdecl.name] = ty
        self.symbols.define_struct(StructInfo(sd.name, fields, sd.span))
        return VOID

    def _check_enum(self, ed: EnumDecl) -> Type:
        variants: list[str] = []
        for variant in ed.variants:
            if variant in variants:
                self._error(f"Duplicate variant '{variant}' in enum '{ed.name}'", ed.span)
            variants.append(variant)
        self.symbols.define_enum(EnumInfo(ed.name, variants, ed.span))
        return VOID

    def _check_assignment(self, assign: Assignment) -> Type:
        target_type = self._place_type(assign.target)
        value_type = self._infer_value(assign.value, target_type)
        self._expect_type(target_type, value_type, assign.value.span, "assignment")
        return VOID

    def _check_if(self, stmt: IfStmt) -> Type:
        self._expect_condition(stmt.condition, "if")
        self._check_block(stmt.then_block)
        if stmt.else_if is not None:
            self._check_if(stmt.else_if)
        if stmt.else_block is not None:
            self._check_block(stmt.else_block)
        return VOID

    def _check_for(self, loop: ForLoop) -> Type:
        self._check_var_decl(loop.init)
        self._expect_condition(loop.condition, "for")
        self._check_block(loop.body)
        self._check_assignment(loop.increment)
        return VOID

    def _expect_condition(self, expr: Expr, keyword: str) -> None:
        ty = self._infer_value(expr)
        if ty != BOOL:
            self._error(
                f"Condition of '{keyword}' must be bool, found {type_name(ty)}", expr.span,
            )

    def _check_print(self, stmt: PrintStmt) -> Type:
        types = [self._infer_value(arg) for arg in stmt.args]
        if len(types) > 1:
            template = stmt.args[0]
            if types[0] != STRING:
                self._error(
                    "The first argument of print must be a String when more arguments follow",
                    template.span,
                    'Use a format string: print("x = {}", x);',
                )
            self._check_placeholders(template, len(types) - 1, "print")
        return VOID

    def _check_placeholders(self, template: Expr, given: int, what: str) -> None:
        if not isinstance(template, StringLit):
            return
        expected = count_placeholders(template.value)
        if expected != given:
            self._error(
                f"{what}: format string has {expected} placeholder(s) "
                f"but {given} argument(s) were given",
                template.span,
                "Use one '{}' per argument",
            )

    def _check_return(self, stmt: ReturnStmt) -> Type:
        if self._return_type is None:
            self._error("'return' outside of a function", stmt.span)
        expected = self._return_type
        if stmt.value is None:
            if not isinstance(expected, VoidType):
                self._error(
                    f"Missing return value: function returns {type_name(expected)}", stmt.span,
                )
            return VOID
        if isinstance(expected, VoidType):
            self._error(
                "Cannot return a value from a void function", stmt.value.span,
                "Declare a return type with '-> type'",
            )
        actual = self._infer_value(stmt.value, expected)
        self._expect_type(expected, actual, stmt.value.span, "return value")
        return VOID

    # ── Imports ─────────────────────────────────────────────────

    def _build_module(self, parsed: ParsedModule) -> ModuleInfo:
        checker = Checker(
            filename=str(parsed.path),
            source=parsed.source,
            base_dir=parsed.path.parent,
            modules=self.modules,
        )
        checker.check(parsed.program)
        return ModuleInfo(parsed, checker.symbols)

    def _load_module(self, path: str, span: Span) -> ModuleInfo:
        info = self.modules.load(path, self.base_dir, self._build_module, span)
        # Struct and enum definitions always come along so values of those
        # types can be used; local declarations win
        for name, struct in info.symbols.structs.items():
            self.symbols.structs.setdefault(name, struct)
        for name, enum in info.symbols.enums.items():
            self.symbols.enums.setdefault(name, enum)
        return info

    def _check_import(self, stmt: ImportStmt) -> Type:
        info = self._load_module(stmt.path, stmt.span)
        alias = stmt.alias or module_stem(stmt.path, self.modules.extension)
        self.imported[alias] = info
        self.symbols.define(Symbol(alias, SymbolKind.MODULE, ModuleType(alias), stmt.span))
        return VOID

    def _check_import_selective(self, stmt: ImportSelective) -> Type:
        info = self._load_module(stmt.path, stmt.span)
        for name in stmt.names:
            if not info.parsed.is_public(name):
                self._error(
                    f"'{name}' is not exported by module '{stmt.path}'", stmt.span,
                    f"Mark it with 'export' in {info.parsed.path.name}",
                )
            sig = info.function(name)
            var = info.variable(name)
            if sig is not None:
                self.symbols.define_function(sig)
            elif var is not None:
                self.symbols.define(Symbol(name, SymbolKind.VARIABLE, var.resolved_type, stmt.span))
            elif name not in info.symbols.structs and name not in info.symbols.enums:
                self._error(f"Module '{stmt.path}' has no member '{name}'", stmt.span)
        return VOID

    def _imported_module(self, expr: Expr) -> tuple[str, ModuleInfo] | None:
        if not isinstance(expr, Identifier):
            return None
        sym = self.symbols.lookup(expr.name)
        if sym is None or sym.kind != SymbolKind.MODULE:
            return None
        return expr.name, self.imported[expr.name]

    # ── Types ───────────────────────────────────────────────────

    def _resolve_type_ref(self, ref: TypeRef) -> Type:
        base = PRIMITIVES.get(ref.name)
        if base is None:
            if ref.name in self.symbols.structs:
                base = StructType(ref.name)
            elif ref.name in self.symbols.enums:
                base = EnumType(ref.name)
            else:
                self._error(
                    f"Unknown type '{ref.name}'", ref.span,
                    "Declare the struct or enum before using it",
                )
        return ArrayType(base) if ref.is_array else base

    def _place_type(self, expr: Expr) -> Type:
        """Type of an assignable location."""
        if isinstance(expr, Identifier):
            sym = self.symbols.lookup(expr.name)
            if sym is None:
                self._error(
                    f"Undefined variable '{expr.name}'", expr.span,
                    f"Declare it first with 'let {expr.name} = ...;'",
                )
            if sym.kind == SymbolKind.MODULE:
                self._error(f"Cannot assign to module '{expr.name}'", expr.span)
            return sym.resolved_type
        if isinstance(expr, FieldAccess):
            if self._imported_module(expr.obj) is not None:
                self._error("Cannot assign to a member of an imported module", expr.span)
            return self._field_type(self._place_type(expr.obj), expr)
        if isinstance(expr, IndexExpr):
            target = self._place_type(expr.target)
            self._expect_index(expr.index)
            if isinstance(target, ArrayType):
                return target.element
            if target == STRING:
                self._error(
                    "Cannot assign to an index of a String", expr.span,
                    "Strings are immutable; build a new one instead",
                )
            self._error(f"Cannot index into {type_name(target)}", expr.span)
        self._error(
            "Invalid assignment target", expr.span,
            "Only variables, fields and array elements can be assigned",
        )

    def _field_type(self, obj_type: Type, expr: FieldAccess) -> Type:
        if not isinstance(obj_type, StructType):
            self._error(f"Cannot access field '{expr.field}' on {type_name(obj_type)}", expr.span)
        info = self.symbols.structs.get(obj_type.name)
        if info is None:
            self._error(f"Unknown struct '{obj_type.name}'", expr.span)
        field_type = info.fields.get(expr.field)
        if field_type is None:
            self._error(
                f"Struct '{obj_type.name}' has no field '{expr.field}'", expr.span,
                f"Fields: {', '.join(info.fields) or '(none)'}",
            )
        return field_type

    def _expect_index(self, index: Expr) -> None:
        ty = self._infer_value(index)
        if ty != INT:
            self._error(f"Index must be int, found {type_name(ty)}", index.span)

    # ── Expression type inference ───────────────────────────────

    def _infer_value(self, expr: Expr, expected: Type | None = None) -> Type:
        """Infer the type of an expression that must produce a value."""
        ty = self._infer_expr(expr, expected)
        if isinstance(ty, VoidType):
            self._error("Expression has no value (type void)", expr.span)
        return ty

    def _infer_expr(self, expr: Expr, expected: Type | None = None) -> Type:
        """Infer the type of an expression. ``expected`` types empty arrays."""
        if isinstance(expr, IntegerLit):
            return INT
        if isinstance(expr, FloatLit):
            return FLOAT
        if isinstance(expr, BooleanLit):
            return BOOL
        if isinstance(expr, StringLit):
            return STRING
        if isinstance(expr, Identifier):
            return self._infer_identifier(expr)
        if isinstance(expr, UnaryExpr):
            return self._infer_unary(expr)
        if isinstance(expr, BinaryExpr):
            return self._infer_binary(expr)
        if isinstance(expr, CallExpr):
            return self._infer_call(expr)
        if isinstance(expr, ArrayLiteral):
            return self._infer_array(expr, expected)
        if isinstance(expr, IndexExpr):
            return self._infer_index(expr)
        if isinstance(expr, MethodCallExpr):
            return self._infer_method_call(expr)
        if isinstance(expr, FieldAccess):
            return self._infer_field(expr)
        if isinstance(expr, StructInit):
            return self._infer_struct_init(expr)
        if isinstance(expr, EnumVariant):
            return self._infer_enum_variant(expr)
        self._error(f"Cannot type-check {type(expr).__name__}", expr.span)

    def _infer_identifier(self, expr: Identifier) -> Type:
        sym = self.symbols.lookup(expr.name)
        if sym is None:
            hint = None
            if expr.name in self.symbols.functions:
                hint = f"'{expr.name}' is a function; call it with '{expr.name}(...)'"
            self._error(f"Undefined variable '{expr.name}'", expr.span, hint)
        return sym.resolved_type

    def _infer_unary(self, expr: UnaryExpr) -> Type:
        operand = self._infer_value(expr.operand)
        if expr.op == UnaryOp.NEGATE:
            if operand not in (INT, FLOAT):
                self._error(f"Cannot negate {type_name(operand)}", expr.span)
            return operand
        if operand != BOOL:
            self._error(f"Operator '!' requires bool, found {type_name(operand)}", expr.span)
        return BOOL

    def _infer_binary(self, expr: BinaryExpr) -> Type:
        left = self._infer_value(expr.left)
        right = self._infer_value(expr.right)
        op = expr.op
        operands = f"{type_name(left)} and {type_name(right)}"

        if op in LOGICAL_OPS:
            if left != BOOL or right != BOOL:
                self._error(f"Operator '{op.value}' requires bool operands, found {operands}", expr.span)
            return BOOL

        if op == BinaryOp.ADD and (left == STRING or right == STRING):
            return STRING

        if op in ARITHMETIC_OPS:
            widened = numeric_widen(left, right)
            if widened is None:
                self._error(f"Operator '{op.value}' cannot be applied to {operands}", expr.span)
            return widened

        if left != right:
            self._error(f"Cannot compare {operands}", expr.span, "Both sides must have the same type")
        if op not in EQUALITY_OPS and left not in (INT, FLOAT, STRING):
            self._error(f"Operator '{op.value}' cannot be applied to {operands}", expr.span)
        return BOOL

    def _check_arguments(
        self, name: str, param_types: list[Type], args: list[Expr], span: Span,
    ) -> None:
        if len(args) != len(param_types):
            self._error(
                f"Function '{name}' takes {len(param_types)} argument(s) "
                f"but {len(args)} were given",
                span,
            )
        for i, (arg, param) in enumerate(zip(args, param_types)):
            actual = self._infer_value(arg, param)
            self._expect_type(param, actual, arg.span, f"argument {i + 1} of '{name}'")

    def _infer_call(self, expr: CallExpr) -> Type:
        sig = self.symbols.resolve_function(expr.name)
        if sig is not None:
            self._check_arguments(expr.name, sig.param_types, expr.args, expr.span)
            return sig.return_type
        builtin = SIGNATURES.get(expr.name)
        if builtin is not None:
            return self._infer_builtin_call(builtin, expr)
        self._error(f"Undefined function '{expr.name}'", expr.span)

    def _infer_builtin_call(self, sig: BuiltinSignature, expr: CallExpr) -> Type:
        args = expr.args
        if not sig.accepts(len(args)):
            self._error(
                f"{sig.name}() takes {sig.arity_text()} argument(s) but {len(args)} were given",
                expr.span,
            )

        if sig.name == "enum_from_string":
            enum = args[0]
            if not isinstance(enum, StringLit):
                self._error(
                    "enum_from_string() expects the enum name as a string literal", enum.span,
                    'Use: enum_from_string("Color", text)',
                )
            if enum.value not in self.symbols.enums:
                self._error(f"Unknown enum '{enum.value}'", enum.span)
            variant = self._infer_value(args[1])
            self._expect_type(STRING, variant, args[1].span, "argument 2 of 'enum_from_string'")
            return EnumType(enum.value)

        for i, arg in enumerate(args):
            param = sig.param_types[i] if i < len(sig.param_types) else None
            actual = self._infer_value(arg, param)
            if param is not None:
                self._expect_type(param, actual, arg.span, f"argument {i + 1} of '{sig.name}'")
            if sig.name == "len" and not (isinstance(actual, ArrayType) or actual == STRING):
                self._error(f"len() expects an array or String, found {type_name(actual)}", arg.span)

        if sig.name == "format":
            self._check_placeholders(args[0], len(args) - 1, "format")
        return sig.return_type

    def _infer_array(self, expr: ArrayLiteral, expected: Type | None) -> Type:
        if not expr.elements:
            if isinstance(expected, ArrayType):
                return expected
            self._error(
                "Cannot infer the type of an empty array", expr.span,
                "Give the variable a type: let a: int[] = [];",
            )
        element_hint = expected.element if isinstance(expected, ArrayType) else None
        first = self._infer_value(expr.elements[0], element_hint)
        for element in expr.elements[1:]:
            ty = self._infer_value(element, first)
            if ty != first:
                self._error(
                    f"Array elements must all have type {type_name(first)}, found {type_name(ty)}",
                    element.span,
                )
        return ArrayType(first)

    def _infer_index(self, expr: IndexExpr) -> Type:
        target = self._infer_value(expr.target)
        self._expect_index(expr.index)
        if isinstance(target, ArrayType):
            return target.element
        if target == STRING:
            return STRING
        self._error(f"Cannot index into {type_name(target)}", expr.span)

    def _infer_method_call(self, expr: MethodCallExpr) -> Type:
        module = self._imported_module(expr.receiver)
        if module is not None:
            alias, info = module
            sig = info.function(expr.method)
            if sig is None:
                self._error(f"Module '{alias}' has no exported function '{expr.method}'", expr.span)
            self._check_arguments(f"{alias}.{expr.method}", sig.param_types, expr.args, expr.span)
            return sig.return_type

        receiver = self._infer_value(expr.receiver)
        if isinstance(receiver, ArrayType):
            allowed = ARRAY_METHODS
        elif receiver == STRING:
            allowed = STRING_METHODS
        else:
            self._error(f"Type {type_name(receiver)} has no method '{expr.method}'", expr.span)

        method = Method.from_name(expr.method)
        if method is None or method not in allowed:
            names = ", ".join(sorted(m.value for m in allowed))
            self._error(
                f"Unknown method '{expr.method}' on {type_name(receiver)}", expr.span,
                f"Available methods: {names}",
            )
        if len(expr.args) != ARITY[method]:
            self._error(
                f"Method '{method.value}' takes {ARITY[method]} argument(s) "
                f"but {len(expr.args)} were given",
                expr.span,
            )

        what = f"argument of '{method.value}'"
        match method:
            case Method.PUSH:
                element = receiver.element
                self._expect_type(element, self._infer_value(expr.args[0], element), expr.args[0].span, what)
                return receiver
            case Method.POP:
                return receiver.element
            case Method.SLICE:
                for arg in expr.args:
                    self._expect_type(INT, self._infer_value(arg), arg.span, what)
                return receiver
            case Method.JOIN:
                self._expect_type(STRING, self._infer_value(expr.args[0]), expr.args[0].span, what)
                return STRING
            case Method.SPLIT:
                self._expect_type(STRING, self._infer_value(expr.args[0]), expr.args[0].span, what)
                return ArrayType(STRING)
            case Method.REPLACE:
                for arg in expr.args:
                    self._expect_type(STRING, self._infer_value(arg), arg.span, what)
                return STRING

    def _infer_field(self, expr: FieldAccess) -> Type:
        module = self._imported_module(expr.obj)
        if module is not None:
            alias, info = module
            var = info.variable(expr.field)
            if var is None:
                self._error(f"Module '{alias}' has no exported variable '{expr.field}'", expr.span)
            return var.resolved_type
        return self._field_type(self._infer_value(expr.obj), expr)

    def _infer_struct_init(self, expr: StructInit) -> Type:
        info = self.symbols.structs.get(expr.name)
        if info is None:
            self._error(f"Unknown struct '{expr.name}'", expr.span)
        given: set[str] = set()
        for name, value in expr.fields:
            if name not in info.fields:
                self._error(
                    f"Struct '{expr.name}' has no field '{name}'", value.span,
                    f"Fields: {', '.join(info.fields) or '(none)'}",
                )
            if name in given:
                self._error(f"Field '{name}' is given more than once", value.span)
            given.add(name)
            expected = info.fields[name]
            self._expect_type(expected, self._infer_value(value, expected), value.span, f"field '{name}'")
        missing = [name for name in info.fields if name not in given]
        if missing:
            self._error(
                f"Missing field(s) in '{expr.name}' literal: {', '.join(missing)}", expr.span,
            )
        return StructType(expr.name)

    def _infer_enum_variant(self, expr: EnumVariant) -> Type:
        info = self.symbols.enums.get(expr.enum)
        if info is None:
            self._error(f"Unknown enum '{expr.enum}'", expr.span)
        if expr.variant not in info.variants:
            self._error(
                f"Enum '{expr.enum}' has no variant '{expr.variant}'", expr.span,
                f"Variants: {', '.join(info.variants)}",
            )
        return EnumType(expr.enum)
