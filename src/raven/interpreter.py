"""Tree-walking interpreter for the Raven language.

``execute`` evaluates any node and returns a value. Early return uses a
single pending-return sentinel: once a ``return`` has run, enclosing blocks
and loops stop and hand the value up until the function call boundary
clears it.
"""

from __future__ import annotations

import math
import operator
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import NoReturn, TextIO

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
from raven.builtins import call_builtin, is_builtin, print_text
from raven.environment import Environment, FieldStep, IndexStep, Place
from raven.errors import RavenError, RavenRuntimeError
from raven.methods import ARITY, Method
from raven.modules import ModuleGraph, ParsedModule, module_stem
from raven.source import Span
from raven.values import (
    FALSE,
    I64_MAX,
    I64_MIN,
    TRUE,
    VOID,
    ArrayValue,
    BoolValue,
    EnumValue,
    FloatValue,
    IntValue,
    ModuleValue,
    StringValue,
    StructValue,
    Value,
    from_bool,
)

# Deepest chain of Raven calls; the host recursion limit is raised to fit it
MAX_CALL_DEPTH = 2500
_FRAMES_PER_CALL = 40

_COMPARISONS = {
    BinaryOp.LESS: operator.lt,
    BinaryOp.GREATER: operator.gt,
    BinaryOp.LESS_EQUAL: operator.le,
    BinaryOp.GREATER_EQUAL: operator.ge,
}


@dataclass
class UserFunction:
    """A declared function and the interpreter whose globals it closes over."""

    decl: FunctionDecl
    owner: Interpreter


@dataclass
class RuntimeModule:
    parsed: ParsedModule
    interpreter: Interpreter

    def function(self, name: str) -> UserFunction | None:
        if not self.parsed.is_public(name):
            return None
        return self.interpreter.functions.get(name)

    def variable(self, name: str) -> Value | None:
        if not self.parsed.is_public(name):
            return None
        return self.interpreter.globals.lookup(name)


def _truncating_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _typed(value: Value, type_ref: TypeRef | None) -> Value:
    """Give an empty array the element type named by its declaration."""
    if (
        type_ref is not None
        and type_ref.is_array
        and isinstance(value, ArrayValue)
        and value.element_type is None
    ):
        return replace(value, element_type=type_ref.name)
    return value


class Interpreter:
    """Executes Raven programs against injectable input and output streams."""

    def __init__(
        self,
        *,
        filename: str = "<stdin>",
        source: str | None = None,
        base_dir: Path | None = None,
        modules: ModuleGraph[RuntimeModule] | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.filename = filename
        self.source = source
        self.base_dir = base_dir or Path.cwd()
        self.modules: ModuleGraph[RuntimeModule] = modules or ModuleGraph(RavenRuntimeError)
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

        self.globals = Environment(name="globals")
        self.env = self.globals
        self.functions: dict[str, UserFunction] = {}
        self.structs: dict[str, dict[str, TypeRef]] = {}
        self.enums: dict[str, list[str]] = {}
        self._pending_return: Value | None = None
        self._depth = 0

        limit = MAX_CALL_DEPTH * _FRAMES_PER_CALL
        if sys.getrecursionlimit() < limit:
            sys.setrecursionlimit(limit)

    # ── Public API ──────────────────────────────────────────────

    def run(self, program: Block) -> Value:
        """Execute top-level statements; returns the value of the last one."""
        self._pending_return = None
        result: Value = VOID
        try:
            for stmt in program.statements:
                try:
                    result = self.execute(stmt)
                except RecursionError:
                    raise RavenRuntimeError(
                        "Maximum recursion depth exceeded", stmt.span,
                        hint="Check that recursive functions reach a base case",
                    ) from None
                if self._pending_return is not None:
                    break
        except RavenError as err:
            raise err.attach(self.source, self.filename)
        finally:
            self._pending_return = None
        return result

    def execute(self, node: Node) -> Value:
        """Execute a statement or evaluate an expression."""
        if self._pending_return is not None:
            return self._pending_return

        if isinstance(node, Block):
            return self._exec_block(node)
        if isinstance(node, VarDecl):
            return self._exec_var_decl(node)
        if isinstance(node, FunctionDecl):
            self.functions[node.name] = UserFunction(node, self)
            return VOID
        if isinstance(node, StructDecl):
            self.structs[node.name] = {f.name: f.type_ref for f in node.fields}
            return VOID
        if isinstance(node, EnumDecl):
            self.enums[node.name] = list(node.variants)
            return VOID
        if isinstance(node, Assignment):
            return self._exec_assignment(node)
        if isinstance(node, IfStmt):
            return self._exec_if(node)
        if isinstance(node, WhileLoop):
            return self._exec_while(node)
        if isinstance(node, ForLoop):
            return self._exec_for(node)
        if isinstance(node, PrintStmt):
            args = [self._evaluate(arg) for arg in node.args]
            self.stdout.write(print_text(args, node.span) + "\n")
            return VOID
        if isinstance(node, ReturnStmt):
            value = self._evaluate(node.value) if node.value is not None else VOID
            self._pending_return = value
            return value
        if isinstance(node, CallStmt):
            return self._evaluate(node.call)
        if isinstance(node, ExprStmt):
            return self._evaluate(node.expr)
        if isinstance(node, ImportStmt):
            return self._exec_import(node)
        if isinstance(node, ImportSelective):
            return self._exec_import_selective(node)
        if isinstance(node, ExportStmt):
            return self.execute(node.stmt)
        return self._evaluate(node)

    def call_function(self, name: str, args: list[Value], span: Span | None = None) -> Value:
        """Call a declared, imported or builtin function by name."""
        span = span or Span.dummy()
        func = self.functions.get(name)
        if func is not None:
            return func.owner._invoke(func.decl, args, span)
        if is_builtin(name):
            return call_builtin(self, name, args, span)
        self._error(f"Undefined function '{name}'", span)

    # ── Helpers ─────────────────────────────────────────────────

    def _error(self, message: str, span: Span, hint: str | None = None) -> NoReturn:
        raise RavenRuntimeError(message, span, hint=hint)

    def _expect_bool(self, value: Value, span: Span) -> bool:
        if not isinstance(value, BoolValue):
            self._error(f"Expected bool, found {value.type_name()}", span)
        return value.value

    def _expect_int(self, value: Value, span: Span, what: str) -> int:
        if not isinstance(value, IntValue):
            self._error(f"{what} must be int, found {value.type_name()}", span)
        return value.value

    def _expect_string(self, value: Value, span: Span, what: str) -> str:
        if not isinstance(value, StringValue):
            self._error(f"{what} must be String, found {value.type_name()}", span)
        return value.value

    def _invoke(self, decl: FunctionDecl, args: list[Value], span: Span) -> Value:
        """Run ``decl`` in a fresh frame whose parent is this module's globals."""
        if len(args) != len(decl.params):
            self._error(
                f"Function '{decl.name}' takes {len(decl.params)} argument(s) "
                f"but {len(args)} were given",
                span,
            )
        if self._depth >= MAX_CALL_DEPTH:
            self._error(
                f"Maximum recursion depth exceeded ({MAX_CALL_DEPTH} nested calls)", span,
                hint="Check that recursive functions reach a base case",
            )

        frame = Environment(parent=self.globals, name=decl.name)
        for param, arg in zip(decl.params, args):
            frame.define(param.name, _typed(arg, param.type_ref))

        saved_env, saved_return = self.env, self._pending_return
        self.env, self._pending_return = frame, None
        self._depth += 1
        try:
            self._exec_block(decl.body)
            result = self._pending_return
            if result is None:
                if decl.return_type.name != "void" or decl.return_type.is_array:
                    self._error(
                        f"Function '{decl.name}' ended without returning a value", decl.span,
                        f"Every path through '{decl.name}' must return {decl.return_type}",
                    )
                result = VOID
        except RavenError as err:
            raise err.attach(self.source, self.filename)
        finally:
            self._depth -= 1
            self.env, self._pending_return = saved_env, saved_return
        return _typed(result, decl.return_type)

    # ── Statements ──────────────────────────────────────────────

    def _exec_block(self, block: Block) -> Value:
        result: Value = VOID
        for stmt in block.statements:
            result = self.execute(stmt)
            if self._pending_return is not None:
                return self._pending_return
        return result

    def _exec_var_decl(self, vd: VarDecl) -> Value:
        self.env.define(vd.name, _typed(self._evaluate(vd.value), vd.type_ref))
        return VOID

    def _exec_assignment(self, assign: Assignment) -> Value:
        place = self._place(assign.target)
        if place is None:
            self._error("Invalid assignment target", assign.target.span)
        value = self._evaluate(assign.value)
        if isinstance(value, ArrayValue) and value.element_type is None:
            current = place.read(self.env)
            if isinstance(current, ArrayValue):
                value = replace(value, element_type=current.element_type)
        place.write(self.env, value)
        return VOID

    def _exec_if(self, stmt: IfStmt) -> Value:
        if self._expect_bool(self._evaluate(stmt.condition), stmt.condition.span):
            return self._exec_block(stmt.then_block)
        if stmt.else_if is not None:
            return self._exec_if(stmt.else_if)
        if stmt.else_block is not None:
            return self._exec_block(stmt.else_block)
        return VOID

    def _exec_while(self, loop: WhileLoop) -> Value:
        while self._expect_bool(self._evaluate(loop.condition), loop.condition.span):
            self._exec_block(loop.body)
            if self._pending_return is not None:
                return self._pending_return
        return VOID

    def _exec_for(self, loop: ForLoop) -> Value:
        self._exec_var_decl(loop.init)
        while self._expect_bool(self._evaluate(loop.condition), loop.condition.span):
            self._exec_block(loop.body)
            if self._pending_return is not None:
                return self._pending_return
            self._exec_assignment(loop.increment)
        return VOID

    # ── Imports ─────────────────────────────────────────────────

    def _build_module(self, parsed: ParsedModule) -> RuntimeModule:
        interpreter = Interpreter(
            filename=str(parsed.path),
            source=parsed.source,
            base_dir=parsed.path.parent,
            modules=self.modules,
            stdin=self.stdin,
            stdout=self.stdout,
        )
        interpreter.run(parsed.program)
        return RuntimeModule(parsed, interpreter)

    def _load_module(self, path: str, span: Span) -> RuntimeModule:
        module = self.modules.load(path, self.base_dir, self._build_module, span)
        for name, fields in module.interpreter.structs.items():
            self.structs.setdefault(name, fields)
        for name, variants in module.interpreter.enums.items():
            self.enums.setdefault(name, variants)
        return module

    def _exec_import(self, stmt: ImportStmt) -> Value:
        module = self._load_module(stmt.path, stmt.span)
        alias = stmt.alias or module_stem(stmt.path, self.modules.extension)
        self.env.define(alias, ModuleValue(alias, str(module.parsed.path)))
        return VOID

    def _exec_import_selective(self, stmt: ImportSelective) -> Value:
        module = self._load_module(stmt.path, stmt.span)
        for name in stmt.names:
            if not module.parsed.is_public(name):
                self._error(f"'{name}' is not exported by module '{stmt.path}'", stmt.span)
            func = module.function(name)
            value = module.variable(name)
            if func is not None:
                self.functions[name] = func
            elif value is not None:
                self.env.define(name, value)
            elif name not in module.interpreter.structs and name not in module.interpreter.enums:
                self._error(f"Module '{stmt.path}' has no member '{name}'", stmt.span)
        return VOID

    def _module_receiver(self, expr: Expr) -> RuntimeModule | None:
        if not isinstance(expr, Identifier):
            return None
        value = self.env.lookup(expr.name)
        if not isinstance(value, ModuleValue):
            return None
        return self.modules.get(value.path)

    # ── Places ──────────────────────────────────────────────────

    def _place(self, expr: Expr) -> Place | None:
        """The addressable location ``expr`` denotes, or None for temporaries."""
        if isinstance(expr, Identifier):
            return Place(expr.name, (), expr.span)
        if isinstance(expr, FieldAccess):
            base = self._place(expr.obj)
            if base is None:
                return None
            return base.then(FieldStep(expr.field), expr.span)
        if isinstance(expr, IndexExpr):
            base = self._place(expr.target)
            if base is None:
                return None
            index = self._expect_int(self._evaluate(expr.index), expr.index.span, "Index")
            return base.then(IndexStep(index), expr.span)
        return None

    # ── Expressions ─────────────────────────────────────────────

    def _evaluate(self, expr: Expr) -> Value:
        if isinstance(expr, IntegerLit):
            return IntValue(expr.value)
        if isinstance(expr, FloatLit):
            return FloatValue(expr.value)
        if isinstance(expr, BooleanLit):
            return TRUE if expr.value else FALSE
        if isinstance(expr, StringLit):
            return StringValue(expr.value)
        if isinstance(expr, Identifier):
            return self._eval_identifier(expr)
        if isinstance(expr, UnaryExpr):
            return self._eval_unary(expr)
        if isinstance(expr, BinaryExpr):
            return self._eval_binary(expr)
        if isinstance(expr, CallExpr):
            args = [self._evaluate(arg) for arg in expr.args]
            return self.call_function(expr.name, args, expr.span)
        if isinstance(expr, ArrayLiteral):
            return ArrayValue(tuple(self._evaluate(e) for e in expr.elements))
        if isinstance(expr, IndexExpr):
            return self._eval_index(expr)
        if isinstance(expr, MethodCallExpr):
            return self._eval_method_call(expr)
        if isinstance(expr, FieldAccess):
            return self._eval_field(expr)
        if isinstance(expr, StructInit):
            return self._eval_struct_init(expr)
        if isinstance(expr, EnumVariant):
            return self._eval_enum_variant(expr)
        self._error(f"Cannot evaluate {type(expr).__name__}", expr.span)

    def _eval_identifier(self, expr: Identifier) -> Value:
        value = self.env.lookup(expr.name)
        if value is None:
            hint = None
            if expr.name in self.functions:
                hint = f"'{expr.name}' is a function; call it with '{expr.name}(...)'"
            self._error(f"Undefined variable '{expr.name}'", expr.span, hint)
        return value

    def _eval_unary(self, expr: UnaryExpr) -> Value:
        operand = self._evaluate(expr.operand)
        if expr.op == UnaryOp.NOT:
            return from_bool(not self._expect_bool(operand, expr.operand.span))
        if isinstance(operand, IntValue):
            return self._check_int(-operand.value, expr.span)
        if isinstance(operand, FloatValue):
            return FloatValue(-operand.value)
        self._error(f"Cannot negate {operand.type_name()}", expr.span)

    def _eval_binary(self, expr: BinaryExpr) -> Value:
        op = expr.op
        if op in LOGICAL_OPS:
            left = self._expect_bool(self._evaluate(expr.left), expr.left.span)
            if op == BinaryOp.AND and not left:
                return FALSE
            if op == BinaryOp.OR and left:
                return TRUE
            return from_bool(self._expect_bool(self._evaluate(expr.right), expr.right.span))

        left = self._evaluate(expr.left)
        right = self._evaluate(expr.right)

        if op == BinaryOp.ADD and (isinstance(left, StringValue) or isinstance(right, StringValue)):
            return StringValue(left.to_string() + right.to_string())
        if op in ARITHMETIC_OPS:
            return self._arithmetic(op, left, right, expr.span)
        if op in EQUALITY_OPS:
            equal = left == right
            return from_bool(equal if op == BinaryOp.EQUAL else not equal)

        if type(left) is not type(right) or not isinstance(left, (IntValue, FloatValue, StringValue)):
            self._error(
                f"Operator '{op.value}' cannot be applied to "
                f"{left.type_name()} and {right.type_name()}",
                expr.span,
            )
        return from_bool(_COMPARISONS[op](left.value, right.value))

    def _check_int(self, result: int, span: Span) -> IntValue:
        if not I64_MIN <= result <= I64_MAX:
            self._error("Integer overflow", span, "Integers are 64-bit signed")
        return IntValue(result)

    def _arithmetic(self, op: BinaryOp, left: Value, right: Value, span: Span) -> Value:
        if isinstance(left, IntValue) and isinstance(right, IntValue):
            a, b = left.value, right.value
            if op in (BinaryOp.DIVIDE, BinaryOp.MODULO) and b == 0:
                self._error("Division by zero", span)
            match op:
                case BinaryOp.ADD:
                    result = a + b
                case BinaryOp.SUBTRACT:
                    result = a - b
                case BinaryOp.MULTIPLY:
                    result = a * b
                case BinaryOp.DIVIDE:
                    result = _truncating_div(a, b)
                case _:
                    result = a - b * _truncating_div(a, b)
            return self._check_int(result, span)

        if isinstance(left, (IntValue, FloatValue)) and isinstance(right, (IntValue, FloatValue)):
            x, y = float(left.value), float(right.value)
            if op in (BinaryOp.DIVIDE, BinaryOp.MODULO) and y == 0.0:
                self._error("Division by zero", span)
            match op:
                case BinaryOp.ADD:
                    return FloatValue(x + y)
                case BinaryOp.SUBTRACT:
                    return FloatValue(x - y)
                case BinaryOp.MULTIPLY:
                    return FloatValue(x * y)
                case BinaryOp.DIVIDE:
                    return FloatValue(x / y)
                case _:
                    return FloatValue(math.fmod(x, y))

        self._error(
            f"Operator '{op.value}' cannot be applied to "
            f"{left.type_name()} and {right.type_name()}",
            span,
        )

    def _eval_index(self, expr: IndexExpr) -> Value:
        target = self._evaluate(expr.target)
        index = self._expect_int(self._evaluate(expr.index), expr.index.span, "Index")
        if isinstance(target, ArrayValue):
            items: tuple[Value, ...] | str = target.elements
        elif isinstance(target, StringValue):
            items = target.value
        else:
            self._error(f"Cannot index into {target.type_name()}", expr.span)
        if not 0 <= index < len(items):
            self._error(
                f"Index {index} out of bounds for {target.type_name()} of length {len(items)}",
                expr.span,
            )
        item = items[index]
        return StringValue(item) if isinstance(item, str) else item

    def _eval_field(self, expr: FieldAccess) -> Value:
        module = self._module_receiver(expr.obj)
        if module is not None:
            value = module.variable(expr.field)
            if value is None:
                self._error(
                    f"Module '{module.parsed.name}' has no exported variable '{expr.field}'",
                    expr.span,
                )
            return value
        return FieldStep(expr.field).get(self._evaluate(expr.obj), expr.span)

    def _eval_struct_init(self, expr: StructInit) -> Value:
        declared = self.structs.get(expr.name)
        if declared is None:
            self._error(f"Unknown struct '{expr.name}'", expr.span)
        given: dict[str, Value] = {}
        for name, value_expr in expr.fields:
            if name not in declared:
                self._error(f"Struct '{expr.name}' has no field '{name}'", value_expr.span)
            given[name] = _typed(self._evaluate(value_expr), declared[name])
        missing = [name for name in declared if name not in given]
        if missing:
            self._error(
                f"Missing field(s) in '{expr.name}' literal: {', '.join(missing)}", expr.span,
            )
        return StructValue(expr.name, tuple((name, given[name]) for name in declared))

    def _eval_enum_variant(self, expr: EnumVariant) -> Value:
        variants = self.enums.get(expr.enum)
        if variants is None:
            self._error(f"Unknown enum '{expr.enum}'", expr.span)
        if expr.variant not in variants:
            self._error(f"Enum '{expr.enum}' has no variant '{expr.variant}'", expr.span)
        return EnumValue(expr.enum, expr.variant)

    # ── Methods ─────────────────────────────────────────────────

    def _eval_method_call(self, expr: MethodCallExpr) -> Value:
        module = self._module_receiver(expr.receiver)
        if module is not None:
            func = module.function(expr.method)
            if func is None:
                self._error(
                    f"Module '{module.parsed.name}' has no exported function '{expr.method}'",
                    expr.span,
                )
            args = [self._evaluate(arg) for arg in expr.args]
            return func.owner._invoke(func.decl, args, expr.span)

        method = Method.from_name(expr.method)
        if method is None:
            self._error(f"Unknown method '{expr.method}'", expr.span)

        # push/pop write back when the receiver is addressable
        place = self._place(expr.receiver) if method.mutates else None
        receiver = place.read(self.env) if place is not None else self._evaluate(expr.receiver)
        args = [self._evaluate(arg) for arg in expr.args]
        if len(args) != ARITY[method]:
            self._error(
                f"Method '{method.value}' takes {ARITY[method]} argument(s) "
                f"but {len(args)} were given",
                expr.span,
            )

        if isinstance(receiver, ArrayValue):
            updated, result = self._array_method(method, receiver, args, expr)
            if place is not None and updated is not receiver:
                place.write(self.env, updated)
            return result
        if isinstance(receiver, StringValue):
            return self._string_method(method, receiver.value, args, expr)
        self._error(f"Type {receiver.type_name()} has no method '{method.value}'", expr.span)

    def _slice_bounds(self, args: list[Value], length: int, expr: MethodCallExpr) -> tuple[int, int]:
        start = self._expect_int(args[0], expr.args[0].span, "Slice start")
        end = self._expect_int(args[1], expr.args[1].span, "Slice end")
        if not 0 <= start <= end <= length:
            self._error(
                f"Slice [{start}, {end}) out of bounds for length {length}", expr.span,
            )
        return start, end

    def _array_method(
        self, method: Method, receiver: ArrayValue, args: list[Value], expr: MethodCallExpr,
    ) -> tuple[ArrayValue, Value]:
        """Apply ``method``; returns the receiver after the call and the result."""
        match method:
            case Method.PUSH:
                updated = receiver.pushed(args[0])
                return updated, updated
            case Method.POP:
                if not receiver:
                    self._error("Cannot pop from an empty array", expr.span)
                return receiver.popped()
            case Method.SLICE:
                start, end = self._slice_bounds(args, len(receiver), expr)
                return receiver, replace(receiver, elements=receiver.elements[start:end])
            case Method.JOIN:
                sep = self._expect_string(args[0], expr.args[0].span, "Separator")
                return receiver, StringValue(sep.join(e.to_string() for e in receiver.elements))
        self._error(f"Unknown method '{method.value}' on {receiver.type_name()}", expr.span)

    def _string_method(
        self, method: Method, text: str, args: list[Value], expr: MethodCallExpr,
    ) -> Value:
        match method:
            case Method.SLICE:
                start, end = self._slice_bounds(args, len(text), expr)
                return StringValue(text[start:end])
            case Method.SPLIT:
                sep = self._expect_string(args[0], expr.args[0].span, "Separator")
                if not sep:
                    self._error("Cannot split on an empty separator", expr.args[0].span)
                return ArrayValue(tuple(StringValue(part) for part in text.split(sep)), "String")
            case Method.REPLACE:
                old = self._expect_string(args[0], expr.args[0].span, "Pattern")
                new = self._expect_string(args[1], expr.args[1].span, "Replacement")
                return StringValue(text.replace(old, new))
        self._error(f"Unknown method '{method.value}' on String", expr.span)
