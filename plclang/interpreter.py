"""Interpreter for the PLC language.

This module implements a tree-walking evaluator over the `Source` AST
together with the convenience pipeline (`run_program`, `compile_module`)
that scans, parses, analyzes and runs a program.

Statement execution returns either None (the statement completed) or a
`ReturnSignal` carrying the value of a `RETURN`. Every block propagates
a signal upward unchanged and only a function call consumes it.

Function bodies use call-time scoping: a call runs in a fresh child of
the scope active at the call site, not of the scope the function was
defined in. Globals stay visible because every chain ends at the global
scope.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Any, List, Optional, TextIO

from .analyzer import analyze
from .ast import (
    Source, GlobalDecl, FuncDecl, ExprStmt, VarDecl, Assign, IfStmt,
    SwitchStmt, CaseStmt, WhileStmt, ReturnStmt, Literal, Group, BinaryOp,
    Access, Call, ListLit, Node
)
from .builtin_function import define_builtins, make_print
from .debug import DebugLog
from .environment import Scope, Variable
from .errors import PlcRuntimeError
from .parser import parse_program
from .types import (
    ANY, NIL_VALUE, CharVal, is_integer, to_string, type_of_value, values_equal,
)

# Scratch variable holding a SWITCH condition; '$' cannot start an identifier
SWITCH_VARIABLE = '$switch'


def exact_precision(a: Decimal, b: Decimal) -> int:
    """Digits needed for `a + b`, `a - b` and `a * b` to be exact."""
    ta, tb = a.as_tuple(), b.as_tuple()
    return len(ta.digits) + len(tb.digits) + abs(ta.exponent - tb.exponent) + 2


def divide_decimal(a: Decimal, b: Decimal) -> Decimal:
    """Divide `a` by a nonzero `b` at the scale of `a`, rounding half to even.

    Works on the integer coefficients so the quotient is exact regardless
    of the size of the operands.
    """
    ta, tb = a.as_tuple(), b.as_tuple()
    numerator = int(''.join(map(str, ta.digits)))
    denominator = int(''.join(map(str, tb.digits)))
    # a / b / 10**ta.exponent == coefficient(a) / (coefficient(b) * 10**tb.exponent)
    if tb.exponent < 0:
        numerator *= 10 ** -tb.exponent
    else:
        denominator *= 10 ** tb.exponent
    quotient, remainder = divmod(numerator, denominator)
    if 2 * remainder > denominator or (2 * remainder == denominator and quotient % 2 == 1):
        quotient += 1
    sign = '-' if ta.sign != tb.sign and quotient != 0 else ''
    return Decimal(f"{sign}{quotient}E{ta.exponent}")


@dataclass
class ReturnSignal:
    """Result of executing a RETURN statement."""
    value: Any


class Interpreter:
    """Core interpreter that executes a PLC AST."""
    def __init__(self, parent: Optional[Scope] = None, debug_level: int = 0,
                 debug_file: str = 'debug.txt', stdout: Optional[TextIO] = None,
                 debug: Optional[DebugLog] = None):
        self.scope = define_builtins(Scope(parent), make_print(stdout))
        self.debug = debug if debug is not None else DebugLog(debug_level, debug_file)

    # Public API
    def run(self, source: Source) -> Any:
        """Define globals and functions, then call main/0 and return its value."""
        try:
            for decl in source.globals:
                self.execute(decl)
            for func in source.functions:
                self.execute(func)
            try:
                main = self.scope.lookup_function('main', 0)
            except NameError:
                raise PlcRuntimeError('missing main/0 function')
            self.debug.log(1, "run: main")
            result = main.invoke([])
            self.debug.log(1, f"run: main returned {to_string(result)}")
            return result
        finally:
            self.debug.close()

    # Helpers

    def lookup_variable(self, name: str) -> Variable:
        try:
            return self.scope.lookup_variable(name)
        except NameError as e:
            raise PlcRuntimeError(str(e))

    def define_variable(self, name: str, value: Any, mutable: bool = True):
        try:
            self.scope.define_variable(name, name, ANY, mutable, value)
        except ValueError as e:
            raise PlcRuntimeError(str(e))

    def execute_block(self, statements: List[Node]) -> Optional[ReturnSignal]:
        """Execute statements in a fresh child scope, propagating a return."""
        saved = self.scope
        self.scope = Scope(saved)
        try:
            for stmt in statements:
                result = self.execute(stmt)
                if isinstance(result, ReturnSignal):
                    return result
            return None
        finally:
            self.scope = saved

    def require_boolean(self, value: Any, what: str) -> bool:
        if not isinstance(value, bool):
            raise PlcRuntimeError(f'{what} expects Boolean, got {type_of_value(value).name}')
        return value

    # Statements

    def execute(self, node: Node) -> Optional[ReturnSignal]:
        if isinstance(node, GlobalDecl):
            value = self.evaluate(node.value) if node.value is not None else NIL_VALUE
            self.define_variable(node.name, value, node.mutable)
            self.debug.log(2, f"global {node.name} = {to_string(value)}")
            return None
        if isinstance(node, FuncDecl):
            self.define_function(node)
            return None
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr)
            return None
        if isinstance(node, VarDecl):
            value = self.evaluate(node.value) if node.value is not None else NIL_VALUE
            self.define_variable(node.name, value)
            self.debug.log(2, f"declare {node.name} = {to_string(value)}")
            return None
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            self.assign(node.target, value)
            return None
        if isinstance(node, IfStmt):
            cond = self.require_boolean(self.evaluate(node.condition), 'IF')
            self.debug.log(3, f"if condition -> {to_string(cond)}")
            return self.execute_block(node.then_body if cond else node.else_body)
        if isinstance(node, WhileStmt):
            while self.require_boolean(self.evaluate(node.condition), 'WHILE'):
                res = self.execute_block(node.body)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, SwitchStmt):
            return self.execute_switch(node)
        if isinstance(node, CaseStmt):
            return self.execute_block(node.body)
        if isinstance(node, ReturnStmt):
            value = self.evaluate(node.value) if node.value is not None else NIL_VALUE
            return ReturnSignal(value)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def define_function(self, node: FuncDecl):
        def call(args: List[Any]) -> Any:
            saved = self.scope
            # call-time scoping: child of the caller's scope
            self.scope = Scope(saved)
            try:
                for name, arg in zip(node.params, args):
                    self.define_variable(name, arg)
                for stmt in node.body:
                    res = self.execute(stmt)
                    if isinstance(res, ReturnSignal):
                        return res.value
                return NIL_VALUE
            finally:
                self.scope = saved

        try:
            self.scope.define_function(node.name, node.name, [ANY] * len(node.params), ANY, call)
        except ValueError as e:
            raise PlcRuntimeError(str(e))
        self.debug.log(2, f"define function {node.name}/{len(node.params)}")

    def execute_switch(self, node: SwitchStmt) -> Optional[ReturnSignal]:
        saved = self.scope
        self.scope = Scope(saved)
        try:
            self.define_variable(SWITCH_VARIABLE, self.evaluate(node.condition))
            condition = self.lookup_variable(SWITCH_VARIABLE).value
            for i, case in enumerate(node.cases):
                if case.value is None or values_equal(condition, self.evaluate(case.value)):
                    self.debug.log(3, f"switch selected case {i}")
                    return self.execute(case)
            return None
        finally:
            self.scope = saved

    def assign(self, target: Access, value: Any):
        variable = self.lookup_variable(target.name)
        if target.offset is None:
            if not variable.mutable:
                raise PlcRuntimeError(f'cannot assign to immutable variable {target.name}')
            variable.value = value
            self.debug.log(2, f"assign {target.name} = {to_string(value)}")
            return
        items = variable.value
        index = self.list_index(target, items)
        items[index] = value
        self.debug.log(2, f"assign {target.name}[{index}] = {to_string(value)}")

    def list_index(self, target: Access, items: Any) -> int:
        if not isinstance(items, list):
            raise PlcRuntimeError(f'cannot index {target.name} of type {type_of_value(items).name}')
        index = self.evaluate(target.offset)
        if not is_integer(index):
            raise PlcRuntimeError('list index must be Integer')
        if index < 0 or index >= len(items):
            raise PlcRuntimeError(f'list index {index} out of range')
        return index

    # Expressions

    def evaluate(self, node: Node) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Group):
            return self.evaluate(node.expr)
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left)
            # Short-circuit for && and ||
            if node.op == '&&':
                if not self.require_boolean(left, '&&'):
                    return False
                return self.require_boolean(self.evaluate(node.right), '&&')
            if node.op == '||':
                if self.require_boolean(left, '||'):
                    return True
                return self.require_boolean(self.evaluate(node.right), '||')
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Access):
            variable = self.lookup_variable(node.name)
            if node.offset is None:
                return variable.value
            items = variable.value
            return items[self.list_index(node, items)]
        if isinstance(node, Call):
            args = [self.evaluate(arg) for arg in node.args]
            try:
                function = self.scope.lookup_function(node.name, len(args))
            except NameError as e:
                raise PlcRuntimeError(str(e))
            self.debug.log(1, f"call {node.name}/{len(args)}")
            try:
                return function.invoke(args)
            except RecursionError:
                raise PlcRuntimeError(f'stack overflow in call to {node.name}/{len(args)}')
        if isinstance(node, ListLit):
            return [self.evaluate(element) for element in node.elements]
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op == '==':
            return values_equal(a, b)
        if op == '!=':
            return not values_equal(a, b)
        if op == '+':
            # If either operand is a string, concatenate
            if isinstance(a, str) or isinstance(b, str):
                return to_string(a) + to_string(b)
            return self.arithmetic(op, a, b)
        if op in ('-', '*', '/'):
            return self.arithmetic(op, a, b)
        if op == '^':
            if not (is_integer(a) and is_integer(b)):
                raise PlcRuntimeError(
                    f"'^' requires Integer operands, got {type_of_value(a).name} and {type_of_value(b).name}")
            if b < 0:
                raise PlcRuntimeError('negative exponent')
            return a ** b
        if op in ('<', '>'):
            if not self.comparable(a, b):
                raise PlcRuntimeError(
                    f"'{op}' requires comparable operands of the same type, "
                    f"got {type_of_value(a).name} and {type_of_value(b).name}")
            return a < b if op == '<' else a > b
        raise PlcRuntimeError(f'unsupported operator {op}')

    def arithmetic(self, op: str, a: Any, b: Any) -> Any:
        if is_integer(a) and is_integer(b):
            if op == '+':
                return a + b
            if op == '-':
                return a - b
            if op == '*':
                return a * b
            if b == 0:
                raise PlcRuntimeError('division by zero')
            # integer division truncating toward zero
            q = abs(a) // abs(b)
            return q if (a < 0) == (b < 0) else -q
        if isinstance(a, Decimal) and isinstance(b, Decimal):
            if op == '/':
                if b == 0:
                    raise PlcRuntimeError('division by zero')
                return divide_decimal(a, b)
            with localcontext() as ctx:
                # wide enough that sums and products are exact
                ctx.prec = exact_precision(a, b)
                if op == '+':
                    return a + b
                if op == '-':
                    return a - b
                return a * b
        raise PlcRuntimeError(
            f"invalid operands for '{op}': {type_of_value(a).name} and {type_of_value(b).name}")

    def comparable(self, a: Any, b: Any) -> bool:
        if isinstance(a, list) or isinstance(b, list):
            return False
        if type_of_value(a) is not type_of_value(b):
            return False
        return isinstance(a, (bool, int, Decimal, CharVal, str))


def run_program(source: str, debug_level: int = 0, stdout: Optional[TextIO] = None) -> Any:
    """Scan, parse, analyze and run a PLC program, returning main's value."""
    debug = DebugLog(debug_level)
    try:
        ast_program = parse_program(source)
        analyze(ast_program, debug=debug)
        interpreter = Interpreter(stdout=stdout, debug=debug)
        return interpreter.run(ast_program)
    finally:
        debug.close()


def compile_module(file_path: str, debug_level: int = 0) -> Interpreter:
    """Compile and execute a PLC file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    ast_program = parse_program(source)
    debug = DebugLog(debug_level)
    try:
        analyze(ast_program, debug=debug)
        interpreter = Interpreter(debug=debug)
        interpreter.run(ast_program)
    finally:
        debug.close()
    return interpreter
