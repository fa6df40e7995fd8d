"""Static analyzer for the PLC language.

The analyzer walks a parsed `Source`, resolves every name against a chain
of `Scope`s and assigns a `Type` to every expression. It stops at the
first violation by raising `AnalysisError`.

Results are not written into the tree. Instead they are collected in an
`Annotations` object of side tables (expression -> Type, declaration or
access -> Variable, function or call -> Function) which later stages,
such as a code emitter, can query.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from .ast import (
    Source, GlobalDecl, FuncDecl, ExprStmt, VarDecl, Assign, IfStmt,
    SwitchStmt, CaseStmt, WhileStmt, ReturnStmt, Literal, Group, BinaryOp,
    Access, Call, ListLit, Node
)
from .builtin_function import define_builtins
from .debug import DebugLog
from .environment import Function, Scope, Variable
from .errors import AnalysisError
from .types import (
    Type, ANY, NIL, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING, COMPARABLE,
    COMPARABLE_TYPES, NIL_VALUE, CharVal, NilVal, get_type,
)

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

ARITHMETIC_OPS = ('-', '*', '/')
COMPARISON_OPS = ('<', '>', '==', '!=')


def require_assignable(target: Type, source: Type):
    """Raise AnalysisError unless a `source` value may be stored as `target`."""
    if source is target:
        return
    if target is ANY:
        return
    if target is COMPARABLE and source in COMPARABLE_TYPES:
        return
    raise AnalysisError(f"type {source.name} is not assignable to {target.name}")


class Annotations:
    """Side tables filled by the analyzer, keyed by node identity."""
    def __init__(self):
        # id(node) -> (node, payload); the node is kept so its id stays valid
        self._types: Dict[int, Tuple[Node, Type]] = {}
        self._variables: Dict[int, Tuple[Node, Variable]] = {}
        self._functions: Dict[int, Tuple[Node, Function]] = {}

    def set_type(self, node: Node, type_: Type):
        self._types[id(node)] = (node, type_)

    def set_variable(self, node: Node, variable: Variable):
        self._variables[id(node)] = (node, variable)

    def set_function(self, node: Node, function: Function):
        self._functions[id(node)] = (node, function)

    def type_of(self, node: Node) -> Type:
        if id(node) not in self._types:
            raise KeyError(f"no type recorded for {type(node).__name__}")
        return self._types[id(node)][1]

    def variable_of(self, node: Node) -> Variable:
        if id(node) not in self._variables:
            raise KeyError(f"no variable recorded for {type(node).__name__}")
        return self._variables[id(node)][1]

    def function_of(self, node: Node) -> Function:
        if id(node) not in self._functions:
            raise KeyError(f"no function recorded for {type(node).__name__}")
        return self._functions[id(node)][1]


class Analyzer:
    def __init__(self, parent: Optional[Scope] = None, debug: Optional[DebugLog] = None):
        self.scope = define_builtins(Scope(parent))
        self.annotations = Annotations()
        self.function: Optional[FuncDecl] = None
        self.debug = debug if debug is not None else DebugLog()

    # Helpers

    def resolve_type(self, name: str) -> Type:
        try:
            return get_type(name)
        except KeyError:
            raise AnalysisError(f"unknown type {name}")

    def define_variable(self, name: str, type_: Type, mutable: bool) -> Variable:
        try:
            return self.scope.define_variable(name, name, type_, mutable)
        except ValueError as e:
            raise AnalysisError(str(e))

    def lookup_variable(self, name: str) -> Variable:
        try:
            return self.scope.lookup_variable(name)
        except NameError as e:
            raise AnalysisError(str(e))

    def visit_body(self, statements: List[Node]):
        """Visit statements in a fresh child scope, restoring the scope after."""
        saved = self.scope
        self.scope = Scope(saved)
        try:
            for stmt in statements:
                self.visit(stmt)
        finally:
            self.scope = saved

    def type_of_declared(self, name: str, type_name: Optional[str], value: Optional[Node]) -> Type:
        """Type of a declaration: its annotation if present, else its initializer's."""
        if type_name is not None:
            declared = self.resolve_type(type_name)
            if value is not None:
                self.visit_expression(value, declared)
                require_assignable(declared, self.annotations.type_of(value))
            return declared
        if value is None:
            raise AnalysisError(f"declaration of {name} lacks both type and initial value")
        self.visit_expression(value)
        return self.annotations.type_of(value)

    # Entry point

    def analyze(self, source: Source) -> Annotations:
        self.debug.log(1, "analyze: start")
        for decl in source.globals:
            self.visit(decl)
        has_main = False
        for func in source.functions:
            if func.name == 'main' and not func.params:
                has_main = True
                if func.return_type != 'Integer':
                    raise AnalysisError("main/0 must declare return type Integer")
            self.visit(func)
        if not has_main:
            raise AnalysisError("missing main/0 function")
        self.debug.log(1, "analyze: done")
        return self.annotations

    # Declarations and statements

    def visit(self, node: Node):
        if isinstance(node, GlobalDecl):
            type_ = self.type_of_declared(node.name, node.type_name, node.value)
            variable = self.define_variable(node.name, type_, node.mutable)
            self.annotations.set_variable(node, variable)
            self.debug.log(2, f"global {node.name}: {type_.name}")
            return
        if isinstance(node, FuncDecl):
            self.visit_function(node)
            return
        if isinstance(node, ExprStmt):
            self.visit_expression(node.expr)
            return
        if isinstance(node, VarDecl):
            type_ = self.type_of_declared(node.name, node.type_name, node.value)
            variable = self.define_variable(node.name, type_, True)
            self.annotations.set_variable(node, variable)
            self.debug.log(2, f"declare {node.name}: {type_.name}")
            return
        if isinstance(node, Assign):
            self.visit_expression(node.target)
            variable = self.annotations.variable_of(node.target)
            if not variable.mutable:
                raise AnalysisError(f"cannot assign to immutable variable {variable.name}")
            self.visit_expression(node.value, variable.type)
            require_assignable(variable.type, self.annotations.type_of(node.value))
            return
        if isinstance(node, IfStmt):
            self.require_condition(node.condition, 'IF')
            if not node.then_body:
                raise AnalysisError("IF requires a non-empty then branch")
            self.visit_body(node.then_body)
            self.visit_body(node.else_body)
            return
        if isinstance(node, WhileStmt):
            self.require_condition(node.condition, 'WHILE')
            self.visit_body(node.body)
            return
        if isinstance(node, SwitchStmt):
            self.visit_switch(node)
            return
        if isinstance(node, CaseStmt):
            if node.value is not None:
                self.visit_expression(node.value)
            self.visit_body(node.body)
            return
        if isinstance(node, ReturnStmt):
            self.visit_return(node)
            return
        raise NotImplementedError(f"analyze: unexpected node type {type(node)}")

    def visit_function(self, node: FuncDecl):
        param_types = [self.resolve_type(t) if t is not None else ANY for t in node.param_types]
        return_type = self.resolve_type(node.return_type) if node.return_type is not None else NIL
        try:
            function = self.scope.define_function(node.name, node.name, param_types, return_type,
                                                  lambda args: NIL_VALUE)
        except ValueError as e:
            raise AnalysisError(str(e))
        self.annotations.set_function(node, function)
        self.debug.log(1, f"function {node.name}/{function.arity}")

        saved = self.scope
        self.scope = Scope(saved)
        self.function = node
        try:
            for name, type_ in zip(node.params, param_types):
                self.define_variable(name, type_, True)
            for stmt in node.body:
                self.visit(stmt)
        finally:
            self.scope = saved
            self.function = None

    def require_condition(self, condition: Node, what: str):
        self.visit_expression(condition)
        type_ = self.annotations.type_of(condition)
        if type_ is not BOOLEAN:
            raise AnalysisError(f"{what} condition must be Boolean, got {type_.name}")

    def visit_switch(self, node: SwitchStmt):
        self.visit_expression(node.condition)
        condition_type = self.annotations.type_of(node.condition)
        last = len(node.cases) - 1
        for i, case in enumerate(node.cases):
            if i == last:
                if case.value is not None:
                    raise AnalysisError("the last SWITCH case must be DEFAULT without a value")
            else:
                if not isinstance(case.value, Literal):
                    raise AnalysisError(f"CASE value at position {i} must be a literal")
                self.visit_expression(case.value)
                if self.annotations.type_of(case.value) is not condition_type:
                    raise AnalysisError(
                        f"CASE value at position {i} does not match condition type {condition_type.name}")
            self.visit_body(case.body)

    def visit_return(self, node: ReturnStmt):
        if self.function is None:
            raise AnalysisError("RETURN outside of a function")
        expected = self.annotations.function_of(self.function).return_type
        if node.value is None:
            actual = NIL
        else:
            self.visit_expression(node.value)
            actual = self.annotations.type_of(node.value)
        if actual is not expected:
            raise AnalysisError(
                f"function {self.function.name} must return {expected.name}, got {actual.name}")

    # Expressions

    def visit_expression(self, node: Node, expected: Optional[Type] = None) -> Type:
        """Type `node`, record the type, and return it.

        `expected` is the declared type a list literal is being assigned
        to; other expressions ignore it.
        """
        type_ = self.expression_type(node, expected)
        self.annotations.set_type(node, type_)
        return type_

    def expression_type(self, node: Node, expected: Optional[Type]) -> Type:
        if isinstance(node, Literal):
            return self.literal_type(node.value)
        if isinstance(node, Group):
            if not isinstance(node.expr, BinaryOp):
                raise AnalysisError("a grouped expression must contain a binary expression")
            return self.visit_expression(node.expr)
        if isinstance(node, BinaryOp):
            return self.binary_type(node)
        if isinstance(node, Access):
            if node.offset is not None:
                offset_type = self.visit_expression(node.offset)
                if offset_type is not INTEGER:
                    raise AnalysisError(f"index of {node.name} must be Integer, got {offset_type.name}")
            variable = self.lookup_variable(node.name)
            self.annotations.set_variable(node, variable)
            return variable.type
        if isinstance(node, Call):
            try:
                function = self.scope.lookup_function(node.name, len(node.args))
            except NameError as e:
                raise AnalysisError(str(e))
            for arg, param_type in zip(node.args, function.parameter_types):
                arg_type = self.visit_expression(arg)
                try:
                    require_assignable(param_type, arg_type)
                except AnalysisError as e:
                    raise AnalysisError(f"argument to {node.name}: {e.message}")
            self.annotations.set_function(node, function)
            return function.return_type
        if isinstance(node, ListLit):
            return self.list_type(node, expected)
        raise NotImplementedError(f"analyze: unexpected expression type {type(node)}")

    def literal_type(self, value: Any) -> Type:
        if isinstance(value, NilVal):
            return NIL
        if isinstance(value, bool):
            return BOOLEAN
        if isinstance(value, CharVal):
            return CHARACTER
        if isinstance(value, str):
            return STRING
        if isinstance(value, int):
            if not INT_MIN <= value <= INT_MAX:
                raise AnalysisError(f"integer literal {value} out of range")
            return INTEGER
        if isinstance(value, Decimal):
            if math.isinf(float(value)):
                raise AnalysisError(f"decimal literal {value} out of range")
            return DECIMAL
        raise AnalysisError(f"unrecognized literal {value!r}")

    def binary_type(self, node: BinaryOp) -> Type:
        left = self.visit_expression(node.left)
        right = self.visit_expression(node.right)
        op = node.op
        if op in ('&&', '||'):
            if left is not BOOLEAN or right is not BOOLEAN:
                raise AnalysisError(f"'{op}' requires Boolean operands, got {left.name} and {right.name}")
            return BOOLEAN
        if op == '+':
            if left is STRING or right is STRING:
                return STRING
            if left is right and left in (INTEGER, DECIMAL):
                return left
            raise AnalysisError(f"invalid operands for '+': {left.name} and {right.name}")
        if op in ARITHMETIC_OPS:
            if left is right and left in (INTEGER, DECIMAL):
                return left
            raise AnalysisError(
                f"'{op}' requires two Integer or two Decimal operands, got {left.name} and {right.name}")
        if op == '^':
            if left is INTEGER and right is INTEGER:
                return INTEGER
            raise AnalysisError(f"'^' requires Integer operands, got {left.name} and {right.name}")
        if op in COMPARISON_OPS:
            if left is not right:
                raise AnalysisError(
                    f"'{op}' requires operands of the same type, got {left.name} and {right.name}")
            return BOOLEAN
        raise AnalysisError(f"unsupported binary operator {op}")

    def list_type(self, node: ListLit, expected: Optional[Type]) -> Type:
        element_type = expected
        for element in node.elements:
            type_ = self.visit_expression(element)
            if element_type is None:
                element_type = type_
            elif element_type is not ANY and type_ is not element_type:
                raise AnalysisError(
                    f"cannot add {type_.name} to a list of {element_type.name}")
        return element_type


def analyze(source: Source, scope: Optional[Scope] = None,
            debug: Optional[DebugLog] = None) -> Annotations:
    """Analyze `source` with a fresh Analyzer and return its annotations."""
    return Analyzer(scope, debug).analyze(source)
