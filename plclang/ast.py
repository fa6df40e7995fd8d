"""Abstract Syntax Tree (AST) definitions for the PLC language.

The AST classes defined in this module represent the syntactic structure
of parsed PLC programs. Nodes are plain dataclasses and are never mutated
after parsing; the analyzer records resolved types and bindings in side
tables keyed by node (see `plclang.analyzer.Annotations`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Any


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Source(Node):
    globals: List['GlobalDecl']
    functions: List['FuncDecl']


@dataclass
class GlobalDecl(Node):
    name: str
    type_name: Optional[str]
    mutable: bool
    value: Optional[Node]


@dataclass
class FuncDecl(Node):
    name: str
    params: List[str]
    param_types: List[Optional[str]]
    return_type: Optional[str]
    body: List[Node]


@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class VarDecl(Node):
    name: str
    type_name: Optional[str]
    value: Optional[Node]


@dataclass
class Assign(Node):
    target: 'Access'
    value: Node


@dataclass
class IfStmt(Node):
    condition: Node
    then_body: List[Node]
    else_body: List[Node]


@dataclass
class CaseStmt(Node):
    value: Optional[Node]  # None for DEFAULT
    body: List[Node]


@dataclass
class SwitchStmt(Node):
    condition: Node
    cases: List[CaseStmt]


@dataclass
class WhileStmt(Node):
    condition: Node
    body: List[Node]


@dataclass
class ReturnStmt(Node):
    value: Optional[Node]


@dataclass
class Literal(Node):
    value: Any  # NIL_VALUE, bool, CharVal, int, Decimal or str


@dataclass
class Group(Node):
    expr: Node


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class Access(Node):
    name: str
    offset: Optional[Node] = None


@dataclass
class Call(Node):
    name: str
    args: List[Node]


@dataclass
class ListLit(Node):
    elements: List[Node]
