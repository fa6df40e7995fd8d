"""JSON serialization/deserialization for the PLC AST.

This module converts between PLC AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Literal values keep
their runtime kind: decimals are stored as text so no precision is lost,
and characters and nil are tagged so they do not come back as strings.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from .ast import (
    Source,
    GlobalDecl,
    FuncDecl,
    ExprStmt,
    VarDecl,
    Assign,
    IfStmt,
    CaseStmt,
    SwitchStmt,
    WhileStmt,
    ReturnStmt,
    Literal,
    Group,
    BinaryOp,
    Access,
    Call,
    ListLit,
)
from .types import NIL_VALUE, CharVal, NilVal


def value_to_obj(value: Any) -> Dict[str, Any]:
    if isinstance(value, NilVal):
        return {"kind": "nil"}
    if isinstance(value, bool):
        return {"kind": "boolean", "value": value}
    if isinstance(value, int):
        return {"kind": "integer", "value": value}
    if isinstance(value, Decimal):
        return {"kind": "decimal", "value": str(value)}
    if isinstance(value, CharVal):
        return {"kind": "character", "value": value.value}
    if isinstance(value, str):
        return {"kind": "string", "value": value}
    raise TypeError(f"Unsupported literal value: {value!r}")


def value_from_obj(o: Dict[str, Any]) -> Any:
    kind = o["kind"]
    if kind == "nil":
        return NIL_VALUE
    if kind == "boolean":
        return bool(o["value"])
    if kind == "integer":
        return int(o["value"])
    if kind == "decimal":
        return Decimal(o["value"])
    if kind == "character":
        return CharVal(o["value"])
    if kind == "string":
        return o["value"]
    raise ValueError(f"Unknown literal kind: {kind}")


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Source):
        return {
            "type": "Source",
            "globals": [ast_to_obj(g) for g in node.globals],
            "functions": [ast_to_obj(f) for f in node.functions],
        }
    if isinstance(node, GlobalDecl):
        return {
            "type": "GlobalDecl",
            "name": node.name,
            "type_name": node.type_name,
            "mutable": node.mutable,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, FuncDecl):
        return {
            "type": "FuncDecl",
            "name": node.name,
            "params": list(node.params),
            "param_types": list(node.param_types),
            "return_type": node.return_type,
            "body": [ast_to_obj(s) for s in node.body],
        }
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, VarDecl):
        return {
            "type": "VarDecl",
            "name": node.name,
            "type_name": node.type_name,
            "value": ast_to_obj(node.value),
        }
    if isinstance(node, Assign):
        return {"type": "Assign", "target": ast_to_obj(node.target), "value": ast_to_obj(node.value)}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_body": [ast_to_obj(s) for s in node.then_body],
            "else_body": [ast_to_obj(s) for s in node.else_body],
        }
    if isinstance(node, CaseStmt):
        return {"type": "CaseStmt", "value": ast_to_obj(node.value), "body": [ast_to_obj(s) for s in node.body]}
    if isinstance(node, SwitchStmt):
        return {
            "type": "SwitchStmt",
            "condition": ast_to_obj(node.condition),
            "cases": [ast_to_obj(c) for c in node.cases],
        }
    if isinstance(node, WhileStmt):
        return {
            "type": "WhileStmt",
            "condition": ast_to_obj(node.condition),
            "body": [ast_to_obj(s) for s in node.body],
        }
    if isinstance(node, ReturnStmt):
        return {"type": "ReturnStmt", "value": ast_to_obj(node.value)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": value_to_obj(node.value)}
    if isinstance(node, Group):
        return {"type": "Group", "expr": ast_to_obj(node.expr)}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Access):
        return {"type": "Access", "name": node.name, "offset": ast_to_obj(node.offset)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, ListLit):
        return {"type": "ListLit", "elements": [ast_to_obj(e) for e in node.elements]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Source":
        return Source(
            globals=[ast_from_obj(g) for g in obj["globals"]],
            functions=[ast_from_obj(f) for f in obj["functions"]],
        )
    if t == "GlobalDecl":
        return GlobalDecl(
            name=obj["name"],
            type_name=obj.get("type_name"),
            mutable=bool(obj["mutable"]),
            value=ast_from_obj(obj.get("value")),
        )
    if t == "FuncDecl":
        return FuncDecl(
            name=obj["name"],
            params=list(obj["params"]),
            param_types=list(obj["param_types"]),
            return_type=obj.get("return_type"),
            body=[ast_from_obj(s) for s in obj["body"]],
        )
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "VarDecl":
        return VarDecl(name=obj["name"], type_name=obj.get("type_name"), value=ast_from_obj(obj.get("value")))
    if t == "Assign":
        return Assign(target=ast_from_obj(obj["target"]), value=ast_from_obj(obj["value"]))
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            then_body=[ast_from_obj(s) for s in obj["then_body"]],
            else_body=[ast_from_obj(s) for s in obj.get("else_body", [])],
        )
    if t == "CaseStmt":
        return CaseStmt(value=ast_from_obj(obj.get("value")), body=[ast_from_obj(s) for s in obj["body"]])
    if t == "SwitchStmt":
        return SwitchStmt(condition=ast_from_obj(obj["condition"]), cases=[ast_from_obj(c) for c in obj["cases"]])
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=[ast_from_obj(s) for s in obj["body"]])
    if t == "ReturnStmt":
        return ReturnStmt(value=ast_from_obj(obj.get("value")))
    if t == "Literal":
        return Literal(value=value_from_obj(obj["value"]))
    if t == "Group":
        return Group(expr=ast_from_obj(obj["expr"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "Access":
        return Access(name=obj["name"], offset=ast_from_obj(obj.get("offset")))
    if t == "Call":
        return Call(name=obj["name"], args=[ast_from_obj(a) for a in obj["args"]])
    if t == "ListLit":
        return ListLit(elements=[ast_from_obj(e) for e in obj["elements"]])

    raise ValueError(f"Unknown AST node type: {t}")
