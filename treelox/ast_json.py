"""JSON serialization/deserialization for the TreeLox AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Every node becomes an object with
a "type" key naming its class plus one key per field; tuples of child
nodes become lists. It supports a full round-trip for all node types,
which is what lets `python -m treelox --ast` run a previously emitted file.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, List

from .ast import (
    Assign,
    Binary,
    Block,
    Call,
    ExpressionStmt,
    FunctionDecl,
    Grouping,
    IfStmt,
    Literal,
    Logical,
    Node,
    PrintStmt,
    ReturnStmt,
    Ternary,
    Unary,
    VarDecl,
    Variable,
    WhileStmt,
)


NODE_TYPES: Dict[str, type] = {
    cls.__name__: cls
    for cls in (
        Literal, Variable, Assign, Binary, Logical, Unary, Ternary, Call, Grouping,
        ExpressionStmt, PrintStmt, VarDecl, Block, IfStmt, WhileStmt, FunctionDecl, ReturnStmt,
    )
}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, float, int, str)):
        return node
    if isinstance(node, (list, tuple)):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, Node) and type(node).__name__ in NODE_TYPES:
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def program_to_obj(statements: List[Any]) -> Dict[str, Any]:
    return {"type": "Program", "body": [ast_to_obj(s) for s in statements]}


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, str)):
        return obj
    if isinstance(obj, (int, float)):
        # JSON turns 1.0 into 1; Lox numbers are always floats
        return float(obj)
    if isinstance(obj, list):
        return tuple(ast_from_obj(o) for o in obj)
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {}
    for f in fields(cls):
        if f.name not in obj:
            raise ValueError(f"{t} node is missing field {f.name!r}")
        value = obj[f.name]
        if f.name == 'line':
            kwargs['line'] = int(value)
        elif f.name in ('name', 'op'):
            kwargs[f.name] = value
        elif f.name == 'params':
            kwargs['params'] = tuple(value)
        else:
            kwargs[f.name] = ast_from_obj(value)
    return cls(**kwargs)


def program_from_obj(obj: Dict[str, Any]) -> List[Any]:
    if obj.get("type") != "Program":
        raise ValueError("AST file does not contain a Program")
    return [ast_from_obj(s) for s in obj["body"]]
