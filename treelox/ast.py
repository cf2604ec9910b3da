"""Abstract Syntax Tree (AST) definitions for TreeLox.

The parser produces these nodes and the interpreter consumes them. Nodes
are frozen dataclasses with no behaviour of their own; each records the
source line it was parsed from so that runtime errors can point back at
the program. `Expr` and `Stmt` name the closed sets of variants, which the
interpreter matches exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


# Expressions

@dataclass(frozen=True)
class Literal(Node):
    value: Any  # None, bool, float or str
    line: int


@dataclass(frozen=True)
class Variable(Node):
    name: str
    line: int


@dataclass(frozen=True)
class Assign(Node):
    name: str
    value: 'Expr'
    line: int


@dataclass(frozen=True)
class Binary(Node):
    op: str
    left: 'Expr'
    right: 'Expr'
    line: int


@dataclass(frozen=True)
class Logical(Node):
    op: str  # 'and' or 'or'
    left: 'Expr'
    right: 'Expr'
    line: int


@dataclass(frozen=True)
class Unary(Node):
    op: str
    operand: 'Expr'
    line: int


@dataclass(frozen=True)
class Ternary(Node):
    condition: 'Expr'
    then_branch: 'Expr'
    else_branch: 'Expr'
    line: int


@dataclass(frozen=True)
class Call(Node):
    callee: 'Expr'
    arguments: Tuple['Expr', ...]
    line: int  # line of the closing parenthesis


@dataclass(frozen=True)
class Grouping(Node):
    expression: 'Expr'
    line: int


# Statements

@dataclass(frozen=True)
class ExpressionStmt(Node):
    expression: 'Expr'
    line: int


@dataclass(frozen=True)
class PrintStmt(Node):
    expression: 'Expr'
    line: int


@dataclass(frozen=True)
class VarDecl(Node):
    name: str
    initializer: 'Expr'
    line: int


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple['Stmt', ...]
    line: int


@dataclass(frozen=True)
class IfStmt(Node):
    condition: 'Expr'
    then_branch: 'Stmt'
    else_branch: Optional['Stmt']
    line: int


@dataclass(frozen=True)
class WhileStmt(Node):
    condition: 'Expr'
    body: 'Stmt'
    line: int


@dataclass(frozen=True)
class FunctionDecl(Node):
    name: str
    params: Tuple[str, ...]
    body: Tuple['Stmt', ...]
    line: int


@dataclass(frozen=True)
class ReturnStmt(Node):
    value: Optional['Expr']
    line: int


Expr = Union[Literal, Variable, Assign, Binary, Logical, Unary, Ternary, Call, Grouping]

Stmt = Union[ExpressionStmt, PrintStmt, VarDecl, Block, IfStmt, WhileStmt, FunctionDecl, ReturnStmt]
