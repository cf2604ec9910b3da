"""Render AST nodes as s-expressions, mostly for debugging the parser.

    1 + 2 * 3        ->  (+ 1 (* 2 3))
    a ? b : c        ->  (?: (var a) (var b) (var c))
    x = 1            ->  (set! x 1)
"""

from __future__ import annotations

from typing import assert_never

from .ast import (
    Assign, Binary, Block, Call, Expr, ExpressionStmt, FunctionDecl,
    Grouping, IfStmt, Literal, Logical, PrintStmt, ReturnStmt, Stmt,
    Ternary, Unary, VarDecl, Variable, WhileStmt,
)
from .types import stringify


def parenthesize(name: str, *parts: str) -> str:
    return '(' + ' '.join((name,) + parts) + ')'


def format_expr(expr: Expr) -> str:
    if isinstance(expr, Literal):
        if isinstance(expr.value, str):
            return repr(expr.value)
        return stringify(expr.value)
    if isinstance(expr, Variable):
        return parenthesize('var', expr.name)
    if isinstance(expr, Assign):
        return parenthesize('set!', expr.name, format_expr(expr.value))
    if isinstance(expr, (Binary, Logical)):
        return parenthesize(expr.op, format_expr(expr.left), format_expr(expr.right))
    if isinstance(expr, Unary):
        return parenthesize(expr.op, format_expr(expr.operand))
    if isinstance(expr, Ternary):
        return parenthesize(
            '?:', format_expr(expr.condition), format_expr(expr.then_branch), format_expr(expr.else_branch))
    if isinstance(expr, Call):
        return parenthesize('call', format_expr(expr.callee), *(format_expr(a) for a in expr.arguments))
    if isinstance(expr, Grouping):
        return parenthesize('group', format_expr(expr.expression))
    assert_never(expr)


def format_stmt(stmt: Stmt) -> str:
    if isinstance(stmt, ExpressionStmt):
        return parenthesize(';', format_expr(stmt.expression))
    if isinstance(stmt, PrintStmt):
        return parenthesize('print', format_expr(stmt.expression))
    if isinstance(stmt, VarDecl):
        return parenthesize('var', stmt.name, format_expr(stmt.initializer))
    if isinstance(stmt, Block):
        return parenthesize('block', *(format_stmt(s) for s in stmt.statements))
    if isinstance(stmt, IfStmt):
        parts = [format_expr(stmt.condition), format_stmt(stmt.then_branch)]
        if stmt.else_branch is not None:
            parts.append(format_stmt(stmt.else_branch))
        return parenthesize('if', *parts)
    if isinstance(stmt, WhileStmt):
        return parenthesize('while', format_expr(stmt.condition), format_stmt(stmt.body))
    if isinstance(stmt, FunctionDecl):
        params = '(' + ' '.join(stmt.params) + ')'
        return parenthesize('fun', stmt.name, params, *(format_stmt(s) for s in stmt.body))
    if isinstance(stmt, ReturnStmt):
        if stmt.value is None:
            return '(return)'
        return parenthesize('return', format_expr(stmt.value))
    assert_never(stmt)
