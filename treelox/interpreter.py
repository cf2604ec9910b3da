"""Tree-walking interpreter for TreeLox.

The interpreter executes the statements produced by `treelox.parser`
against a chain of `Environment` scopes. Statements run for their effect;
`execute` returns None on normal completion or a `ReturnSignal` when a
`return` statement fires, and every compound statement passes that signal
straight back to its caller until the function-call executor consumes it.
Runtime problems raise `LoxRuntimeError` subclasses, which abort the rest
of the program but leave bindings made so far in place.

`run_source` is the entry point used by the command line and the REPL: it
scans, parses and runs one piece of source text and folds every outcome
into a `RunResult`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, assert_never

from .ast import (
    Assign, Binary, Block, Call, Expr, ExpressionStmt, FunctionDecl,
    Grouping, IfStmt, Literal, Logical, PrintStmt, ReturnStmt, Stmt,
    Ternary, Unary, VarDecl, Variable, WhileStmt,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import (
    ArityError, ErrorReport, LoxRuntimeError, NotCallable, OperandError,
    ResourceExhausted, ReturnSignal, ZeroDivision,
)
from .parser import Parser, ensure_recursion_limit
from .scanner import scan
from .types import is_equal, is_number, is_truthy, stringify, type_name


# Python frames used per Lox call, with headroom for nested expressions
FRAMES_PER_CALL = 12


class LoxFunction:
    """A user-defined function together with the scope it was declared in."""
    def __init__(self, declaration: FunctionDecl, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', args: List[Any]) -> Any:
        return interpreter.call_function(self, args)

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"<function {self.name}>"


def global_environment() -> Environment:
    """Create a fresh global scope holding the native functions."""
    env = Environment()
    env.define('clock', BuiltinFunction('clock', 0, lambda args: time.time()))
    return env


class Interpreter:
    """Core interpreter that executes TreeLox statements."""
    def __init__(
        self,
        write: Callable[[str], Any] = print,
        debug_level: int = 0,
        debug_file: str = 'debug.txt',
        max_call_depth: int = 200,
        max_loop_iterations: Optional[int] = None,
    ):
        self.write = write
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.max_call_depth = max_call_depth
        self.max_loop_iterations = max_loop_iterations
        self.call_depth = 0
        self.current_line = 0

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def interpret(self, statements: Sequence[Stmt], env: Environment):
        """Run statements in env, raising LoxRuntimeError on failure."""
        self.debug(f"run {len(statements)} statement(s)")
        self.ensure_recursion_limit()
        self.call_depth = 0
        try:
            for stmt in statements:
                self.execute(stmt, env)
        except RecursionError:
            raise ResourceExhausted('Maximum recursion depth exceeded.', self.current_line)
        except LoxRuntimeError as err:
            self.debug(f"runtime error: {err.report}")
            raise

    def evaluate_line(self, expr: Expr, env: Environment) -> Any:
        """Evaluate a bare expression typed at the REPL."""
        self.ensure_recursion_limit()
        self.call_depth = 0
        try:
            return self.evaluate(expr, env)
        except RecursionError:
            raise ResourceExhausted('Maximum recursion depth exceeded.', self.current_line)

    def ensure_recursion_limit(self):
        ensure_recursion_limit(self.max_call_depth * FRAMES_PER_CALL + 200)

    # Statements
    def execute_block(self, statements: Sequence[Stmt], env: Environment) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt, env)
            # propagate return signals
            if result is not None:
                return result
        return None

    def execute(self, stmt: Stmt, env: Environment) -> Optional[ReturnSignal]:
        self.current_line = stmt.line
        if isinstance(stmt, ExpressionStmt):
            self.evaluate(stmt.expression, env)
            return None
        if isinstance(stmt, PrintStmt):
            value = self.evaluate(stmt.expression, env)
            self.write(stringify(value))
            return None
        if isinstance(stmt, VarDecl):
            value = self.evaluate(stmt.initializer, env)
            env.define(stmt.name, value)
            if self.debug_level >= 2:
                self.debug(f"declare {stmt.name} = {stringify(value)} ({type_name(value)})")
            return None
        if isinstance(stmt, Block):
            scope = Environment(env)
            if self.debug_level >= 3:
                self.debug(f"line {stmt.line}: enter block at scope depth {scope.depth()}")
            return self.execute_block(stmt.statements, scope)
        if isinstance(stmt, IfStmt):
            truthy = is_truthy(self.evaluate(stmt.condition, env))
            if self.debug_level >= 3:
                self.debug(f"line {stmt.line}: if condition -> {truthy}")
            if truthy:
                return self.execute(stmt.then_branch, env)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch, env)
            return None
        if isinstance(stmt, WhileStmt):
            iterations = 0
            while is_truthy(self.evaluate(stmt.condition, env)):
                iterations += 1
                if self.max_loop_iterations is not None and iterations > self.max_loop_iterations:
                    raise ResourceExhausted(
                        f"Loop exceeded {self.max_loop_iterations} iterations.", stmt.line, 'IterationLimit')
                result = self.execute(stmt.body, env)
                if result is not None:
                    return result
            return None
        if isinstance(stmt, FunctionDecl):
            env.define(stmt.name, LoxFunction(stmt, env))
            if self.debug_level >= 2:
                self.debug(f"define function {stmt.name}/{len(stmt.params)}")
            return None
        if isinstance(stmt, ReturnStmt):
            value = self.evaluate(stmt.value, env) if stmt.value is not None else None
            return ReturnSignal(value)
        assert_never(stmt)

    # Expressions
    def evaluate(self, expr: Expr, env: Environment) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression, env)
        if isinstance(expr, Variable):
            return env.get(expr.name, expr.line)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value, env)
            env.assign(expr.name, value, expr.line)
            return value
        if isinstance(expr, Logical):
            left = self.evaluate(expr.left, env)
            if expr.op == 'or':
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right, env)
        if isinstance(expr, Ternary):
            if is_truthy(self.evaluate(expr.condition, env)):
                return self.evaluate(expr.then_branch, env)
            return self.evaluate(expr.else_branch, env)
        if isinstance(expr, Unary):
            return self.apply_unary_op(expr.op, self.evaluate(expr.operand, env), expr.line)
        if isinstance(expr, Binary):
            left = self.evaluate(expr.left, env)
            right = self.evaluate(expr.right, env)
            return self.apply_binary_op(expr.op, left, right, expr.line)
        if isinstance(expr, Call):
            callee = self.evaluate(expr.callee, env)
            args = [self.evaluate(arg, env) for arg in expr.arguments]
            return self.call(callee, args, expr.line)
        assert_never(expr)

    def apply_unary_op(self, op: str, operand: Any, line: int) -> Any:
        if op == '!':
            return not is_truthy(operand)
        if not is_number(operand):
            raise OperandError('Operand must be a number.', line)
        if op == '-':
            return -operand
        if op == '+':
            return operand
        raise OperandError(f"Unknown unary operator '{op}'.", line)

    def apply_binary_op(self, op: str, a: Any, b: Any, line: int) -> Any:
        if op == '==':
            return is_equal(a, b)
        if op == '!=':
            return not is_equal(a, b)
        if op == '+':
            if is_number(a) and is_number(b):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            raise OperandError('Operands must be two numbers or two strings.', line)
        if not (is_number(a) and is_number(b)):
            raise OperandError('Operands must be numbers.', line)
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0.0:
                raise ZeroDivision('Division by zero.', line)
            return a / b
        if op == '<':
            return a < b
        if op == '<=':
            return a <= b
        if op == '>':
            return a > b
        if op == '>=':
            return a >= b
        raise OperandError(f"Unknown operator '{op}'.", line)

    # Calls
    def call(self, callee: Any, args: List[Any], line: int) -> Any:
        if not isinstance(callee, (LoxFunction, BuiltinFunction)):
            raise NotCallable('Can only call functions.', line)
        if len(args) != callee.arity:
            raise ArityError(callee.arity, len(args), line)
        if self.call_depth >= self.max_call_depth:
            raise ResourceExhausted('Stack overflow.', line)
        self.current_line = line
        self.call_depth += 1
        try:
            return callee.call(self, args)
        finally:
            self.call_depth -= 1

    def call_function(self, func: LoxFunction, args: List[Any]) -> Any:
        # Create new environment for call; closure's env is parent
        call_env = Environment(func.closure)
        for param, arg in zip(func.declaration.params, args):
            call_env.define(param, arg)
        if self.debug_level >= 3:
            self.debug(f"call {func.name}({', '.join(stringify(a) for a in args)}) depth={self.call_depth}")
        result = self.execute_block(func.declaration.body, call_env)
        value = result.value if result is not None else None
        if self.debug_level >= 3:
            self.debug(f"return {func.name} -> {stringify(value)}")
        return value


###############################################################################
# Running source text
###############################################################################


class RunStatus(Enum):
    OK = 'ok'
    LEXICAL_ERRORS = 'lexical_errors'
    SYNTAX_ERRORS = 'syntax_errors'
    RUNTIME_ERROR = 'runtime_error'


@dataclass
class RunResult:
    status: RunStatus
    errors: List[ErrorReport] = field(default_factory=list)
    value: Any = None  # value of a bare REPL expression

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.OK


def run_source(
    source: str,
    environment: Optional[Environment] = None,
    *,
    interpreter: Optional[Interpreter] = None,
    write: Optional[Callable[[str], Any]] = None,
    repl: bool = False,
) -> RunResult:
    """Scan, parse and run source text.

    Passing the same environment to successive calls keeps declarations
    alive between them, which is how the REPL works. In REPL mode input
    that is not a list of statements but is a single expression (`1 + 2`)
    is evaluated and its value printed.

    `write` receives printed output when no interpreter is given; an
    interpreter brings its own, so passing both is a ValueError.
    """
    if interpreter is None:
        interpreter = Interpreter(write=write or print)
    elif write is not None:
        raise ValueError("run_source() takes write or interpreter, not both")
    if environment is None:
        environment = global_environment()

    tokens, lex_errors = scan(source)
    if lex_errors:
        return RunResult(RunStatus.LEXICAL_ERRORS, [e.report for e in lex_errors])

    parser = Parser(tokens)
    statements = parser.parse()
    if parser.errors:
        if repl:
            expr = Parser(tokens).parse_expression_line()
            if expr is not None:
                try:
                    value = interpreter.evaluate_line(expr, environment)
                except LoxRuntimeError as err:
                    return RunResult(RunStatus.RUNTIME_ERROR, [err.report])
                interpreter.write(stringify(value))
                return RunResult(RunStatus.OK, value=value)
        return RunResult(RunStatus.SYNTAX_ERRORS, [e.report for e in parser.errors])

    try:
        interpreter.interpret(statements, environment)
    except LoxRuntimeError as err:
        return RunResult(RunStatus.RUNTIME_ERROR, [err.report])
    return RunResult(RunStatus.OK)


def run_program(source: str, write: Callable[[str], Any] = print, debug_level: int = 0) -> RunResult:
    """Run a whole script in a fresh global environment."""
    interpreter = Interpreter(write=write, debug_level=debug_level)
    try:
        return run_source(source, global_environment(), interpreter=interpreter)
    finally:
        interpreter.close()
