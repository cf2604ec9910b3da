"""Recursive-descent parser for TreeLox.

There is one method per grammar rule. Precedence comes from the order the
methods call each other, loosest first:

    assignment -> ternary -> or -> and -> equality -> comparison
               -> term -> factor -> unary -> call -> primary

Binary operators are left-associative. The ternary operator is
right-associative in its else branch, so `a ? b : c ? d : e` reads as
`a ? b : (c ? d : e)`.

A syntax error does not stop the parse. The error is recorded and the
parser skips ahead to the next statement boundary (see `synchronize`), so
a single pass reports every independent problem. `for` loops are
desugared into blocks and `while` loops here and never reach the
interpreter.

Nesting is capped at `MAX_NESTING` levels. Going deeper is a syntax
error rather than a Python `RecursionError`, whatever the recursion limit
of the host process was before parsing began.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from .ast import (
    Assign, Binary, Block, Call, Expr, ExpressionStmt, FunctionDecl,
    Grouping, IfStmt, Literal, Logical, PrintStmt, ReturnStmt, Stmt,
    Ternary, Unary, VarDecl, Variable, WhileStmt,
)
from .errors import CompileError, ParseError
from .scanner import scan
from .tokens import Token, TokenType


MAX_ARGUMENTS = 255

# deepest nesting of groupings, unary chains and blocks the parser accepts
MAX_NESTING = 200

# Python frames used per nesting level, for a parenthesized expression
FRAMES_PER_NESTING = 20

NESTING_MESSAGE = "Expression or statement nested too deeply."

STATEMENT_KEYWORDS = {
    TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
    TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
}

BINARY_OPERATORS = {
    TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL, TokenType.GREATER,
    TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL,
    TokenType.SLASH, TokenType.STAR, TokenType.AND, TokenType.OR,
}


def ensure_recursion_limit(needed: int):
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


class Parser:
    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type is not TokenType.EOF:
            line = self.tokens[-1].line if self.tokens else 1
            self.tokens.append(Token(TokenType.EOF, '', None, line))
        self.pos = 0
        self.function_depth = 0
        self.nesting = 0
        self.errors: List[ParseError] = []

    # Token helpers

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def is_at_end(self) -> bool:
        return self.peek().type is TokenType.EOF

    def advance(self) -> Token:
        if not self.is_at_end():
            self.pos += 1
        return self.previous()

    def check(self, *types: TokenType) -> bool:
        return self.peek().type in types

    def match(self, *types: TokenType) -> bool:
        if self.check(*types):
            self.advance()
            return True
        return False

    def consume(self, type_: TokenType, message: str) -> Token:
        if self.check(type_):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token: Token, message: str) -> ParseError:
        where = 'at end' if token.type is TokenType.EOF else f"at '{token.lexeme}'"
        return ParseError(f"{where}: {message}", token.line)

    def report(self, err: ParseError):
        self.errors.append(err)

    @contextmanager
    def nested(self) -> Iterator[None]:
        self.nesting += 1
        try:
            if self.nesting > MAX_NESTING:
                raise self.error(self.peek(), NESTING_MESSAGE)
            yield
        finally:
            self.nesting -= 1

    def synchronize(self):
        """Discard tokens until the start of the next statement."""
        self.advance()
        while not self.is_at_end():
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in STATEMENT_KEYWORDS:
                return
            self.advance()

    # Entry points

    def parse(self) -> List[Stmt]:
        ensure_recursion_limit(MAX_NESTING * FRAMES_PER_NESTING + 500)
        statements: List[Stmt] = []
        try:
            while not self.is_at_end():
                stmt = self.parse_declaration()
                if stmt is not None:
                    statements.append(stmt)
        except RecursionError:
            self.report(self.error(self.peek(), NESTING_MESSAGE))
        return statements

    def parse_expression_line(self) -> Optional[Expr]:
        """Parse the whole input as one bare expression, as typed at a REPL.

        Returns None (recording the error) if the tokens are not exactly one
        expression followed by EOF.
        """
        ensure_recursion_limit(MAX_NESTING * FRAMES_PER_NESTING + 500)
        self.pos = 0
        try:
            expr = self.parse_expression()
            self.consume(TokenType.EOF, 'Expected end of expression.')
            return expr
        except ParseError as err:
            self.report(err)
        except RecursionError:
            self.report(self.error(self.peek(), NESTING_MESSAGE))
        return None

    # Declarations

    def parse_declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TokenType.FUN):
                return self.parse_function()
            if self.match(TokenType.VAR):
                return self.parse_var_decl()
            if self.check(TokenType.CLASS):
                raise self.error(self.peek(), 'classes are not supported.')
            return self.parse_statement()
        except ParseError as err:
            self.report(err)
            self.synchronize()
            return None

    def parse_function(self) -> FunctionDecl:
        name = self.consume(TokenType.IDENTIFIER, 'Expected function name.')
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after function name.")
        params: List[str] = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.report(self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters."))
                param = self.consume(TokenType.IDENTIFIER, 'Expected parameter name.')
                params.append(param.lexeme)
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after parameters.")
        self.consume(TokenType.LEFT_BRACE, "Expected '{' before function body.")
        self.function_depth += 1
        try:
            with self.nested():
                body = self.parse_block_statements()
        finally:
            self.function_depth -= 1
        return FunctionDecl(name.lexeme, tuple(params), tuple(body), name.line)

    def parse_var_decl(self) -> VarDecl:
        name = self.consume(TokenType.IDENTIFIER, 'Expected variable name.')
        self.consume(TokenType.EQUAL, "Expected '=' after variable name; declarations require an initializer.")
        initializer = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after variable declaration.")
        return VarDecl(name.lexeme, initializer, name.line)

    # Statements

    def parse_statement(self) -> Stmt:
        with self.nested():
            return self.parse_simple_statement()

    def parse_simple_statement(self) -> Stmt:
        if self.match(TokenType.PRINT):
            return self.parse_print_stmt()
        if self.match(TokenType.RETURN):
            return self.parse_return_stmt()
        if self.match(TokenType.IF):
            return self.parse_if_stmt()
        if self.match(TokenType.WHILE):
            return self.parse_while_stmt()
        if self.match(TokenType.FOR):
            return self.parse_for_stmt()
        if self.match(TokenType.LEFT_BRACE):
            line = self.previous().line
            return Block(tuple(self.parse_block_statements()), line)
        return self.parse_expression_stmt()

    def parse_print_stmt(self) -> PrintStmt:
        line = self.previous().line
        value = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after value.")
        return PrintStmt(value, line)

    def parse_return_stmt(self) -> ReturnStmt:
        keyword = self.previous()
        if self.function_depth == 0:
            # keep parsing so the rest of the statement is checked too
            self.report(self.error(keyword, "Can't return from top-level code."))
        value: Optional[Expr] = None
        if not self.check(TokenType.SEMICOLON):
            value = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after return value.")
        return ReturnStmt(value, keyword.line)

    def parse_if_stmt(self) -> IfStmt:
        line = self.previous().line
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'if'.")
        condition = self.parse_expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after if condition.")
        then_branch = self.parse_statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.parse_statement()
        return IfStmt(condition, then_branch, else_branch, line)

    def parse_while_stmt(self) -> WhileStmt:
        line = self.previous().line
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'while'.")
        condition = self.parse_expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after condition.")
        body = self.parse_statement()
        return WhileStmt(condition, body, line)

    def parse_for_stmt(self) -> Stmt:
        # for (init; cond; incr) body  =>  { init; while (cond) { body; incr; } }
        line = self.previous().line
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'for'.")
        initializer: Optional[Stmt]
        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expression_stmt()

        condition: Expr = Literal(True, line)
        if not self.check(TokenType.SEMICOLON):
            condition = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after loop condition.")

        increment: Optional[Expr] = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.parse_expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after for clauses.")

        body = self.parse_statement()
        if increment is not None:
            body = Block((body, ExpressionStmt(increment, increment.line)), body.line)
        loop: Stmt = WhileStmt(condition, body, line)
        if initializer is not None:
            loop = Block((initializer, loop), line)
        return loop

    def parse_block_statements(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume(TokenType.RIGHT_BRACE, "Expected '}' after block.")
        return statements

    def parse_expression_stmt(self) -> ExpressionStmt:
        expr = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after expression.")
        return ExpressionStmt(expr, expr.line)

    # Expressions

    def parse_expression(self) -> Expr:
        with self.nested():
            return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        expr = self.parse_ternary()
        if self.match(TokenType.EQUAL):
            equals = self.previous()
            with self.nested():
                value = self.parse_assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value, expr.line)
            # reported, but the parser is not confused so no synchronizing
            self.report(self.error(equals, 'Invalid assignment target.'))
        return expr

    def parse_ternary(self) -> Expr:
        expr = self.parse_or()
        if self.match(TokenType.QUESTION):
            line = self.previous().line
            with self.nested():
                then_branch = self.parse_ternary()
                self.consume(TokenType.COLON, "Expected ':' in ternary expression.")
                else_branch = self.parse_ternary()
            return Ternary(expr, then_branch, else_branch, line)
        return expr

    def parse_or(self) -> Expr:
        expr = self.parse_and()
        while self.match(TokenType.OR):
            op = self.previous()
            right = self.parse_and()
            expr = Logical(op.lexeme, expr, right, op.line)
        return expr

    def parse_and(self) -> Expr:
        expr = self.parse_equality()
        while self.match(TokenType.AND):
            op = self.previous()
            right = self.parse_equality()
            expr = Logical(op.lexeme, expr, right, op.line)
        return expr

    def parse_binary(self, operand, *types: TokenType) -> Expr:
        expr = operand()
        while self.match(*types):
            op = self.previous()
            right = operand()
            expr = Binary(op.lexeme, expr, right, op.line)
        return expr

    def parse_equality(self) -> Expr:
        return self.parse_binary(self.parse_comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def parse_comparison(self) -> Expr:
        return self.parse_binary(
            self.parse_term,
            TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL,
        )

    def parse_term(self) -> Expr:
        return self.parse_binary(self.parse_factor, TokenType.MINUS, TokenType.PLUS)

    def parse_factor(self) -> Expr:
        return self.parse_binary(self.parse_unary, TokenType.SLASH, TokenType.STAR)

    def parse_unary(self) -> Expr:
        if self.match(TokenType.BANG, TokenType.MINUS, TokenType.PLUS):
            op = self.previous()
            with self.nested():
                operand = self.parse_unary()
            return Unary(op.lexeme, operand, op.line)
        if self.check(*BINARY_OPERATORS):
            # e.g. `* 3`: swallow the right operand, then complain about the left
            op = self.advance()
            with self.nested():
                self.parse_unary()
            raise self.error(op, f"'{op.lexeme}' operator requires a left operand.")
        return self.parse_call()

    def parse_call(self) -> Expr:
        expr = self.parse_primary()
        while self.match(TokenType.LEFT_PAREN):
            expr = self.finish_call(expr)
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments: List[Expr] = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.report(self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments."))
                arguments.append(self.parse_expression())
                if not self.match(TokenType.COMMA):
                    break
        paren = self.consume(TokenType.RIGHT_PAREN, "Expected ')' after arguments.")
        return Call(callee, tuple(arguments), paren.line)

    def parse_primary(self) -> Expr:
        token = self.peek()
        if self.match(TokenType.FALSE):
            return Literal(False, token.line)
        if self.match(TokenType.TRUE):
            return Literal(True, token.line)
        if self.match(TokenType.NIL):
            return Literal(None, token.line)
        if self.match(TokenType.NUMBER, TokenType.STRING):
            return Literal(token.literal, token.line)
        if self.match(TokenType.IDENTIFIER):
            return Variable(token.lexeme, token.line)
        if self.match(TokenType.LEFT_PAREN):
            expr = self.parse_expression()
            self.consume(TokenType.RIGHT_PAREN, "Expected ')' after expression.")
            return Grouping(expr, token.line)
        if self.check(TokenType.THIS, TokenType.SUPER):
            raise self.error(token, 'classes are not supported.')
        raise self.error(token, 'Expected expression.')


def parse_program(source: str) -> List[Stmt]:
    """Scan and parse source, raising CompileError if anything was wrong.

    Lexical errors are reported on their own; the parser never sees a token
    stream with holes in it.
    """
    tokens, lex_errors = scan(source)
    if lex_errors:
        raise CompileError(list(lex_errors))
    parser = Parser(tokens)
    statements = parser.parse()
    if parser.errors:
        raise CompileError(list(parser.errors))
    return statements
