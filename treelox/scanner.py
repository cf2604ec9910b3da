"""Scanner for TreeLox source text.

The scanner walks the source once, left to right, and yields tokens as it
goes. Whitespace and `//` comments are skipped. Problems such as an
unexpected character or an unterminated string are recorded in
`Scanner.errors` and scanning carries on, so one pass reports every
lexical error in the input. The token stream always ends with an EOF token.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .errors import LexicalError
from .tokens import KEYWORDS, Token, TokenType


ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
    '\'': '\'',
}

SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
    '?': TokenType.QUESTION,
    ':': TokenType.COLON,
}

# first char -> (token without '=', token with a trailing '=')
ONE_OR_TWO_CHAR_TOKENS = {
    '!': (TokenType.BANG, TokenType.BANG_EQUAL),
    '=': (TokenType.EQUAL, TokenType.EQUAL_EQUAL),
    '<': (TokenType.LESS, TokenType.LESS_EQUAL),
    '>': (TokenType.GREATER, TokenType.GREATER_EQUAL),
}


def is_identifier_start(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_identifier_char(c: str) -> bool:
    return is_identifier_start(c) or is_digit(c)


class Scanner:
    def __init__(self, source: str):
        self.source = source
        self.start = 0
        self.current = 0
        self.line = 1
        self.errors: List[LexicalError] = []

    def tokens(self) -> Iterator[Token]:
        """Lazily yield tokens, finishing with EOF."""
        while not self.is_at_end():
            self.start = self.current
            token = self.scan_token()
            if token is not None:
                yield token
        yield Token(TokenType.EOF, '', None, self.line)

    def scan_tokens(self) -> List[Token]:
        return list(self.tokens())

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        if c == '\n':
            self.line += 1
        return c

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def match(self, expected: str) -> bool:
        if self.peek() != expected:
            return False
        self.current += 1
        return True

    def error(self, message: str, line: Optional[int] = None):
        self.errors.append(LexicalError(message, self.line if line is None else line))

    def make_token(self, type_: TokenType, literal=None, line: Optional[int] = None) -> Token:
        lexeme = self.source[self.start:self.current]
        return Token(type_, lexeme, literal, self.line if line is None else line)

    def scan_token(self) -> Optional[Token]:
        c = self.advance()
        if c in SINGLE_CHAR_TOKENS:
            return self.make_token(SINGLE_CHAR_TOKENS[c])
        if c in ONE_OR_TWO_CHAR_TOKENS:
            single, double = ONE_OR_TWO_CHAR_TOKENS[c]
            return self.make_token(double if self.match('=') else single)
        if c == '/':
            if self.match('/'):
                # comment runs to the end of the line
                while self.peek() != '\n' and not self.is_at_end():
                    self.current += 1
                return None
            return self.make_token(TokenType.SLASH)
        if c in ' \r\t\n':
            return None
        if c == '"':
            return self.string()
        if is_digit(c):
            return self.number()
        if is_identifier_start(c):
            return self.identifier()
        self.error(f"Unexpected character {c!r}.")
        return None

    def string(self) -> Optional[Token]:
        start_line = self.line
        chars: List[str] = []
        valid = True
        while not self.is_at_end():
            c = self.advance()
            if c == '"':
                if not valid:
                    return None
                return self.make_token(TokenType.STRING, ''.join(chars), start_line)
            if c != '\\':
                chars.append(c)
                continue
            if self.is_at_end():
                break
            escaped = self.advance()
            if escaped == '\n':
                # backslash-newline continues the literal on the next line
                continue
            if escaped in ESCAPES:
                chars.append(ESCAPES[escaped])
            else:
                self.error(f"Invalid escape sequence '\\{escaped}'.")
                valid = False
        self.error('Unterminated string.', start_line)
        return None

    def number(self) -> Token:
        while is_digit(self.peek()):
            self.current += 1
        # a trailing '.' is left for the next token
        if self.peek() == '.' and is_digit(self.peek_next()):
            self.current += 1
            while is_digit(self.peek()):
                self.current += 1
        return self.make_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self) -> Token:
        while is_identifier_char(self.peek()):
            self.current += 1
        text = self.source[self.start:self.current]
        return self.make_token(KEYWORDS.get(text, TokenType.IDENTIFIER))


def scan(source: str) -> Tuple[List[Token], List[LexicalError]]:
    """Tokenize source, returning the tokens and any lexical errors."""
    scanner = Scanner(source)
    tokens = scanner.scan_tokens()
    return tokens, scanner.errors
