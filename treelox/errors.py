from dataclasses import dataclass
from typing import Any, List


@dataclass(frozen=True)
class ErrorReport:
    """What went wrong, where: enough for a caller to format a diagnostic."""
    kind: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"[line {self.line}] {self.kind}: {self.message}"


class LoxError(Exception):
    """Base exception carrying an ErrorReport."""
    kind = 'Error'

    def __init__(self, message: str, line: int, kind: str = ''):
        self.report = ErrorReport(kind or self.kind, line, message)
        super().__init__(str(self.report))

    @property
    def line(self) -> int:
        return self.report.line

    @property
    def message(self) -> str:
        return self.report.message


class LexicalError(LoxError):
    """Raised for characters or literals the scanner cannot tokenize."""
    kind = 'LexicalError'


class ParseError(LoxError):
    """Raised for grammar violations; collected by the parser."""
    kind = 'SyntaxError'


class LoxRuntimeError(LoxError):
    """Aborts the current statement sequence."""
    kind = 'RuntimeError'


class UndefinedVariable(LoxRuntimeError):
    kind = 'UndefinedVariable'

    def __init__(self, name: str, line: int):
        super().__init__(f"Undefined variable '{name}'.", line)
        self.name = name


class OperandError(LoxRuntimeError):
    kind = 'TypeError'


class ArityError(LoxRuntimeError):
    kind = 'ArityError'

    def __init__(self, expected: int, actual: int, line: int):
        super().__init__(f"Expected {expected} arguments but got {actual}.", line)
        self.expected = expected
        self.actual = actual


class NotCallable(LoxRuntimeError):
    kind = 'NotCallable'


class ZeroDivision(LoxRuntimeError):
    kind = 'ZeroDivision'


class ResourceExhausted(LoxRuntimeError):
    kind = 'StackOverflow'


class CompileError(Exception):
    """Every lexical or syntax error found while preparing a program."""
    def __init__(self, errors: List[LoxError]):
        super().__init__('\n'.join(str(e.report) for e in errors))
        self.errors = errors


class ReturnSignal:
    """Result of executing a return statement; unwound by the call executor."""
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"
