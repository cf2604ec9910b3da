# TreeLox language package
# This package provides a scanner, parser and tree-walk interpreter for Lox.
from .environment import Environment
from .errors import CompileError, ErrorReport, LoxError, LoxRuntimeError
from .interpreter import (
    Interpreter, RunResult, RunStatus, global_environment, run_program, run_source,
)
from .parser import Parser, parse_program
from .scanner import Scanner, scan

__all__ = [
    'CompileError',
    'Environment',
    'ErrorReport',
    'Interpreter',
    'LoxError',
    'LoxRuntimeError',
    'Parser',
    'RunResult',
    'RunStatus',
    'Scanner',
    'global_environment',
    'parse_program',
    'run_program',
    'run_source',
    'scan',
]
