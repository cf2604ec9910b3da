"""CLI entry point for the TreeLox interpreter.

Usage:
    python -m treelox [-v|-vv|-vvv] [script]
    python -m treelox [-v...] --emit-ast <script>
    python -m treelox [-v...] --ast <ast_json_file>
    python -m treelox --print-ast <script>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given script and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --print-ast   Parse the given script and print its s-expression form
  --max-depth   Maximum depth of nested function calls

Without a script the interpreter starts a REPL. Lines starting with '.'
are interpreter directives (`.exit`, `.help`). Debug information is
written to `debug.txt` in the current directory when verbosity is greater
than zero.

Exit codes follow sysexits: 64 usage, 65 lexical/syntax errors, 66 input
file missing, 70 runtime error.
"""

import argparse
import cmd
import json
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from termcolor import colored

from .ast_json import program_from_obj, program_to_obj
from .errors import CompileError, ErrorReport, LoxRuntimeError
from .interpreter import Interpreter, RunStatus, global_environment, run_source
from .parser import parse_program
from .printer import format_stmt

EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

DIRECTIVE_HELP = """Interpreter directives:
    .exit - exit the interpreter
    .help - display this text"""


def report(errors: Iterable[ErrorReport]):
    """Print diagnostics to stderr."""
    for err in errors:
        location = colored(f"[line {err.line}] ", attrs=["bold"])
        kind = colored(f"{err.kind}: ", "red", attrs=["bold"])
        print(location + kind + err.message, file=sys.stderr)


def exit_code(status: RunStatus) -> int:
    if status is RunStatus.OK:
        return EX_OK
    if status is RunStatus.RUNTIME_ERROR:
        return EX_SOFTWARE
    return EX_DATAERR


class Shell(cmd.Cmd):
    """TreeLox REPL. Every line shares one global environment."""
    intro = "TreeLox :: tree-walk Lox interpreter\nType '.help' for interpreter directives."
    prompt = "> "

    def __init__(self, interpreter: Interpreter, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interpreter = interpreter
        self.environment = global_environment()

    def cmdloop(self, intro=None):
        # cmd.Cmd turns end of input into the line 'EOF', which is also a
        # valid Lox identifier, so end of input is detected here instead
        self.preloop()
        if intro is not None:
            self.intro = intro
        if self.intro:
            self.stdout.write(str(self.intro) + "\n")
        stop = False
        while not stop:
            line = self.read_line()
            if line is None:
                self.stdout.write("\n")
                break
            line = self.precmd(line)
            stop = self.onecmd(line)
            stop = self.postcmd(stop, line)
        self.postloop()

    def read_line(self) -> Optional[str]:
        """Next input line, or None at end of input."""
        if self.use_rawinput:
            try:
                return input(self.prompt)
            except EOFError:
                return None
        self.stdout.write(self.prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            return None
        return line.rstrip('\r\n')

    def onecmd(self, line: str) -> bool:
        # Lox source may start with '!' or '?', which cmd.Cmd would treat as
        # its own shortcuts, so every line is routed here instead
        stripped = line.strip()
        if not stripped or stripped.startswith('.'):
            return self.directive(stripped)
        result = run_source(line, self.environment, interpreter=self.interpreter, repl=True)
        report(result.errors)
        return False

    def directive(self, command: str) -> bool:
        if command == '.exit':
            print("Goodbye")
            return True
        if command in ('.help', ''):
            print(DIRECTIVE_HELP)
            return False
        print(colored(f"Unrecognized interpreter directive: {command}", "red"), file=sys.stderr)
        print(DIRECTIVE_HELP, file=sys.stderr)
        return False


def read_source(path: Path) -> Optional[str]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except OSError:
        print(f"Error: file {path} not found", file=sys.stderr)
        return None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog='treelox', description="Tree-walk Lox interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-depth', type=int, default=200, metavar='N',
                        help='maximum depth of nested function calls')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='emit AST JSON for the given .lox file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--print-ast', metavar='LOX_FILE', help='print the parsed AST as s-expressions')
    parser.add_argument('script', nargs='?', help='TreeLox script to execute; omit for a REPL')
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EX_USAGE if e.code else EX_OK

    # Parse-only modes
    if args.emit_ast or args.print_ast:
        program_file = Path(args.emit_ast or args.print_ast)
        source = read_source(program_file)
        if source is None:
            return EX_NOINPUT
        try:
            statements = parse_program(source)
        except CompileError as e:
            report(err.report for err in e.errors)
            return EX_DATAERR
        if args.print_ast:
            for stmt in statements:
                print(format_stmt(stmt))
            return EX_OK
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(program_to_obj(statements), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return EX_OK

    interpreter = Interpreter(debug_level=args.v, max_call_depth=args.max_depth)
    try:
        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            if not ast_path.exists():
                print(f"Error: file {ast_path} not found", file=sys.stderr)
                return EX_NOINPUT
            with open(ast_path, 'r', encoding='utf-8') as f:
                try:
                    statements = program_from_obj(json.load(f))
                except (ValueError, TypeError) as e:
                    print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
                    return EX_DATAERR
            try:
                interpreter.interpret(statements, global_environment())
            except LoxRuntimeError as e:
                report([e.report])
                return EX_SOFTWARE
            return EX_OK

        # REPL
        if not args.script:
            Shell(interpreter).cmdloop()
            return EX_OK

        # Default: execute source file
        source = read_source(Path(args.script))
        if source is None:
            return EX_NOINPUT
        result = run_source(source, global_environment(), interpreter=interpreter)
        report(result.errors)
        return exit_code(result.status)
    finally:
        interpreter.close()


if __name__ == '__main__':
    sys.exit(main())
