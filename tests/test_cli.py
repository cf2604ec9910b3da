import io
import json

import pytest

from treelox.__main__ import EX_DATAERR, EX_NOINPUT, EX_OK, EX_SOFTWARE, EX_USAGE, Shell, main
from treelox.interpreter import Interpreter


@pytest.fixture(autouse=True)
def in_tmp_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def write_script(tmp_path, source, name='script.lox'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return str(path)


def test_runs_script(tmp_path, capsys):
    script = write_script(tmp_path, 'var greeting = "hi";\nprint greeting + "!";')
    assert main([script]) == EX_OK
    assert capsys.readouterr().out == 'hi!\n'


def test_syntax_error_exit_code(tmp_path, capsys):
    script = write_script(tmp_path, 'print 1;\nvar x;\nprint 2;')
    assert main([script]) == EX_DATAERR
    captured = capsys.readouterr()
    assert captured.out == ''
    assert '[line 2]' in captured.err
    assert 'SyntaxError' in captured.err


def test_lexical_error_exit_code(tmp_path, capsys):
    script = write_script(tmp_path, 'print "open;')
    assert main([script]) == EX_DATAERR
    assert 'LexicalError' in capsys.readouterr().err


def test_runtime_error_exit_code(tmp_path, capsys):
    script = write_script(tmp_path, 'print "before";\nprint missing;')
    assert main([script]) == EX_SOFTWARE
    captured = capsys.readouterr()
    assert captured.out == 'before\n'
    assert 'UndefinedVariable' in captured.err
    assert '[line 2]' in captured.err


def test_missing_script(tmp_path, capsys):
    assert main([str(tmp_path / 'nope.lox')]) == EX_NOINPUT
    assert 'not found' in capsys.readouterr().err


def test_bad_usage():
    assert main(['--bogus']) == EX_USAGE


def test_print_ast(tmp_path, capsys):
    script = write_script(tmp_path, 'print 1 + 2 * 3;\nvar t = a ? b : c;')
    assert main(['--print-ast', script]) == EX_OK
    assert capsys.readouterr().out.splitlines() == [
        '(print (+ 1 (* 2 3)))',
        '(var t (?: (var a) (var b) (var c)))',
    ]


def test_emit_then_run_ast(tmp_path, capsys):
    script = write_script(tmp_path, 'fun sq(x) { return x * x; }\nprint sq(12);')
    assert main(['--emit-ast', script]) == EX_OK
    emitted = capsys.readouterr().out.strip()
    assert emitted.endswith('script.lox.ast.json')
    with open(emitted, 'r', encoding='utf-8') as f:
        assert json.load(f)['type'] == 'Program'

    assert main(['--ast', emitted]) == EX_OK
    assert capsys.readouterr().out == '144\n'


def test_invalid_ast_file(tmp_path, capsys):
    path = tmp_path / 'bad.ast.json'
    path.write_text('{"type": "Program", "body": [{"type": "Nope"}]}', encoding='utf-8')
    assert main(['--ast', str(path)]) == EX_DATAERR
    assert 'invalid AST file' in capsys.readouterr().err


def test_verbose_run_writes_debug_file(tmp_path):
    script = write_script(tmp_path, 'var a = 1;')
    assert main(['-vv', script]) == EX_OK
    assert 'declare a = 1' in (tmp_path / 'debug.txt').read_text(encoding='utf-8')


def test_max_depth_flag(tmp_path, capsys):
    script = write_script(tmp_path, 'fun f(n) { if (n > 0) f(n - 1); }\nf(20);')
    assert main(['--max-depth', '10', script]) == EX_SOFTWARE
    assert 'StackOverflow' in capsys.readouterr().err


def run_shell(lines):
    shell = Shell(Interpreter(), stdin=io.StringIO(lines))
    shell.use_rawinput = False
    shell.cmdloop()


def test_repl_keeps_state_between_lines(capsys):
    run_shell('var a = 1;\nfun inc() { a = a + 1; }\ninc();\nprint a;\n')
    assert '2\n' in capsys.readouterr().out


def test_repl_prints_expression_values(capsys):
    run_shell('1 + 2\n"a" + "b"\n')
    out = capsys.readouterr().out
    assert '3\n' in out
    assert 'ab\n' in out


def test_repl_survives_errors(capsys):
    run_shell('print nope;\nvar x;\nprint "still here";\n')
    captured = capsys.readouterr()
    assert 'UndefinedVariable' in captured.err
    assert 'SyntaxError' in captured.err
    assert 'still here\n' in captured.out


def test_repl_lines_may_start_with_bang(capsys):
    run_shell('print !true;\n!nil\n')
    out = capsys.readouterr().out
    assert 'false\n' in out
    assert 'true\n' in out


def test_repl_directives(capsys):
    run_shell('.help\n.frobnicate\n.exit\nprint "unreachable";\n')
    captured = capsys.readouterr()
    assert '.exit - exit the interpreter' in captured.out
    assert 'Unrecognized interpreter directive: .frobnicate' in captured.err
    assert 'Goodbye' in captured.out
    assert 'unreachable' not in captured.out


def test_repl_reads_a_variable_named_eof(capsys):
    run_shell('var EOF = 5;\nEOF\nprint "after";\n')
    out = capsys.readouterr().out
    assert '5\n' in out
    assert 'after\n' in out
