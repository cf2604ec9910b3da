from pathlib import Path

from treelox.interpreter import RunStatus, run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def run_example(name):
    with open(EXAMPLES / name, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source)


def test_hello(capsys):
    result = run_example('hello.lox')
    assert result.ok
    assert capsys.readouterr().out.strip() == 'Hello, world!'


def test_counter_closures_share_captured_variable(capsys):
    run_example('counter.lox')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['1', '2', '1', '3']


def test_fib(capsys):
    run_example('fib.lox')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['0', '1', '1', '2', '3', '5', '8', '13', '21', '34']


def test_escapes(capsys):
    run_example('escapes.lox')
    out = capsys.readouterr().out
    assert out == 'He said, "Go home."\nShe did.\ntab:\there\nback\\slash\none line\n'


def test_block_scopes_shadow_and_restore(capsys):
    run_example('scope.lox')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == [
        'inner a', 'outer b', 'global c',
        'outer a', 'outer b', 'global c',
        'global a', 'global b', 'global c',
    ]


def test_ternary(capsys):
    run_example('ternary.lox')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['1', '3', '4', 'no']


def test_loop_body_gets_fresh_scope_per_iteration(capsys):
    run_example('closures_in_loop.lox')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['0', '1']


def test_runtime_error_stops_the_script(capsys):
    result = run_example('runtime_error.lox')
    assert result.status is RunStatus.RUNTIME_ERROR
    assert result.errors[0].kind == 'TypeError'
    assert result.errors[0].line == 3
    assert capsys.readouterr().out.strip() == 'kept'
