import json

import pytest

from treelox.ast import Literal, PrintStmt
from treelox.ast_json import ast_from_obj, program_from_obj, program_to_obj
from treelox.environment import Environment
from treelox.interpreter import Interpreter, global_environment
from treelox.parser import parse_program

SOURCE = '''
fun makeCounter() {
  var i = 0;
  fun count() { i = i + 1; return i; }
  return count;
}
var c = makeCounter();
c();
for (var n = 0; n < 3; n = n + 1) {
  print n > 1 ? "big" : "small";
}
if (c() == 2 and !false) print "two"; else print "other";
print -1.5 + 2 == 0.5;
'''


def run_statements(statements):
    out = []
    Interpreter(write=out.append).interpret(statements, global_environment())
    return out


def test_program_survives_json_and_runs_the_same():
    statements = parse_program(SOURCE)
    text = json.dumps(program_to_obj(statements))
    restored = program_from_obj(json.loads(text))
    assert restored == statements
    assert run_statements(restored) == run_statements(statements) == ['small', 'small', 'big', 'two', 'true']


def test_numbers_come_back_as_floats():
    (stmt,) = program_from_obj(json.loads(json.dumps(program_to_obj(parse_program('print 3;')))))
    assert stmt == PrintStmt(Literal(3.0, 1), 1)
    assert isinstance(stmt.expression.value, float)


def test_node_shape():
    obj = program_to_obj(parse_program('var x = "a";'))
    assert obj == {
        'type': 'Program',
        'body': [{'type': 'VarDecl', 'name': 'x', 'initializer': {'type': 'Literal', 'value': 'a', 'line': 1}, 'line': 1}],
    }


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'ClassDecl', 'line': 1})


def test_missing_field():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'PrintStmt', 'line': 1})


def test_document_must_be_a_program():
    with pytest.raises(ValueError):
        program_from_obj({'type': 'Block', 'statements': [], 'line': 1})


def test_restored_function_closes_over_its_scope():
    statements = program_from_obj(program_to_obj(parse_program('var a = 1; fun f() { return a; } a = 2;')))
    env = Environment()
    Interpreter(write=lambda s: None).interpret(statements, env)
    f = env.get('f', 1)
    assert f.call(Interpreter(write=lambda s: None), []) == 2.0
