import pytest

from treelox.environment import Environment
from treelox.errors import UndefinedVariable


def test_get_walks_outward():
    outer = Environment()
    outer.define('a', 1.0)
    inner = Environment(outer)
    assert inner.get('a', 1) == 1.0
    assert inner.depth() == 1


def test_define_shadows_outer_binding():
    outer = Environment()
    outer.define('a', 1.0)
    inner = Environment(outer)
    inner.define('a', 2.0)
    assert inner.get('a', 1) == 2.0
    assert outer.get('a', 1) == 1.0


def test_assign_updates_nearest_declaring_scope():
    outer = Environment()
    outer.define('a', 1.0)
    inner = Environment(outer)
    inner.assign('a', 5.0, 1)
    assert outer.get('a', 1) == 5.0
    assert 'a' not in inner.values


def test_assign_never_declares():
    env = Environment()
    with pytest.raises(UndefinedVariable) as info:
        env.assign('missing', 1.0, 7)
    assert info.value.line == 7
    assert 'missing' not in env.values


def test_get_undefined_reports_name_and_line():
    with pytest.raises(UndefinedVariable) as info:
        Environment(Environment()).get('y', 3)
    assert info.value.name == 'y'
    assert info.value.report.kind == 'UndefinedVariable'
    assert info.value.report.line == 3
