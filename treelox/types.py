"""Runtime value helpers for TreeLox.

Lox values map onto Python objects directly: `nil` is None, booleans are
bool, every number is a float, strings are str, and functions are
`LoxFunction` or `BuiltinFunction` instances. This module holds the
rules that differ from Python's own: truthiness, equality and the way
values are printed.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any


def is_truthy(value: Any) -> bool:
    """Only nil and false are falsey; 0 and "" are truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    """Value equality with no coercion between types.

    Python would happily call `True == 1.0`; Lox does not.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, (bool, float, str)) or a is None:
        return a == b
    # functions compare by identity
    return a is b


def is_number(value: Any) -> bool:
    return isinstance(value, float)


def type_name(value: Any) -> str:
    """Return the Lox type name of a runtime value."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, float):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if callable(getattr(value, 'call', None)):
        return 'function'
    return type(value).__name__


def format_number(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value.is_integer():
        # `-0` keeps its sign, as in other Lox implementations
        return '-0' if math.copysign(1.0, value) < 0 and value == 0 else str(int(value))
    # shortest round-trip digits, never in exponent form: 1e-05 prints as 0.00001
    return format(Decimal(repr(value)), 'f')


def stringify(value: Any) -> str:
    """Convert a Lox value to the text `print` shows."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    return str(value)
