from decimal import Decimal

import pytest

from plclang.builtin_function import define_builtins, make_print
from plclang.environment import Scope
from plclang.types import (
    ANY, NIL, INTEGER, STRING, NIL_VALUE, CharVal, NilVal, get_type, to_string, type_of_value, values_equal,
)


def test_lookup_walks_parent_chain():
    root = Scope()
    root.define_variable('x', 'x', INTEGER, True, 1)
    child = Scope(root)
    assert child.lookup_variable('x').value == 1


def test_nearer_scope_shadows():
    root = Scope()
    root.define_variable('x', 'x', INTEGER, True, 1)
    child = Scope(root)
    child.define_variable('x', 'x', STRING, True, 'inner')
    assert child.lookup_variable('x').value == 'inner'
    assert root.lookup_variable('x').value == 1


def test_duplicate_variable_in_same_scope():
    scope = Scope()
    scope.define_variable('x', 'x', INTEGER, True)
    with pytest.raises(ValueError):
        scope.define_variable('x', 'x', INTEGER, True)


def test_undefined_variable():
    with pytest.raises(NameError):
        Scope(Scope()).lookup_variable('nope')


def test_functions_are_keyed_by_name_and_arity():
    scope = Scope()
    scope.define_function('f', 'f', [], INTEGER, lambda args: 0)
    scope.define_function('f', 'f', [INTEGER], INTEGER, lambda args: args[0])
    assert scope.lookup_function('f', 0).invoke([]) == 0
    assert scope.lookup_function('f', 1).invoke([7]) == 7
    with pytest.raises(NameError):
        scope.lookup_function('f', 2)
    with pytest.raises(ValueError):
        scope.define_function('f', 'f', [ANY], NIL, lambda args: NIL_VALUE)


def test_builtin_print_signature():
    scope = define_builtins(Scope())
    function = scope.lookup_function('print', 1)
    assert function.parameter_types == [ANY]
    assert function.return_type is NIL
    assert function.invoke(['ignored']) is NIL_VALUE


def test_make_print_writes_to_stdout(capsys):
    assert make_print()([[1, NIL_VALUE]]) is NIL_VALUE
    assert capsys.readouterr().out == '[1, nil]\n'


def test_get_type():
    assert get_type('Integer') is INTEGER
    with pytest.raises(KeyError):
        get_type('integer')


def test_type_of_value():
    assert type_of_value(True) is not INTEGER
    assert type_of_value(3) is INTEGER
    assert type_of_value([1]) is ANY


def test_values_equal_requires_same_kind():
    assert values_equal(NIL_VALUE, NilVal())
    assert values_equal(CharVal('a'), CharVal('a'))
    assert not values_equal(CharVal('a'), 'a')
    assert not values_equal(1, True)
    assert not values_equal(1, Decimal('1'))
    assert values_equal([1, 'a'], [1, 'a'])
    assert not values_equal([1], [1, 2])


def test_to_string():
    assert to_string(NIL_VALUE) == 'nil'
    assert to_string(False) == 'false'
    assert to_string(Decimal('1.50')) == '1.50'
    assert to_string(CharVal('z')) == 'z'
    assert to_string([CharVal('a'), 'b', [True]]) == '[a, b, [true]]'
