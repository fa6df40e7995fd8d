import json
import os
from decimal import Decimal

import pytest

from plclang.ast import Literal
from plclang.ast_json import ast_to_obj, ast_from_obj
from plclang.interpreter import parse_program
from plclang.types import NIL_VALUE, CharVal

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


@pytest.mark.parametrize('name', sorted(n for n in os.listdir(EXAMPLES) if n.endswith('.plc')))
def test_example_tree_survives_json(name):
    with open(os.path.join(EXAMPLES, name), 'r', encoding='utf-8') as f:
        ast = parse_program(f.read())
    text = json.dumps(ast_to_obj(ast))
    assert ast_from_obj(json.loads(text)) == ast


def test_literal_kinds_are_preserved():
    for value in (NIL_VALUE, True, 3, Decimal('2.50'), CharVal('c'), 'c'):
        restored = ast_from_obj(json.loads(json.dumps(ast_to_obj(Literal(value))))).value
        assert type(restored) is type(value)
        assert restored == value


def test_decimal_is_stored_as_text():
    assert ast_to_obj(Literal(Decimal('0.10'))) == {
        "type": "Literal",
        "value": {"kind": "decimal", "value": "0.10"},
    }


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({"type": "Lambda"})
