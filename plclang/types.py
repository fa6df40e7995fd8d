"""Type definitions and value helpers for PLC.

This module defines the closed set of static types used by the analyzer
and the runtime value representation used by the interpreter. Static
types are singletons compared by identity. Runtime values are plain
Python objects (bool, int, Decimal, str, list) plus two marker classes
for `NIL` and characters, which Python has no distinct type for.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict


@dataclass(frozen=True, eq=False)
class Type:
    """A PLC static type.

    `name` is the spelling used in source type annotations and
    `exported_name` is the spelling a code emitter uses for the target
    language. Equality is identity: there is exactly one instance per type.
    """
    name: str
    exported_name: str

    def __repr__(self) -> str:
        return self.name


ANY = Type('Any', 'Object')
NIL = Type('Nil', 'Void')
BOOLEAN = Type('Boolean', 'boolean')
INTEGER = Type('Integer', 'int')
DECIMAL = Type('Decimal', 'double')
CHARACTER = Type('Character', 'char')
STRING = Type('String', 'String')
COMPARABLE = Type('Comparable', 'Comparable')

TYPES: Dict[str, Type] = {
    t.name: t for t in (ANY, NIL, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING, COMPARABLE)
}

# Types satisfying Comparable
COMPARABLE_TYPES = (INTEGER, DECIMAL, CHARACTER, STRING)


def get_type(name: str) -> Type:
    """Return the type spelled `name` in source, raising KeyError if unknown."""
    if name not in TYPES:
        raise KeyError(f"unknown type {name}")
    return TYPES[name]


class NilVal:
    """Marker object for the PLC `NIL` value. All instances are equal."""
    def __eq__(self, other: Any) -> bool:
        return isinstance(other, NilVal)

    def __hash__(self) -> int:
        return 0

    def __repr__(self) -> str:
        return 'NIL'


NIL_VALUE = NilVal()


@dataclass(frozen=True, order=True)
class CharVal:
    """A single PLC character.

    Kept apart from `str` so that a character and a one-letter string are
    different runtime kinds, as they are different static types.
    """
    value: str

    def __str__(self) -> str:
        return self.value


def is_integer(value: Any) -> bool:
    # bool is a subclass of int; treat separately
    return isinstance(value, int) and not isinstance(value, bool)


def type_of_value(value: Any) -> Type:
    """Return the static type matching a runtime value. Lists map to Any."""
    if isinstance(value, NilVal):
        return NIL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return INTEGER
    if isinstance(value, Decimal):
        return DECIMAL
    if isinstance(value, CharVal):
        return CHARACTER
    if isinstance(value, str):
        return STRING
    return ANY


def values_equal(a: Any, b: Any) -> bool:
    """Value equality; values of different runtime kinds are never equal."""
    if isinstance(a, list) and isinstance(b, list):
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, list) or isinstance(b, list):
        return False
    if type_of_value(a) is not type_of_value(b):
        return False
    return a == b


def to_string(value: Any) -> str:
    """Convert a PLC value to the text written by `print` and used by `+`."""
    if isinstance(value, NilVal):
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, list):
        return '[' + ', '.join(to_string(item) for item in value) + ']'
    return str(value)
