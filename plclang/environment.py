from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from plclang.types import Type, NIL_VALUE


@dataclass
class Variable:
    name: str
    exported_name: str
    type: Type
    mutable: bool
    value: Any = NIL_VALUE


@dataclass
class Function:
    name: str
    exported_name: str
    parameter_types: List[Type]
    return_type: Type
    fn: Callable[[List[Any]], Any] = field(repr=False)

    @property
    def arity(self) -> int:
        return len(self.parameter_types)

    def invoke(self, args: List[Any]) -> Any:
        return self.fn(args)


class Scope:
    """A lexical scope mapping names to variables and (name, arity) to functions.

    Lookups walk up the parent chain on a miss, so a nearer scope shadows an
    outer one. Both the analyzer and the interpreter build their own chains
    of scopes; only the payload of the bindings differs.
    """
    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.variables: Dict[str, Variable] = {}
        self.functions: Dict[Tuple[str, int], Function] = {}

    def define_variable(self, name: str, exported_name: str, type_: Type,
                        mutable: bool, value: Any = NIL_VALUE) -> Variable:
        if name in self.variables:
            raise ValueError(f'variable {name} already defined in this scope')
        variable = Variable(name, exported_name, type_, mutable, value)
        self.variables[name] = variable
        return variable

    def lookup_variable(self, name: str) -> Variable:
        if name in self.variables:
            return self.variables[name]
        if self.parent:
            return self.parent.lookup_variable(name)
        raise NameError(f'undefined variable {name}')

    def define_function(self, name: str, exported_name: str, parameter_types: List[Type],
                        return_type: Type, fn: Callable[[List[Any]], Any]) -> Function:
        key = (name, len(parameter_types))
        if key in self.functions:
            raise ValueError(f'function {name}/{key[1]} already defined in this scope')
        function = Function(name, exported_name, list(parameter_types), return_type, fn)
        self.functions[key] = function
        return function

    def lookup_function(self, name: str, arity: int) -> Function:
        if (name, arity) in self.functions:
            return self.functions[(name, arity)]
        if self.parent:
            return self.parent.lookup_function(name, arity)
        raise NameError(f'undefined function {name}/{arity}')
