import sys
from typing import Any, Callable, List, Optional, TextIO

from plclang.environment import Scope
from plclang.types import ANY, NIL, NIL_VALUE, to_string


def make_print(stdout: Optional[TextIO] = None) -> Callable[[List[Any]], Any]:
    """Build the `print/1` callable writing to `stdout` (sys.stdout when None)."""
    def std_print(args: List[Any]) -> Any:
        print(to_string(args[0]), file=stdout if stdout is not None else sys.stdout)
        return NIL_VALUE
    return std_print


def define_builtins(scope: Scope, print_fn: Optional[Callable[[List[Any]], Any]] = None) -> Scope:
    """Register the builtin functions in `scope` and return it.

    The analyzer passes no `print_fn` and gets a stub that only carries the
    signature; the interpreter passes a real writer.
    """
    if print_fn is None:
        print_fn = lambda args: NIL_VALUE
    scope.define_function('print', 'System.out.println', [ANY], NIL, print_fn)
    return scope
