# PLC language package
# This package provides a scanner, parser, static analyzer and interpreter for PLC.
from .analyzer import analyze
from .errors import PlcError, LexError, ParseError, AnalysisError, PlcRuntimeError
from .interpreter import run_program, compile_module, Interpreter
from .parser import parse_program
from .scanner import scan

__all__ = [
    'scan',
    'parse_program',
    'analyze',
    'run_program',
    'compile_module',
    'Interpreter',
    'PlcError',
    'LexError',
    'ParseError',
    'AnalysisError',
    'PlcRuntimeError',
]
