import os

from plclang.analyzer import analyze
from plclang.interpreter import parse_program, Interpreter

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def test_program_2_recursive_factorial(capsys):
    with open(os.path.join(EXAMPLES, 'program_2.plc'), 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    analyze(ast)
    interp = Interpreter()
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '3628800'
    assert result == 0
