import os

from plclang.analyzer import analyze
from plclang.interpreter import parse_program, Interpreter

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def test_program_3_fibonacci_globals(capsys):
    with open(os.path.join(EXAMPLES, 'program_3.plc'), 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    analyze(ast)
    interp = Interpreter()
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '\n'.join(['0', '1', '1', '2', '3', '5', '8', '13', '21', '34'])
    assert result == 10
