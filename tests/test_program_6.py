import os

from plclang.analyzer import analyze
from plclang.interpreter import parse_program, Interpreter

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def test_program_6_mixed_literals(capsys):
    with open(os.path.join(EXAMPLES, 'program_6.plc'), 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    analyze(ast)
    interp = Interpreter()
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '\n'.join(['31.500', '3.8', 'total: 12', 'c', 'false', '1024', '-3'])
    assert result == 0
