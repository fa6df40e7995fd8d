import os

from plclang.analyzer import analyze
from plclang.interpreter import parse_program, Interpreter

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def test_program_5_list_aliasing(capsys):
    with open(os.path.join(EXAMPLES, 'program_5.plc'), 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    analyze(ast)
    interp = Interpreter()
    result = interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '10\n[10, 2, 3]'
    assert result == 13
