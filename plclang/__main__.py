"""CLI entry point for the PLC toolchain.

Usage:
    python -m plclang [-v|-vv|-vvv] <program_file>
    python -m plclang [-v...] --check <program_file>
    python -m plclang [-v...] --emit-ast <program_file>
    python -m plclang [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --check       Scan, parse and analyze the program without running it
  --emit-ast    Parse the given .plc file and emit an AST JSON file
  --ast         Analyze and execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. A program that runs to completion exits
with the Integer returned by its `main` function.
"""

import argparse
import json
import sys
from pathlib import Path

from .analyzer import analyze
from .ast import Source
from .ast_json import ast_to_obj, ast_from_obj
from .debug import DebugLog
from .errors import PlcError
from .interpreter import Interpreter
from .parser import parse_program
from .types import is_integer


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(ast_program: Source, debug_level: int) -> int:
    """Analyze and run `ast_program`, returning the process exit status."""
    debug = DebugLog(debug_level)
    try:
        analyze(ast_program, debug=debug)
        result = Interpreter(debug=debug).run(ast_program)
    finally:
        debug.close()
    return result if is_integer(result) else 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="PLC language toolchain")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--check', metavar='PLC_FILE', help='analyze the given .plc file without running it')
    group.add_argument('--emit-ast', metavar='PLC_FILE', help='emit AST JSON for the given .plc file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='PLC program file (.plc) to execute')
    args = parser.parse_args(argv)

    try:
        # Check mode
        if args.check:
            debug = DebugLog(args.v)
            try:
                analyze(parse_program(read_source(Path(args.check))), debug=debug)
            finally:
                debug.close()
            print("ok")
            return

        # Emit AST mode
        if args.emit_ast:
            program_file = Path(args.emit_ast)
            ast_program = parse_program(read_source(program_file))
            obj = ast_to_obj(ast_program)
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(obj, out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            ast_path = Path(args.ast)
            if not ast_path.exists():
                print(f"Error: file {ast_path} not found", file=sys.stderr)
                sys.exit(1)
            with open(ast_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            sys.exit(execute(ast_from_obj(data), args.v))

        # Default: execute source file
        if not args.program:
            parser.error('missing program file; or use --check/--emit-ast/--ast')
        ast_program = parse_program(read_source(Path(args.program)))
        sys.exit(execute(ast_program, args.v))
    except PlcError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
