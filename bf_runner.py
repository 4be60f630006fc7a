#!/usr/bin/env python3
import argparse
import sys

import diagnostics
from errors import BFError, ConfigurationError, ResourceExhaustedError, SourceError
from executor import STRATEGIES, Interpreter
from program import compile_source
from tape import DEFAULT_CAPACITY, DEFAULT_MAX_CAPACITY, Tape

class ArgumentParser(argparse.ArgumentParser):
    # Usage errors exit 1
    def error(self, message):
        diagnostics.error("%s", message)
        self.print_usage(sys.stderr)
        sys.exit(1)

def build_parser():
    parser = ArgumentParser(
        prog='bf-runner',
        description="Run a brainfuck program on a growable byte tape.")
    parser.add_argument('source', nargs='?',
                        help="source file (default: read the program from stdin)")
    parser.add_argument('--strategy', choices=sorted(STRATEGIES), default='scan',
                        help="bracket resolution: scan on every jump, or cache each loop")
    parser.add_argument('--capacity', type=int, default=DEFAULT_CAPACITY,
                        help=f"initial tape capacity (default {DEFAULT_CAPACITY})")
    parser.add_argument('--max-capacity', type=int, default=DEFAULT_MAX_CAPACITY,
                        help=f"tape capacity ceiling (default {DEFAULT_MAX_CAPACITY})")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="report tape and program growth")
    parser.add_argument('--dump', action='store_true',
                        help="print the tape after the program halts")
    parser.add_argument('--disasm', action='store_true',
                        help="print the compiled instructions and exit")
    return parser

def compile_file(filename):
    if filename is None or filename == '-':
        return compile_source(getattr(sys.stdin, 'buffer', sys.stdin))
    try:
        f = open(filename, 'rb')
    except OSError as e:
        raise SourceError(f"cannot open file {filename}: {e.strerror}") from e
    with f:
        return compile_source(f)

def run(args):
    tape = Tape(args.capacity, args.max_capacity)
    try:
        program = compile_file(args.source)
    except ResourceExhaustedError as e:
        # Nothing has run yet, so this is a setup failure
        diagnostics.error("%s", e)
        return 1
    if args.disasm:
        print("\n".join(program.disassemble()))
        return 0
    diagnostics.note("compiled %d instructions", len(program))

    interp = Interpreter(program, tape, strategy=args.strategy)
    interp.run()

    diagnostics.note("halted after %d steps", interp.steps)
    if args.dump:
        diagnostics.print_message(diagnostics.NOTE, "%s", tape.dump())
    return 0

def main(argv=None):
    args = build_parser().parse_args(argv)
    diagnostics.set_verbose(args.verbose)
    try:
        return run(args)
    except (ConfigurationError, SourceError) as e:
        diagnostics.error("%s", e)
        return 1
    except BFError as e:
        diagnostics.error("%s", e)
        return e.exit_code
    except KeyboardInterrupt:
        return 130
    finally:
        diagnostics.set_verbose(False)

if __name__ == "__main__":
    sys.exit(main())
