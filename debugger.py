#!/usr/bin/env python3
import argparse
import sys

from diagnostics import Colors
from errors import BFError
from executor import STRATEGIES, Interpreter
from program import Opcode, compile_string
from tape import Tape
from termio import BufferIO, TermIO

def op_label(op):
    try:
        return Opcode(op).name
    except ValueError:
        return f"0x{op:02x}"

class Debugger:
    def __init__(self, code, strategy='scan', io=None, tape=None):
        self.code_str = code
        self.program = compile_string(code)
        self.interp = Interpreter(self.program, tape or Tape(), io or TermIO(), strategy)
        self.breakpoints = set()
        self.error = None

    @property
    def pc(self):
        return self.program.position

    @property
    def tape(self):
        return self.interp.tape

    @property
    def step_count(self):
        return self.interp.steps

    @property
    def finished(self):
        return self.interp.halted or self.error is not None

    def run_step(self):
        if self.finished:
            return False
        try:
            return self.interp.step()
        except BFError as e:
            self.error = e
            print(f"{Colors.FAIL}Error: {e}{Colors.ENDC}")
            return False

    def run_until_breakpoint(self):
        """Run until HALT, an error, or the next breakpoint. True if a breakpoint stopped it."""
        while self.run_step():
            if self.pc in self.breakpoints:
                print(f"Breakpoint hit at {self.pc}")
                return True
        return False

    def toggle_breakpoint(self, pc):
        if pc in self.breakpoints:
            self.breakpoints.remove(pc)
            return False
        self.breakpoints.add(pc)
        return True

    def print_state(self):
        print(f"\n{Colors.BOLD}--- Step {self.step_count} ---{Colors.ENDC}")
        print(f"PC: {self.pc} / {len(self.program)}")
        print(f"Offset: {self.tape.offset} (capacity {self.tape.capacity})")

        window = 8
        tape_str = ""
        for off in range(self.tape.offset - window, self.tape.offset + window + 1):
            val = f"{self.tape.cell_at(off):03}"
            if off == self.tape.offset:
                tape_str += f"{Colors.REVERSE}[{val}]{Colors.ENDC} "
            else:
                tape_str += f" {val}  "
        print(f"Loc: {tape_str}")

        context_window = 2
        start_op = max(0, self.pc - context_window)
        end_op = min(len(self.program), self.pc + context_window + 1)
        for i in range(start_op, end_op):
            op_str = op_label(self.program.peek(i))
            mark = "*" if i in self.breakpoints else " "
            if i == self.pc:
                print(f"{Colors.GREEN}->{mark}{i:04}: {op_str}{Colors.ENDC}")
            else:
                print(f"  {mark}{i:04}: {op_str}")

    def dump_memory(self, offset, count):
        print("Memory Dump:")
        for off in range(offset, offset + count):
            print(f"[{off:+05}]: {self.tape.cell_at(off)}")

    def handle(self, cmd):
        """Run one REPL command. Returns False when the session should end."""
        if cmd.startswith('s'):
            self.run_step()
        elif cmd.startswith('c'):
            self.run_until_breakpoint()
        elif cmd.startswith('q'):
            return False
        elif cmd.startswith('m'):
            parts = cmd.split()
            try:
                offset = int(parts[1]) if len(parts) > 1 else self.tape.offset
                count = int(parts[2]) if len(parts) > 2 else 20
            except ValueError:
                print("Usage: m [offset] [count]")
            else:
                self.dump_memory(offset, count)
        elif cmd.startswith('b'):
            try:
                bp = int(cmd.split()[1])
            except (IndexError, ValueError):
                print("Usage: b <pc>")
            else:
                state = "set" if self.toggle_breakpoint(bp) else "removed"
                print(f"Breakpoint {state} at {bp}")
        else:
            print(f"Unknown command: {cmd}")
        return True

    def run(self):
        print("BF Debugger started. Commands: (s)tep, (c)ontinue, (b)reak <pc>, (m)em dump, (q)uit, enter to repeat last")
        last_cmd = 's'
        while not self.finished:
            self.print_state()
            try:
                cmd = input(f"{Colors.BLUE}(bf-dbg){Colors.ENDC} ").strip()
            except EOFError:
                break

            if cmd == '':
                cmd = last_cmd
            last_cmd = cmd

            if not self.handle(cmd):
                break

        print("Execution finished.")

def main(argv=None):
    parser = argparse.ArgumentParser(prog='bf-debug')
    parser.add_argument('source')
    parser.add_argument('--strategy', choices=sorted(STRATEGIES), default='scan')
    parser.add_argument('--input', default=None,
                        help="feed program input from this string instead of the terminal")
    args = parser.parse_args(argv)

    try:
        with open(args.source, 'r', encoding='latin-1') as f:
            code = f.read()
    except OSError as e:
        print(f"{Colors.FAIL}cannot open file {args.source}: {e.strerror}{Colors.ENDC}", file=sys.stderr)
        return 1

    # The REPL owns the terminal, so program input comes from a buffer
    io = BufferIO(args.input or "")
    dbg = Debugger(code, strategy=args.strategy, io=io)
    dbg.run()
    if io.output_bytes:
        print(f"Output: {io.getvalue()!r}")
    return 2 if dbg.error else 0

if __name__ == '__main__':
    sys.exit(main())
