import enum
import io

import diagnostics
from errors import ResourceExhaustedError, SourceError

INITIAL_PROGRAM_CAPACITY = 64

class Opcode(enum.IntEnum):
    HALT = 0
    MOVE_BACKWARD = 1   # `>`
    MOVE_FORWARD = 2    # `<`
    INCREMENT = 3
    DECREMENT = 4
    OUTPUT = 5
    INPUT = 6
    JUMP_IF_ZERO = 7
    JUMP_IF_NONZERO = 8

SYMBOLS = {
    '+': Opcode.INCREMENT,
    ',': Opcode.INPUT,
    '-': Opcode.DECREMENT,
    '.': Opcode.OUTPUT,
    '<': Opcode.MOVE_FORWARD,
    '>': Opcode.MOVE_BACKWARD,
    '[': Opcode.JUMP_IF_ZERO,
    ']': Opcode.JUMP_IF_NONZERO,
}

_CHARS = {op: ch for ch, op in SYMBOLS.items()}

WHITESPACE = ' \t\n'

class Program:
    """
    Compiled instruction sequence: a bytearray of opcodes plus a read cursor.

    `self.code` keeps spare capacity and grows by half its size when full;
    `self.end` marks how much of it holds instructions.
    """

    def __init__(self, capacity=INITIAL_PROGRAM_CAPACITY, max_capacity=None):
        self.code = bytearray(capacity)
        self.end = 0
        self.pc = 0
        self.max_capacity = max_capacity

    def __len__(self):
        return self.end

    @property
    def capacity(self):
        return len(self.code)

    @property
    def position(self):
        return self.pc

    def _grow(self):
        old_cap = len(self.code)
        new_cap = old_cap + old_cap // 2
        if self.max_capacity is not None and new_cap > self.max_capacity:
            raise ResourceExhaustedError(
                f"out of memory: program would grow to {new_cap} bytes "
                f"(limit {self.max_capacity})")
        self.code.extend(bytes(new_cap - old_cap))
        diagnostics.note("program: current capacity: %d", new_cap)

    def append(self, opcode):
        if self.end >= len(self.code):
            self._grow()
        self.code[self.end] = opcode
        self.end += 1

    def fetch(self):
        op = self.code[self.pc]
        self.pc += 1
        return op

    def peek(self, index):
        return self.code[index]

    def jump(self, index):
        self.pc = index

    def rewind(self):
        self.pc = 0

    def opcodes(self):
        return bytes(self.code[:self.end])

    def disassemble(self):
        lines = []
        for i, op in enumerate(self.code[:self.end]):
            try:
                name = Opcode(op).name
            except ValueError:
                name = f"0x{op:02x}"
            lines.append(f"{i:04}: {name:<16} {_CHARS.get(op, '')}")
        return lines

def _chars(stream):
    while True:
        ch = stream.read(1)
        if not ch:
            return
        if isinstance(ch, bytes):
            ch = ch.decode('latin-1')
        yield ch

def compile_source(stream, program=None):
    """
    Compile a character stream into a Program ending in HALT.

    Whitespace and unknown characters are skipped; `//` starts a comment
    running through the end of the line.
    """
    if program is None:
        program = Program()
    chars = _chars(stream)
    pending = None
    try:
        while True:
            if pending is not None:
                ch, pending = pending, None
            else:
                ch = next(chars, None)
            if ch is None:
                break
            if ch in WHITESPACE:
                continue
            op = SYMBOLS.get(ch)
            if op is not None:
                program.append(op)
            elif ch == '/':
                ch = next(chars, None)
                if ch == '/':
                    for ch in chars:
                        if ch == '\n':
                            break
                else:
                    # A lone '/' is ignored; what follows it is still source
                    pending = ch
    except (OSError, UnicodeDecodeError) as e:
        raise SourceError(f"cannot read source: {e}") from e
    program.append(Opcode.HALT)
    program.rewind()
    return program

def compile_string(code, program=None):
    return compile_source(io.StringIO(code), program)
