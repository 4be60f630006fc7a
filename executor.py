from errors import DecodeError, UnmatchedBracketError
from program import Opcode
from tape import Tape
from termio import TermIO

class BracketStrategy:
    """
    Resolves `[` / `]` control transfer.

    Both hooks are called after the bracket has been fetched, so
    `program.position - 1` is the bracket's own index.
    """
    name = None

    def jump_if_zero(self, program, tape):
        raise NotImplementedError

    def jump_if_nonzero(self, program, tape):
        raise NotImplementedError

    @staticmethod
    def scan_forward(program, start):
        """Index of the `]` closing the loop whose body starts at `start`."""
        depth = 0
        i = start
        while i < len(program):
            op = program.peek(i)
            if op == Opcode.HALT:
                break
            if op == Opcode.JUMP_IF_ZERO:
                depth += 1
            elif op == Opcode.JUMP_IF_NONZERO:
                if depth == 0:
                    return i
                depth -= 1
            i += 1
        raise UnmatchedBracketError("can't find next ']'")

class ScanStrategy(BracketStrategy):
    """Searches for the matching bracket every time a jump is taken."""
    name = 'scan'

    def jump_if_zero(self, program, tape):
        if tape.read() == 0:
            close = self.scan_forward(program, program.position)
            program.jump(close + 1)

    def jump_if_nonzero(self, program, tape):
        if tape.read() != 0:
            program.jump(self.scan_backward(program, program.position - 2) + 1)

    @staticmethod
    def scan_backward(program, start):
        depth = 0
        i = start
        while i >= 0:
            op = program.peek(i)
            if op == Opcode.JUMP_IF_NONZERO:
                depth += 1
            elif op == Opcode.JUMP_IF_ZERO:
                if depth == 0:
                    return i
                depth -= 1
            i -= 1
        raise UnmatchedBracketError("can't find previous '['")

class CacheStrategy(BracketStrategy):
    """
    Resolves each `[` once, on its first visit, and remembers the pair.

    A `]` is only ever resolved through a `[` that has already run; it
    never searches backward, so a `]` whose `[` was never visited is fatal
    even where ScanStrategy would find a match.
    """
    name = 'cache'

    def __init__(self):
        self.targets = {}
        # Most recent `[` visited, and the `]` of the last backward jump
        self.last_open = None
        self.last_close = None

    def jump_if_zero(self, program, tape):
        here = program.position - 1
        if here != self.last_open:
            # The cached pair belongs to another loop
            self.last_close = None
        self.last_open = here
        close = self.targets.get(here)
        if close is None:
            close = self.scan_forward(program, here + 1)
            self.targets[here] = close
            self.targets[close] = here
        if tape.read() == 0:
            if close == self.last_close:
                self.last_close = None
            program.jump(close + 1)

    def jump_if_nonzero(self, program, tape):
        if tape.read() == 0:
            return
        here = program.position - 1
        if here == self.last_close:
            program.jump(self.last_open + 1)
            return
        open_ = self.targets.get(here)
        if open_ is None:
            raise UnmatchedBracketError("no '[' seen for ']' at %d" % here)
        self.last_open, self.last_close = open_, here
        program.jump(open_ + 1)

STRATEGIES = {
    ScanStrategy.name: ScanStrategy,
    CacheStrategy.name: CacheStrategy,
}

def make_strategy(name):
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"unknown bracket strategy: {name!r}") from None

class Interpreter:
    def __init__(self, program, tape=None, io=None, strategy=None):
        self.program = program
        self.tape = tape if tape is not None else Tape()
        self.io = io if io is not None else TermIO()
        if strategy is None or isinstance(strategy, str):
            strategy = make_strategy(strategy or ScanStrategy.name)
        self.strategy = strategy
        self.steps = 0
        self.halted = False

    def step(self):
        """Execute one instruction. Returns False once HALT is reached."""
        if self.halted:
            return False
        op = self.program.fetch()
        self.steps += 1

        if op == Opcode.HALT:
            self.halted = True
            return False
        elif op == Opcode.MOVE_BACKWARD:
            self.tape.move_backward()
        elif op == Opcode.MOVE_FORWARD:
            self.tape.move_forward()
        elif op == Opcode.INCREMENT:
            self.tape.increment()
        elif op == Opcode.DECREMENT:
            self.tape.decrement()
        elif op == Opcode.OUTPUT:
            self.io.output(self.tape.read())
        elif op == Opcode.INPUT:
            self.tape.write(self.io.input())
        elif op == Opcode.JUMP_IF_ZERO:
            self.strategy.jump_if_zero(self.program, self.tape)
        elif op == Opcode.JUMP_IF_NONZERO:
            self.strategy.jump_if_nonzero(self.program, self.tape)
        else:
            raise DecodeError(op, self.program.position - 1)
        return True

    def run(self):
        while self.step():
            pass
        return self
