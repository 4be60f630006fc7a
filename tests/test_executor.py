import pytest

from errors import DecodeError, ResourceExhaustedError, UnmatchedBracketError
from executor import CacheStrategy, Interpreter, ScanStrategy, make_strategy
from program import Program, compile_string
from tape import Tape
from termio import BufferIO

HELLO = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)

# Well-formed programs, each with the input it is fed
PROGRAMS = [
    ("+++.", b""),
    ("++[>++<-]>.", b""),
    ("// this is ignored\n+.", b""),
    ("-.", b""),
    (HELLO, b""),
    ("++[>++[>+<-]<-]>>.", b""),
    ("++[>[+]<-]+.", b""),
    ("[[-]+]+.", b""),
    (",[.,]", b"echo\x00"),
    (",[->+<]>.", b"\x05"),
    ("<" * 40 + "+++" + ">" * 80 + "-" + "[<]" + ".", b""),
    ("+++[>+++[>+++[>+<-]<-]<-]>>>.", b""),
]


def run(code, strategy, data=b"", tape=None):
    io = BufferIO(data)
    interp = Interpreter(compile_string(code), tape or Tape(), io, strategy)
    interp.run()
    return io.getvalue(), interp


@pytest.fixture(params=['scan', 'cache'])
def strategy(request):
    return request.param


def test_scenario_increment_output(strategy):
    assert run("+++.", strategy)[0] == b"\x03"


def test_scenario_doubling_loop(strategy):
    assert run("++[>++<-]>.", strategy)[0] == b"\x04"


def test_scenario_line_comment(strategy):
    assert run("// this is ignored\n+.", strategy)[0] == b"\x01"


def test_scenario_wraparound(strategy):
    assert run("-.", strategy)[0] == b"\xff"


def test_hello_world(strategy):
    assert run(HELLO, strategy)[0] == b"Hello World!\n"


def test_only_comments_does_nothing(strategy):
    out, interp = run("  // nothing here\n", strategy)
    assert out == b""
    assert interp.steps == 1
    assert interp.halted


def test_input_end_reads_as_ff(strategy):
    assert run(",.", strategy)[0] == b"\xff"


def test_skips_nested_loops_on_zero(strategy):
    # Cell is zero, so the whole nested block is skipped
    assert run("[[-]>[+]<]+.", strategy)[0] == b"\x01"


def test_unmatched_open_bracket_is_fatal(strategy):
    with pytest.raises(UnmatchedBracketError):
        run("[+.", strategy)


def test_unmatched_close_bracket_is_fatal(strategy):
    with pytest.raises(UnmatchedBracketError):
        run("+]", strategy)


def test_tape_ceiling_is_fatal(strategy):
    with pytest.raises(ResourceExhaustedError):
        run("+[>+]", strategy, tape=Tape(16, max_capacity=64))


def test_bad_opcode_is_fatal(strategy):
    program = Program()
    program.append(3)
    program.append(0x42)
    program.append(0)
    interp = Interpreter(program, Tape(), BufferIO(), strategy)
    with pytest.raises(DecodeError) as excinfo:
        interp.run()
    assert excinfo.value.opcode == 0x42
    assert excinfo.value.position == 1
    assert str(excinfo.value) == "unexpected instruction 0x42"


@pytest.mark.parametrize("code, data", PROGRAMS)
def test_strategies_agree(code, data):
    scan_out, scan = run(code, 'scan', data)
    cache_out, cache = run(code, 'cache', data)
    assert scan_out == cache_out
    assert scan.tape.cells() == cache.tape.cells()
    assert scan.tape.offset == cache.tape.offset
    assert scan.steps == cache.steps


def test_scan_jumps_past_matching_close():
    program = compile_string("[[+]+]+")
    program.fetch()
    ScanStrategy().jump_if_zero(program, Tape())
    assert program.position == 6


def test_scan_returns_after_matching_open():
    program = compile_string("+[[+]+]")
    tape = Tape()
    tape.increment()
    program.jump(7)
    ScanStrategy().jump_if_nonzero(program, tape)
    assert program.position == 2


def test_cache_reuses_resolved_pairs():
    strategy = CacheStrategy()
    _, interp = run("+++[-]", strategy)
    assert strategy.targets == {3: 5, 5: 3}
    assert (strategy.last_open, strategy.last_close) == (3, 5)
    assert interp.tape.read() == 0


def test_cache_never_searches_backward():
    # Start inside the loop body, so its '[' is never visited
    code = "+[>+<-]"
    program = compile_string(code)
    program.jump(2)
    interp = Interpreter(program, Tape(), BufferIO(), CacheStrategy())
    interp.tape.write(2)
    with pytest.raises(UnmatchedBracketError):
        interp.run()

    program = compile_string(code)
    program.jump(2)
    interp = Interpreter(program, Tape(), BufferIO(), ScanStrategy())
    interp.tape.write(2)
    interp.run()
    assert interp.tape.read() == 0
    assert interp.tape.cell_at(1) == 2


def test_cache_resolves_open_bracket_on_first_visit():
    # Scan only looks for ']' when it has to skip; the cache looks on every new '['
    out, interp = run("+[.-", 'scan')
    assert out == b"\x01"
    with pytest.raises(UnmatchedBracketError):
        run("+[.-", 'cache')


def test_make_strategy():
    assert isinstance(make_strategy('scan'), ScanStrategy)
    assert isinstance(make_strategy('cache'), CacheStrategy)
    with pytest.raises(ValueError):
        make_strategy('bogus')


def test_step_after_halt():
    _, interp = run("+", 'scan')
    assert interp.step() is False
    assert interp.steps == 2
