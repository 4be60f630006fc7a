import pytest

import debugger
from debugger import Debugger
from termio import BufferIO


def make(code, **kwargs):
    return Debugger(code, io=BufferIO(kwargs.pop('data', b"")), **kwargs)


def test_step_by_step():
    dbg = make("++.")
    assert dbg.pc == 0
    assert dbg.run_step()
    assert dbg.pc == 1
    assert dbg.tape.read() == 1
    dbg.run_step()
    dbg.run_step()
    assert dbg.interp.io.getvalue() == b"\x02"
    # HALT
    assert not dbg.run_step()
    assert dbg.finished


@pytest.mark.parametrize("strategy", ["scan", "cache"])
def test_breakpoint_stops_inside_loop(strategy):
    dbg = make("+++[>+<-]>.", strategy=strategy)
    dbg.toggle_breakpoint(5)
    assert dbg.run_until_breakpoint()
    assert dbg.pc == 5
    assert dbg.tape.cell_at(1) == 0
    assert dbg.run_until_breakpoint()
    assert dbg.tape.cell_at(1) == 1
    dbg.toggle_breakpoint(5)
    assert not dbg.run_until_breakpoint()
    assert dbg.interp.io.getvalue() == b"\x03"


def test_error_ends_session(capsys):
    dbg = make("[")
    assert not dbg.run_until_breakpoint()
    assert dbg.finished
    assert dbg.error is not None
    assert "Error: can't find next ']'" in capsys.readouterr().out


def test_handle_commands(capsys):
    dbg = make("+>++")
    assert dbg.handle("s")
    assert dbg.handle("b 3")
    assert dbg.breakpoints == {3}
    assert dbg.handle("c")
    assert dbg.pc == 3
    assert dbg.handle("m -1 3")
    out = capsys.readouterr().out
    assert "Breakpoint set at 3" in out
    assert "[+0000]: 1" in out
    assert dbg.handle("b x")
    assert "Usage: b <pc>" in capsys.readouterr().out
    assert not dbg.handle("q")


def test_print_state_marks_cursor(capsys):
    dbg = make("+")
    dbg.run_step()
    dbg.print_state()
    out = capsys.readouterr().out
    assert "--- Step 1 ---" in out
    assert "[001]" in out
    assert "HALT" in out


def test_repl_session(monkeypatch, capsys):
    commands = iter(["s", "", "q"])
    monkeypatch.setattr('builtins.input', lambda prompt="": next(commands))
    dbg = make("+++")
    dbg.run()
    assert dbg.step_count == 2
    assert "Execution finished." in capsys.readouterr().out


def test_main(tmp_path, monkeypatch, capsys):
    path = tmp_path / "prog.bf"
    path.write_text(",+.")
    monkeypatch.setattr('builtins.input', lambda prompt="": "c")
    assert debugger.main([str(path), "--input", "A"]) == 0
    assert "Output: b'B'" in capsys.readouterr().out


def test_main_missing_file(tmp_path):
    assert debugger.main([str(tmp_path / "nope.bf")]) == 1
