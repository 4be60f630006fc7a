import contextlib
import os
import sys
import termios

EOF_BYTE = 0xFF

@contextlib.contextmanager
def raw_terminal(fd):
    """Turn off echo and line buffering on `fd` for the duration of the block."""
    if not os.isatty(fd):
        yield
        return
    old_settings = termios.tcgetattr(fd)
    new_settings = termios.tcgetattr(fd)
    new_settings[3] &= ~(termios.ECHO | termios.ICANON)
    try:
        termios.tcsetattr(fd, termios.TCSANOW, new_settings)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, old_settings)

class TermIO:
    """Byte I/O on the process's standard streams."""

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def output(self, value):
        out = getattr(self.stdout, 'buffer', self.stdout)
        out.write(bytes((value,)))
        out.flush()

    def input(self):
        with raw_terminal(self.stdin.fileno()):
            # Unbuffered read so no bytes are held back in Python's buffer
            data = os.read(self.stdin.fileno(), 1)
        return data[0] if data else EOF_BYTE

class BufferIO:
    """In-memory I/O: input is served from `data`, output is collected."""

    def __init__(self, data=b""):
        if isinstance(data, str):
            data = data.encode('latin-1')
        self.input_bytes = bytearray(data)
        self.output_bytes = bytearray()

    def output(self, value):
        self.output_bytes.append(value)

    def input(self):
        if not self.input_bytes:
            return EOF_BYTE
        return self.input_bytes.pop(0)

    def getvalue(self):
        return bytes(self.output_bytes)
