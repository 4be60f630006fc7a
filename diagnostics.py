import os
import sys

class Colors:
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    BLUE = '\033[94m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    REVERSE = '\033[7m'

NOTE, WARNING, ERROR = 0, 1, 2

_PREFIXES = {
    NOTE: ("NOTE:", Colors.BOLD + Colors.CYAN),
    WARNING: ("WARNING:", Colors.BOLD + Colors.WARNING),
    ERROR: ("ERROR:", Colors.BOLD + Colors.FAIL),
}

_verbose = False

def set_verbose(flag):
    global _verbose
    _verbose = bool(flag)

def is_verbose():
    return _verbose

def use_color(stream):
    if os.environ.get('NO_COLOR'):
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())

def print_message(level, fmt, *args, stream=None):
    """
    Write a diagnostic to the error stream.
    level: 0=note, 1=warning, 2=error (out-of-range values are clamped).
    """
    stream = stream if stream is not None else sys.stderr
    level = min(max(level, NOTE), ERROR)
    label, color = _PREFIXES[level]
    if use_color(stream):
        label = f"{color}{label}{Colors.ENDC}"
    message = fmt % args if args else fmt
    stream.write(f"{label} {message}\n")
    stream.flush()

def note(fmt, *args):
    # Debug log, silent unless --verbose
    if _verbose:
        print_message(NOTE, fmt, *args)

def warning(fmt, *args):
    print_message(WARNING, fmt, *args)

def error(fmt, *args):
    print_message(ERROR, fmt, *args)
