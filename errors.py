class BFError(Exception):
    """Base class for everything the interpreter raises on purpose."""
    exit_code = 1

class ConfigurationError(BFError):
    pass

class SourceError(BFError):
    pass

class FatalError(BFError):
    """Runtime failure that aborts the run."""
    exit_code = 2

class ResourceExhaustedError(FatalError):
    pass

class UnmatchedBracketError(FatalError):
    pass

class DecodeError(FatalError):
    def __init__(self, opcode, position=None):
        self.opcode = opcode
        self.position = position
        super().__init__("unexpected instruction 0x%02x" % (opcode & 0xFF))
