import diagnostics
from errors import ConfigurationError, ResourceExhaustedError

MIN_CAPACITY = 16
DEFAULT_CAPACITY = 32
DEFAULT_MAX_CAPACITY = 4 * 1024

class Tape:
    """
    Byte cells with a movable cursor.

    The buffer grows by half its size on whichever edge the cursor is
    about to leave. Positions are plain indices into `self.data`, so a
    growth on the low side only has to shift `ptr` and `origin`.
    "Forward" moves toward index 0, "backward" toward the end.
    """

    def __init__(self, capacity=DEFAULT_CAPACITY, max_capacity=DEFAULT_MAX_CAPACITY):
        if capacity < MIN_CAPACITY:
            raise ConfigurationError(
                f"tape capacity must be at least {MIN_CAPACITY}, got {capacity}")
        if max_capacity < capacity:
            raise ConfigurationError(
                f"maximum capacity {max_capacity} is below initial capacity {capacity}")
        self.max_capacity = max_capacity
        self.data = bytearray(capacity)
        self.ptr = capacity // 2
        # Index of the cell the cursor started on
        self.origin = self.ptr

    @property
    def capacity(self):
        return len(self.data)

    @property
    def offset(self):
        """Cursor position relative to the starting cell; unaffected by growth."""
        return self.ptr - self.origin

    def _grown_capacity(self):
        old_cap = len(self.data)
        new_cap = old_cap + old_cap // 2
        if new_cap > self.max_capacity:
            raise ResourceExhaustedError(
                f"out of memory: tape would grow to {new_cap} cells "
                f"(limit {self.max_capacity})")
        return new_cap

    def _expand_low(self):
        new_cap = self._grown_capacity()
        added = new_cap - len(self.data)
        self.data = bytearray(added) + self.data
        self.ptr += added
        self.origin += added
        diagnostics.note("tape: current capacity: %d", new_cap)

    def _expand_high(self):
        new_cap = self._grown_capacity()
        self.data.extend(bytes(new_cap - len(self.data)))
        diagnostics.note("tape: current capacity: %d", new_cap)

    def move_forward(self):
        if self.ptr <= 0:
            self._expand_low()
        self.ptr -= 1

    def move_backward(self):
        if self.ptr >= len(self.data) - 1:
            self._expand_high()
        self.ptr += 1

    def increment(self):
        self.data[self.ptr] = (self.data[self.ptr] + 1) & 0xFF

    def decrement(self):
        self.data[self.ptr] = (self.data[self.ptr] - 1) & 0xFF

    def read(self):
        return self.data[self.ptr]

    def write(self, value):
        self.data[self.ptr] = value & 0xFF

    def cell_at(self, offset):
        """Read a cell by offset from the starting cell; unallocated cells read as zero."""
        index = self.origin + offset
        if 0 <= index < len(self.data):
            return self.data[index]
        return 0

    def cells(self):
        return bytes(self.data)

    def dump(self):
        data = ",".join(str(b) for b in self.data)
        return f"tape: {{size={len(self.data)},cursor={self.offset},data=[{data}]}}"
