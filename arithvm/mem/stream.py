"""
Arithmetic Machine — Instruction Stream

Read-only byte view of a program. The machine never owns or mutates it,
so one stream can back any number of machines.

Every read is bounds-checked: running off the end raises TruncatedStream
instead of reading garbage.
"""

from ..errors import TruncatedStream


class InstructionStream:
    """Immutable bytecode buffer with bounds-checked reads."""

    __slots__ = ('_code',)

    def __init__(self, code):
        if isinstance(code, InstructionStream):
            code = code.code
        self._code = bytes(code)

    @property
    def code(self) -> bytes:
        return self._code

    def __len__(self) -> int:
        return len(self._code)

    def fetch8(self, pc: int) -> int:
        """Read one byte at pc."""
        if not (0 <= pc < len(self._code)):
            raise TruncatedStream(pc, 1, max(len(self._code) - pc, 0))
        return self._code[pc]

    def fetch(self, pc: int, width: int) -> bytes:
        """Read `width` bytes starting at pc."""
        available = max(len(self._code) - pc, 0)
        if pc < 0 or width > available:
            raise TruncatedStream(pc, width, available)
        return self._code[pc:pc + width]

    def __repr__(self):
        return f"InstructionStream({len(self._code)} bytes)"
