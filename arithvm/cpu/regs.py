"""
Arithmetic Machine — Register File

  r1, r2  — scalar double registers, written only by ST1/ST2
  pc      — program counter, byte offset of the next opcode
  steps   — executed instruction counter
"""


class Registers:
    """Machine register set."""

    __slots__ = ('r1', 'r2', 'pc', 'steps')

    def __init__(self):
        self.r1: float = 0.0
        self.r2: float = 0.0
        self.pc: int = 0
        self.steps: int = 0

    def display(self) -> str:
        """Format register state for trace output."""
        return f"PC={self.pc:04X} R1={self.r1!r} R2={self.r2!r}"

    def reset(self):
        self.r1 = 0.0
        self.r2 = 0.0
        self.pc = 0
        self.steps = 0
