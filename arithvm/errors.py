"""
Arithmetic Machine — Fatal Execution Conditions

Every condition here terminates the run. Components raise them at the
point of detection; ArithVM.step() converts them into an ExecutionResult.

  IllegalOpcode     byte with no entry in the opcode table
  TruncatedStream   fetch ran past the end of the bytecode
  StackOverflow     push with the operand stack at capacity
  StackUnderflow    pop/peek with too few values on the stack
  DivisionByZero    DIV with a zero right operand
"""

from typing import Optional


class VMError(Exception):
    """Base class for all fatal machine conditions."""

    def __init__(self, message: str, pc: Optional[int] = None):
        super().__init__(message)
        self.pc = pc


class IllegalOpcode(VMError):
    """Raised when an undefined opcode is fetched."""

    def __init__(self, opcode: int, pc: int):
        super().__init__(f"Unknown opcode 0x{opcode:02X} at {pc}", pc)
        self.opcode = opcode


class TruncatedStream(VMError):
    """Raised when an opcode or operand read runs past the end of the stream."""

    def __init__(self, pc: int, needed: int, available: int):
        super().__init__(
            f"Truncated stream at {pc}: need {needed} bytes, have {available}", pc)
        self.needed = needed
        self.available = available


class StackOverflow(VMError):
    """Raised when pushing onto a full operand stack."""


class StackUnderflow(VMError):
    """Raised when popping from an empty operand stack."""


class DivisionByZero(VMError):
    """Raised by DIV when the right operand is zero."""
