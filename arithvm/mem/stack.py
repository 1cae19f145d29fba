"""
Arithmetic Machine — Operand Stack

Fixed-capacity stack of doubles. sp indexes the top element and is -1
when the stack is empty. Instructions only ever touch the top; snapshot()
exists for inspection and tests, not for the execute loop.
"""

from typing import List, Tuple

from ..errors import StackOverflow, StackUnderflow

# Maximum number of values on the stack
STACK_SIZE = 256


class OperandStack:
    """Bounded operand stack.

    Storage is preallocated to `capacity` slots, as the machine would
    allocate it once at creation. Overflow and underflow raise instead
    of touching slots outside the allocation.
    """

    def __init__(self, capacity: int = STACK_SIZE):
        if capacity < 1:
            raise ValueError(f"stack capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._slots: List[float] = [0.0] * capacity
        self.sp = -1

    @property
    def depth(self) -> int:
        return self.sp + 1

    def __len__(self) -> int:
        return self.depth

    def push(self, value: float):
        """Write value above the current top."""
        if self.sp + 1 >= self.capacity:
            raise StackOverflow(
                f"Stack overflow: capacity {self.capacity} exceeded")
        self.sp += 1
        self._slots[self.sp] = float(value)

    def pop(self) -> float:
        """Remove and return the top value."""
        if self.sp < 0:
            raise StackUnderflow("Stack underflow: pop from empty stack")
        value = self._slots[self.sp]
        self.sp -= 1
        return value

    def peek(self) -> float:
        if self.sp < 0:
            raise StackUnderflow("Stack underflow: peek at empty stack")
        return self._slots[self.sp]

    def require(self, count: int, what: str = 'instruction'):
        """Raise StackUnderflow unless at least `count` values are present."""
        if self.depth < count:
            raise StackUnderflow(
                f"{what} requires {count} stack elements, have {self.depth}")

    def snapshot(self) -> Tuple[float, ...]:
        """Current contents, bottom to top."""
        return tuple(self._slots[:self.depth])

    def clear(self):
        self.sp = -1

    def release(self):
        """Drop the backing storage. The stack is unusable afterwards."""
        self._slots = []
        self.capacity = 0
        self.sp = -1

    def __repr__(self):
        return f"OperandStack(depth={self.depth}, capacity={self.capacity})"
