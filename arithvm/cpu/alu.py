"""
Arithmetic Machine — ALU Operations

Binary operations take (a, b) where a is the first-pushed value and b the
second-pushed (first-popped) one, so SUB computes a - b.

Comparisons are Python float comparisons, i.e. IEEE-754: every relation
against NaN is false except !=.
"""

import operator
from typing import Callable, Dict

from .decoder import Opcode


def add(a: float, b: float) -> float:
    return a + b


def sub(a: float, b: float) -> float:
    return a - b


def mul(a: float, b: float) -> float:
    return a * b


def div(a: float, b: float) -> float:
    """Divide a by b. Raises ZeroDivisionError for b == 0.0 (either sign)."""
    if b == 0.0:
        raise ZeroDivisionError("division by zero")
    return a / b


def neg(v: float) -> float:
    return -v


BINARY_OPS: Dict[Opcode, Callable[[float, float], float]] = {
    Opcode.ADD: add,
    Opcode.SUB: sub,
    Opcode.MUL: mul,
    Opcode.DIV: div,
}

# Jxx: jump when RELATIONS[op](r1, r2) holds
RELATIONS: Dict[Opcode, Callable[[float, float], bool]] = {
    Opcode.JEQ: operator.eq,
    Opcode.JNE: operator.ne,
    Opcode.JLT: operator.lt,
    Opcode.JLE: operator.le,
    Opcode.JGT: operator.gt,
    Opcode.JGE: operator.ge,
}
