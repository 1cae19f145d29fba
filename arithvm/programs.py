"""
Arithmetic Machine — Sample Programs

Hand-assembled bytecode, kept byte-for-byte so it can be compared with
bytecode produced by other implementations.
"""

from .cpu.decoder import Opcode as Op

# push 2, push 1, subtract, print -> 1.000000
SUBTRACT = bytes([
    Op.DCONST_2, Op.DCONST_1,
    Op.SUB,
    Op.PRINT,
    Op.HALT,
])

# DCONST 12.54 (big-endian IEEE-754), print -> 12.540000
README = bytes([
    Op.DCONST,
    0x40, 0x29, 0x14, 0x7A, 0xE1, 0x47, 0xAE, 0x14,
    Op.PRINT,
    Op.HALT,
])

# Prints the Fibonacci sequence, stopping once the last two terms are both
# past 100 (the final iteration prints 144 and 233).
FIBONACCI = bytes([
    # Start with 0 and 1 already on the stack
    Op.DCONST_0,
    Op.DCONST_0,
    Op.PRINT,
    Op.DCONST_1,
    Op.DCONST_1,
    Op.PRINT,
    # Loop start (address 6)
    Op.ST2,
    Op.ST1,
    Op.LD1,
    Op.LD2,
    # r1 = r1 + r2
    Op.ADD,
    Op.ST1,
    Op.LD1,
    Op.LD1,
    Op.PRINT,           # PRINT consumes one copy
    # r2 = r1 + r2
    Op.LD2,
    Op.ADD,
    Op.ST2,
    Op.LD2,
    Op.PRINT,
    # Leave both terms on the stack for the next iteration
    Op.LD1,
    Op.LD2,
    # r1 = 100.0; loop while 100.0 > r2
    Op.DCONST,
    0x40, 0x59, 0, 0, 0, 0, 0, 0,
    Op.ST1,
    Op.JGT,
    0, 0, 0, 6,

    Op.HALT,
])

FIBONACCI_LOOP = 6

SAMPLES = {
    'subtract': SUBTRACT,
    'readme': README,
    'fibonacci': FIBONACCI,
}
