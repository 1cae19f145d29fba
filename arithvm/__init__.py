"""
Arithmetic Machine
==================
A stack-based virtual machine that executes arithmetic over doubles.

    ┌──────────┐    ┌──────────┐    ┌───────────────┐    ┌──────────┐
    │ Bytecode │───>│ Decoder  │───>│ Execute loop  │───>│  PRINT   │
    │ (bytes)  │    │ (table)  │    │ stack + r1/r2 │    │  sink    │
    └──────────┘    └──────────┘    └───────────────┘    └──────────┘

    - cpu/decoder.py:   Opcode table, the single source of operand widths
    - cpu/codec.py:     f64 / u32 operands in an explicit wire byte order
    - cpu/alu.py:       Arithmetic and IEEE-754 relations for the jumps
    - mem/stream.py:    Read-only, bounds-checked bytecode
    - mem/stack.py:     Fixed-capacity operand stack
    - emu.py:           ArithVM step/run loop and ExecutionResult
    - disasm.py:        Listing of a bytecode stream
"""

__version__ = "1.0.0"

import logging

# Library code only logs; handlers are installed by setup_logging()
logging.getLogger(__name__).addHandler(logging.NullHandler())

from .errors import (
    VMError, IllegalOpcode, TruncatedStream, StackOverflow, StackUnderflow,
    DivisionByZero,
)
from .cpu.codec import (
    WIRE_ORDER, check_byteorder, encode_f64, decode_f64, encode_u32, decode_u32,
    f64_bits,
)
from .cpu.decoder import (
    Opcode, OpInfo, OPCODES, Instruction,
    decode_opcode, decode_operand, decode_instruction,
    encode_instruction, encode_program,
)
from .cpu.regs import Registers
from .mem.stack import OperandStack, STACK_SIZE
from .mem.stream import InstructionStream
from .periph.console import ConsoleSink, format_value
from .emu import ArithVM, ExecutionResult, StopReason, execute_bytecode
from .disasm import disassemble, format_listing
from .programs import SAMPLES
