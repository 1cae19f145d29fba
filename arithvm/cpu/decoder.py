"""
Arithmetic Machine — Opcode Table / Decoder / Encoder

This module maps opcode bytes to (mnemonic, operand mode, operand width).
It is the only place operand widths are defined: the decoder, the
encoder, the disassembler and the machine's dispatch table are all built
from OPCODES.

Operand modes:
  INH   Inherent (no operand bytes)
  F64   8-byte double constant, wire order (DCONST)
  ADDR  4-byte absolute jump address, wire order (Jxx)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, NamedTuple, Tuple, Union

from ..errors import IllegalOpcode
from ..mem.stream import InstructionStream
from .codec import (
    WIRE_ORDER, F64_SIZE, U32_SIZE,
    encode_f64, decode_f64, encode_u32, decode_u32,
)

# ──────────────────────────────────────────────
# Operand mode constants
# ──────────────────────────────────────────────

INH  = 'INH'
F64  = 'F64'
ADDR = 'ADDR'

MODE_WIDTH = {
    INH:  0,
    F64:  F64_SIZE,
    ADDR: U32_SIZE,
}


class Opcode(IntEnum):
    HALT      = 0x00
    DCONST_M1 = 0x0A
    DCONST_0  = 0x0B
    DCONST_1  = 0x0C
    DCONST_2  = 0x0D
    DCONST    = 0x0F
    JEQ       = 0x10
    JNE       = 0x11
    JLT       = 0x12
    JLE       = 0x13
    JGT       = 0x14
    JGE       = 0x15
    ADD       = 0x60
    SUB       = 0x61
    MUL       = 0x62
    # 0x63 unassigned
    DIV       = 0x64
    NEG       = 0x70
    NOP       = 0xF0
    PRINT     = 0xF2
    ST1       = 0xF4
    LD1       = 0xF5
    ST2       = 0xF6
    LD2       = 0xF7


class OpInfo(NamedTuple):
    mnemonic: str
    mode: str
    width: int


def _info(op: Opcode, mode: str) -> OpInfo:
    return OpInfo(op.name, mode, MODE_WIDTH[mode])


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, operand_mode, operand_width)

OPCODES = {
    # ── Control ──
    Opcode.HALT:      _info(Opcode.HALT,      INH),
    Opcode.NOP:       _info(Opcode.NOP,       INH),

    # ── Constants ──
    Opcode.DCONST_M1: _info(Opcode.DCONST_M1, INH),
    Opcode.DCONST_0:  _info(Opcode.DCONST_0,  INH),
    Opcode.DCONST_1:  _info(Opcode.DCONST_1,  INH),
    Opcode.DCONST_2:  _info(Opcode.DCONST_2,  INH),
    Opcode.DCONST:    _info(Opcode.DCONST,    F64),

    # ── Conditional absolute jumps (compare r1 against r2) ──
    Opcode.JEQ:       _info(Opcode.JEQ,       ADDR),
    Opcode.JNE:       _info(Opcode.JNE,       ADDR),
    Opcode.JLT:       _info(Opcode.JLT,       ADDR),
    Opcode.JLE:       _info(Opcode.JLE,       ADDR),
    Opcode.JGT:       _info(Opcode.JGT,       ADDR),
    Opcode.JGE:       _info(Opcode.JGE,       ADDR),

    # ── Arithmetic ──
    Opcode.ADD:       _info(Opcode.ADD,       INH),
    Opcode.SUB:       _info(Opcode.SUB,       INH),
    Opcode.MUL:       _info(Opcode.MUL,       INH),
    Opcode.DIV:       _info(Opcode.DIV,       INH),
    Opcode.NEG:       _info(Opcode.NEG,       INH),

    # ── Output / registers ──
    Opcode.PRINT:     _info(Opcode.PRINT,     INH),
    Opcode.ST1:       _info(Opcode.ST1,       INH),
    Opcode.LD1:       _info(Opcode.LD1,       INH),
    Opcode.ST2:       _info(Opcode.ST2,       INH),
    Opcode.LD2:       _info(Opcode.LD2,       INH),
}

_missing = [op.name for op in Opcode if op not in OPCODES]
if _missing:
    raise RuntimeError(f"Opcodes without a table entry: {', '.join(_missing)}")
del _missing


Operand = Union[None, float, int]


@dataclass(frozen=True)
class Instruction:
    """One decoded instruction and where it sits in the stream."""
    pc: int
    opcode: Opcode
    operand: Operand = None

    @property
    def info(self) -> OpInfo:
        return OPCODES[self.opcode]

    @property
    def mnemonic(self) -> str:
        return self.info.mnemonic

    @property
    def size(self) -> int:
        return 1 + self.info.width

    @property
    def next_pc(self) -> int:
        return self.pc + self.size

    def encode(self) -> bytes:
        return encode_instruction(self.opcode, self.operand)

    def __str__(self):
        if self.operand is None:
            return self.mnemonic
        if self.info.mode == ADDR:
            return f"{self.mnemonic} {self.operand}"
        return f"{self.mnemonic} {self.operand!r}"


# ──────────────────────────────────────────────
# Decoding
# ──────────────────────────────────────────────

def decode_opcode(stream: InstructionStream, pc: int) -> Tuple[Opcode, OpInfo, int]:
    """Fetch and decode the opcode byte at pc.

    Returns: (opcode, info, pc_after_opcode)

    Raises:
        TruncatedStream: pc is at or past the end of the stream
        IllegalOpcode: byte has no table entry
    """
    byte = stream.fetch8(pc)
    try:
        opcode = Opcode(byte)
    except ValueError:
        raise IllegalOpcode(byte, pc) from None
    return opcode, OPCODES[opcode], pc + 1


def decode_operand(stream: InstructionStream, info: OpInfo, pc: int,
                   byteorder: str = WIRE_ORDER) -> Tuple[Operand, int]:
    """Read the operand that follows an opcode.

    pc points at the first operand byte. Returns (value, pc_after_operand);
    value is None for INH, float for F64, int for ADDR.
    """
    if info.mode == INH:
        return None, pc
    data = stream.fetch(pc, info.width)
    if info.mode == F64:
        return decode_f64(data, byteorder), pc + info.width
    if info.mode == ADDR:
        return decode_u32(data, byteorder), pc + info.width
    raise ValueError(f"Unknown operand mode: {info.mode}")


def decode_instruction(stream, pc: int = 0,
                       byteorder: str = WIRE_ORDER) -> Instruction:
    """Decode the full instruction at pc."""
    if not isinstance(stream, InstructionStream):
        stream = InstructionStream(stream)
    opcode, info, operand_pc = decode_opcode(stream, pc)
    operand, _ = decode_operand(stream, info, operand_pc, byteorder)
    return Instruction(pc, opcode, operand)


# ──────────────────────────────────────────────
# Encoding
# ──────────────────────────────────────────────

def encode_instruction(opcode, operand: Operand = None,
                       byteorder: str = WIRE_ORDER) -> bytes:
    """Encode one opcode and its operand.

    Raises ValueError if the opcode is unknown or the operand does not
    match the opcode's mode.
    """
    try:
        opcode = Opcode(opcode)
    except ValueError:
        raise ValueError(f"Unknown opcode: {opcode!r}") from None
    info = OPCODES[opcode]
    head = bytes([opcode])

    if info.mode == INH:
        if operand is not None:
            raise ValueError(f"{info.mnemonic} takes no operand, got {operand!r}")
        return head
    if operand is None:
        raise ValueError(f"{info.mnemonic} requires an operand")
    if info.mode == F64:
        return head + encode_f64(float(operand), byteorder)
    if isinstance(operand, float) and not operand.is_integer():
        raise ValueError(f"{info.mnemonic} address must be an integer, got {operand!r}")
    return head + encode_u32(int(operand), byteorder)


def encode_program(instructions: Iterable, byteorder: str = WIRE_ORDER) -> bytes:
    """Encode a sequence of instructions to bytecode.

    Items may be Opcode values, (opcode, operand) tuples or Instruction
    objects.
    """
    out = bytearray()
    for item in instructions:
        if isinstance(item, Instruction):
            out += encode_instruction(item.opcode, item.operand, byteorder)
        elif isinstance(item, tuple):
            out += encode_instruction(*item, byteorder=byteorder)
        else:
            out += encode_instruction(item, byteorder=byteorder)
    return bytes(out)
