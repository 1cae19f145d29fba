"""
Arithmetic Machine — Bytecode Listing

Linear-sweep disassembly using the same opcode table as the machine.
Nothing is executed, so jump targets are shown but not followed.

Bad input never raises: an undefined byte is listed as DB and a
truncated trailing instruction as ??, and the sweep stops there since
operand widths after that point can't be trusted.
"""

from typing import List

from .cpu.decoder import ADDR, Instruction, decode_instruction
from .errors import IllegalOpcode, TruncatedStream
from .mem.stream import InstructionStream


def disassemble(code) -> List[Instruction]:
    """Decode every well-formed instruction from the start of the stream.

    Stops silently at the first undefined or truncated instruction.
    """
    stream = InstructionStream(code)
    result = []
    pc = 0
    while pc < len(stream):
        try:
            instr = decode_instruction(stream, pc)
        except (IllegalOpcode, TruncatedStream):
            break
        result.append(instr)
        pc = instr.next_pc
    return result


def _line(pc: int, raw: bytes, text: str) -> str:
    hex_bytes = ' '.join(f"{b:02X}" for b in raw)
    return f"{pc:04X}  {hex_bytes:<26s} {text}"


def format_listing(code) -> str:
    """Listing with address, raw bytes and mnemonic per line."""
    stream = InstructionStream(code)
    data = stream.code
    lines = []
    pc = 0
    while pc < len(stream):
        try:
            instr = decode_instruction(stream, pc)
        except IllegalOpcode as e:
            lines.append(_line(pc, data[pc:pc + 1], f"DB 0x{e.opcode:02X}"))
            break
        except TruncatedStream:
            lines.append(_line(pc, data[pc:], "??"))
            break
        text = str(instr)
        if instr.info.mode == ADDR:
            text = f"{instr.mnemonic} 0x{instr.operand:04X}"
        lines.append(_line(pc, data[pc:instr.next_pc], text))
        pc = instr.next_pc
    return '\n'.join(lines)
