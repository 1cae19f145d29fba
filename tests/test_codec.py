"""
Operand codec and opcode table tests.

The wire order is a parameter, so "decoding on a big-endian host" and
"on a little-endian host" come down to the same struct calls: these
tests pin the byte layout and the exact bit patterns instead.
"""

import math
import struct

import pytest

from arithvm import (
    Opcode as Op, OPCODES, WIRE_ORDER, Instruction, InstructionStream,
    IllegalOpcode, TruncatedStream,
    encode_f64, decode_f64, encode_u32, decode_u32, f64_bits,
    encode_instruction, encode_program, decode_instruction, decode_opcode,
)
from arithvm.cpu.decoder import ADDR, F64, INH


class TestF64:
    def test_reference_encoding(self):
        """12.54 as it appears in existing bytecode."""
        raw = bytes([0x40, 0x29, 0x14, 0x7A, 0xE1, 0x47, 0xAE, 0x14])
        assert WIRE_ORDER == 'big'
        assert encode_f64(12.54) == raw
        assert decode_f64(raw) == 12.54

    def test_hundred(self):
        assert encode_f64(100.0) == bytes([0x40, 0x59, 0, 0, 0, 0, 0, 0])

    @pytest.mark.parametrize("value", [
        0.0, -0.0, 1.0, -1.0, 12.54, 1e-310, 1.7976931348623157e308,
        float('inf'), float('-inf'),
    ])
    @pytest.mark.parametrize("order", ['big', 'little'])
    def test_bit_pattern_preserved(self, value, order):
        decoded = decode_f64(encode_f64(value, order), order)
        assert f64_bits(decoded) == f64_bits(value)

    def test_nan_payload_preserved(self):
        raw = bytes([0x7F, 0xF8, 0x00, 0x00, 0x00, 0x00, 0x12, 0x34])
        value = decode_f64(raw)
        assert math.isnan(value)
        assert encode_f64(value) == raw

    def test_orders_are_mirror_images(self):
        assert encode_f64(12.54, 'little') == encode_f64(12.54, 'big')[::-1]
        assert decode_f64(encode_f64(3.5, 'big')[::-1], 'little') == 3.5

    def test_independent_of_host_order(self):
        native = struct.pack('=d', 12.54)
        expected = native if struct.pack('=H', 1) == b'\x00\x01' else native[::-1]
        assert encode_f64(12.54) == expected

    def test_bad_length(self):
        with pytest.raises(ValueError):
            decode_f64(b'\x00' * 7)

    def test_bad_byteorder(self):
        with pytest.raises(ValueError):
            encode_f64(1.0, 'native')


class TestU32:
    def test_reference_encoding(self):
        assert encode_u32(6) == bytes([0, 0, 0, 6])
        assert decode_u32(bytes([0, 0, 0, 6])) == 6

    def test_little(self):
        assert encode_u32(0x01020304, 'little') == bytes([4, 3, 2, 1])
        assert decode_u32(bytes([4, 3, 2, 1]), 'little') == 0x01020304

    def test_full_range(self):
        assert decode_u32(encode_u32(0xFFFFFFFF)) == 0xFFFFFFFF

    @pytest.mark.parametrize("value", [-1, 0x100000000])
    def test_out_of_range(self, value):
        with pytest.raises(ValueError):
            encode_u32(value)


class TestOpcodeTable:
    """Opcode values must match existing bytecode byte-for-byte."""

    def test_values(self):
        expected = {
            'HALT': 0x00, 'DCONST_M1': 0x0A, 'DCONST_0': 0x0B, 'DCONST_1': 0x0C,
            'DCONST_2': 0x0D, 'DCONST': 0x0F,
            'JEQ': 0x10, 'JNE': 0x11, 'JLT': 0x12, 'JLE': 0x13, 'JGT': 0x14, 'JGE': 0x15,
            'ADD': 0x60, 'SUB': 0x61, 'MUL': 0x62, 'DIV': 0x64, 'NEG': 0x70,
            'NOP': 0xF0, 'PRINT': 0xF2,
            'ST1': 0xF4, 'LD1': 0xF5, 'ST2': 0xF6, 'LD2': 0xF7,
        }
        assert {op.name: op.value for op in Op} == expected

    def test_0x63_unassigned(self):
        assert 0x63 not in {op.value for op in Op}

    def test_widths(self):
        for op, info in OPCODES.items():
            assert info.mnemonic == op.name
            if op == Op.DCONST:
                assert (info.mode, info.width) == (F64, 8)
            elif Op.JEQ <= op <= Op.JGE:
                assert (info.mode, info.width) == (ADDR, 4)
            else:
                assert (info.mode, info.width) == (INH, 0)


class TestDecoder:
    def test_decode_opcode(self):
        stream = InstructionStream(bytes([Op.NOP, Op.HALT]))
        op, info, next_pc = decode_opcode(stream, 1)
        assert op is Op.HALT
        assert next_pc == 2

    def test_illegal(self):
        with pytest.raises(IllegalOpcode) as exc:
            decode_opcode(InstructionStream(bytes([0x63])), 0)
        assert exc.value.opcode == 0x63
        assert exc.value.pc == 0

    def test_truncated(self):
        with pytest.raises(TruncatedStream) as exc:
            decode_instruction(bytes([Op.JGT, 0, 0]))
        assert exc.value.pc == 1
        assert exc.value.needed == 4
        assert exc.value.available == 2

    def test_decode_instruction(self):
        code = bytes([Op.NOP]) + encode_instruction(Op.DCONST, 100.0)
        instr = decode_instruction(code, 1)
        assert instr == Instruction(1, Op.DCONST, 100.0)
        assert instr.size == 9
        assert instr.next_pc == 10
        assert str(instr) == "DCONST 100.0"

    def test_instruction_reencodes(self):
        code = encode_instruction(Op.JLE, 0x0102)
        assert decode_instruction(code).encode() == code


class TestEncoder:
    def test_program(self):
        code = encode_program([Op.DCONST_2, (Op.DCONST, 100.0), (Op.JGT, 6), Op.HALT])
        assert code == bytes([0x0D, 0x0F, 0x40, 0x59, 0, 0, 0, 0, 0, 0,
                              0x14, 0, 0, 0, 6, 0x00])

    def test_accepts_raw_ints(self):
        assert encode_program([0x0C, 0xF2, 0x00]) == bytes([0x0C, 0xF2, 0x00])

    def test_unknown_opcode(self):
        with pytest.raises(ValueError):
            encode_instruction(0x63)

    def test_missing_operand(self):
        with pytest.raises(ValueError):
            encode_instruction(Op.DCONST)

    def test_unexpected_operand(self):
        with pytest.raises(ValueError):
            encode_instruction(Op.ADD, 1.0)

    def test_fractional_address(self):
        with pytest.raises(ValueError):
            encode_instruction(Op.JEQ, 1.5)
