"""Operand stack, instruction stream and output sink unit tests."""

import pytest

from arithvm import (
    ConsoleSink, InstructionStream, OperandStack, StackOverflow, StackUnderflow,
    TruncatedStream, format_value,
)


class TestOperandStack:
    def test_push_pop_order(self):
        s = OperandStack()
        s.push(1.0)
        s.push(2.0)
        assert s.sp == 1
        assert s.pop() == 2.0
        assert s.pop() == 1.0
        assert s.sp == -1

    def test_values_become_floats(self):
        s = OperandStack()
        s.push(3)
        assert isinstance(s.peek(), float)

    def test_overflow(self):
        s = OperandStack(capacity=3)
        for v in (1.0, 2.0, 3.0):
            s.push(v)
        with pytest.raises(StackOverflow):
            s.push(4.0)
        assert s.snapshot() == (1.0, 2.0, 3.0)

    def test_underflow(self):
        s = OperandStack()
        with pytest.raises(StackUnderflow):
            s.pop()
        with pytest.raises(StackUnderflow):
            s.peek()

    def test_require(self):
        s = OperandStack()
        s.push(1.0)
        s.require(1)
        with pytest.raises(StackUnderflow, match="ADD requires 2"):
            s.require(2, 'ADD')

    def test_clear_and_release(self):
        s = OperandStack(capacity=4)
        s.push(1.0)
        s.clear()
        assert len(s) == 0
        s.release()
        with pytest.raises(StackOverflow):
            s.push(1.0)

    def test_bad_capacity(self):
        with pytest.raises(ValueError):
            OperandStack(capacity=0)


class TestInstructionStream:
    def test_reads(self):
        s = InstructionStream(bytearray([1, 2, 3]))
        assert len(s) == 3
        assert s.fetch8(2) == 3
        assert s.fetch(1, 2) == bytes([2, 3])

    def test_copy_is_immutable(self):
        buf = bytearray([1, 2, 3])
        s = InstructionStream(buf)
        buf[0] = 9
        assert s.fetch8(0) == 1

    def test_past_end(self):
        s = InstructionStream(bytes([1, 2, 3]))
        with pytest.raises(TruncatedStream):
            s.fetch8(3)
        with pytest.raises(TruncatedStream) as exc:
            s.fetch(2, 4)
        assert (exc.value.pc, exc.value.needed, exc.value.available) == (2, 4, 1)

    def test_negative_pc(self):
        with pytest.raises(TruncatedStream):
            InstructionStream(b'\x00').fetch8(-1)


class TestConsoleSink:
    @pytest.mark.parametrize("value, text", [
        (1.0, '1.000000'),
        (12.54, '12.540000'),
        (-0.5, '-0.500000'),
        (144.0, '144.000000'),
        (float('nan'), 'nan'),
        (float('inf'), 'inf'),
        (float('-inf'), '-inf'),
    ])
    def test_format_value(self, value, text):
        assert format_value(value) == text

    def test_echo(self):
        seen = []
        sink = ConsoleSink(echo=seen.append)
        sink.emit(2.0)
        sink.emit(3.0)
        assert seen == ['2.000000', '3.000000']
        assert sink.output == '2.000000\n3.000000\n'
        sink.clear()
        assert sink.lines == []
