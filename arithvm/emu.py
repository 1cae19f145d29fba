"""
Arithmetic Machine — Main Machine Class

This is the top-level class that integrates:
  - Instruction stream (mem/stream.py), read-only, not owned
  - Operand stack (mem/stack.py)
  - Registers r1, r2, pc (cpu/regs.py)
  - Opcode decoder (cpu/decoder.py)
  - ALU operations (cpu/alu.py)
  - PRINT sink (periph/console.py)

Execution model:
  1. Fetch opcode at PC
  2. Decode its fixed-width operand (none, f64 or u32 address)
  3. Execute the handler → update stack, registers, PC
  4. Check termination (HALT, fatal condition, step budget)

Termination reasons:
  HALT             HALT opcode, the only successful stop
  DIV_ZERO         DIV with a zero right operand
  ILLEGAL          undefined opcode
  TRUNCATED        fetch ran past the end of the bytecode
  STACK_OVERFLOW   push onto a full stack
  STACK_UNDERFLOW  pop from an empty stack
  TIMEOUT          run() step budget exhausted (machine is resumable)
"""

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .cpu import alu
from .cpu.codec import WIRE_ORDER, check_byteorder
from .cpu.decoder import (
    Opcode, OPCODES, Instruction, decode_opcode, decode_operand,
)
from .cpu.regs import Registers
from .errors import (
    VMError, IllegalOpcode, TruncatedStream, StackOverflow, StackUnderflow,
    DivisionByZero,
)
from .mem.stack import OperandStack, STACK_SIZE
from .mem.stream import InstructionStream
from .periph.console import ConsoleSink

log = logging.getLogger(__name__)


class StopReason(Enum):
    HALT = 'Halt'
    DIV_ZERO = 'DivisionByZero'
    ILLEGAL = 'InvalidOpcode'
    TRUNCATED = 'TruncatedStream'
    STACK_OVERFLOW = 'StackOverflow'
    STACK_UNDERFLOW = 'StackUnderflow'
    TIMEOUT = 'StepLimit'


_ERROR_REASONS = {
    IllegalOpcode: StopReason.ILLEGAL,
    TruncatedStream: StopReason.TRUNCATED,
    StackOverflow: StopReason.STACK_OVERFLOW,
    StackUnderflow: StopReason.STACK_UNDERFLOW,
    DivisionByZero: StopReason.DIV_ZERO,
}


@dataclass(frozen=True)
class ExecutionResult:
    """Why and where the machine stopped.

    pc is the address of the instruction that stopped the machine (for
    TRUNCATED, the offset of the read that ran off the end). opcode is
    the offending byte for ILLEGAL, otherwise the opcode being executed
    when known.
    """
    reason: StopReason
    pc: int
    opcode: Optional[int] = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.reason is StopReason.HALT

    @property
    def exit_status(self) -> int:
        return 0 if self.ok else 1

    def __str__(self):
        if self.ok:
            return f"Halted @ PC = {self.pc}"
        return f"{self.reason.value}: {self.message} @ PC = {self.pc}"


class _HaltException(Exception):
    pass


def _check_steps(max_steps: int) -> int:
    if max_steps < 0:
        raise ValueError(f"max_steps must be >= 0, got {max_steps}")
    return max_steps


class ArithVM:
    """Stack-based double-precision bytecode machine.

    Usage:
        vm = ArithVM(FIBONACCI)
        result = vm.run()
        result.ok          # True
        vm.sink.lines      # ['0.000000', '1.000000', ...]
        vm.close()
    """

    DEFAULT_MAX_STEPS = 10_000_000

    def __init__(self, code, *, stack_size: int = STACK_SIZE,
                 sink: Optional[ConsoleSink] = None,
                 max_steps: Optional[int] = None,
                 byteorder: str = WIRE_ORDER):
        self.code = code if isinstance(code, InstructionStream) else InstructionStream(code)
        self.byteorder = check_byteorder(byteorder)
        self.max_steps = _check_steps(self.DEFAULT_MAX_STEPS if max_steps is None else max_steps)

        self.regs = Registers()
        self.stack = OperandStack(stack_size)
        self.sink = sink if sink is not None else ConsoleSink()

        # Terminal result, set once the machine halts or faults
        self.result: Optional[ExecutionResult] = None
        self._closed = False

        self._trace = False
        self._trace_output: List[str] = []

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[ExecutionResult]:
        """Execute one instruction. Returns the result if stopped, else None."""
        if self._closed:
            raise RuntimeError("machine is closed")
        if self.result is not None:
            return self.result

        pc = self.regs.pc
        opcode = None
        try:
            opcode, info, operand_pc = decode_opcode(self.code, pc)
            operand, next_pc = decode_operand(self.code, info, operand_pc, self.byteorder)

            if self._trace:
                instr = Instruction(pc, opcode, operand)
                self._trace_output.append(f"{pc:04X}: {str(instr):20s} {self.regs.display()}")

            self.regs.pc = next_pc
            self.regs.steps += 1
            self._dispatch[opcode](operand)
        except _HaltException:
            self.result = ExecutionResult(StopReason.HALT, pc, int(opcode))
        except VMError as e:
            self.result = self._fault(e, pc, opcode)
        return self.result

    def run(self, max_steps: Optional[int] = None) -> ExecutionResult:
        """Run until HALT, a fatal condition, or max_steps instructions.

        Returns:
            ExecutionResult; TIMEOUT results are not terminal and a later
            run() continues where this one stopped.
        """
        max_steps = self.max_steps if max_steps is None else _check_steps(max_steps)
        if self.result is not None:
            return self.result

        log.debug("Running %d-byte program from PC=%d", len(self.code), self.regs.pc)
        for _ in range(max_steps):
            result = self.step()
            if result is not None:
                if result.ok:
                    log.debug("Halted at PC=%d after %d steps", result.pc, self.regs.steps)
                else:
                    log.debug("%s", result)
                return result

        log.debug("Step budget of %d exhausted at PC=%d", max_steps, self.regs.pc)
        return ExecutionResult(StopReason.TIMEOUT, self.regs.pc,
                               message=f"step budget of {max_steps} exhausted")

    def _fault(self, exc: VMError, pc: int, opcode) -> ExecutionResult:
        reason = _ERROR_REASONS[type(exc)]
        if isinstance(exc, IllegalOpcode):
            byte = exc.opcode
        else:
            byte = None if opcode is None else int(opcode)
        fault_pc = exc.pc if exc.pc is not None else pc
        if self._trace:
            self._trace_output.append(f"  ERROR: {exc}")
        return ExecutionResult(reason, fault_pc, byte, str(exc))

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(operand)
    # PC already points past the operand when a handler runs.

    def _build_dispatch(self) -> Dict[Opcode, Callable]:
        """Build opcode → handler dispatch table."""
        dispatch = {
            Opcode.HALT:      self._op_halt,
            Opcode.NOP:       self._op_nop,

            Opcode.DCONST_M1: functools.partial(self._op_const, -1.0),
            Opcode.DCONST_0:  functools.partial(self._op_const, 0.0),
            Opcode.DCONST_1:  functools.partial(self._op_const, 1.0),
            Opcode.DCONST_2:  functools.partial(self._op_const, 2.0),
            Opcode.DCONST:    self._op_dconst,

            Opcode.ADD:       functools.partial(self._op_binary, Opcode.ADD),
            Opcode.SUB:       functools.partial(self._op_binary, Opcode.SUB),
            Opcode.MUL:       functools.partial(self._op_binary, Opcode.MUL),
            Opcode.DIV:       self._op_div,
            Opcode.NEG:       self._op_neg,

            Opcode.PRINT:     self._op_print,
            Opcode.ST1:       self._op_st1,
            Opcode.LD1:       self._op_ld1,
            Opcode.ST2:       self._op_st2,
            Opcode.LD2:       self._op_ld2,
        }
        for op in alu.RELATIONS:
            dispatch[op] = functools.partial(self._op_jump, op)

        missing = [OPCODES[op].mnemonic for op in OPCODES if op not in dispatch]
        if missing:
            raise RuntimeError(f"No handler for opcodes: {', '.join(missing)}")
        return dispatch

    def _op_halt(self, operand):
        raise _HaltException()

    def _op_nop(self, operand):
        pass

    def _op_const(self, value: float, operand):
        self.stack.push(value)

    def _op_dconst(self, operand: float):
        self.stack.push(operand)

    def _op_jump(self, op: Opcode, target: int):
        if alu.RELATIONS[op](self.regs.r1, self.regs.r2):
            self.regs.pc = target

    def _op_binary(self, op: Opcode, operand):
        self.stack.require(2, OPCODES[op].mnemonic)
        b = self.stack.pop()
        a = self.stack.pop()
        self.stack.push(alu.BINARY_OPS[op](a, b))

    def _op_div(self, operand):
        self.stack.require(2, 'DIV')
        b = self.stack.pop()
        a = self.stack.pop()
        try:
            value = alu.div(a, b)
        except ZeroDivisionError:
            raise DivisionByZero("Division by zero") from None
        self.stack.push(value)

    def _op_neg(self, operand):
        self.stack.push(alu.neg(self.stack.pop()))

    def _op_print(self, operand):
        self.sink.emit(self.stack.pop())

    def _op_st1(self, operand):
        self.regs.r1 = self.stack.pop()

    def _op_ld1(self, operand):
        self.stack.push(self.regs.r1)

    def _op_st2(self, operand):
        self.regs.r2 = self.stack.pop()

    def _op_ld2(self, operand):
        self.stack.push(self.regs.r2)

    # ══════════════════════════════════════════════
    # Debug / lifecycle
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable per-instruction trace lines."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def reset(self):
        """Return to the initial state: pc=0, empty stack, r1=r2=0."""
        if self._closed:
            raise RuntimeError("machine is closed")
        self.regs.reset()
        self.stack.clear()
        self.result = None
        self._trace_output.clear()

    def close(self):
        """Release the operand stack. The bytecode is left untouched."""
        if not self._closed:
            self.stack.release()
            self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def execute_bytecode(code, **kwargs) -> Tuple[ExecutionResult, ArithVM]:
    """Create a machine for `code`, run it, and return (result, machine)."""
    vm = ArithVM(code, **kwargs)
    return vm.run(), vm
