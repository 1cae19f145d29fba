"""Instruction stream and operand stack."""
