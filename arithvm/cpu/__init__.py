"""CPU side: registers, opcode table, operand codec, ALU."""
