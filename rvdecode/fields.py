#!/usr/bin/env python3
"""
Field extraction for 32-bit RV32 instruction words.

InstructionFields is a read-only view of one word. Register and function
fields are plain bit slices; the five immediate formats are rebuilt from the
raw sub-groups on every access.
"""

from dataclasses import dataclass

from .encodings import WORD_MASK

SIGN_BIT = 0x80000000


def to_signed32(value: int) -> int:
    """Interpret the low 32 bits of value as a two's-complement integer."""
    value &= WORD_MASK
    return value - (1 << 32) if value & SIGN_BIT else value


@dataclass(frozen=True)
class InstructionFields:
    """Field view of a single instruction word"""
    word: int

    def _with_sign(self, fill_bits: int, raw: int) -> int:
        # The sign source is always bit 31 of the word, never the
        # immediate's own top bit.
        if not self.word & SIGN_BIT:
            return raw
        return to_signed32((((1 << fill_bits) - 1) << (32 - fill_bits)) | raw)

    # Raw immediate sub-groups
    @property
    def instr_30_25(self) -> int:
        return (self.word >> 25) & 0b111111

    @property
    def instr_24_21(self) -> int:
        return (self.word >> 21) & 0b1111

    @property
    def instr_20(self) -> int:
        return (self.word >> 20) & 0b1

    @property
    def instr_19_12(self) -> int:
        return (self.word >> 12) & 0b11111111

    @property
    def instr_11_8(self) -> int:
        return (self.word >> 8) & 0b1111

    @property
    def instr_7(self) -> int:
        return (self.word >> 7) & 0b1

    # Fixed fields
    @property
    def opcode(self) -> int:
        return self.word & 0b1111111

    @property
    def rd(self) -> int:
        return (self.word >> 7) & 0b11111

    @property
    def rs1(self) -> int:
        return (self.word >> 15) & 0b11111

    @property
    def rs2(self) -> int:
        return (self.word >> 20) & 0b11111

    @property
    def funct3(self) -> int:
        return (self.word >> 12) & 0b111

    @property
    def funct7(self) -> int:
        return (self.word >> 25) & 0b1111111

    @property
    def funct7_rs2(self) -> int:
        """funct7 and rs2 together, used to tell ecall/ebreak/xret/wfi apart"""
        return (self.word >> 20) & 0b111111111111

    # Immediates
    @property
    def imm_i(self) -> int:
        return self._with_sign(21, (self.instr_30_25 << 5) | (self.instr_24_21 << 1) | self.instr_20)

    @property
    def imm_s(self) -> int:
        return self._with_sign(21, (self.instr_30_25 << 5) | (self.instr_11_8 << 1) | self.instr_7)

    @property
    def imm_b(self) -> int:
        return self._with_sign(20, (self.instr_7 << 11) | (self.instr_30_25 << 5) | (self.instr_11_8 << 1))

    @property
    def imm_u(self) -> int:
        return to_signed32(self.word & 0xFFFFF000)

    @property
    def imm_j(self) -> int:
        return self._with_sign(12, (self.instr_19_12 << 12) | (self.instr_20 << 11)
                               | (self.instr_30_25 << 5) | (self.instr_24_21 << 1))
