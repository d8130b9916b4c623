#!/usr/bin/env python3
"""
RV32I/M instruction decoder.

decode() maps a 32-bit instruction word to its assembly text. Dispatch is by
major opcode to one handler per instruction family; each handler does an
exact lookup on funct3 (and funct7 or the combined funct7/rs2 field where
the ISA needs it). Any lookup that misses means the word is not a recognized
instruction and decode() returns None. Nothing here raises for any input.

Output text follows a fixed layout:

    addi     x1, x0, -1
    beq      x1, x2, .+0x00000010
    csrrs    x5, mstatus, x0
    ecall
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .config import DisplayConfig
from .csr import csr_name
from .encodings import (
    WORD_MASK,
    OPCODE_LUI,
    OPCODE_AUIPC,
    OPCODE_JAL,
    OPCODE_JALR,
    OPCODE_BRANCH,
    OPCODE_LOAD,
    OPCODE_STORE,
    OPCODE_OP_IMM,
    OPCODE_OP,
    OPCODE_MISC_MEM,
    OPCODE_SYSTEM,
    register_name,
)
from .fields import InstructionFields

DEFAULT_DISPLAY = DisplayConfig()

# ============================================================================
# Mnemonic tables
# ============================================================================

BRANCH_OPS = {
    0b000: "beq",
    0b001: "bne",
    0b100: "blt",
    0b101: "bge",
    0b110: "bltu",
    0b111: "bgeu",
}

LOAD_OPS = {
    0b000: "lb",
    0b001: "lh",
    0b010: "lw",
    0b100: "lbu",
    0b101: "lhu",
}

STORE_OPS = {
    0b000: "sb",
    0b001: "sh",
    0b010: "sw",
}

OP_IMM_OPS = {
    0b000: "addi",
    0b010: "slti",
    0b011: "sltiu",
    0b100: "xori",
    0b110: "ori",
    0b111: "andi",
}

# funct3 == 101 is split by funct7; slli ignores funct7
SHIFT_RIGHT_IMM_OPS = {
    0b0000000: "srli",
    0b0100000: "srai",
}

# funct7 -> funct3 -> mnemonic
OP_OPS = {
    0b0000000: {
        0b000: "add",
        0b001: "sll",
        0b010: "slt",
        0b011: "sltu",
        0b100: "xor",
        0b101: "srl",
        0b110: "or",
        0b111: "and",
    },
    # M extension
    0b0000001: {
        0b000: "mul",
        0b001: "mulh",
        0b010: "mulhsu",
        0b011: "mulhu",
        0b100: "div",
        0b101: "divu",
        0b110: "rem",
        0b111: "remu",
    },
    0b0100000: {
        0b000: "sub",
        0b101: "sra",
    },
}

MISC_MEM_OPS = {
    0b000: "fence",
    0b001: "fence.i",
}

# funct7/rs2 combined field, only when funct3 == rd == rs1 == 0
SYSTEM_OPS = {
    0b000000000000: "ecall",
    0b000000000001: "ebreak",
    0b000000000010: "uret",
    0b000100000010: "sret",
    0b001100000010: "mret",
    0b000100000101: "wfi",
}

CSR_REG_OPS = {
    0b001: "csrrw",
    0b010: "csrrs",
    0b011: "csrrc",
}

CSR_IMM_OPS = {
    0b101: "csrrwi",
    0b110: "csrrsi",
    0b111: "csrrci",
}

# ============================================================================
# Operand formatting
# ============================================================================

def pcrel(offset: int) -> str:
    """Render a pc-relative byte offset as .+0x######## or .-0x########"""
    if offset >= 0:
        return f".+0x{offset:08x}"
    return f".-0x{-offset:08x}"


class Formatter:
    """Renders mnemonics and operands according to a DisplayConfig."""

    def __init__(self, display: DisplayConfig = DEFAULT_DISPLAY):
        self.display = display

    def insn(self, name: str, *operands: str) -> str:
        if not operands:
            return name
        # Always keep at least one space between mnemonic and operands
        column = name.ljust(self.display.mnemonic_width - 1) + " "
        return column + ", ".join(operands)

    def reg(self, num: int) -> str:
        return register_name(num, self.display.register_names)

    def mem(self, offset: int, base: int) -> str:
        return f"{offset}({self.reg(base)})"

# ============================================================================
# Per-family handlers
# ============================================================================

def decode_lui(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    return fmt.insn("lui", fmt.reg(p.rd), f"{p.imm_u & WORD_MASK:#010x}")


def decode_auipc(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    return fmt.insn("auipc", fmt.reg(p.rd), f"{p.imm_u & WORD_MASK:#010x}")


def decode_jal(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    return fmt.insn("jal", fmt.reg(p.rd), pcrel(p.imm_j))


def decode_jalr(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    if p.funct3 != 0:
        return None
    return fmt.insn("jalr", fmt.reg(p.rd), fmt.mem(p.imm_i, p.rs1))


def decode_branch(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    name = BRANCH_OPS.get(p.funct3)
    if name is None:
        return None
    return fmt.insn(name, fmt.reg(p.rs1), fmt.reg(p.rs2), pcrel(p.imm_b))


def decode_load(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    name = LOAD_OPS.get(p.funct3)
    if name is None:
        return None
    return fmt.insn(name, fmt.reg(p.rd), fmt.mem(p.imm_i, p.rs1))


def decode_store(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    name = STORE_OPS.get(p.funct3)
    if name is None:
        return None
    return fmt.insn(name, fmt.reg(p.rs2), fmt.mem(p.imm_s, p.rs1))


def decode_op_imm(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    name = OP_IMM_OPS.get(p.funct3)
    if name is not None:
        return fmt.insn(name, fmt.reg(p.rd), fmt.reg(p.rs1), str(p.imm_i))

    # Shifts take their amount from the rs2 field, not from imm_i
    if p.funct3 == 0b001:
        name = "slli"
    elif p.funct3 == 0b101:
        name = SHIFT_RIGHT_IMM_OPS.get(p.funct7)
    if name is None:
        return None
    return fmt.insn(name, fmt.reg(p.rd), fmt.reg(p.rs1), str(p.rs2))


def decode_op(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    name = OP_OPS.get(p.funct7, {}).get(p.funct3)
    if name is None:
        return None
    return fmt.insn(name, fmt.reg(p.rd), fmt.reg(p.rs1), fmt.reg(p.rs2))


def decode_misc_mem(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    return MISC_MEM_OPS.get(p.funct3)


def decode_system(p: InstructionFields, fmt: Formatter) -> Optional[str]:
    if p.funct3 == 0b000:
        if p.rd != 0 or p.rs1 != 0:
            return None
        return SYSTEM_OPS.get(p.funct7_rs2)

    name = CSR_REG_OPS.get(p.funct3)
    if name is not None:
        return fmt.insn(name, fmt.reg(p.rd), csr_name(p.imm_i), fmt.reg(p.rs1))

    name = CSR_IMM_OPS.get(p.funct3)
    if name is not None:
        # The rs1 field value is printed as a full-width hex literal
        return fmt.insn(name, fmt.reg(p.rd), csr_name(p.imm_i), f"0x{p.rs1:08x}")

    return None


OPCODE_HANDLERS: Dict[int, Callable[[InstructionFields, Formatter], Optional[str]]] = {
    OPCODE_LUI:      decode_lui,
    OPCODE_AUIPC:    decode_auipc,
    OPCODE_JAL:      decode_jal,
    OPCODE_JALR:     decode_jalr,
    OPCODE_BRANCH:   decode_branch,
    OPCODE_LOAD:     decode_load,
    OPCODE_STORE:    decode_store,
    OPCODE_OP_IMM:   decode_op_imm,
    OPCODE_OP:       decode_op,
    OPCODE_MISC_MEM: decode_misc_mem,
    OPCODE_SYSTEM:   decode_system,
}

# ============================================================================
# Public API
# ============================================================================

def decode(word: int, display: DisplayConfig = DEFAULT_DISPLAY) -> Optional[str]:
    """
    Decode an instruction word to assembly text.

    Args:
        word: Instruction word; only the low 32 bits are used
        display: Rendering options

    Returns:
        The instruction text, or None if the word is not a recognized
        RV32I/M, privileged or Zicsr instruction
    """
    p = InstructionFields(word & WORD_MASK)
    handler = OPCODE_HANDLERS.get(p.opcode)
    if handler is None:
        return None
    return handler(p, Formatter(display))


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one word: text, or None when unrecognized."""
    word: int
    text: Optional[str]
    display: DisplayConfig = field(default=DEFAULT_DISPLAY, compare=False, repr=False)

    @property
    def valid(self) -> bool:
        return self.text is not None

    def __str__(self):
        if self.text is None:
            return self.display.format_invalid(self.word)
        return self.text


def decode_word(word: int, display: DisplayConfig = DEFAULT_DISPLAY) -> DecodeResult:
    """Decode a word and keep it together with the outcome."""
    word &= WORD_MASK
    return DecodeResult(word, decode(word, display), display)
