#!/usr/bin/env python3
"""
RV32I/M instruction encoding database and field utilities.

The tables here describe which bit patterns belong to which instruction.
They back the verbose output of the command line tool and serve as an
independent cross-check of the decoder table.
"""

from typing import Dict, List, Tuple, Optional
from dataclasses import dataclass

WORD_MASK = 0xFFFFFFFF

@dataclass(frozen=True)
class InstructionEncoding:
    """Represents the encoding of a RISC-V instruction"""
    name: str
    base_pattern: int  # Base encoding with all fields as 0
    base_mask: int     # Mask for fixed bits (opcode, funct3, funct7, etc.)
    format: str        # R, I, S, B, U, J
    fields: Dict[str, Tuple[int, int]]  # field_name -> (bit_position, width)

    def matches(self, word: int) -> bool:
        return (word & self.base_mask) == self.base_pattern

# Major opcodes (bits 6:0)
OPCODE_LUI      = 0b0110111
OPCODE_AUIPC    = 0b0010111
OPCODE_JAL      = 0b1101111
OPCODE_JALR     = 0b1100111
OPCODE_BRANCH   = 0b1100011
OPCODE_LOAD     = 0b0000011
OPCODE_STORE    = 0b0100011
OPCODE_OP_IMM   = 0b0010011
OPCODE_OP       = 0b0110011
OPCODE_MISC_MEM = 0b0001111
OPCODE_SYSTEM   = 0b1110011

# RISC-V instruction formats and their field layouts
# Format: field_name -> (lsb_position, width)

R_TYPE_FIELDS = {
    "opcode": (0, 7),
    "rd": (7, 5),
    "funct3": (12, 3),
    "rs1": (15, 5),
    "rs2": (20, 5),
    "funct7": (25, 7),
}

I_TYPE_FIELDS = {
    "opcode": (0, 7),
    "rd": (7, 5),
    "funct3": (12, 3),
    "rs1": (15, 5),
    "imm": (20, 12),
}

# Shift-immediate: the low five bits of the I immediate hold the shift amount
SHIFT_TYPE_FIELDS = {
    "opcode": (0, 7),
    "rd": (7, 5),
    "funct3": (12, 3),
    "rs1": (15, 5),
    "shamt": (20, 5),
    "funct7": (25, 7),
}

# CSR access: the I immediate holds the 12-bit CSR address
CSR_TYPE_FIELDS = {
    "opcode": (0, 7),
    "rd": (7, 5),
    "funct3": (12, 3),
    "rs1": (15, 5),
    "csr": (20, 12),
}

S_TYPE_FIELDS = {
    "opcode": (0, 7),
    "imm_0_4": (7, 5),
    "funct3": (12, 3),
    "rs1": (15, 5),
    "rs2": (20, 5),
    "imm_5_11": (25, 7),
}

B_TYPE_FIELDS = {
    "opcode": (0, 7),
    "imm_11": (7, 1),
    "imm_1_4": (8, 4),
    "funct3": (12, 3),
    "rs1": (15, 5),
    "rs2": (20, 5),
    "imm_5_10": (25, 6),
    "imm_12": (31, 1),
}

U_TYPE_FIELDS = {
    "opcode": (0, 7),
    "rd": (7, 5),
    "imm": (12, 20),
}

J_TYPE_FIELDS = {
    "opcode": (0, 7),
    "rd": (7, 5),
    "imm_12_19": (12, 8),
    "imm_11": (20, 1),
    "imm_1_10": (21, 10),
    "imm_20": (31, 1),
}

# RV32I Base Instruction Set
RV32I_INSTRUCTIONS = {
    # Loads
    "LB":    InstructionEncoding("LB",    0x00000003, 0x0000707F, "I", I_TYPE_FIELDS),
    "LH":    InstructionEncoding("LH",    0x00001003, 0x0000707F, "I", I_TYPE_FIELDS),
    "LW":    InstructionEncoding("LW",    0x00002003, 0x0000707F, "I", I_TYPE_FIELDS),
    "LBU":   InstructionEncoding("LBU",   0x00004003, 0x0000707F, "I", I_TYPE_FIELDS),
    "LHU":   InstructionEncoding("LHU",   0x00005003, 0x0000707F, "I", I_TYPE_FIELDS),

    # Stores
    "SB":    InstructionEncoding("SB",    0x00000023, 0x0000707F, "S", S_TYPE_FIELDS),
    "SH":    InstructionEncoding("SH",    0x00001023, 0x0000707F, "S", S_TYPE_FIELDS),
    "SW":    InstructionEncoding("SW",    0x00002023, 0x0000707F, "S", S_TYPE_FIELDS),

    # ALU Immediate
    "ADDI":  InstructionEncoding("ADDI",  0x00000013, 0x0000707F, "I", I_TYPE_FIELDS),
    "SLTI":  InstructionEncoding("SLTI",  0x00002013, 0x0000707F, "I", I_TYPE_FIELDS),
    "SLTIU": InstructionEncoding("SLTIU", 0x00003013, 0x0000707F, "I", I_TYPE_FIELDS),
    "XORI":  InstructionEncoding("XORI",  0x00004013, 0x0000707F, "I", I_TYPE_FIELDS),
    "ORI":   InstructionEncoding("ORI",   0x00006013, 0x0000707F, "I", I_TYPE_FIELDS),
    "ANDI":  InstructionEncoding("ANDI",  0x00007013, 0x0000707F, "I", I_TYPE_FIELDS),
    "SLLI":  InstructionEncoding("SLLI",  0x00001013, 0xFE00707F, "I", SHIFT_TYPE_FIELDS),
    "SRLI":  InstructionEncoding("SRLI",  0x00005013, 0xFE00707F, "I", SHIFT_TYPE_FIELDS),
    "SRAI":  InstructionEncoding("SRAI",  0x40005013, 0xFE00707F, "I", SHIFT_TYPE_FIELDS),

    # ALU Register-Register
    "ADD":   InstructionEncoding("ADD",   0x00000033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "SUB":   InstructionEncoding("SUB",   0x40000033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "SLL":   InstructionEncoding("SLL",   0x00001033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "SLT":   InstructionEncoding("SLT",   0x00002033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "SLTU":  InstructionEncoding("SLTU",  0x00003033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "XOR":   InstructionEncoding("XOR",   0x00004033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "SRL":   InstructionEncoding("SRL",   0x00005033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "SRA":   InstructionEncoding("SRA",   0x40005033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "OR":    InstructionEncoding("OR",    0x00006033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "AND":   InstructionEncoding("AND",   0x00007033, 0xFE00707F, "R", R_TYPE_FIELDS),

    # Upper Immediate
    "LUI":   InstructionEncoding("LUI",   0x00000037, 0x0000007F, "U", U_TYPE_FIELDS),
    "AUIPC": InstructionEncoding("AUIPC", 0x00000017, 0x0000007F, "U", U_TYPE_FIELDS),

    # Branches
    "BEQ":   InstructionEncoding("BEQ",   0x00000063, 0x0000707F, "B", B_TYPE_FIELDS),
    "BNE":   InstructionEncoding("BNE",   0x00001063, 0x0000707F, "B", B_TYPE_FIELDS),
    "BLT":   InstructionEncoding("BLT",   0x00004063, 0x0000707F, "B", B_TYPE_FIELDS),
    "BGE":   InstructionEncoding("BGE",   0x00005063, 0x0000707F, "B", B_TYPE_FIELDS),
    "BLTU":  InstructionEncoding("BLTU",  0x00006063, 0x0000707F, "B", B_TYPE_FIELDS),
    "BGEU":  InstructionEncoding("BGEU",  0x00007063, 0x0000707F, "B", B_TYPE_FIELDS),

    # Jump
    "JAL":   InstructionEncoding("JAL",   0x0000006F, 0x0000007F, "J", J_TYPE_FIELDS),
    "JALR":  InstructionEncoding("JALR",  0x00000067, 0x0000707F, "I", I_TYPE_FIELDS),

    # System
    "ECALL":   InstructionEncoding("ECALL",   0x00000073, 0xFFFFFFFF, "I", I_TYPE_FIELDS),
    "EBREAK":  InstructionEncoding("EBREAK",  0x00100073, 0xFFFFFFFF, "I", I_TYPE_FIELDS),
    "FENCE":   InstructionEncoding("FENCE",   0x0000000F, 0x0000707F, "I", I_TYPE_FIELDS),
    "FENCE.I": InstructionEncoding("FENCE.I", 0x0000100F, 0x0000707F, "I", I_TYPE_FIELDS),
}

# RV32M Extension (Multiply/Divide)
RV32M_INSTRUCTIONS = {
    "MUL":    InstructionEncoding("MUL",    0x02000033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "MULH":   InstructionEncoding("MULH",   0x02001033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "MULHSU": InstructionEncoding("MULHSU", 0x02002033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "MULHU":  InstructionEncoding("MULHU",  0x02003033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "DIV":    InstructionEncoding("DIV",    0x02004033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "DIVU":   InstructionEncoding("DIVU",   0x02005033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "REM":    InstructionEncoding("REM",    0x02006033, 0xFE00707F, "R", R_TYPE_FIELDS),
    "REMU":   InstructionEncoding("REMU",   0x02007033, 0xFE00707F, "R", R_TYPE_FIELDS),
}

# Privileged instructions
PRIVILEGED_INSTRUCTIONS = {
    "MRET":   InstructionEncoding("MRET",   0x30200073, 0xFFFFFFFF, "I", I_TYPE_FIELDS),
    "SRET":   InstructionEncoding("SRET",   0x10200073, 0xFFFFFFFF, "I", I_TYPE_FIELDS),
    "URET":   InstructionEncoding("URET",   0x00200073, 0xFFFFFFFF, "I", I_TYPE_FIELDS),
    "WFI":    InstructionEncoding("WFI",    0x10500073, 0xFFFFFFFF, "I", I_TYPE_FIELDS),
}

# CSR instructions
CSR_INSTRUCTIONS = {
    "CSRRW":  InstructionEncoding("CSRRW",  0x00001073, 0x0000707F, "I", CSR_TYPE_FIELDS),
    "CSRRS":  InstructionEncoding("CSRRS",  0x00002073, 0x0000707F, "I", CSR_TYPE_FIELDS),
    "CSRRC":  InstructionEncoding("CSRRC",  0x00003073, 0x0000707F, "I", CSR_TYPE_FIELDS),
    "CSRRWI": InstructionEncoding("CSRRWI", 0x00005073, 0x0000707F, "I", CSR_TYPE_FIELDS),
    "CSRRSI": InstructionEncoding("CSRRSI", 0x00006073, 0x0000707F, "I", CSR_TYPE_FIELDS),
    "CSRRCI": InstructionEncoding("CSRRCI", 0x00007073, 0x0000707F, "I", CSR_TYPE_FIELDS),
}

# Combined instruction database
ALL_INSTRUCTIONS = {
    **RV32I_INSTRUCTIONS,
    **RV32M_INSTRUCTIONS,
    **PRIVILEGED_INSTRUCTIONS,
    **CSR_INSTRUCTIONS,
}

# Register name to number mapping
REGISTER_MAP = {
    "x0": 0, "zero": 0,
    "x1": 1, "ra": 1,
    "x2": 2, "sp": 2,
    "x3": 3, "gp": 3,
    "x4": 4, "tp": 4,
    "x5": 5, "t0": 5,
    "x6": 6, "t1": 6,
    "x7": 7, "t2": 7,
    "x8": 8, "s0": 8, "fp": 8,
    "x9": 9, "s1": 9,
    "x10": 10, "a0": 10,
    "x11": 11, "a1": 11,
    "x12": 12, "a2": 12,
    "x13": 13, "a3": 13,
    "x14": 14, "a4": 14,
    "x15": 15, "a5": 15,
    "x16": 16, "a6": 16,
    "x17": 17, "a7": 17,
    "x18": 18, "s2": 18,
    "x19": 19, "s3": 19,
    "x20": 20, "s4": 20,
    "x21": 21, "s5": 21,
    "x22": 22, "s6": 22,
    "x23": 23, "s7": 23,
    "x24": 24, "s8": 24,
    "x25": 25, "s9": 25,
    "x26": 26, "s10": 26,
    "x27": 27, "s11": 27,
    "x28": 28, "t3": 28,
    "x29": 29, "t4": 29,
    "x30": 30, "t5": 30,
    "x31": 31, "t6": 31,
}

def _abi_names() -> List[str]:
    # First ABI alias listed for each number wins (s0 over fp)
    names = [None] * 32
    for name, num in REGISTER_MAP.items():
        if not name.startswith("x") and names[num] is None:
            names[num] = name
    return names

ABI_NAMES = _abi_names()

def match_encoding(word: int) -> Optional[InstructionEncoding]:
    """Find the first database entry whose fixed bits match an instruction word"""
    word &= WORD_MASK
    for encoding in ALL_INSTRUCTIONS.values():
        if encoding.matches(word):
            return encoding
    return None

def register_name(num: int, style: str = "numeric") -> str:
    """Render a register number as x<n> or by its ABI name"""
    if style == "abi":
        return ABI_NAMES[num]
    return f"x{num}"

def parse_word(text: str, default_base: int = 16) -> int:
    """
    Parse an instruction word given on the command line or in a hex file.

    '0x' and '0b' prefixes select the base explicitly, anything else is read
    in default_base. Underscores are accepted as digit separators.

    Raises:
        ValueError: If the text is not a non-negative number
    """
    value = text.strip().lower().replace("_", "")
    if value.startswith("0x"):
        base, digits = 16, value[2:]
    elif value.startswith("0b"):
        base, digits = 2, value[2:]
    else:
        base, digits = default_base, value

    if not digits or digits.startswith(("-", "+")):
        raise ValueError(f"Invalid instruction word: '{text}'")
    try:
        return int(digits, base)
    except ValueError:
        raise ValueError(f"Invalid instruction word: '{text}'") from None

def get_field(value: int, field_pos: int, field_width: int) -> int:
    """Extract a field from an instruction encoding"""
    return (value >> field_pos) & ((1 << field_width) - 1)

def describe_fields(word: int, encoding: InstructionEncoding) -> Dict[str, int]:
    """Split a word into the named fields of an encoding's format, LSB first"""
    return {
        name: get_field(word, pos, width)
        for name, (pos, width) in sorted(encoding.fields.items(), key=lambda item: item[1][0])
    }
