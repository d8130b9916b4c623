import dataclasses

import pytest

from rvdecode.fields import InstructionFields, to_signed32


def encode_i_type(imm, rs1, funct3, rd, opcode=0x13):
    return (
        ((imm & 0xfff) << 20)
        | ((rs1 & 0x1f) << 15)
        | ((funct3 & 0x7) << 12)
        | ((rd & 0x1f) << 7)
        | (opcode & 0x7f)
    )


def encode_s_type(imm, rs2, rs1, funct3, opcode=0x23):
    imm &= 0xfff
    return (
        ((imm >> 5) & 0x7f) << 25
        | ((rs2 & 0x1f) << 20)
        | ((rs1 & 0x1f) << 15)
        | ((funct3 & 0x7) << 12)
        | (imm & 0x1f) << 7
        | (opcode & 0x7f)
    )


def encode_b_type(imm, rs2, rs1, funct3, opcode=0x63):
    imm &= 0x1fff
    return (
        ((imm >> 12) & 0x1) << 31
        | ((imm >> 5) & 0x3f) << 25
        | ((rs2 & 0x1f) << 20)
        | ((rs1 & 0x1f) << 15)
        | ((funct3 & 0x7) << 12)
        | ((imm >> 1) & 0xf) << 8
        | ((imm >> 11) & 0x1) << 7
        | (opcode & 0x7f)
    )


def encode_j_type(imm, rd, opcode=0x6f):
    imm &= 0x1fffff
    return (
        ((imm >> 20) & 0x1) << 31
        | ((imm >> 1) & 0x3ff) << 21
        | ((imm >> 11) & 0x1) << 20
        | ((imm >> 12) & 0xff) << 12
        | ((rd & 0x1f) << 7)
        | (opcode & 0x7f)
    )


def test_register_and_function_fields():
    p = InstructionFields(0x0220A1B3)  # mulhsu x3, x1, x2
    assert p.opcode == 0x33
    assert p.rd == 3
    assert p.rs1 == 1
    assert p.rs2 == 2
    assert p.funct3 == 0b010
    assert p.funct7 == 0b0000001
    assert p.funct7_rs2 == 0x022


def test_raw_subgroups():
    p = InstructionFields(0xFFFFFFFF)
    assert p.instr_30_25 == 0x3f
    assert p.instr_24_21 == 0xf
    assert p.instr_20 == 1
    assert p.instr_19_12 == 0xff
    assert p.instr_11_8 == 0xf
    assert p.instr_7 == 1

    p = InstructionFields(0x00000000)
    assert (p.instr_30_25, p.instr_24_21, p.instr_20, p.instr_19_12, p.instr_11_8, p.instr_7) == (0, 0, 0, 0, 0, 0)


def test_system_fields():
    p = InstructionFields(0x30200073)
    assert p.funct7_rs2 == 0x302
    p = InstructionFields(0xC00022F3)
    assert p.imm_i == -1024


def test_all_ones_immediates():
    p = InstructionFields(0xFFFFFFFF)
    assert p.imm_i == -1
    assert p.imm_s == -1
    assert p.imm_b == -2
    assert p.imm_j == -2
    assert p.imm_u == -4096


@pytest.mark.parametrize("imm", [0, 1, 5, 2047, -1, -16, -2048])
def test_imm_i(imm):
    assert InstructionFields(encode_i_type(imm, 2, 0, 1)).imm_i == imm


@pytest.mark.parametrize("imm", [0, 4, 2047, -4, -2048])
def test_imm_s(imm):
    assert InstructionFields(encode_s_type(imm, 10, 2, 2)).imm_s == imm


@pytest.mark.parametrize("imm", [0, 16, 4094, -2, -8, -4096])
def test_imm_b(imm):
    assert InstructionFields(encode_b_type(imm, 2, 1, 0)).imm_b == imm


@pytest.mark.parametrize("imm", [0, 8, 0xffffe, -2, -4, -0x100000])
def test_imm_j(imm):
    assert InstructionFields(encode_j_type(imm, 1)).imm_j == imm


def test_imm_u_keeps_upper_bits():
    assert InstructionFields(0x123452B7).imm_u == 0x12345000
    assert InstructionFields(0x80000037).imm_u == -0x80000000
    assert InstructionFields(0xFFFFF0B7).imm_u & 0xFFFFFFFF == 0xFFFFF000


def test_sign_fill_sets_all_upper_bits():
    for word in (0x80000013, 0xFFF00013, 0x8000006F, 0x80000023, 0xA5A5A5A5):
        p = InstructionFields(word)
        assert p.imm_i & 0xFFFFF800 == 0xFFFFF800
        assert p.imm_s & 0xFFFFF800 == 0xFFFFF800
        assert p.imm_b & 0xFFFFF000 == 0xFFFFF000
        assert p.imm_j & 0xFFF00000 == 0xFFF00000
        assert p.imm_i < 0 and p.imm_s < 0 and p.imm_b < 0 and p.imm_j < 0


def test_clear_sign_bit_gives_raw_field():
    for word in (0x7FF00013, 0x12345678, 0x5A5A5A5A, 0x00000FFF):
        p = InstructionFields(word)
        assert p.imm_i == (word >> 20) & 0x7ff
        assert p.imm_s == (((word >> 25) & 0x3f) << 5) | ((word >> 7) & 0x1f)
        assert p.imm_i >= 0 and p.imm_s >= 0 and p.imm_b >= 0 and p.imm_j >= 0


def test_fields_are_read_only():
    p = InstructionFields(0x13)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.word = 0x73


def test_to_signed32():
    assert to_signed32(0) == 0
    assert to_signed32(0x7FFFFFFF) == 0x7FFFFFFF
    assert to_signed32(0x80000000) == -0x80000000
    assert to_signed32(0xFFFFFFFF) == -1
    assert to_signed32(0x100000005) == 5
