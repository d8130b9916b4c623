#!/usr/bin/env python3
"""
Control and status register names.

CSR_TABLE maps a 12-bit CSR address to its register name. It is built once
at import time and cannot be modified afterwards.
"""

from types import MappingProxyType
from typing import Dict, Mapping

_NAMED_CSRS = {
    # User trap setup and handling
    0x000: "ustatus",
    0x004: "uie",
    0x005: "utvec",
    0x040: "uscratch",
    0x041: "uepc",
    0x042: "ucause",
    0x043: "ubadaddr",
    0x044: "uip",

    # User floating point
    0x001: "fflags",
    0x002: "frm",
    0x003: "fcsr",

    # User counters/timers
    0xc00: "cycle",
    0xc01: "time",
    0xc02: "instret",
    0xc80: "cycleh",
    0xc81: "timeh",
    0xc82: "instreth",

    # Supervisor
    0x100: "sstatus",
    0x102: "sedeleg",
    0x103: "sideleg",
    0x104: "sie",
    0x105: "stvec",
    0x140: "sscratch",
    0x141: "sepc",
    0x142: "scause",
    0x143: "sbadaddr",
    0x144: "sip",
    0x180: "sptbr",

    # Hypervisor
    0x200: "hstatus",
    0x202: "hedeleg",
    0x203: "hideleg",
    0x204: "hie",
    0x205: "htvec",
    0x240: "hscratch",
    0x241: "hepc",
    0x242: "hcause",
    0x243: "hbadaddr",
    0x244: "hip",

    # Machine information
    0xf11: "mvendorid",
    0xf12: "marchid",
    0xf13: "mimpid",
    0xf14: "mhartid",

    # Machine trap setup and handling
    0x300: "mstatus",
    0x301: "misa",
    0x302: "medeleg",
    0x303: "mideleg",
    0x304: "mie",
    0x305: "mtvec",
    0x340: "mscratch",
    0x341: "mepc",
    0x342: "mcause",
    0x343: "mbadaddr",
    0x344: "mip",

    # Machine protection and translation
    0x380: "mbase",
    0x381: "mbound",
    0x382: "mibase",
    0x383: "mibound",
    0x384: "mdbase",
    0x385: "mdbound",

    # Machine counters
    0xb00: "mcycle",
    0xb02: "minstret",
    0xb80: "mcycleh",
    0xb82: "minstreth",
    0x320: "mucounteren",
    0x321: "mscounteren",
    0x322: "mhcounteren",

    # Debug/trace
    0x7a0: "tselect",
    0x7a1: "tdata1",
    0x7a2: "tdata2",
    0x7a3: "tdata3",
    0x7b0: "dcsr",
    0x7b1: "dpc",
    0x7b2: "dscratch",
}


def _build_csr_table() -> Mapping[int, str]:
    table: Dict[int, str] = dict(_NAMED_CSRS)

    # Hardware performance monitor families, numbered 3..31
    for i in range(3, 32):
        table[0x320 + i] = f"mhpmevent{i}"
        table[0xb00 + i] = f"mhpmcounter{i}"
        table[0xb80 + i] = f"mhpmcounter{i}h"
        table[0xc00 + i] = f"hpmcounter{i}"
        table[0xc80 + i] = f"hpmcounter{i}h"

    return MappingProxyType(table)


CSR_TABLE = _build_csr_table()


def csr_name(address: int) -> str:
    """Name of the CSR at address, or '$0x<addr>' when it has none."""
    name = CSR_TABLE.get(address)
    if name is not None:
        return name
    # Sign-extended addresses print as their 32-bit two's complement
    return f"$0x{address & 0xFFFFFFFF:03x}"
