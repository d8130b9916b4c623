"""
rvdecode - RV32I/M instruction word decoder.

This package provides tools for:
- Splitting 32-bit instruction words into fields and immediates
- Decoding words to assembly text (RV32I, RV32M, privileged, Zicsr)
- Naming control and status registers
- Decoding the instruction stream of a VCD simulation dump

Example:
    >>> from rvdecode import decode
    >>> decode(0x00008067)
    'jalr     x0, 0(x1)'
    >>> decode(0xFFFFFFFF) is None
    True
"""

__version__ = "0.1.0"

from .fields import (
    InstructionFields,
    to_signed32,
)

from .csr import (
    CSR_TABLE,
    csr_name,
)

from .decoder import (
    decode,
    decode_word,
    DecodeResult,
    Formatter,
)

from .cache import DecoderCache

from .config import (
    DecoderConfig,
    DisplayConfig,
    TraceConfig,
    load_config,
)

from .encodings import (
    InstructionEncoding,
    match_encoding,
    parse_word,
)

__all__ = [
    # Fields
    "InstructionFields",
    "to_signed32",
    # CSR names
    "CSR_TABLE",
    "csr_name",
    # Decoder
    "decode",
    "decode_word",
    "DecodeResult",
    "Formatter",
    "DecoderCache",
    # Configuration
    "DecoderConfig",
    "DisplayConfig",
    "TraceConfig",
    "load_config",
    # Encodings
    "InstructionEncoding",
    "match_encoding",
    "parse_word",
]
