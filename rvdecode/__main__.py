#!/usr/bin/env python3
"""
CLI entry point for rvdecode package.

Allows running the decoder tools via: python -m rvdecode <command>
"""

import sys
import argparse
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

import yaml

from .config import load_config
from .csr import csr_name
from .decoder import decode, decode_word
from .encodings import WORD_MASK, describe_fields, match_encoding, parse_word

# (word, expected text) pairs checked by the 'test' command
SELF_TEST_VECTORS = [
    (0x00000013, "addi     x0, x0, 0"),
    (0x00100073, "ebreak"),
    (0x00008067, "jalr     x0, 0(x1)"),
    (0x30200073, "mret"),
    (0xFFFFFFFF, None),
    (0x123452B7, "lui      x5, 0x12345000"),
    (0xFFDFF06F, "jal      x0, .-0x00000004"),
    (0xFE009CE3, "bne      x1, x0, .-0x00000008"),
    (0xFEA12E23, "sw       x10, -4(x2)"),
    (0x0220A1B3, "mulhsu   x3, x1, x2"),
    (0x300110F3, "csrrw    x1, mstatus, x2"),
    (0x3042D073, "csrrwi   x0, mie, 0x00000005"),
]


def _mask_word(word: int, text: str) -> int:
    if word > WORD_MASK:
        print(f"Warning: '{text}' is wider than 32 bits, using 0x{word & WORD_MASK:08x}", file=sys.stderr)
    return word & WORD_MASK


def iter_hex_words(lines: Iterable[str], base: int = 0) -> Iterator[Tuple[int, int, str]]:
    """
    Yield (address, word, token) for each word of a hex listing.

    Words are whitespace separated hex numbers; '#' and '//' start comments.
    '@<hex>' moves to a word index, as in $readmemh. Addresses are
    base + 4 * index.

    Raises:
        ValueError: If a token is not a hex number
    """
    index = 0
    for line in lines:
        line = line.split('#', 1)[0].split('//', 1)[0]
        for token in line.split():
            if token.startswith('@'):
                index = parse_word(token[1:])
                continue
            yield base + 4 * index, parse_word(token), token
            index += 1


def _run_self_test() -> int:
    failures = 0
    for word, expected in SELF_TEST_VECTORS:
        got = decode(word)
        if got != expected:
            print(f"✗ 0x{word:08x}: expected {expected!r}, got {got!r}")
            failures += 1

    if failures:
        print(f"✗ Test failed: {failures} of {len(SELF_TEST_VECTORS)} vectors")
        return 1
    print(f"✓ Built-in test passed! Checked {len(SELF_TEST_VECTORS)} vectors")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="rvdecode",
        description="rvdecode - RV32I/M instruction word decoder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decode instruction words
  python -m rvdecode decode 0x00000013 00008067

  # Disassemble a hex listing starting at 0x80000000
  python -m rvdecode disasm --base 0x80000000 firmware.hex

  # Look up CSR names
  python -m rvdecode csr 0x344 0xc00

  # Decode the instruction signal of a simulation dump
  python -m rvdecode trace --signal instr_rdata_i sim.vcd
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    def add_config_args(sub):
        sub.add_argument(
            "-c", "--config",
            type=Path,
            help="YAML decoder configuration"
        )
        sub.add_argument(
            "-t", "--target",
            help="Builtin configuration name (default, abi)"
        )

    # Decode command
    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode instruction words given on the command line"
    )
    decode_parser.add_argument("words", nargs="+", help="Instruction words (hex, 0x/0b prefixes accepted)")
    decode_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show matched encoding and field values"
    )
    add_config_args(decode_parser)

    # Disasm command
    disasm_parser = subparsers.add_parser(
        "disasm",
        help="Disassemble a file of hex words"
    )
    disasm_parser.add_argument("input_file", help="Hex listing ('-' for stdin)")
    disasm_parser.add_argument(
        "-b", "--base",
        default="0",
        help="Address of the first word (default: 0)"
    )
    add_config_args(disasm_parser)

    # CSR command
    csr_parser = subparsers.add_parser(
        "csr",
        help="Show the names of CSR addresses"
    )
    csr_parser.add_argument("addresses", nargs="+", help="12-bit CSR addresses (hex)")

    # Trace command
    trace_parser = subparsers.add_parser(
        "trace",
        help="Decode the instruction signal of a VCD file"
    )
    trace_parser.add_argument("vcd_file", help="Input VCD file")
    trace_parser.add_argument("--signal", help="Instruction word signal (default: from config)")
    trace_parser.add_argument("--strip-prefix", help="Strip prefix from signal names (default: from config)")
    trace_parser.add_argument("-v", "--verbose", action="store_true")
    add_config_args(trace_parser)

    # Test command
    subparsers.add_parser(
        "test",
        help="Run built-in tests"
    )

    # Version command
    subparsers.add_parser(
        "version",
        help="Show version information"
    )

    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    # Dispatch to appropriate handler
    if args.command in ("decode", "disasm"):
        try:
            config = load_config(args.config, args.target)
        except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        display = config.display

    if args.command == "decode":
        status = 0
        for text in args.words:
            try:
                word = _mask_word(parse_word(text), text)
            except ValueError as e:
                print(f"Error: {e}", file=sys.stderr)
                status = 1
                continue

            result = decode_word(word, display)
            print(f"{word:08x}  {result}")

            if args.verbose:
                encoding = match_encoding(word)
                if encoding is None:
                    print("  encoding: none")
                else:
                    fields = " ".join(f"{name}=0x{value:x}" for name, value in describe_fields(word, encoding).items())
                    print(f"  encoding: {encoding.name} ({encoding.format}-type)")
                    print(f"  fields: {fields}")
        return status

    elif args.command == "disasm":
        try:
            base = parse_word(args.base)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        try:
            if args.input_file == "-":
                lines = sys.stdin.readlines()
            else:
                with open(args.input_file, 'r') as f:
                    lines = f.readlines()
        except FileNotFoundError:
            print(f"Error: input file '{args.input_file}' not found", file=sys.stderr)
            return 1

        try:
            for address, word, token in iter_hex_words(lines, base):
                word = _mask_word(word, token)
                print(f"{address & WORD_MASK:08x}: {word:08x}  {decode_word(word, display)}")
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0

    elif args.command == "csr":
        status = 0
        for text in args.addresses:
            try:
                address = parse_word(text)
            except ValueError as e:
                print(f"Error: {e}", file=sys.stderr)
                status = 1
                continue
            if address > 0xFFF:
                print(f"Error: CSR address '{text}' is wider than 12 bits", file=sys.stderr)
                status = 1
                continue
            print(f"0x{address:03x}  {csr_name(address)}")
        return status

    elif args.command == "trace":
        from . import vcd_trace
        trace_argv = [args.vcd_file]
        if args.signal:
            trace_argv.extend(["--signal", args.signal])
        if args.strip_prefix is not None:
            trace_argv.extend(["--strip-prefix", args.strip_prefix])
        if args.config:
            trace_argv.extend(["--config", str(args.config)])
        if args.target:
            trace_argv.extend(["--target", args.target])
        if args.verbose:
            trace_argv.append("-v")
        return vcd_trace.main(trace_argv)

    elif args.command == "test":
        return _run_self_test()

    elif args.command == "version":
        from . import __version__
        print(f"rvdecode version {__version__}")
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
