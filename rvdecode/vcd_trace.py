#!/usr/bin/env python3
"""
Decode the instruction stream recorded in a VCD file.

Finds the instruction word signal in a VCD dump and prints one decoded line
for every change of its value. Repeated samples of the same word go through
a one-entry cache and are not decoded again.

Usage: python -m rvdecode.vcd_trace <input.vcd> [--signal NAME] [--strip-prefix PREFIX]
"""

import sys
import argparse
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .cache import DecoderCache
from .config import load_config
from .decoder import DecodeResult
from .encodings import WORD_MASK

class VCDSignal:
    """Represents a signal from VCD file."""
    def __init__(self, identifier: str, name: str, width: int):
        self.identifier = identifier
        self.name = name
        self.width = width

    @property
    def base_name(self) -> str:
        """Name without a trailing bit range such as ' [31:0]'."""
        return self.name.split(" [", 1)[0]

@dataclass(frozen=True)
class TraceEntry:
    """One decoded instruction word and the time it appeared."""
    time: int
    word: int
    result: DecodeResult

    def __str__(self):
        return f"{self.time:>10}  {self.word:08x}  {self.result}"

def parse_vcd_header(lines: List[str]) -> Tuple[Dict[str, VCDSignal], int]:
    """Parse VCD header to extract signal declarations with full hierarchical paths."""
    signals = {}
    i = 0
    scope_stack = []

    while i < len(lines):
        line = lines[i].strip()

        if line.startswith('$enddefinitions'):
            return signals, i + 1

        # Parse scope entry
        if line.startswith('$scope'):
            parts = line.split()
            if len(parts) >= 3:
                scope_stack.append(parts[2])

        # Parse scope exit
        if line.startswith('$upscope'):
            if scope_stack:
                scope_stack.pop()

        # Parse variable declarations
        if line.startswith('$var'):
            parts = line.split()
            if len(parts) >= 5:
                width = int(parts[2])
                identifier = parts[3]
                signal_name = parts[4]

                # Build full hierarchical name
                if scope_stack:
                    full_name = ".".join(scope_stack) + "." + signal_name
                else:
                    full_name = signal_name

                # Handle array indices like [31:0]
                if len(parts) > 5 and parts[5].startswith('['):
                    full_name += " " + parts[5]

                signals[identifier] = VCDSignal(identifier, full_name, width)

        i += 1

    return signals, len(lines)

def strip_prefix_from_signals(signals: Dict[str, VCDSignal], prefix: str):
    """Strip a common prefix from all signal names."""
    if not prefix:
        return

    prefix_with_dot = prefix if prefix.endswith('.') else prefix + '.'

    for sig in signals.values():
        if sig.name.startswith(prefix_with_dot):
            sig.name = sig.name[len(prefix_with_dot):]

def find_signal(signals: Dict[str, VCDSignal], name: str) -> Optional[VCDSignal]:
    """
    Look up a signal by name.

    An exact match on the (prefix-stripped) hierarchical name wins; otherwise
    the first signal whose path ends in '.<name>' is returned.
    """
    for sig in signals.values():
        if sig.base_name == name:
            return sig

    suffix = "." + name
    for sig in signals.values():
        if sig.base_name.endswith(suffix):
            return sig

    return None

def _parse_value(value: str) -> Optional[int]:
    # x/z bits leave the word undefined
    if not value or any(bit not in '01' for bit in value):
        return None
    return int(value, 2)

def trace_instructions(
    lines: List[str],
    identifier: str,
    start_line: int,
    cache: DecoderCache
) -> Tuple[List[TraceEntry], int]:
    """
    Walk VCD value changes and decode every new word of one signal.

    Returns:
        (entries, skipped) where skipped counts changes with x/z bits
    """
    entries = []
    skipped = 0
    current_time = 0

    for i in range(start_line, len(lines)):
        line = lines[i].strip()

        if not line or line.startswith('$'):
            continue

        # Timestamp
        if line.startswith('#'):
            try:
                current_time = int(line[1:])
            except ValueError:
                pass
            continue

        # Value change
        if line.startswith(('b', 'B')):
            # Multi-bit value: b<value> <identifier>
            parts = line.split()
            if len(parts) < 2 or parts[1] != identifier:
                continue
            value = parts[0][1:].lower()
        elif line.startswith(('r', 'R')):
            continue
        else:
            # Single-bit value: <value><identifier>
            if len(line) < 2 or line[1:] != identifier:
                continue
            value = line[0].lower()

        word = _parse_value(value)
        if word is None:
            skipped += 1
            continue
        word &= WORD_MASK

        is_new = cache.result is None or word != cache.word
        result = cache.update(word)
        if is_new:
            entries.append(TraceEntry(current_time, word, result))

    return entries, skipped

def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description='Decode the instruction word signal of a VCD file',
        epilog='Example: python -m rvdecode.vcd_trace sim.vcd --signal instr_rdata_i --strip-prefix tb.dut'
    )
    parser.add_argument('vcd_file', help='Input VCD file')
    parser.add_argument('--signal', type=str, default=None,
                       help='Instruction word signal (default: from config)')
    parser.add_argument('--strip-prefix', type=str, default=None,
                       help='Strip this prefix from signal paths (default: from config)')
    parser.add_argument('-c', '--config', type=Path, default=None,
                       help='YAML decoder configuration')
    parser.add_argument('-t', '--target', type=str, default=None,
                       help='Builtin configuration name (default, abi)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config, args.target)
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    signal_name = args.signal or config.trace.instruction_data
    prefix = args.strip_prefix if args.strip_prefix is not None else config.trace.testbench_prefix

    # Read VCD file
    try:
        with open(args.vcd_file, 'r') as f:
            lines = f.readlines()
    except FileNotFoundError:
        print(f"Error: VCD file not found: {args.vcd_file}", file=sys.stderr)
        return 1

    if args.verbose:
        print("[1/3] Parsing VCD header...")
    signals, data_start = parse_vcd_header(lines)
    strip_prefix_from_signals(signals, prefix)
    if args.verbose:
        print(f"  Found {len(signals)} signals")

    if args.verbose:
        print(f"[2/3] Locating instruction signal '{signal_name}'...")
    signal = find_signal(signals, signal_name)
    if signal is None:
        print(f"Error: signal '{signal_name}' not found in {args.vcd_file}", file=sys.stderr)
        return 1
    if signal.width != 32:
        print(f"Warning: signal '{signal.name}' is {signal.width} bits wide, expected 32", file=sys.stderr)
    if args.verbose:
        print(f"  Using {signal.name} (id {signal.identifier})")

    if args.verbose:
        print("[3/3] Decoding value changes...")
    cache = DecoderCache(config.display)
    entries, skipped = trace_instructions(lines, signal.identifier, data_start, cache)

    for entry in entries:
        print(entry)

    if skipped:
        print(f"Warning: skipped {skipped} value changes with x/z bits", file=sys.stderr)
    if args.verbose:
        invalid = sum(1 for entry in entries if not entry.result.valid)
        print(f"  Decoded {len(entries)} words ({invalid} unrecognized)")

    return 0

if __name__ == '__main__':
    sys.exit(main())
