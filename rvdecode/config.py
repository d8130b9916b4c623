#!/usr/bin/env python3
"""
Decoder configuration management.

This module handles loading and validating YAML configuration files that
control how decoded instructions are displayed (mnemonic column width,
register naming, the invalid-instruction message) and which waveform
signal carries the instruction word when decoding VCD traces.
"""

import yaml
import jsonschema
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field


# JSON Schema for validating decoder configuration YAML files
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "rvdecode Configuration",
    "description": "Display and trace settings for the RV32 instruction decoder",
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {
            "type": "string",
            "description": "Name of this configuration"
        },
        "display": {
            "type": "object",
            "properties": {
                "mnemonic_width": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 32,
                    "description": "Column width the mnemonic is padded to"
                },
                "register_names": {
                    "type": "string",
                    "enum": ["numeric", "abi"],
                    "description": "Render registers as x<n> or by ABI name"
                },
                "invalid_format": {
                    "type": "string",
                    "pattern": "\\{word",
                    "description": "Message for unrecognized words, formatted with word=<int>"
                }
            },
            "additionalProperties": False
        },
        "trace": {
            "type": "object",
            "properties": {
                "instruction_data": {
                    "type": "string",
                    "description": "Signal name for instruction word"
                },
                "testbench_prefix": {
                    "type": "string",
                    "description": "VCD signal path prefix to strip"
                }
            },
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}


@dataclass(frozen=True)
class DisplayConfig:
    """How decoded instructions are rendered as text."""
    mnemonic_width: int = 9
    register_names: str = "numeric"  # numeric or abi
    invalid_format: str = "invalid instruction 0x{word:08x}"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'DisplayConfig':
        """Create DisplayConfig from dictionary (loaded from YAML)."""
        defaults = cls()
        return cls(
            mnemonic_width=d.get('mnemonic_width', defaults.mnemonic_width),
            register_names=d.get('register_names', defaults.register_names),
            invalid_format=d.get('invalid_format', defaults.invalid_format),
        )

    def format_invalid(self, word: int) -> str:
        return self.invalid_format.format(word=word)


@dataclass
class TraceConfig:
    """VCD trace configuration."""
    instruction_data: str = "instr_rdata_i"
    testbench_prefix: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'TraceConfig':
        """Create TraceConfig from dictionary."""
        trace = cls()
        if 'instruction_data' in d:
            trace.instruction_data = d['instruction_data']
        if 'testbench_prefix' in d:
            trace.testbench_prefix = d['testbench_prefix']
        return trace


@dataclass
class DecoderConfig:
    """Complete decoder configuration."""
    name: str = "default"
    display: DisplayConfig = field(default_factory=DisplayConfig)
    trace: TraceConfig = field(default_factory=TraceConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<dict>") -> 'DecoderConfig':
        """Validate a loaded configuration document and build the config.

        Raises:
            ValueError: If the document doesn't match the schema
        """
        try:
            jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ValueError(f"Invalid config file {source}: {e.message}") from e

        config = cls(name=data['name'])

        if 'display' in data:
            config.display = DisplayConfig.from_dict(data['display'])
        if 'trace' in data:
            config.trace = TraceConfig.from_dict(data['trace'])

        # The schema only checks that a {word...} placeholder is present
        try:
            config.display.format_invalid(0)
        except (KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
            raise ValueError(
                f"Invalid config file {source}: bad invalid_format "
                f"'{config.display.invalid_format}': {e}"
            ) from e

        return config

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> 'DecoderConfig':
        """Load and validate configuration from YAML file.

        Raises:
            ValueError: If config doesn't match schema
            yaml.YAMLError: If YAML is malformed
            FileNotFoundError: If file doesn't exist
        """
        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data, source=str(yaml_path))


BUILTIN_CONFIG_DIR = Path(__file__).parent / "configs"


def load_config(config_path: Optional[Path] = None, target: Optional[str] = None) -> DecoderConfig:
    """
    Load decoder configuration from file or use builtin config.

    Args:
        config_path: Path to YAML config file
        target: Shortcut name for builtin configs ('default', 'abi')

    Returns:
        DecoderConfig object

    Priority:
        1. config_path if provided
        2. builtin config matching target name
        3. default configuration
    """
    if config_path:
        # An explicit path that doesn't exist is an error, not a fallback
        return DecoderConfig.from_yaml(Path(config_path))

    if target:
        builtin_path = BUILTIN_CONFIG_DIR / f"{target}.yaml"
        if builtin_path.exists():
            return DecoderConfig.from_yaml(builtin_path)
        raise ValueError(f"Unknown builtin target '{target}'")

    return DecoderConfig()
