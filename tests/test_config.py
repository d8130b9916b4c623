from textwrap import dedent

import pytest
import yaml

from rvdecode.config import DecoderConfig, DisplayConfig, TraceConfig, load_config


def _write_config(tmp_path, text, name="decoder.yaml"):
    path = tmp_path / name
    path.write_text(dedent(text))
    return path


def test_defaults():
    config = load_config()
    assert config.name == "default"
    assert config.display == DisplayConfig()
    assert config.display.mnemonic_width == 9
    assert config.display.register_names == "numeric"
    assert config.trace.instruction_data == "instr_rdata_i"
    assert config.trace.testbench_prefix == ""


def test_builtin_targets():
    default = load_config(target="default")
    assert default.name == "default"
    assert default.display == DisplayConfig()

    abi = load_config(target="abi")
    assert abi.name == "abi"
    assert abi.display.register_names == "abi"
    assert abi.display.mnemonic_width == 9


def test_unknown_target():
    with pytest.raises(ValueError):
        load_config(target="nonexistent")


def test_from_yaml(tmp_path):
    path = _write_config(tmp_path, """\
        name: ibex-trace
        display:
          mnemonic_width: 10
          invalid_format: "?? {word:08x}"
        trace:
          instruction_data: instr_rdata_id
          testbench_prefix: tb_top.dut
        """)
    config = load_config(path)
    assert config.name == "ibex-trace"
    assert config.display.mnemonic_width == 10
    assert config.display.register_names == "numeric"
    assert config.display.format_invalid(0xdeadbeef) == "?? deadbeef"
    assert config.trace == TraceConfig("instr_rdata_id", "tb_top.dut")


def test_explicit_path_wins_over_target(tmp_path):
    path = _write_config(tmp_path, "name: mine\n")
    assert load_config(path, target="abi").name == "mine"


@pytest.mark.parametrize("body", [
    "display:\n  mnemonic_width: 9\n",                 # missing name
    "name: x\ndisplay:\n  register_names: fancy\n",    # bad enum
    "name: x\ndisplay:\n  mnemonic_width: 0\n",        # out of range
    "name: x\ndisplay:\n  invalid_format: oops\n",     # no {word} placeholder
    "name: x\ncolour: blue\n",                         # unknown key
    "name: x\ntrace:\n  pc: pc_if_o\n",                # unknown trace key
    "",                                                # empty document
])
def test_schema_violations(tmp_path, body):
    path = _write_config(tmp_path, body)
    with pytest.raises(ValueError):
        DecoderConfig.from_yaml(path)


def test_unrenderable_invalid_format(tmp_path):
    path = _write_config(tmp_path, 'name: x\ndisplay:\n  invalid_format: "{word:q}"\n')
    with pytest.raises(ValueError, match="invalid_format"):
        load_config(path)

    path = _write_config(tmp_path, 'name: x\ndisplay:\n  invalid_format: "{word} {pc}"\n')
    with pytest.raises(ValueError, match="invalid_format"):
        load_config(path)

    for fmt in ("{word[0]}", "{word.real.x}"):
        path = _write_config(tmp_path, f'name: x\ndisplay:\n  invalid_format: "{fmt}"\n')
        with pytest.raises(ValueError, match="invalid_format"):
            load_config(path)


def test_missing_and_malformed_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")

    path = _write_config(tmp_path, "name: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        load_config(path)


def test_from_dict():
    config = DecoderConfig.from_dict({"name": "inline", "display": {"register_names": "abi"}})
    assert config.display.register_names == "abi"
    assert config.trace == TraceConfig()
