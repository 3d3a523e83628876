from __future__ import annotations

import pytest

from vm_bindgen.compiler.encode import (FMT_CBOR, FMT_MSGPACK, MAGIC, VERSION, ProgramCodecError,
                                        decode_program, encode_program, encode_programs,
                                        program_to_dict)
from vm_bindgen.compiler.ir import pretty
from vm_bindgen.examples.counter import Counter
from vm_bindgen.examples.escrow import Escrow

PROGRAMS = Counter.__bindgen__.programs


def test_header():
    blob = encode_program(PROGRAMS["increment"])
    assert blob[:4] == MAGIC == b"VBEP"
    assert blob[4] == VERSION
    assert blob[5] == FMT_CBOR


def test_dict_form():
    d = program_to_dict(PROGRAMS["increment"])
    assert d["name"] == "increment"
    assert d["contract"] == "Counter"
    ops = {i["op"]: i for i in d["instrs"]}
    assert ops["decode_input"] == {"op": "decode_input", "model": "increment.Input", "fmt": "json", "fields": ["by"]}
    assert ops["invoke"]["receiver"] == "mutable"
    assert ops["invoke"]["bindings"] == [["by", "positional_or_keyword"]]
    assert ops["state_read"]["contract_type"] == "Counter"


def test_callback_operands():
    d = program_to_dict(Escrow.__bindgen__.programs["on_transfer"])
    (cb,) = [i for i in d["instrs"] if i["op"] == "resolve_callback_result"]
    assert cb == {"op": "resolve_callback_result", "index": 0, "name": "receipt",
                  "ok_type": "Receipt", "fmt": "json", "unit": False}


@pytest.mark.parametrize("fmt", [FMT_CBOR, FMT_MSGPACK])
def test_roundtrip_to_dict_form(fmt):
    program = PROGRAMS["new"]
    assert decode_program(encode_program(program, fmt=fmt)) == program_to_dict(program)


def test_encoding_is_stable():
    a = encode_programs(list(PROGRAMS.values()))
    b = encode_programs(list(reversed(list(PROGRAMS.values()))))
    assert a == b
    names = [p["name"] for p in decode_program(a)]
    assert names == sorted(names)


def test_bad_inputs():
    with pytest.raises(ProgramCodecError, match="bad magic"):
        decode_program(b"XXXX\x01\x01")
    with pytest.raises(ProgramCodecError, match="unsupported version"):
        decode_program(MAGIC + b"\x09\x01")
    with pytest.raises(ProgramCodecError, match="Unknown format byte"):
        decode_program(MAGIC + b"\x01\x07\xa0")
    with pytest.raises(ProgramCodecError, match="Unknown format byte"):
        encode_program(PROGRAMS["get"], fmt=9)


def test_pretty_listing():
    text = pretty(PROGRAMS["increment"])
    lines = text.splitlines()
    assert lines[0] == "entry Counter.increment:"
    assert lines[1] == "  00 setup_panic_hook"
    assert "  02 decode_input model=increment.Input fmt=json fields=('by',)" in lines
