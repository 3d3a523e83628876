from __future__ import annotations

import msgspec
import pytest

from vm_bindgen.compiler import InputModelMode, synthesize_input_model
from vm_bindgen.examples.counter import Counter
from vm_bindgen.examples.escrow import Escrow
from vm_bindgen.examples.status_message import StatusMessage
from vm_bindgen.serialization import SerializationFormat


def _model(cls, name, mode=InputModelMode.DECODE):
    return synthesize_input_model(cls.__bindgen__.descriptors[name], mode)


def test_record_name_and_fields():
    m = _model(Counter, "increment")
    assert m.name == "increment.Input"
    assert m.struct.__name__ == "increment.Input"
    assert m.fields == ("by",)
    assert m.fmt is SerializationFormat.JSON


def test_json_record_is_keyed_by_name():
    m = _model(Counter, "increment")
    assert m.encode({"by": 3}) == b'{"by":3}'
    rec = m.decode(b'{"by": 3, "unrelated": true}')
    assert m.as_dict(rec) == {"by": 3}


def test_json_record_rejects_missing_and_mistyped_fields():
    m = _model(Counter, "new")
    with pytest.raises(msgspec.ValidationError):
        m.decode(b"{}")
    with pytest.raises(msgspec.ValidationError):
        m.decode(b'{"start": "three"}')


def test_defaulted_parameters_are_required_on_the_wire():
    for mode in InputModelMode:
        m = _model(Counter, "increment", mode)
        with pytest.raises(msgspec.ValidationError, match="Object missing required field `by`"):
            m.decode(b"{}")
    assert _model(Counter, "increment").decode(b'{"by": 1}').by == 1


def test_binary_record_is_positional_and_skips_callbacks():
    m = _model(Escrow, "on_price", InputModelMode.ENCODE)
    assert m.fields == ("memo",)
    assert m.fmt is SerializationFormat.BINARY
    assert m.encode({"memo": "x"}) == msgspec.msgpack.encode(["x"])


def test_empty_record_encodes_to_empty_payload():
    m = _model(Counter, "reset", InputModelMode.ENCODE)
    assert m.is_empty
    assert m.encode({}) == b""

    m = _model(Escrow, "on_balances")
    assert m.is_empty


def test_annotated_constraints_are_kept():
    m = _model(StatusMessage, "set_status")
    m.decode(b'{"message": "ok"}')
    with pytest.raises(msgspec.ValidationError):
        m.decode(msgspec.json.encode({"message": "x" * 281}))


def test_decode_flavour_carries_docs():
    m = _model(StatusMessage, "set_status")
    assert m.doc.startswith("Store a status message for the caller.")
    assert "#### Parameters" in m.doc
    assert "- `message` New status text." in m.doc
    assert "- payable: ✓" in m.doc
    assert m.struct.__doc__ == m.doc

    enc = _model(StatusMessage, "set_status", InputModelMode.ENCODE)
    assert enc.doc == ""
    assert enc.fields == m.fields


def test_custom_properties_in_docs():
    m = _model(Counter, "increment")
    assert "- category: arithmetic" in m.doc


def test_models_are_cached_per_descriptor_and_mode():
    a = _model(Counter, "increment")
    b = _model(Counter, "increment")
    c = _model(Counter, "increment", InputModelMode.ENCODE)
    assert a is b
    assert a is not c
    assert a.struct is not c.struct
    desc = Counter.__bindgen__.descriptors["increment"]
    assert desc.input_models == {InputModelMode.DECODE: a, InputModelMode.ENCODE: c}
