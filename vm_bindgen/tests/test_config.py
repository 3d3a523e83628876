from __future__ import annotations

from dataclasses import dataclass

import pytest

from vm_bindgen import contract
from vm_bindgen.config import load_config
from vm_bindgen.serialization import SerializationFormat


def test_defaults(fresh_config, monkeypatch):
    for name in ("DEFAULT_SERIALIZER", "OPENAPI_VERSION", "MAX_INPUT_BYTES", "MAX_STATE_BYTES", "LOG_LEVEL"):
        monkeypatch.delenv(f"VM_BINDGEN_{name}", raising=False)
    cfg = load_config()
    assert cfg.as_dict() == {
        "default_serializer": "json",
        "openapi_version": "3.1.0",
        "max_input_bytes": 4_194_304,
        "max_state_bytes": 4_194_304,
        "log_level": "WARNING",
    }


def test_environment_overrides(fresh_config, monkeypatch):
    monkeypatch.setenv("VM_BINDGEN_DEFAULT_SERIALIZER", "Binary")
    monkeypatch.setenv("VM_BINDGEN_OPENAPI_VERSION", "3.0.3")
    monkeypatch.setenv("VM_BINDGEN_MAX_INPUT_BYTES", "0x1000")
    monkeypatch.setenv("VM_BINDGEN_LOG_LEVEL", "debug")
    cfg = load_config()
    assert cfg.default_serializer == "binary"
    assert cfg.openapi_version == "3.0.3"
    assert cfg.max_input_bytes == 4096
    assert cfg.log_level == "DEBUG"


@pytest.mark.parametrize("raw,expected", [("1", 1024), ("999999999999", 67_108_864), ("many", 4_194_304)])
def test_numeric_values_are_clamped(fresh_config, monkeypatch, raw, expected):
    monkeypatch.setenv("VM_BINDGEN_MAX_STATE_BYTES", raw)
    assert load_config().max_state_bytes == expected


def test_unknown_serializer_falls_back(fresh_config, monkeypatch):
    monkeypatch.setenv("VM_BINDGEN_DEFAULT_SERIALIZER", "xml")
    assert load_config().default_serializer == "json"


def test_default_serializer_applies_to_unmarked_methods(fresh_config, monkeypatch):
    monkeypatch.setenv("VM_BINDGEN_DEFAULT_SERIALIZER", "binary")

    @contract
    @dataclass
    class Compact:
        def put(self, key: str, value: int) -> int:
            return value

    desc = Compact.__bindgen__.descriptors["put"]
    assert desc.input_serializer is SerializationFormat.BINARY
    assert desc.result_serializer is SerializationFormat.BINARY
