"""
encode.py — stable bytes encoding of entry programs (CBOR or msgpack).

Encoded programs are a descriptive artifact: they let tooling diff, hash and
ship the generated entry points (e.g. `vm-bindgen inspect --cbor`). Types are
rendered by name, so decoding yields the plain dict form, not an executable
program.

Wire layout
-----------
Header (6 bytes):
  0..3 : ASCII magic b"VBEP"  (vm-bindgen entry program)
  4    : version byte (0x01)
  5    : format byte  (0x01 = CBOR, 0x02 = MSGPACK)

Payload (program_to_dict):
  {"name": str, "contract": str,
   "instrs": [{"op": str, <operand>: <scalar or list>, ...}, ...]}

CBOR payloads use canonical encoding, so equal programs give equal bytes.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, List

import cbor2
import msgspec

from ..serialization import type_name
from .ir import Binding, EntryProgram, Instr

MAGIC = b"VBEP"
VERSION = 1
FMT_CBOR = 0x01
FMT_MSGPACK = 0x02

_MSGPACK_ENC = msgspec.msgpack.Encoder()
_MSGPACK_DEC = msgspec.msgpack.Decoder()

_TYPE_OPERANDS = ("type", "ok_type", "item_type", "contract_type")


class ProgramCodecError(ValueError):
    pass


def _operand(key: str, value: Any) -> Any:
    if key == "model":
        return value.name
    if key in _TYPE_OPERANDS:
        return type_name(value)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Binding):
        return [value.name, value.kind.value]
    if isinstance(value, tuple):
        return [_operand(key, v) for v in value]
    return value


def instr_to_dict(instr: Instr) -> Dict[str, Any]:
    out: Dict[str, Any] = {"op": instr.op}
    for k, v in instr.operands().items():
        out[k] = _operand(k, v)
    return out


def program_to_dict(program: EntryProgram) -> Dict[str, Any]:
    contract = program.contract
    return {
        "name": program.name,
        "contract": getattr(contract, "__qualname__", str(contract)),
        "instrs": [instr_to_dict(i) for i in program.instrs],
    }


def _dumps_payload(obj: Any, fmt: int) -> bytes:
    if fmt == FMT_CBOR:
        return cbor2.dumps(obj, canonical=True)
    if fmt == FMT_MSGPACK:
        return _MSGPACK_ENC.encode(obj)
    raise ProgramCodecError(f"Unknown format byte: {fmt!r}")


def _loads_payload(data: bytes, fmt: int) -> Any:
    try:
        if fmt == FMT_CBOR:
            return cbor2.loads(data)
        if fmt == FMT_MSGPACK:
            return _MSGPACK_DEC.decode(data)
    except (cbor2.CBORDecodeError, msgspec.DecodeError) as e:
        raise ProgramCodecError(f"corrupt payload: {e}") from e
    raise ProgramCodecError(f"Unknown format byte: {fmt!r}")


def encode_program(program: EntryProgram, *, fmt: int = FMT_CBOR) -> bytes:
    header = MAGIC + bytes([VERSION, fmt])
    return header + _dumps_payload(program_to_dict(program), fmt)


def encode_programs(programs: List[EntryProgram], *, fmt: int = FMT_CBOR) -> bytes:
    """All entry points of a contract, sorted by name."""
    body = [program_to_dict(p) for p in sorted(programs, key=lambda p: p.name)]
    return MAGIC + bytes([VERSION, fmt]) + _dumps_payload(body, fmt)


def decode_program(data: bytes) -> Any:
    """Inverse of encode_program / encode_programs (dict form)."""
    if len(data) < 6 or data[:4] != MAGIC:
        raise ProgramCodecError("bad magic: not an encoded entry program")
    version, fmt = data[4], data[5]
    if version != VERSION:
        raise ProgramCodecError(f"unsupported version: {version}")
    return _loads_payload(data[6:], fmt)


__all__ = [
    "MAGIC",
    "VERSION",
    "FMT_CBOR",
    "FMT_MSGPACK",
    "ProgramCodecError",
    "decode_program",
    "encode_program",
    "encode_programs",
    "instr_to_dict",
    "program_to_dict",
]
