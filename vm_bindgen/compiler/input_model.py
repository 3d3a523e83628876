"""
input_model.py — synthesized record types for method inputs.

Every method gets an input record named ``<method>.Input`` whose fields are
the method's plain parameters, in declaration order. Two flavours exist:

* DECODE  — used by the entry point to deserialize the host input. Carries
            documentation (method docs, parameter docs, derived properties)
            and is what the OpenAPI generator publishes.
* ENCODE  — used by the client marshaller to serialize a call. Field order
            and names are identical, so what a client encodes the entry point
            decodes.

Records are msgspec Structs built with ``msgspec.defstruct``. For the binary
format they are array-like (positional), for JSON they are objects keyed by
parameter name. Every field is required: parameter defaults belong to the
client signature, never to the wire. A method with no plain parameters gets an
empty record and an empty payload.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple, Type

import msgspec

from ..serialization import SerializationFormat, decode, encode
from .descriptor import MethodDescriptor

log = logging.getLogger(__name__)


class InputModelMode(str, enum.Enum):
    ENCODE = "encode"
    DECODE = "decode"


@dataclass(frozen=True)
class InputModel:
    name: str
    struct: Type[msgspec.Struct]
    fmt: SerializationFormat
    mode: InputModelMode
    fields: Tuple[str, ...]
    doc: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def build(self, values: Mapping[str, Any]) -> msgspec.Struct:
        return self.struct(**{k: values[k] for k in self.fields})

    def encode(self, values: Mapping[str, Any]) -> bytes:
        if self.is_empty:
            return b""
        return encode(self.build(values), self.fmt)

    def decode(self, data: bytes) -> msgspec.Struct:
        return decode(data, self.struct, self.fmt)

    def as_dict(self, record: msgspec.Struct) -> Dict[str, Any]:
        return {k: getattr(record, k) for k in self.fields}


def input_model_name(ident: str) -> str:
    return f"{ident}.Input"


def render_input_doc(desc: MethodDescriptor) -> str:
    """
    Method docs, then a "#### Parameters" list (when any parameter is
    documented) and a "#### Properties" list of derived flags.
    """
    parts: List[str] = []
    if desc.docs:
        parts.append(desc.docs)
    if any(a.doc for a in desc.args):
        lines = ["#### Parameters", ""]
        for a in desc.args:
            lines.append(f"- `{a.name}` {a.doc}".rstrip())
        parts.append("\n".join(lines))
    props = desc.derived_properties()
    if props:
        lines = ["#### Properties", ""]
        lines.extend(f"- {k}: {v}" for k, v in props)
        parts.append("\n".join(lines))
    return "\n\n".join(parts)


def synthesize_input_model(
    desc: MethodDescriptor,
    mode: InputModelMode = InputModelMode.DECODE,
) -> InputModel:
    """Build (or fetch) the input record for *desc*."""
    hit = desc.input_models.get(mode)
    if hit is not None:
        return hit

    name = input_model_name(desc.ident)
    plain = desc.plain_args()
    fields: List[Tuple[str, Any]] = [(a.name, a.wire_type) for a in plain]
    fmt = desc.input_serializer
    doc = render_input_doc(desc) if mode is InputModelMode.DECODE else ""
    namespace: Dict[str, Any] = {"__doc__": doc} if doc else {}
    struct = msgspec.defstruct(
        name,
        fields,
        array_like=fmt is SerializationFormat.BINARY,
        forbid_unknown_fields=False,
        namespace=namespace,
        module=getattr(desc.func, "__module__", None),
    )
    model = InputModel(
        name=name,
        struct=struct,
        fmt=fmt,
        mode=mode,
        fields=tuple(a.name for a in plain),
        doc=doc,
    )
    desc.input_models[mode] = model
    log.debug("input model %s (%s, %s): fields=%s", name, mode.value, fmt.value, model.fields)
    return model


__all__ = [
    "InputModel",
    "InputModelMode",
    "input_model_name",
    "render_input_doc",
    "synthesize_input_model",
]
