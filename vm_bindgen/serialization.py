"""
vm_bindgen.serialization — the two wire formats used by generated code.

Formats
-------
- JSON    : msgspec.json (UTF-8 JSON; bytes as base64, structs as objects)
- BINARY  : msgspec.msgpack (compact; input records are encoded array-like,
            i.e. positionally in declaration order)

Both directions are type-driven: decoding always targets a concrete Python
type (an input record, a callback type, the contract state class) and
validates while decoding.

Custom wire types
-----------------
Types that need a different representation per format (stringified integers,
base58 hashes) subclass `WireValue`. The encoders/decoders below route them
through msgspec's enc_hook/dec_hook/schema_hook.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, Iterable, Optional, Tuple, Type, Union

import msgspec

from .errors import CodecError


class SerializationFormat(str, enum.Enum):
    JSON = "json"
    BINARY = "binary"

    @classmethod
    def parse(cls, value: Union[str, "SerializationFormat", None],
              default: Optional["SerializationFormat"] = None) -> "SerializationFormat":
        if isinstance(value, SerializationFormat):
            return value
        if value is None:
            if default is not None:
                return default
            raise ValueError("serialization format is required")
        s = str(value).strip().lower()
        if s == "json":
            return cls.JSON
        if s in ("binary", "borsh", "msgpack"):
            return cls.BINARY
        raise ValueError(f"Unsupported serializer: {value!r} (expected 'json' or 'binary')")

    @property
    def label(self) -> str:
        """Name used in abort messages ("... from JSON.")."""
        return "JSON" if self is SerializationFormat.JSON else "Binary"

    @property
    def media_type(self) -> str:
        return "application/json" if self is SerializationFormat.JSON else "application/msgpack"


# ----------------------------- custom wire types ----------------------------- #


class WireValue:
    """
    Base for values with format-specific wire shapes.

    Subclasses implement:
      - to_json_value()    -> JSON-native value (str/int/...)
      - to_binary_value()  -> msgpack-native value (int/bytes/...)
      - from_wire(obj)     (classmethod) -> instance, raising ValueError/TypeError
      - json_schema()      (classmethod) -> JSON schema dict
    """

    __slots__ = ()

    def to_json_value(self) -> Any:
        raise NotImplementedError

    def to_binary_value(self) -> Any:
        raise NotImplementedError

    @classmethod
    def from_wire(cls, obj: Any) -> Any:
        raise NotImplementedError

    @classmethod
    def json_schema(cls) -> Dict[str, Any]:
        return {}


def _json_enc_hook(obj: Any) -> Any:
    if isinstance(obj, WireValue):
        return obj.to_json_value()
    raise NotImplementedError(f"Objects of type {type(obj).__name__} are not supported")


def _binary_enc_hook(obj: Any) -> Any:
    if isinstance(obj, WireValue):
        return obj.to_binary_value()
    raise NotImplementedError(f"Objects of type {type(obj).__name__} are not supported")


def _dec_hook(tp: Type[Any], obj: Any) -> Any:
    if isinstance(tp, type) and issubclass(tp, WireValue):
        if isinstance(obj, tp):
            return obj
        return tp.from_wire(obj)
    raise NotImplementedError(f"Objects of type {tp!r} are not supported")


def _schema_hook(tp: Type[Any]) -> Dict[str, Any]:
    if isinstance(tp, type) and issubclass(tp, WireValue):
        return tp.json_schema()
    raise NotImplementedError


_JSON_ENC = msgspec.json.Encoder(enc_hook=_json_enc_hook)
_BINARY_ENC = msgspec.msgpack.Encoder(enc_hook=_binary_enc_hook)


# --------------------------------- codec ------------------------------------ #


def encode(value: Any, fmt: SerializationFormat) -> bytes:
    """Serialize *value*; raises msgspec errors / TypeError on unsupported values."""
    if fmt is SerializationFormat.JSON:
        return _JSON_ENC.encode(value)
    if fmt is SerializationFormat.BINARY:
        return _BINARY_ENC.encode(value)
    raise CodecError(f"unknown serialization format: {fmt!r}")


def decode(data: bytes, tp: Any, fmt: SerializationFormat) -> Any:
    """Deserialize *data* into *tp*; raises msgspec.DecodeError/ValidationError."""
    if fmt is SerializationFormat.JSON:
        return msgspec.json.decode(data, type=tp, dec_hook=_dec_hook)
    if fmt is SerializationFormat.BINARY:
        return msgspec.msgpack.decode(data, type=tp, dec_hook=_dec_hook)
    raise CodecError(f"unknown serialization format: {fmt!r}")


def coerce(value: Any, tp: Any) -> Any:
    """
    Convert a caller-supplied value into the declared parameter type
    (e.g. dict → Struct, int → U128, "5" → int). Instances of a plain class
    target pass through untouched.
    """
    if isinstance(tp, type) and not isinstance(value, bool) and isinstance(value, tp):
        return value
    try:
        return msgspec.convert(value, type=tp, strict=False, dec_hook=_dec_hook)
    except (msgspec.ValidationError, TypeError, ValueError) as e:
        raise CodecError(f"cannot convert {type(value).__name__} to {type_name(tp)}: {e}") from e


def to_builtins(value: Any, fmt: SerializationFormat = SerializationFormat.JSON) -> Any:
    """JSON-compatible rendering of *value* (used for debugging views)."""
    hook = _json_enc_hook if fmt is SerializationFormat.JSON else _binary_enc_hook
    return msgspec.to_builtins(value, enc_hook=hook)


def schema_components(
    types: Iterable[Any],
    *,
    ref_template: str = "#/components/schemas/{name}",
) -> Tuple[Tuple[Dict[str, Any], ...], Dict[str, Any]]:
    """JSON schemas for *types* plus the shared component definitions."""
    return msgspec.json.schema_components(
        tuple(types), schema_hook=_schema_hook, ref_template=ref_template
    )


def type_name(tp: Any) -> str:
    """Human-readable type name for docs and diagnostics ("int", "List[str]")."""
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, type):
        return tp.__name__
    text = repr(tp)
    return text.replace("typing.", "")


__all__ = [
    "SerializationFormat",
    "WireValue",
    "encode",
    "decode",
    "coerce",
    "to_builtins",
    "schema_components",
    "type_name",
]
