"""
Helper types for values JSON cannot carry faithfully.

JSON numbers are only safe up to 53 bits, so 64/128-bit integers are exchanged
as base-10 strings in JSON and as plain integers in the binary format. 32-byte
hashes are exchanged as base58 strings in JSON and raw bytes in binary.

    from vm_bindgen.json_types import U128

    @view
    def total_supply(self) -> U128:
        return U128(self.supply)
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Union

from .base58 import Base58Error, b58decode, b58encode
from .serialization import WireValue


class _StrInt(WireValue):
    """Fixed-width integer, stringified in JSON."""

    __slots__ = ("value",)

    BITS: ClassVar[int] = 64
    SIGNED: ClassVar[bool] = False

    def __init__(self, value: Union[int, str, "_StrInt"] = 0) -> None:
        if isinstance(value, _StrInt):
            value = value.value
        elif isinstance(value, str):
            value = self._parse(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{type(self).__name__} expects an int, got {type(value).__name__}")
        lo, hi = self.bounds()
        if value < lo or value > hi:
            raise ValueError(f"{type(self).__name__} out of range [{lo}, {hi}]: {value}")
        self.value = int(value)

    @classmethod
    def bounds(cls) -> tuple:
        if cls.SIGNED:
            return -(1 << (cls.BITS - 1)), (1 << (cls.BITS - 1)) - 1
        return 0, (1 << cls.BITS) - 1

    @classmethod
    def _parse(cls, s: str) -> int:
        text = s.strip()
        digits = text[1:] if cls.SIGNED and text.startswith("-") else text
        if not digits.isdigit():
            raise ValueError(f"invalid digit found in string {s!r}")
        return int(text, 10)

    # ---- wire ---- #

    def to_json_value(self) -> str:
        return str(self.value)

    def to_binary_value(self) -> int:
        return self.value

    @classmethod
    def from_wire(cls, obj: Any) -> "_StrInt":
        if isinstance(obj, (str, int)) and not isinstance(obj, bool):
            return cls(obj)
        raise TypeError(f"Expected `str` or `int` for {cls.__name__}, got `{type(obj).__name__}`")

    @classmethod
    def json_schema(cls) -> Dict[str, Any]:
        lo, hi = cls.bounds()
        width = "signed" if cls.SIGNED else "unsigned"
        examples: List[str] = ["0"] if not cls.SIGNED else ["0", str(lo)]
        examples.append(str(hi))
        pattern_digits = len(str(hi))
        sign = "-?" if cls.SIGNED else ""
        return {
            "type": "string",
            "title": cls.__name__,
            "description": f"Stringfied {cls.BITS}-bit {width} integer.",
            "pattern": f"^{sign}[0-9]{{1,{pattern_digits}}}$",
            "minLength": 1,
            "maxLength": max(len(str(lo)), len(str(hi))),
            "default": "0",
            "examples": examples,
        }

    # ---- python protocol ---- #

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _StrInt):
            return type(self) is type(other) and self.value == other.value
        if isinstance(other, int) and not isinstance(other, bool):
            return self.value == other
        return NotImplemented

    def __lt__(self, other: Any) -> bool:
        return self.value < int(other)

    def __le__(self, other: Any) -> bool:
        return self.value <= int(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.value))

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"


class U64(_StrInt):
    BITS = 64
    SIGNED = False


class U128(_StrInt):
    BITS = 128
    SIGNED = False


class I64(_StrInt):
    BITS = 64
    SIGNED = True


class I128(_StrInt):
    BITS = 128
    SIGNED = True


class ParseCryptoHashError(ValueError):
    pass


class Base58CryptoHash(WireValue):
    """32-byte hash; base58 string in JSON, raw bytes in binary."""

    __slots__ = ("digest",)

    LENGTH: ClassVar[int] = 32

    def __init__(self, digest: Union[bytes, bytearray, memoryview] = b"\x00" * 32) -> None:
        raw = bytes(digest)
        if len(raw) != self.LENGTH:
            raise ParseCryptoHashError(
                f"invalid length of the crypto hash, expected {self.LENGTH} got {len(raw)}"
            )
        self.digest = raw

    @classmethod
    def from_str(cls, s: str) -> "Base58CryptoHash":
        try:
            raw = b58decode(s)
        except Base58Error as e:
            raise ParseCryptoHashError(f"base58 decoding error: {e}") from e
        return cls(raw)

    def to_json_value(self) -> str:
        return b58encode(self.digest)

    def to_binary_value(self) -> bytes:
        return self.digest

    @classmethod
    def from_wire(cls, obj: Any) -> "Base58CryptoHash":
        if isinstance(obj, str):
            return cls.from_str(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls(obj)
        raise TypeError(f"Expected `str` or `bytes` for Base58CryptoHash, got `{type(obj).__name__}`")

    @classmethod
    def json_schema(cls) -> Dict[str, Any]:
        lo = b58encode(b"\x00" * cls.LENGTH)
        hi = b58encode(b"\xff" * cls.LENGTH)
        return {
            "type": "string",
            "title": "Base58CryptoHash",
            "description": "Base58-stringfied 256-bit unsigned integer.",
            "pattern": "^[1-9A-HJ-NP-Za-km-z]{32,44}$",
            "minLength": len(lo),
            "maxLength": len(hi),
            "default": lo,
            "examples": [lo, hi],
        }

    def __bytes__(self) -> bytes:
        return self.digest

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Base58CryptoHash):
            return self.digest == other.digest
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.digest)

    def __str__(self) -> str:
        return b58encode(self.digest)

    def __repr__(self) -> str:
        return f"Base58CryptoHash({str(self)!r})"


__all__ = [
    "U64",
    "U128",
    "I64",
    "I128",
    "Base58CryptoHash",
    "ParseCryptoHashError",
]
