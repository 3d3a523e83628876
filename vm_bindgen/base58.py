"""
Base58 (Bitcoin alphabet) encoder/decoder
=========================================

Used by vm_bindgen.json_types.Base58CryptoHash to render 32-byte hashes as
short, unambiguous strings (no 0/O/I/l).

    s = b58encode(b"\\x00" * 32)   # "11111111111111111111111111111111"
    raw = b58decode(s)

Leading zero bytes map to leading "1" characters and back, so the encoding is
length-preserving for fixed-size payloads.
"""

from __future__ import annotations

from typing import Union

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
ALPHABET_REV = {c: i for i, c in enumerate(ALPHABET)}


class Base58Error(ValueError):
    pass


def b58encode(data: Union[bytes, bytearray, memoryview]) -> str:
    raw = bytes(data)
    n_zeros = len(raw) - len(raw.lstrip(b"\x00"))
    num = int.from_bytes(raw, "big")
    out = []
    while num > 0:
        num, rem = divmod(num, 58)
        out.append(ALPHABET[rem])
    return "1" * n_zeros + "".join(reversed(out))


def b58decode(s: str) -> bytes:
    if not isinstance(s, str):
        raise Base58Error("base58 input must be str")
    num = 0
    for pos, ch in enumerate(s):
        digit = ALPHABET_REV.get(ch)
        if digit is None:
            raise Base58Error(f"invalid base58 character {ch!r} at position {pos}")
        num = num * 58 + digit
    n_ones = len(s) - len(s.lstrip("1"))
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * n_ones + body


__all__ = ["ALPHABET", "Base58Error", "b58encode", "b58decode"]
