"""
Gas amounts attached to cross-contract calls.

`Gas` is an unsigned 64-bit quantity; like the other wide integers in
vm_bindgen.json_types it travels as a decimal string in JSON.
"""

from __future__ import annotations

from typing import Any, ClassVar

from .json_types import U64


class Gas(U64):
    ONE_TERA: ClassVar["Gas"]
    ONE_GIGA: ClassVar["Gas"]

    @classmethod
    def tgas(cls, n: int) -> "Gas":
        return cls(n * 1_000_000_000_000)

    @classmethod
    def ggas(cls, n: int) -> "Gas":
        return cls(n * 1_000_000_000)

    def __add__(self, other: Any) -> "Gas":
        return Gas(self.value + int(other))

    def __sub__(self, other: Any) -> "Gas":
        return Gas(self.value - int(other))

    def __mul__(self, other: int) -> "Gas":
        return Gas(self.value * int(other))

    def __floordiv__(self, other: int) -> "Gas":
        return Gas(self.value // int(other))

    def __mod__(self, other: int) -> "Gas":
        return Gas(self.value % int(other))


Gas.ONE_TERA = Gas(1_000_000_000_000)
Gas.ONE_GIGA = Gas(1_000_000_000)

__all__ = ["Gas"]
