"""Outcomes of prior cross-contract sub-calls, as seen by a callback."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Union


class PromiseStatus(str, enum.Enum):
    SUCCESSFUL = "successful"
    NOT_READY = "not_ready"
    FAILED = "failed"


@dataclass(frozen=True)
class PromiseResult:
    status: PromiseStatus
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", PromiseStatus(self.status))
        object.__setattr__(self, "data", bytes(self.data))
        if self.status is not PromiseStatus.SUCCESSFUL and self.data:
            raise ValueError(f"{self.status.value} promise result carries no payload")

    @classmethod
    def successful(cls, data: Union[bytes, bytearray, str] = b"") -> "PromiseResult":
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls(PromiseStatus.SUCCESSFUL, bytes(data))

    @classmethod
    def not_ready(cls) -> "PromiseResult":
        return cls(PromiseStatus.NOT_READY)

    @classmethod
    def failed(cls) -> "PromiseResult":
        return cls(PromiseStatus.FAILED)

    @property
    def is_successful(self) -> bool:
        return self.status is PromiseStatus.SUCCESSFUL

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "data": "0x" + self.data.hex()}


__all__ = ["PromiseStatus", "PromiseResult"]
