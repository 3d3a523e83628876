"""
vm_bindgen.runtime.context — per-invocation environment for the local host.

`VMContext` is the pure-data description of one call: who is calling whom,
what was attached, and which input bytes arrive. The in-memory host
(vm_bindgen.runtime.host.MockedHost) reads it to answer the env queries used
by generated entry points.

Design notes
------------
- Account ids follow the usual rules: 2..64 chars of lowercase letters,
  digits and the separators ``- _ .``; a separator may not start or end the
  id or follow another separator.
- `input` is ``None`` when the caller supplied no input at all, which is
  different from an empty payload.
- Numeric fields are validated to be non-negative.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Union

_ACCOUNT_RE = re.compile(r"^(([a-z\d]+[-_])*[a-z\d]+\.)*([a-z\d]+[-_])*[a-z\d]+$")


class ContextError(Exception):
    """Validation or coercion failure for VMContext."""


def validate_account_id(value: Any, *, name: str = "account_id") -> str:
    if not isinstance(value, str):
        raise ContextError(f"{name} must be str, got {type(value).__name__}")
    if not 2 <= len(value) <= 64:
        raise ContextError(f"{name} must be 2..64 characters, got {len(value)}")
    if not _ACCOUNT_RE.match(value):
        raise ContextError(f"{name} is not a valid account id: {value!r}")
    return value


def _require_non_negative_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


def _to_input(value: Union[bytes, bytearray, memoryview, str, None]) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise ContextError(f"input must be bytes or str, got {type(value).__name__}")


@dataclass(frozen=True)
class VMContext:
    """
    Fields
    ------
    current_account_id:     Account the contract is deployed on.
    signer_account_id:      Account that signed the originating transaction.
    predecessor_account_id: Immediate caller (the contract itself for callbacks).
    input:                  Raw call arguments, or None when absent.
    attached_deposit:       Native tokens attached to the call.
    block_height:           Height of the executing block.
    block_timestamp:        Block timestamp in nanoseconds.
    prepaid_gas:            Gas attached to the call.
    is_view:                True for read-only (view) execution.
    """

    current_account_id: str = "alice.near"
    signer_account_id: str = "bob.near"
    predecessor_account_id: str = "bob.near"
    input: Optional[bytes] = None
    attached_deposit: int = 0
    block_height: int = 0
    block_timestamp: int = 0
    prepaid_gas: int = 300_000_000_000_000
    is_view: bool = False

    def __post_init__(self) -> None:
        for f in ("current_account_id", "signer_account_id", "predecessor_account_id"):
            validate_account_id(getattr(self, f), name=f)
        object.__setattr__(self, "input", _to_input(self.input))
        for f in ("attached_deposit", "block_height", "block_timestamp", "prepaid_gas"):
            object.__setattr__(self, f, _require_non_negative_int(f, getattr(self, f)))
        object.__setattr__(self, "is_view", bool(self.is_view))

    # ---- constructors ---- #

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VMContext":
        raw = d.get("input")
        if isinstance(raw, str) and raw.startswith("0x"):
            raw = bytes.fromhex(raw[2:])
        return cls(
            current_account_id=d.get("current_account_id", "alice.near"),
            signer_account_id=d.get("signer_account_id", "bob.near"),
            predecessor_account_id=d.get("predecessor_account_id", d.get("signer_account_id", "bob.near")),
            input=raw,
            attached_deposit=d.get("attached_deposit", 0),
            block_height=d.get("block_height", 0),
            block_timestamp=d.get("block_timestamp", 0),
            prepaid_gas=d.get("prepaid_gas", 300_000_000_000_000),
            is_view=d.get("is_view", False),
        )

    def with_(self, **changes: Any) -> "VMContext":
        """Copy with some fields replaced (validated again)."""
        return replace(self, **changes)

    # ---- views ---- #

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["input"] = ("0x" + self.input.hex()) if self.input is not None else None
        return d


__all__ = ["ContextError", "VMContext", "validate_account_id"]
