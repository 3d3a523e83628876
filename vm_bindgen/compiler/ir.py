"""
ir.py — instruction IR for generated entry points.

An entry point is a straight-line program (no branches, no loops at the IR
level) that the runtime engine executes top to bottom:

    SetupPanicHook
    RequirePrivate          (private methods)
    RequireNoDeposit        (non-payable, non-view methods)
    DecodeInput             (methods with plain parameters)
    ResolveCallback /
    ResolveCallbackResult   (one per callback parameter, by callback index)
    ResolveCallbackVec      (at most one)
    RequireUninitialized    (INIT only)
    StateRead               (methods with a `self` receiver)
    Invoke
    UnwrapResult            (fallible returns)
    EncodeResult            (methods that emit a value)
    StateWrite              (MUTABLE receivers and INIT*)
    ValueReturn             (methods that emit a value)

Every instruction is a frozen dataclass with a class-level `op` mnemonic used
by the engine's dispatch table and by the encoder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, List, Tuple

from ..serialization import SerializationFormat, type_name
from .descriptor import BindingKind, ReceiverMode


class Instr:
    """Base instruction type used by the engine and the encoder."""

    op: ClassVar[str] = ""

    def operands(self) -> Dict[str, Any]:
        return {k: getattr(self, k) for k in self.__dataclass_fields__}  # type: ignore[attr-defined]


@dataclass(frozen=True)
class SetupPanicHook(Instr):
    op: ClassVar[str] = "setup_panic_hook"


@dataclass(frozen=True)
class RequirePrivate(Instr):
    op: ClassVar[str] = "require_private"
    method: str


@dataclass(frozen=True)
class RequireNoDeposit(Instr):
    op: ClassVar[str] = "require_no_deposit"
    method: str


@dataclass(frozen=True)
class DecodeInput(Instr):
    op: ClassVar[str] = "decode_input"
    model: Any  # InputModel
    fmt: SerializationFormat
    fields: Tuple[str, ...]


@dataclass(frozen=True)
class ResolveCallback(Instr):
    op: ClassVar[str] = "resolve_callback"
    index: int
    name: str
    type: Any
    fmt: SerializationFormat


@dataclass(frozen=True)
class ResolveCallbackResult(Instr):
    op: ClassVar[str] = "resolve_callback_result"
    index: int
    name: str
    ok_type: Any
    fmt: SerializationFormat
    unit: bool = False


@dataclass(frozen=True)
class ResolveCallbackVec(Instr):
    op: ClassVar[str] = "resolve_callback_vec"
    name: str
    item_type: Any
    fmt: SerializationFormat


@dataclass(frozen=True)
class RequireUninitialized(Instr):
    op: ClassVar[str] = "require_uninitialized"


@dataclass(frozen=True)
class StateRead(Instr):
    op: ClassVar[str] = "state_read"
    contract_type: Any


@dataclass(frozen=True)
class Binding:
    name: str
    kind: BindingKind


@dataclass(frozen=True)
class Invoke(Instr):
    op: ClassVar[str] = "invoke"
    method: str
    receiver: ReceiverMode
    bindings: Tuple[Binding, ...] = ()


@dataclass(frozen=True)
class UnwrapResult(Instr):
    op: ClassVar[str] = "unwrap_result"
    method: str


@dataclass(frozen=True)
class EncodeResult(Instr):
    op: ClassVar[str] = "encode_result"
    fmt: SerializationFormat


@dataclass(frozen=True)
class StateWrite(Instr):
    op: ClassVar[str] = "state_write"
    source: str  # "receiver" | "result"


@dataclass(frozen=True)
class ValueReturn(Instr):
    op: ClassVar[str] = "value_return"


@dataclass(frozen=True)
class EntryProgram:
    """The generated entry point for one method, exported under `name`."""

    name: str
    contract: Any
    instrs: Tuple[Instr, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Instr]:
        return iter(self.instrs)

    def __len__(self) -> int:
        return len(self.instrs)

    def ops(self) -> List[str]:
        return [i.op for i in self.instrs]

    def find(self, op: str) -> List[Instr]:
        return [i for i in self.instrs if i.op == op]


def pretty(program: EntryProgram) -> str:
    """Multi-line listing of *program* for the inspect CLI and debugging."""
    owner = getattr(program.contract, "__qualname__", str(program.contract))
    lines = [f"entry {owner}.{program.name}:"]
    for idx, ins in enumerate(program.instrs):
        ops = []
        for k, v in ins.operands().items():
            if k == "model":
                v = v.name
            elif k in ("type", "ok_type", "item_type", "contract_type"):
                v = type_name(v)
            elif isinstance(v, SerializationFormat):
                v = v.value
            elif k == "bindings":
                v = ",".join(b.name for b in v)
            elif hasattr(v, "value"):
                v = v.value
            ops.append(f"{k}={v}")
        lines.append(f"  {idx:02d} {ins.op}" + (" " + " ".join(ops) if ops else ""))
    return "\n".join(lines)


__all__ = [
    "Instr",
    "SetupPanicHook",
    "RequirePrivate",
    "RequireNoDeposit",
    "DecodeInput",
    "ResolveCallback",
    "ResolveCallbackResult",
    "ResolveCallbackVec",
    "RequireUninitialized",
    "StateRead",
    "Binding",
    "Invoke",
    "UnwrapResult",
    "EncodeResult",
    "StateWrite",
    "ValueReturn",
    "EntryProgram",
    "pretty",
]
