"""
vm_bindgen.runtime.engine — executes generated entry programs.

An EntryProgram (vm_bindgen.compiler.ir) is a straight-line list of
instructions. The engine walks it once, keeping a small frame:

    locals    parameter name -> value (decoded input, resolved callbacks)
    receiver  the contract state instance (methods with `self`)
    result    the method's return value (after UnwrapResult: the Ok value)
    encoded   the serialized result awaiting value_return

Every host interaction goes through vm_bindgen.runtime.env, so the engine
works unchanged against MockedHost or a real backend.

Failure model
-------------
All checks abort with HostAbort and an exact, human-readable message. Once
SetupPanicHook has run, any other exception escaping contract code is turned
into a HostAbort carrying ``str(exc)`` (the original is chained as
__cause__). Without the hook, foreign exceptions propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import msgspec

from ..compiler.descriptor import BindingKind, ReceiverMode
from ..compiler.ir import (DecodeInput, EncodeResult, EntryProgram, Invoke,
                           RequireNoDeposit, RequirePrivate, RequireUninitialized,
                           ResolveCallback, ResolveCallbackResult, ResolveCallbackVec,
                           SetupPanicHook, StateRead, StateWrite, UnwrapResult,
                           ValueReturn)
from ..config import load_config
from ..result import Err, Ok, PromiseError, error_message
from ..serialization import SerializationFormat, decode, encode
from . import env
from .error import HostAbort, VmError
from .promise import PromiseStatus

log = logging.getLogger(__name__)

_DECODE_ERRORS = (msgspec.DecodeError, msgspec.ValidationError)

_UNSET = object()


@dataclass
class Frame:
    program: EntryProgram
    locals: Dict[str, Any] = field(default_factory=dict)
    receiver: Any = _UNSET
    result: Any = _UNSET
    encoded: Optional[bytes] = None
    panic_hook: bool = False
    steps: int = 0


@dataclass
class ExecResult:
    return_value: Optional[bytes]
    steps: int
    state_written: bool


class Engine:
    """Interpreter for EntryProgram instruction lists."""

    def __init__(self, *, max_input_bytes: Optional[int] = None) -> None:
        cfg = load_config()
        self.max_input_bytes = int(max_input_bytes or cfg.max_input_bytes)
        self._handlers: Dict[str, Callable[[Any, Frame], None]] = {
            SetupPanicHook.op: self._setup_panic_hook,
            RequirePrivate.op: self._require_private,
            RequireNoDeposit.op: self._require_no_deposit,
            DecodeInput.op: self._decode_input,
            ResolveCallback.op: self._resolve_callback,
            ResolveCallbackResult.op: self._resolve_callback_result,
            ResolveCallbackVec.op: self._resolve_callback_vec,
            RequireUninitialized.op: self._require_uninitialized,
            StateRead.op: self._state_read,
            Invoke.op: self._invoke,
            UnwrapResult.op: self._unwrap_result,
            EncodeResult.op: self._encode_result,
            StateWrite.op: self._state_write,
            ValueReturn.op: self._value_return,
        }

    # ---------- execution entrypoint ---------- #

    def run(self, program: EntryProgram) -> ExecResult:
        frame = Frame(program)
        wrote = False
        log.debug("run %s (%d instrs)", program.name, len(program))
        try:
            for instr in program.instrs:
                handler = self._handlers.get(instr.op)
                if handler is None:
                    raise VmError(f"unknown instruction: {instr.op!r}")
                frame.steps += 1
                handler(instr, frame)
                wrote = wrote or isinstance(instr, StateWrite)
        except HostAbort as e:
            e.context.setdefault("method", program.name)
            log.debug("abort in %s: %s", program.name, e.message)
            raise
        except Exception as e:
            if not frame.panic_hook or isinstance(e, VmError):
                raise
            log.debug("panic in %s: %r", program.name, e)
            raise HostAbort(str(e) or type(e).__name__, method=program.name) from e
        return ExecResult(return_value=frame.encoded, steps=frame.steps, state_written=wrote)

    # ---------- policy ---------- #

    def _setup_panic_hook(self, instr: SetupPanicHook, frame: Frame) -> None:
        env.setup_panic_hook()
        frame.panic_hook = True

    def _require_private(self, instr: RequirePrivate, frame: Frame) -> None:
        if env.predecessor_account_id() != env.current_account_id():
            env.panic_str(f"Method {instr.method} is private")

    def _require_no_deposit(self, instr: RequireNoDeposit, frame: Frame) -> None:
        if env.attached_deposit() != 0:
            env.panic_str(f"Method {instr.method} doesn't accept deposit")

    # ---------- input ---------- #

    def _decode_input(self, instr: DecodeInput, frame: Frame) -> None:
        data = env.input()
        if data is None:
            env.panic_str("Expected input since method has arguments.")
        if len(data) > self.max_input_bytes:
            env.panic_str(f"Input exceeds the maximum of {self.max_input_bytes} bytes")
        try:
            record = instr.model.decode(data)
        except _DECODE_ERRORS as e:
            log.debug("input decode failed: %s", e)
            env.panic_str(f"Failed to deserialize input from {instr.fmt.label}.")
        for name in instr.fields:
            frame.locals[name] = getattr(record, name)

    # ---------- callbacks ---------- #

    @staticmethod
    def _decode_callback(data: bytes, tp: Any, fmt: SerializationFormat) -> Any:
        try:
            return decode(data, tp, fmt)
        except _DECODE_ERRORS as e:
            log.debug("callback decode failed: %s", e)
            env.panic_str(f"Failed to deserialize callback using {fmt.label}")

    def _resolve_callback(self, instr: ResolveCallback, frame: Frame) -> None:
        res = env.promise_result(instr.index)
        if not res.is_successful:
            env.panic_str(f"Callback computation {instr.index} was not successful")
        frame.locals[instr.name] = self._decode_callback(res.data, instr.type, instr.fmt)

    def _resolve_callback_result(self, instr: ResolveCallbackResult, frame: Frame) -> None:
        res = env.promise_result(instr.index)
        if res.status is PromiseStatus.NOT_READY:
            value: Any = Err(PromiseError.NOT_READY)
        elif res.status is PromiseStatus.FAILED:
            value = Err(PromiseError.FAILED)
        elif instr.unit and not res.data:
            value = Ok(None)
        else:
            value = Ok(self._decode_callback(res.data, instr.ok_type, instr.fmt))
        frame.locals[instr.name] = value

    def _resolve_callback_vec(self, instr: ResolveCallbackVec, frame: Frame) -> None:
        out: List[Any] = []
        for i in range(env.promise_results_count()):
            res = env.promise_result(i)
            if not res.is_successful:
                env.panic_str(f"Callback computation {i} was not successful")
            out.append(self._decode_callback(res.data, instr.item_type, instr.fmt))
        frame.locals[instr.name] = out

    # ---------- state ---------- #

    def _require_uninitialized(self, instr: RequireUninitialized, frame: Frame) -> None:
        if env.state_exists():
            env.panic_str("The contract has already been initialized")

    def _state_read(self, instr: StateRead, frame: Frame) -> None:
        state = env.state_read(instr.contract_type)
        if state is None:
            try:
                state = instr.contract_type()
            except TypeError as e:
                log.debug("default construction of %s failed: %s", instr.contract_type, e)
                env.panic_str("The contract is not initialized")
        frame.receiver = state

    def _state_write(self, instr: StateWrite, frame: Frame) -> None:
        contract = frame.program.contract
        state = frame.receiver if instr.source == "receiver" else frame.result
        if instr.source == "result" and not isinstance(state, contract):
            env.panic_str(
                f"Init method {frame.program.name} must return an instance of {contract.__name__}"
            )
        env.state_write(state)

    # ---------- call ---------- #

    @staticmethod
    def _collect_args(bindings: Tuple[Any, ...], frame: Frame) -> Tuple[List[Any], Dict[str, Any]]:
        pos: List[Any] = []
        kw: Dict[str, Any] = {}
        for b in bindings:
            value = frame.locals[b.name]
            if b.kind is BindingKind.KEYWORD_ONLY:
                kw[b.name] = value
            else:
                pos.append(value)
        return pos, kw

    def _invoke(self, instr: Invoke, frame: Frame) -> None:
        contract = frame.program.contract
        if instr.receiver in (ReceiverMode.SHARED, ReceiverMode.MUTABLE):
            target = getattr(frame.receiver, instr.method)
        else:
            target = getattr(contract, instr.method)
        pos, kw = self._collect_args(instr.bindings, frame)
        frame.result = target(*pos, **kw)

    def _unwrap_result(self, instr: UnwrapResult, frame: Frame) -> None:
        res = frame.result
        if isinstance(res, Ok):
            frame.result = res.value
        elif isinstance(res, Err):
            env.panic_str(error_message(res.error))
        else:
            env.panic_str(f"Method {instr.method} must return Ok(...) or Err(...)")

    # ---------- output ---------- #

    def _encode_result(self, instr: EncodeResult, frame: Frame) -> None:
        try:
            frame.encoded = encode(frame.result, instr.fmt)
        except (TypeError, msgspec.EncodeError) as e:
            log.debug("result encode failed: %s", e)
            env.panic_str(f"Failed to serialize the return value using {instr.fmt.label}.")

    def _value_return(self, instr: ValueReturn, frame: Frame) -> None:
        if frame.encoded is not None:
            env.value_return(frame.encoded)


__all__ = ["Engine", "ExecResult", "Frame"]
