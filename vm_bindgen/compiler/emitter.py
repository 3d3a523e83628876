"""
emitter.py — lower a MethodDescriptor to an EntryProgram.

The program fixes the order of checks that every generated entry point
performs; see vm_bindgen.compiler.ir for the instruction list. The order is
observable (e.g. a non-payable method with a deposit aborts before its input
is read) and must not be rearranged.

`make_entry_point` wraps a program into the zero-argument callable the host
dispatches to by method name.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from ..errors import BindgenError
from ..result import is_unit_type
from .descriptor import ArgumentRole, MethodDescriptor, MethodKind, ReceiverMode
from .input_model import InputModelMode, synthesize_input_model
from .ir import (Binding, DecodeInput, EncodeResult, EntryProgram, Instr, Invoke,
                 RequireNoDeposit, RequirePrivate, RequireUninitialized,
                 ResolveCallback, ResolveCallbackResult, ResolveCallbackVec,
                 SetupPanicHook, StateRead, StateWrite, UnwrapResult, ValueReturn)

log = logging.getLogger(__name__)


def emit_entry_program(desc: MethodDescriptor, contract: Any) -> EntryProgram:
    instrs: List[Instr] = [SetupPanicHook()]

    if desc.is_private:
        instrs.append(RequirePrivate(desc.ident))

    if not desc.is_payable and desc.kind is not MethodKind.VIEW:
        instrs.append(RequireNoDeposit(desc.ident))

    if desc.has_input:
        model = synthesize_input_model(desc, InputModelMode.DECODE)
        instrs.append(DecodeInput(model=model, fmt=desc.input_serializer, fields=model.fields))

    for arg in desc.callback_args():
        if arg.role is ArgumentRole.CALLBACK_SINGLE:
            instrs.append(ResolveCallback(
                index=arg.callback_index or 0, name=arg.name, type=arg.wire_type, fmt=arg.serializer,
            ))
        elif arg.role is ArgumentRole.CALLBACK_FALLIBLE:
            instrs.append(ResolveCallbackResult(
                index=arg.callback_index or 0, name=arg.name, ok_type=arg.ok_type,
                fmt=arg.serializer, unit=is_unit_type(arg.ok_type),
            ))
        else:
            raise BindgenError(f"unexpected callback role {arg.role!r} for `{arg.name}`", desc.loc)

    vec = desc.vector_arg()
    if vec is not None:
        instrs.append(ResolveCallbackVec(name=vec.name, item_type=vec.item_type, fmt=vec.serializer))

    if desc.kind is MethodKind.INIT:
        instrs.append(RequireUninitialized())

    if desc.receiver in (ReceiverMode.SHARED, ReceiverMode.MUTABLE):
        instrs.append(StateRead(contract_type=contract))

    bindings = tuple(Binding(a.name, a.binding) for a in desc.args)
    instrs.append(Invoke(method=desc.ident, receiver=desc.receiver, bindings=bindings))

    if desc.returns_fallible:
        instrs.append(UnwrapResult(desc.ident))

    # Regular methods serialize the value before persisting state; the
    # value_return happens last.
    if desc.emits_output:
        instrs.append(EncodeResult(fmt=desc.result_serializer))

    if desc.kind.is_init:
        instrs.append(StateWrite(source="result"))
    elif desc.receiver is ReceiverMode.MUTABLE:
        instrs.append(StateWrite(source="receiver"))

    if desc.emits_output:
        instrs.append(ValueReturn())

    program = EntryProgram(name=desc.ident, contract=contract, instrs=tuple(instrs))
    log.debug("emitted %s.%s: %s", desc.owner, desc.ident, " ".join(program.ops()))
    return program


def make_entry_point(
    program: EntryProgram,
    engine: Optional[Any] = None,
) -> Callable[[], None]:
    """
    Zero-argument callable running *program* against the installed host.
    The host is resolved on every call, so tests can swap hosts between calls.
    """
    from ..runtime.engine import Engine

    runner = engine or Engine()

    def entry() -> None:
        runner.run(program)

    entry.__name__ = program.name
    entry.__qualname__ = f"{getattr(program.contract, '__qualname__', program.contract)}.{program.name}"
    entry.__doc__ = f"Exported entry point for `{program.name}`."
    entry.__bindgen_program__ = program  # type: ignore[attr-defined]
    return entry


__all__ = ["emit_entry_program", "make_entry_point"]
