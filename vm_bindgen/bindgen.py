"""
vm_bindgen.bindgen — the @contract class decorator.

Applying @contract runs the whole pass once, at class definition time:

    analyze every public method     -> MethodDescriptor
    emit one entry program each     -> exported zero-argument entry point
    build the client proxy          -> <Name>Contract
    (lazily) the OpenAPI document

The results are attached to the class as ``cls.__bindgen__``
(`ContractBindings`). Any malformed declaration raises BindgenError and the
class is never created.

    @contract
    @dataclass
    class Counter:
        value: int = 0

        def add(self, n: int) -> int:
            self.value += n
            return self.value

    Counter.__bindgen__.entry_points["add"]()        # host call
    Counter.__bindgen__.proxy("counter.near").add(1)  # client call
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Type

import msgspec

from .compiler.analyzer import analyze_contract
from .compiler.descriptor import MethodDescriptor
from .compiler.emitter import emit_entry_program, make_entry_point
from .compiler.input_model import InputModel, InputModelMode, synthesize_input_model
from .compiler.ir import EntryProgram
from .compiler.marshaller import ContractProxy, make_contract_proxy
from .errors import BindgenError

log = logging.getLogger(__name__)

BINDINGS_ATTR = "__bindgen__"


@dataclass
class ContractBindings:
    contract: type
    descriptors: Dict[str, MethodDescriptor]
    programs: Dict[str, EntryProgram]
    entry_points: Dict[str, Callable[[], None]]
    proxy: Type[ContractProxy]
    tags: Sequence[str] = field(default_factory=tuple)

    def input_model(self, method: str, mode: InputModelMode = InputModelMode.DECODE) -> InputModel:
        return synthesize_input_model(self.descriptors[method], mode)

    def openapi(self, tags: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        from .schema.openapi import contract_openapi

        return contract_openapi(self.contract, tuple(self.tags if tags is None else tags))


def _check_state_type(cls: type) -> None:
    if dataclasses.is_dataclass(cls) or issubclass(cls, msgspec.Struct):
        return
    raise BindgenError(
        f"Contract state {cls.__name__} must be a dataclass or a msgspec.Struct",
        f"{cls.__module__}.{cls.__qualname__}",
    )


def _bind(cls: type, tags: Sequence[str]) -> type:
    if not isinstance(cls, type):
        raise BindgenError(f"@contract applies to classes, got {type(cls).__name__}")
    _check_state_type(cls)

    descriptors: Dict[str, MethodDescriptor] = {}
    programs: Dict[str, EntryProgram] = {}
    entry_points: Dict[str, Callable[[], None]] = {}
    for desc in analyze_contract(cls):
        program = emit_entry_program(desc, cls)
        descriptors[desc.ident] = desc
        programs[desc.ident] = program
        entry_points[desc.ident] = make_entry_point(program)

    bindings = ContractBindings(
        contract=cls,
        descriptors=descriptors,
        programs=programs,
        entry_points=entry_points,
        proxy=make_contract_proxy(cls, descriptors.values()),
        tags=tuple(tags),
    )
    setattr(cls, BINDINGS_ATTR, bindings)
    log.debug("bound contract %s: %s", cls.__qualname__, ", ".join(descriptors) or "-")
    return cls


def contract(cls: Optional[type] = None, *, tags: Sequence[str] = ()) -> Any:
    """Class decorator; usable bare (``@contract``) or with ``tags=[...]``."""
    if cls is None:
        return lambda c: _bind(c, tags)
    return _bind(cls, tags)


def bindings_of(cls: Any) -> ContractBindings:
    b = getattr(cls, BINDINGS_ATTR, None)
    if not isinstance(b, ContractBindings):
        raise BindgenError(f"{getattr(cls, '__name__', cls)!s} is not a @contract class")
    return b


def proxy_for(cls: Any, account_id: str) -> ContractProxy:
    """Client proxy of *cls* targeting *account_id*."""
    return bindings_of(cls).proxy(account_id)


__all__ = ["BINDINGS_ATTR", "ContractBindings", "bindings_of", "contract", "proxy_for"]
