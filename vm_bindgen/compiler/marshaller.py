"""
marshaller.py — client-side call builders.

For every exported method the contract gets a marshal method on a proxy
class ``<Contract>Contract``. Calling it does not execute anything: it
serializes the plain arguments with the method's input serializer (via the
ENCODE input model) and returns a `PendingContractTx` describing the call.

    proxy = Counter.__bindgen__.proxy.with_account("counter.near")
    tx = proxy.add(5)
    tx.receiver_id   # "counter.near"
    tx.method        # "add"
    tx.args          # b'{"value":5}'

Callback parameters are not part of the client signature; the host supplies
them from the results of prior sub-calls.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Type

import msgspec

from ..errors import BindgenError, CodecError
from ..serialization import SerializationFormat, coerce, decode
from .descriptor import BindingKind, MethodDescriptor
from .input_model import InputModelMode, synthesize_input_model

log = logging.getLogger(__name__)

_PARAM_KINDS = {
    BindingKind.POSITIONAL_ONLY: inspect.Parameter.POSITIONAL_ONLY,
    BindingKind.POSITIONAL_OR_KEYWORD: inspect.Parameter.POSITIONAL_OR_KEYWORD,
    BindingKind.KEYWORD_ONLY: inspect.Parameter.KEYWORD_ONLY,
}


@dataclass(frozen=True)
class PendingContractTx:
    """A prepared call: target account, method name and serialized args."""

    receiver_id: str
    method: str
    args: bytes
    is_view: bool
    fmt: SerializationFormat = SerializationFormat.JSON

    def args_json(self) -> Any:
        """Decoded JSON arguments (JSON-serialized calls only)."""
        if self.fmt is not SerializationFormat.JSON:
            raise CodecError(f"arguments of {self.method} are not JSON", fmt=self.fmt.value)
        if not self.args:
            return {}
        return msgspec.json.decode(self.args)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "receiver_id": self.receiver_id,
            "method": self.method,
            "args": "0x" + self.args.hex(),
            "is_view": self.is_view,
            "fmt": self.fmt.value,
        }


def make_marshal_method(desc: MethodDescriptor) -> Callable[..., PendingContractTx]:
    """Build the proxy method for *desc* with a matching Python signature."""
    model = synthesize_input_model(desc, InputModelMode.ENCODE)
    plain = desc.plain_args()

    params: List[inspect.Parameter] = [
        inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    for a in plain:
        default = a.default if a.has_default else inspect.Parameter.empty
        params.append(inspect.Parameter(
            a.name, _PARAM_KINDS[a.binding], default=default, annotation=a.annotation,
        ))
    sig = inspect.Signature(params, return_annotation=PendingContractTx)

    def marshal(self: "ContractProxy", *args: Any, **kwargs: Any) -> PendingContractTx:
        bound = sig.bind(self, *args, **kwargs)
        bound.apply_defaults()
        values = {a.name: coerce(bound.arguments[a.name], a.wire_type) for a in plain}
        payload = model.encode(values)
        return PendingContractTx(
            receiver_id=self._account_id,
            method=desc.ident,
            args=payload,
            is_view=desc.is_view,
            fmt=desc.input_serializer,
        )

    marshal.__name__ = desc.ident
    marshal.__qualname__ = f"{desc.owner}Contract.{desc.ident}"
    marshal.__doc__ = desc.docs or None
    marshal.__signature__ = sig  # type: ignore[attr-defined]
    marshal.__annotations__ = {a.name: a.annotation for a in plain}
    marshal.__annotations__["return"] = PendingContractTx
    return marshal


class ContractProxy:
    """
    Base for generated ``<Contract>Contract`` proxies.

    The target account lives in a private slot. Public members here are
    reserved: no exported method may reuse their names.
    """

    __slots__ = ("_account_id",)

    def __init__(self, account_id: str) -> None:
        self._account_id = str(account_id)

    @classmethod
    def with_account(cls, account_id: str) -> "ContractProxy":
        return cls(account_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._account_id!r})"


RESERVED_PROXY_NAMES = frozenset(n for n in dir(ContractProxy) if not n.startswith("_"))


def make_contract_proxy(contract: Any, descriptors: Iterable[MethodDescriptor]) -> Type[ContractProxy]:
    """Build ``<Name>Contract``; *contract* is the contract class or its name."""
    name = contract.__name__ if isinstance(contract, type) else str(contract)
    ns: Dict[str, Any] = {"__slots__": ()}
    for desc in descriptors:
        if desc.ident in RESERVED_PROXY_NAMES:
            raise BindgenError(f"Method {desc.ident} clashes with a ContractProxy member", desc.loc or None)
        ns[desc.ident] = make_marshal_method(desc)
    module = getattr(contract, "__module__", None) if isinstance(contract, type) else None
    if module:
        ns["__module__"] = module
    proxy = type(f"{name}Contract", (ContractProxy,), ns)
    log.debug("proxy %s: %d method(s)", proxy.__name__, len(ns) - 1)
    return proxy


def decode_return(desc: MethodDescriptor, data: bytes) -> Any:
    """Decode a method's returned bytes with its result serializer."""
    if not desc.emits_output:
        return None
    try:
        return decode(data, desc.output_type, desc.result_serializer)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        raise CodecError(f"cannot decode result of {desc.ident}: {e}",
                         fmt=desc.result_serializer.value) from e


__all__ = [
    "ContractProxy",
    "PendingContractTx",
    "RESERVED_PROXY_NAMES",
    "decode_return",
    "make_contract_proxy",
    "make_marshal_method",
]
