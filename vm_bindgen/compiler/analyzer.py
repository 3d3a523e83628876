"""
analyzer.py — turn a marked contract method into a MethodDescriptor.

This pass runs when the @contract decorator is applied, i.e. at class
definition time. It inspects the Python signature, the resolved annotations
(``typing.get_type_hints(include_extras=True)``) and the markers recorded by
vm_bindgen.markers, and either returns an immutable descriptor or raises
BindgenError with a ``file:line`` location. Malformed declarations are never
degraded into warnings.

Rules enforced here
-------------------
  • No type parameters on methods or on the contract class.
  • No *args / **kwargs; every parameter is annotated.
  • At most one role marker per parameter; at most one callback_vec.
  • callback_result parameters are ``Result[T, PromiseError]``;
    callback_vec parameters are ``List[T]``.
  • @init methods are static or class methods returning the contract type.
  • @payable is rejected on view methods.
  • A ``Result[T, E]`` return needs @handle_result, and @handle_result needs a
    ``Result[T, E]`` return.
"""

from __future__ import annotations

import base64
import inspect
import logging
import typing
from typing import Any, Dict, Iterable, List, Optional, Tuple

import msgspec

from ..config import load_config
from ..errors import BindgenError
from ..markers import MethodMarkers, ParamMarker, get_markers
from ..result import PromiseError, is_unit_type, result_arms
from ..serialization import SerializationFormat
from .descriptor import (ArgInfo, ArgumentRole, BindingKind, MethodDescriptor,
                         MethodKind, ReceiverMode)

log = logging.getLogger(__name__)

_ROLES = {
    "callback": ArgumentRole.CALLBACK_SINGLE,
    "callback_result": ArgumentRole.CALLBACK_FALLIBLE,
    "callback_vec": ArgumentRole.CALLBACK_VECTOR,
}

_BINDINGS = {
    inspect.Parameter.POSITIONAL_ONLY: BindingKind.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD: BindingKind.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY: BindingKind.KEYWORD_ONLY,
}

_MISSING = object()


# ----------------------------------------------------------------------------- #
# helpers
# ----------------------------------------------------------------------------- #


def source_loc(fn: Any) -> str:
    """Best-effort ``file:line`` for diagnostics."""
    target = inspect.unwrap(fn)
    code = getattr(target, "__code__", None)
    try:
        path = inspect.getsourcefile(target) or (code.co_filename if code else "<unknown>")
    except TypeError:
        path = "<unknown>"
    line = code.co_firstlineno if code is not None else 0
    return f"{path}:{line}"


def _contains_typevar(tp: Any) -> bool:
    if isinstance(tp, (typing.TypeVar, typing.ParamSpec)):
        return True
    if isinstance(tp, (list, tuple)):
        return any(_contains_typevar(t) for t in tp)
    return any(_contains_typevar(a) for a in typing.get_args(tp))


def _split_annotated(tp: Any) -> Tuple[Any, Tuple[Any, ...]]:
    if typing.get_origin(tp) is typing.Annotated:
        base, *metas = typing.get_args(tp)
        return base, tuple(metas)
    return tp, ()


def _rebuild_annotated(base: Any, metas: Iterable[Any]) -> Any:
    rest = tuple(metas)
    if not rest:
        return base
    return typing.Annotated[(base, *rest)]


def _meta_doc(metas: Iterable[Any]) -> str:
    for m in metas:
        if isinstance(m, msgspec.Meta) and m.description:
            return m.description
    return ""


def render_literal(value: Any) -> str:
    """
    Text form of a property_attr key or value: strings verbatim, other
    literals prefixed with their kind ("integer: 7", "bool: true").
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return "base64: " + base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, bool):
        return "bool: " + ("true" if value else "false")
    if isinstance(value, int):
        return f"integer: {value}"
    if isinstance(value, float):
        return f"float: {value}"
    return str(value)


def _parse_format(value: Optional[str], default: SerializationFormat, loc: str) -> SerializationFormat:
    try:
        return SerializationFormat.parse(value, default)
    except ValueError as e:
        raise BindgenError(str(e), loc) from e


def _resolve_hints(func: Any, localns: Optional[Dict[str, Any]], loc: str) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(
            func, globalns=getattr(func, "__globals__", None), localns=localns, include_extras=True
        )
    except NameError as e:
        raise BindgenError(f"Cannot resolve type annotation: {e}", loc) from e


def _unwrap_member(member: Any) -> Tuple[Any, ReceiverMode]:
    if isinstance(member, staticmethod):
        return member.__func__, ReceiverMode.NONE
    if isinstance(member, classmethod):
        return member.__func__, ReceiverMode.CLASS
    return member, ReceiverMode.MUTABLE


# ----------------------------------------------------------------------------- #
# method analysis
# ----------------------------------------------------------------------------- #


def analyze_method(
    member: Any,
    *,
    owner: Any,
    name: Optional[str] = None,
    localns: Optional[Dict[str, Any]] = None,
) -> MethodDescriptor:
    """
    Analyze one class member (function, staticmethod or classmethod).

    `owner` is the contract class (or its name); when it is a class it is
    added to the annotation namespace so ``-> "MyContract"`` resolves while
    the class body is still being decorated.
    """
    func, receiver = _unwrap_member(member)
    if not callable(func) or not hasattr(func, "__code__"):
        raise BindgenError(f"Unsupported contract member: {member!r}")
    ident = name or func.__name__
    owner_cls = owner if isinstance(owner, type) else None
    owner_name = owner.__name__ if owner_cls is not None else str(owner)
    loc = source_loc(func)
    markers = get_markers(func) or MethodMarkers()
    cfg = load_config()
    default_fmt = SerializationFormat.parse(cfg.default_serializer)

    if getattr(func, "__type_params__", ()):
        raise BindgenError("Methods with type parameters are not supported for smart contracts", loc)

    ns: Dict[str, Any] = dict(localns or {})
    if owner_cls is not None:
        ns.setdefault(owner_cls.__name__, owner_cls)
    hints = _resolve_hints(func, ns, loc)
    if any(_contains_typevar(t) for t in hints.values()):
        raise BindgenError("Methods with type parameters are not supported for smart contracts", loc)

    # ---- kind & receiver ---- #
    if markers.init is not None:
        if receiver is ReceiverMode.MUTABLE:
            raise BindgenError("Init methods can't have `self` attribute", loc)
        kind = MethodKind.INIT if markers.init == "init" else MethodKind.INIT_IGNORE_STATE
    elif markers.view or receiver in (ReceiverMode.NONE, ReceiverMode.CLASS):
        kind = MethodKind.VIEW
    else:
        kind = MethodKind.REGULAR
    if kind is MethodKind.VIEW and receiver is ReceiverMode.MUTABLE:
        receiver = ReceiverMode.SHARED
    if markers.payable and kind is MethodKind.VIEW:
        raise BindgenError("Payable method must be mutable (not view)", loc)

    input_fmt = _parse_format(markers.input_serializer, default_fmt, loc)
    result_fmt = _parse_format(markers.result_serializer, default_fmt, loc)

    # ---- parameters ---- #
    params = list(inspect.signature(func).parameters.values())
    if receiver is not ReceiverMode.NONE:
        if not params or params[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            raise BindgenError("Contract methods must take `self` (or be static methods)", loc)
        params = params[1:]

    args: List[ArgInfo] = []
    cb_index = 0
    has_vector = False
    for p in params:
        binding = _BINDINGS.get(p.kind)
        if binding is None:
            raise BindgenError(
                f"Variadic parameter `{p.name}` is not supported for contract methods", loc
            )
        ann = hints.get(p.name, _MISSING)
        if ann is _MISSING:
            raise BindgenError(f"Parameter `{p.name}` needs a type annotation", loc)
        base, metas = _split_annotated(ann)
        roles = [m for m in metas if isinstance(m, ParamMarker)]
        rest = [m for m in metas if not isinstance(m, ParamMarker)]
        if len(roles) > 1:
            raise BindgenError(
                f"Parameter `{p.name}` has more than one of callback / callback_result / callback_vec",
                loc,
            )
        wire_type = _rebuild_annotated(base, rest)
        doc = _meta_doc(rest)

        if not roles:
            args.append(ArgInfo(
                name=p.name, annotation=ann, wire_type=wire_type, role=ArgumentRole.PLAIN,
                binding=binding, serializer=input_fmt, doc=doc,
                default=msgspec.NODEFAULT if p.default is inspect.Parameter.empty else p.default,
            ))
            continue

        marker = roles[0]
        role = _ROLES[marker.role]
        fmt = _parse_format(marker.serializer, default_fmt, loc)

        if role is ArgumentRole.CALLBACK_SINGLE:
            args.append(ArgInfo(
                name=p.name, annotation=ann, wire_type=wire_type, role=role,
                binding=binding, serializer=fmt, doc=doc, callback_index=cb_index,
            ))
            cb_index += 1
        elif role is ArgumentRole.CALLBACK_FALLIBLE:
            arms = result_arms(base)
            if arms is None or arms[1] is not PromiseError:
                raise BindgenError(
                    "Function parameters marked with callback_result should have type "
                    "Result[T, PromiseError]",
                    loc,
                )
            args.append(ArgInfo(
                name=p.name, annotation=ann, wire_type=wire_type, role=role,
                binding=binding, serializer=fmt, doc=doc, callback_index=cb_index,
                ok_type=arms[0],
            ))
            cb_index += 1
        else:
            if has_vector:
                raise BindgenError("Only one parameter can be marked with callback_vec", loc)
            if typing.get_origin(base) is not list and base is not list:
                raise BindgenError(
                    "Function parameters marked with callback_vec should have type List[T]", loc
                )
            item_args = typing.get_args(base)
            has_vector = True
            args.append(ArgInfo(
                name=p.name, annotation=ann, wire_type=wire_type, role=role,
                binding=binding, serializer=fmt, doc=doc,
                item_type=item_args[0] if item_args else Any,
            ))

    # ---- return ---- #
    ret = hints.get("return", _MISSING)
    if ret is _MISSING or is_unit_type(ret):
        ret = None
    self_type = getattr(typing, "Self", None)
    if owner_cls is not None and self_type is not None and ret is self_type:
        ret = owner_cls

    arms = result_arms(ret) if ret is not None else None
    ok_t: Any = None
    err_t: Any = None
    if markers.handle_result:
        if arms is None:
            raise BindgenError("Method marked with handle_result should return Result[T, E]", loc)
        ok_t, err_t = arms
        if self_type is not None and ok_t is self_type and owner_cls is not None:
            ok_t = owner_cls
    elif arms is not None:
        raise BindgenError(
            "Serializing Result[T, E] type is not supported; mark the method with "
            "@handle_result to abort the call on Err",
            loc,
        )

    if kind.is_init:
        state_t = ok_t if markers.handle_result else ret
        if ret is None:
            raise BindgenError("Init methods must return the contract state", loc)
        if owner_cls is not None and state_t is not owner_cls:
            raise BindgenError(
                f"Init methods must return the contract state ({owner_cls.__name__})", loc
            )

    desc = MethodDescriptor(
        ident=ident,
        owner=owner_name,
        args=tuple(args),
        kind=kind,
        receiver=receiver,
        input_serializer=input_fmt,
        result_serializer=result_fmt,
        is_payable=markers.payable,
        is_private=markers.private,
        returns_fallible=markers.handle_result,
        returns=ret,
        ok_type=ok_t,
        err_type=err_t,
        docs=inspect.getdoc(func) or "",
        properties=tuple((render_literal(k), render_literal(v)) for k, v in markers.properties),
        loc=loc,
        func=func,
    )
    log.debug(
        "analyzed %s.%s kind=%s receiver=%s args=%d",
        owner_name, ident, kind.value, receiver.value, len(args),
    )
    return desc


# ----------------------------------------------------------------------------- #
# contract analysis
# ----------------------------------------------------------------------------- #


def _is_exported(name: str, member: Any) -> bool:
    if name.startswith("_"):
        return False
    if isinstance(member, (staticmethod, classmethod)):
        return True
    return inspect.isfunction(member)


def analyze_contract(cls: type) -> List[MethodDescriptor]:
    """
    Analyze every public method defined directly on *cls*, in definition
    order. Names starting with an underscore stay internal.
    """
    loc = _class_loc(cls)
    if getattr(cls, "__parameters__", ()) or getattr(cls, "__type_params__", ()):
        raise BindgenError("Contract type parameters are not supported", loc)
    out: List[MethodDescriptor] = []
    for name, member in vars(cls).items():
        if not _is_exported(name, member):
            continue
        out.append(analyze_method(member, owner=cls, name=name))
    log.debug("analyzed contract %s: %d method(s)", cls.__qualname__, len(out))
    return out


def _class_loc(cls: type) -> str:
    try:
        path = inspect.getsourcefile(cls) or "<unknown>"
        _, line = inspect.getsourcelines(cls)
    except (OSError, TypeError):
        return f"{getattr(cls, '__module__', '<unknown>')}.{cls.__qualname__}"
    return f"{path}:{line}"


__all__ = ["analyze_method", "analyze_contract", "render_literal", "source_loc"]
