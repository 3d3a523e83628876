"""
vm_bindgen.markers — declarative markers for contract methods and parameters.

Method markers are decorators; they only record metadata on the function and
return it unchanged (they may be stacked with @staticmethod/@classmethod in
any order). Parameter markers are placed inside ``typing.Annotated``:

    from typing import Annotated, List

    @contract
    @dataclass
    class Escrow:
        owner: str = ""

        @init
        @staticmethod
        def new(owner: str) -> "Escrow": ...

        @payable
        def deposit(self) -> None: ...

        @private
        @serializer("binary")
        def on_lookup(
            self,
            balance: Annotated[int, callback],
            memo: Annotated[Result[None, PromiseError], callback_result],
        ) -> None: ...

        @view
        @property_attr("category", "accounting")
        def get_owner(self) -> str: ...

The markers are consumed by vm_bindgen.compiler.analyzer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Tuple, TypeVar, overload

F = TypeVar("F")

MARKERS_ATTR = "__bindgen_markers__"


@dataclass
class MethodMarkers:
    """Markers collected on one method (mutable while decorators run)."""

    init: Optional[str] = None  # "init" | "init_ignore_state"
    view: bool = False
    payable: bool = False
    private: bool = False
    handle_result: bool = False
    input_serializer: Optional[str] = None
    result_serializer: Optional[str] = None
    properties: List[Tuple[Any, Any]] = field(default_factory=list)


def _target(obj: Any) -> Any:
    """The plain function behind a staticmethod/classmethod wrapper."""
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    return obj


def get_markers(obj: Any) -> Optional[MethodMarkers]:
    return getattr(_target(obj), MARKERS_ATTR, None)


def _markers_for(obj: Any) -> MethodMarkers:
    fn = _target(obj)
    if not callable(fn):
        raise TypeError(f"bindgen markers apply to functions, got {type(obj).__name__}")
    m = getattr(fn, MARKERS_ATTR, None)
    if m is None:
        m = MethodMarkers()
        setattr(fn, MARKERS_ATTR, m)
    return m


# ------------------------------ method markers ------------------------------- #


@overload
def init(fn: F) -> F: ...
@overload
def init(*, ignore_state: bool = False) -> Callable[[F], F]: ...

def init(fn: Any = None, *, ignore_state: bool = False) -> Any:
    """
    Mark a constructor. ``@init`` fails at invocation when contract state
    already exists; ``@init(ignore_state=True)`` overwrites it unconditionally.
    """

    def deco(f: Any) -> Any:
        _markers_for(f).init = "init_ignore_state" if ignore_state else "init"
        return f

    if fn is None:
        return deco
    return deco(fn)


def view(fn: F) -> F:
    """Read-only method: no deposit check, state is never written back."""
    _markers_for(fn).view = True
    return fn


def payable(fn: F) -> F:
    """Allow an attached deposit."""
    _markers_for(fn).payable = True
    return fn


def private(fn: F) -> F:
    """Only the contract's own account may call this method (callbacks)."""
    _markers_for(fn).private = True
    return fn


def handle_result(fn: F) -> F:
    """The method returns ``Result[T, E]``; ``Err`` aborts the invocation."""
    _markers_for(fn).handle_result = True
    return fn


def serializer(fmt: str) -> Callable[[F], F]:
    """Wire format of the method input: ``"json"`` (default) or ``"binary"``."""

    def deco(f: F) -> F:
        _markers_for(f).input_serializer = str(fmt)
        return f

    return deco


def result_serializer(fmt: str) -> Callable[[F], F]:
    """Wire format of the method return value: ``"json"`` or ``"binary"``."""

    def deco(f: F) -> F:
        _markers_for(f).result_serializer = str(fmt)
        return f

    return deco


def property_attr(key: Any, value: Any) -> Callable[[F], F]:
    """
    Attach a descriptive key/value pair, surfaced in generated docs only.
    Stacked markers keep their top-to-bottom source order.
    """

    def deco(f: F) -> F:
        _markers_for(f).properties.insert(0, (key, value))
        return f

    return deco


# ----------------------------- parameter markers ----------------------------- #


@dataclass(frozen=True)
class ParamMarker:
    """
    Role marker for a parameter, used as ``Annotated[T, callback]``.

    Calling the marker returns a copy with a per-parameter serializer:
    ``Annotated[T, callback(serializer="binary")]``.
    """

    role: str  # "callback" | "callback_result" | "callback_vec"
    serializer: Optional[str] = None

    def __call__(self, *, serializer: Optional[str] = None) -> "ParamMarker":
        return replace(self, serializer=serializer)

    def __repr__(self) -> str:
        if self.serializer:
            return f"{self.role}(serializer={self.serializer!r})"
        return self.role


callback = ParamMarker("callback")
callback_result = ParamMarker("callback_result")
callback_vec = ParamMarker("callback_vec")


__all__ = [
    "MARKERS_ATTR",
    "MethodMarkers",
    "ParamMarker",
    "get_markers",
    "init",
    "view",
    "payable",
    "private",
    "handle_result",
    "serializer",
    "result_serializer",
    "property_attr",
    "callback",
    "callback_result",
    "callback_vec",
]
