"""
vm_bindgen.result — success/error sum type for fallible contract methods.

Contract methods marked with ``@handle_result`` return ``Result[T, E]``; the
generated entry point persists/returns ``Ok.value`` and aborts the invocation
with the error's message on ``Err``. The same type carries the outcome of a
``callback_result`` parameter (``Result[T, PromiseError]``).

    from vm_bindgen.result import Ok, Err, Result

    @handle_result
    def withdraw(self, amount: int) -> Result[int, str]:
        if amount > self.balance:
            return Err("insufficient balance")
        self.balance -= amount
        return Ok(self.balance)
"""

from __future__ import annotations

import enum
import types
import typing
from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        raise ValueError(f"called unwrap() on Err: {error_message(self.error)}")


Result = Union[Ok[T], Err[E]]


class PromiseError(str, enum.Enum):
    """Why a prior sub-call has no usable value."""

    NOT_READY = "not_ready"
    FAILED = "failed"


# ------------------------------ type inspection ------------------------------ #


def _is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    if origin is Union:
        return True
    union_type = getattr(types, "UnionType", None)
    return union_type is not None and origin is union_type


def _arm_origin(tp: Any) -> Any:
    if tp is Ok or tp is Err:
        return tp
    return typing.get_origin(tp)


def result_arms(tp: Any) -> Optional[Tuple[Any, Any]]:
    """
    Return ``(ok_type, err_type)`` when *tp* is structurally ``Result[T, E]``,
    i.e. a two-arm union of ``Ok[...]`` and ``Err[...]``; otherwise None.
    """
    if typing.get_origin(tp) is typing.Annotated:
        tp = typing.get_args(tp)[0]
    if not _is_union(tp):
        return None
    arms = typing.get_args(tp)
    if len(arms) != 2:
        return None
    ok_t: Any = None
    err_t: Any = None
    for arm in arms:
        origin = _arm_origin(arm)
        args = typing.get_args(arm)
        inner = args[0] if args else Any
        if origin is Ok and ok_t is None:
            ok_t = inner
        elif origin is Err and err_t is None:
            err_t = inner
        else:
            return None
    if ok_t is None or err_t is None:
        return None
    return ok_t, err_t


def is_unit_type(tp: Any) -> bool:
    """``None`` plays the role of the unit type."""
    return tp is None or tp is type(None)


def error_message(err: Any) -> str:
    """
    Abort reason for the error arm of a fallible return.

    Errors may define ``panic_message()``; strings are used verbatim; enums use
    their value; anything else falls back to ``str()``.
    """
    fn = getattr(err, "panic_message", None)
    if callable(fn):
        return str(fn())
    if isinstance(err, str):
        return err
    if isinstance(err, enum.Enum):
        return str(err.value)
    return str(err)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "PromiseError",
    "result_arms",
    "is_unit_type",
    "error_message",
]
