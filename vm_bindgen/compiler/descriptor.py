"""
descriptor.py — normalized, immutable description of one contract method.

A MethodDescriptor is produced by the analyzer at class-definition time and
consumed by every later stage (input models, entry programs, client stubs,
OpenAPI). It is pure metadata: never persisted, never mutated.

MethodKind, ArgumentRole and ReceiverMode are closed enums; every consumer
matches all of their members explicitly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import msgspec

from ..serialization import SerializationFormat


class MethodKind(str, enum.Enum):
    REGULAR = "regular"
    VIEW = "view"
    INIT = "init"
    INIT_IGNORE_STATE = "init_ignore_state"

    @property
    def is_init(self) -> bool:
        return self in (MethodKind.INIT, MethodKind.INIT_IGNORE_STATE)

    @property
    def http_verb(self) -> str:
        # View calls are the read verb; everything else changes state.
        return "get" if self is MethodKind.VIEW else "post"


class ArgumentRole(str, enum.Enum):
    PLAIN = "plain"
    CALLBACK_SINGLE = "callback"
    CALLBACK_FALLIBLE = "callback_result"
    CALLBACK_VECTOR = "callback_vec"


class BindingKind(str, enum.Enum):
    """How the argument is handed to the method when it is invoked."""

    POSITIONAL_ONLY = "positional_only"
    POSITIONAL_OR_KEYWORD = "positional_or_keyword"
    KEYWORD_ONLY = "keyword_only"


class ReceiverMode(str, enum.Enum):
    NONE = "none"        # @staticmethod
    CLASS = "class"      # @classmethod
    SHARED = "shared"    # self, state read but never written back
    MUTABLE = "mutable"  # self, state written back after the call


@dataclass(frozen=True)
class ArgInfo:
    name: str
    annotation: Any
    wire_type: Any
    role: ArgumentRole
    binding: BindingKind
    serializer: SerializationFormat
    doc: str = ""
    callback_index: Optional[int] = None
    ok_type: Any = None      # CALLBACK_FALLIBLE: T in Result[T, PromiseError]
    item_type: Any = None    # CALLBACK_VECTOR: T in List[T]
    default: Any = field(default=msgspec.NODEFAULT, compare=False)

    @property
    def is_plain(self) -> bool:
        return self.role is ArgumentRole.PLAIN

    @property
    def has_default(self) -> bool:
        return self.default is not msgspec.NODEFAULT


@dataclass(frozen=True)
class MethodDescriptor:
    ident: str
    owner: str
    args: Tuple[ArgInfo, ...]
    kind: MethodKind
    receiver: ReceiverMode
    input_serializer: SerializationFormat = SerializationFormat.JSON
    result_serializer: SerializationFormat = SerializationFormat.JSON
    is_payable: bool = False
    is_private: bool = False
    returns_fallible: bool = False
    returns: Any = None          # declared return annotation; None = no return
    ok_type: Any = None          # returns_fallible: T in Result[T, E]
    err_type: Any = None
    docs: str = ""
    properties: Tuple[Tuple[str, str], ...] = ()
    loc: str = ""
    func: Optional[Callable[..., Any]] = field(default=None, compare=False, repr=False)
    input_models: Dict[Any, Any] = field(default_factory=dict, compare=False, repr=False)

    # ---- argument views ---- #

    def plain_args(self) -> List[ArgInfo]:
        return [a for a in self.args if a.role is ArgumentRole.PLAIN]

    def callback_args(self) -> List[ArgInfo]:
        """Single and fallible callbacks in ascending callback index order."""
        cbs = [
            a
            for a in self.args
            if a.role in (ArgumentRole.CALLBACK_SINGLE, ArgumentRole.CALLBACK_FALLIBLE)
        ]
        return sorted(cbs, key=lambda a: a.callback_index or 0)

    def vector_arg(self) -> Optional[ArgInfo]:
        for a in self.args:
            if a.role is ArgumentRole.CALLBACK_VECTOR:
                return a
        return None

    # ---- shape ---- #

    @property
    def has_input(self) -> bool:
        return any(a.role is ArgumentRole.PLAIN for a in self.args)

    @property
    def has_return(self) -> bool:
        return self.returns is not None

    @property
    def emits_output(self) -> bool:
        """Init methods return the new state; it is persisted, not emitted."""
        return self.has_return and not self.kind.is_init

    @property
    def output_type(self) -> Any:
        """Type of the emitted value (the Ok arm for fallible returns)."""
        if not self.emits_output:
            return None
        return self.ok_type if self.returns_fallible else self.returns

    @property
    def is_view(self) -> bool:
        return self.kind is MethodKind.VIEW

    @property
    def http_verb(self) -> str:
        return self.kind.http_verb

    def derived_properties(self) -> List[Tuple[str, str]]:
        """
        Human-readable flags for docs: init / payable / private, followed by
        the custom property_attr pairs.
        """
        props: List[Tuple[str, str]] = []
        if self.kind is MethodKind.INIT:
            props.append(("init", "✓"))
        elif self.kind is MethodKind.INIT_IGNORE_STATE:
            props.append(("init", "✓ (ignore state)"))
        if self.kind is not MethodKind.VIEW:
            props.append(("payable", "✓" if self.is_payable else "✕"))
        if self.is_private:
            props.append(("private", "✓"))
        props.extend(self.properties)
        return props


__all__ = [
    "MethodKind",
    "ArgumentRole",
    "BindingKind",
    "ReceiverMode",
    "ArgInfo",
    "MethodDescriptor",
]
