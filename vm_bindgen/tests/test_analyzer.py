from dataclasses import dataclass
from typing import Annotated, Dict, Generic, List, TypeVar

import msgspec
import pytest

from vm_bindgen import (BindgenError, PromiseError, Result, callback, callback_result,
                        callback_vec, contract, handle_result, init, payable, private,
                        property_attr, serializer, view)
from vm_bindgen.compiler import (ArgumentRole, BindingKind, MethodKind, ReceiverMode,
                                 analyze_contract, analyze_method)
from vm_bindgen.compiler.analyzer import render_literal
from vm_bindgen.examples.counter import Counter
from vm_bindgen.examples.escrow import Escrow, Receipt
from vm_bindgen.examples.status_message import StatusMessage
from vm_bindgen.result import result_arms
from vm_bindgen.serialization import SerializationFormat

T = TypeVar("T")


def _desc(cls, name):
    return cls.__bindgen__.descriptors[name]


# --- kinds & receivers --------------------------------------------------------


def test_exported_methods_in_definition_order():
    assert list(Counter.__bindgen__.descriptors) == ["new", "get", "increment", "reset", "describe"]


@pytest.mark.parametrize(
    "cls,name,kind,receiver",
    [
        (Counter, "new", MethodKind.INIT, ReceiverMode.NONE),
        (Counter, "get", MethodKind.VIEW, ReceiverMode.SHARED),
        (Counter, "increment", MethodKind.REGULAR, ReceiverMode.MUTABLE),
        (Counter, "describe", MethodKind.VIEW, ReceiverMode.NONE),
        (Escrow, "reset", MethodKind.INIT_IGNORE_STATE, ReceiverMode.CLASS),
        (Escrow, "on_balances", MethodKind.REGULAR, ReceiverMode.MUTABLE),
    ],
)
def test_kind_and_receiver(cls, name, kind, receiver):
    d = _desc(cls, name)
    assert d.kind is kind
    assert d.receiver is receiver


def test_underscore_methods_stay_internal():
    @contract
    @dataclass
    class Hidden:
        def visible(self) -> None:
            pass

        def _helper(self) -> int:
            return 1

    assert list(Hidden.__bindgen__.descriptors) == ["visible"]


def test_flags_and_serializers():
    d = _desc(StatusMessage, "set_status")
    assert d.is_payable and not d.is_private
    assert d.input_serializer is SerializationFormat.JSON

    d = _desc(StatusMessage, "count")
    assert d.result_serializer is SerializationFormat.BINARY
    assert d.input_serializer is SerializationFormat.JSON

    d = _desc(Escrow, "on_price")
    assert d.is_private
    assert d.input_serializer is SerializationFormat.BINARY


# --- parameters ---------------------------------------------------------------


def test_callback_indices_and_roles():
    d = _desc(Escrow, "on_price")
    roles = [(a.name, a.role, a.callback_index, a.serializer) for a in d.args]
    assert roles == [
        ("price", ArgumentRole.CALLBACK_SINGLE, 0, SerializationFormat.JSON),
        ("fee", ArgumentRole.CALLBACK_SINGLE, 1, SerializationFormat.BINARY),
        ("memo", ArgumentRole.PLAIN, None, SerializationFormat.BINARY),
    ]
    assert [a.name for a in d.plain_args()] == ["memo"]


def test_callback_result_and_vector_types():
    d = _desc(Escrow, "on_transfer")
    (arg,) = d.args
    assert arg.role is ArgumentRole.CALLBACK_FALLIBLE
    assert arg.ok_type.__name__ == "Receipt"

    d = _desc(Escrow, "on_balances")
    assert d.vector_arg().item_type is int
    assert not d.has_input


def test_parameter_docs_from_meta():
    d = _desc(StatusMessage, "set_status")
    assert d.args[0].doc == "New status text."


def test_keyword_only_binding():
    @contract
    @dataclass
    class Transfer:
        def send(self, to: str, *, amount: int) -> None:
            pass

    kinds = [a.binding for a in _desc(Transfer, "send").args]
    assert kinds == [BindingKind.POSITIONAL_OR_KEYWORD, BindingKind.KEYWORD_ONLY]


def test_property_attr_keeps_source_order():
    @contract
    @dataclass
    class Props:
        @property_attr("level", 3)
        @property_attr("audited", True)
        def run(self) -> None:
            pass

    assert _desc(Props, "run").properties == (("level", "integer: 3"), ("audited", "bool: true"))


def test_render_literal():
    assert render_literal("x") == "x"
    assert render_literal(7) == "integer: 7"
    assert render_literal(False) == "bool: false"
    assert render_literal(b"\x01\x02") == "base64: AQI="


def test_fallible_return_types():
    d = _desc(Escrow, "release")
    assert d.returns_fallible
    assert d.ok_type is int
    assert d.output_type is int


# --- rejected declarations ----------------------------------------------------


def _expect_error(match, build):
    with pytest.raises(BindgenError, match=match):
        build()


def test_rejects_init_with_self():
    def build():
        @contract
        @dataclass
        class Bad:
            @init
            def new(self) -> "Bad":
                return Bad()

    _expect_error("Init methods can't have `self` attribute", build)


def test_rejects_init_returning_other_type():
    def build():
        @contract
        @dataclass
        class Bad:
            @init
            @staticmethod
            def new() -> int:
                return 1

    _expect_error(r"Init methods must return the contract state \(Bad\)", build)


def test_rejects_payable_view():
    def build():
        @contract
        @dataclass
        class Bad:
            @view
            @payable
            def peek(self) -> int:
                return 0

    _expect_error("Payable method must be mutable", build)


def test_rejects_result_without_handle_result():
    def build():
        @contract
        @dataclass
        class Bad:
            def f(self) -> Result[int, str]:
                raise AssertionError

    _expect_error("Serializing Result", build)


def test_rejects_handle_result_without_result():
    def build():
        @contract
        @dataclass
        class Bad:
            @handle_result
            def f(self) -> int:
                return 0

    _expect_error("should return Result", build)


def test_rejects_bad_callback_result_type():
    def build():
        @contract
        @dataclass
        class Bad:
            @private
            def cb(self, x: Annotated[int, callback_result]) -> None:
                pass

    _expect_error(r"Result\[T, PromiseError\]", build)


def test_rejects_two_vectors_and_non_list_vector():
    def two():
        @contract
        @dataclass
        class Bad:
            def cb(self, a: Annotated[List[int], callback_vec], b: Annotated[List[int], callback_vec]) -> None:
                pass

    def not_list():
        @contract
        @dataclass
        class Bad:
            def cb(self, a: Annotated[Dict[str, int], callback_vec]) -> None:
                pass

    _expect_error("Only one parameter", two)
    _expect_error("should have type List", not_list)


def test_rejects_two_role_markers():
    def build():
        @contract
        @dataclass
        class Bad:
            def cb(self, a: Annotated[int, callback, callback_vec]) -> None:
                pass

    _expect_error("more than one of", build)


def test_rejects_variadics_and_missing_annotations():
    def variadic():
        @contract
        @dataclass
        class Bad:
            def f(self, *items: int) -> None:
                pass

    def unannotated():
        @contract
        @dataclass
        class Bad:
            def f(self, x) -> None:
                pass

    _expect_error("Variadic parameter `items`", variadic)
    _expect_error("Parameter `x` needs a type annotation", unannotated)


def test_rejects_type_parameters():
    def on_method():
        @contract
        @dataclass
        class Bad:
            def f(self, x: T) -> None:
                pass

    def on_class():
        @dataclass
        class Box(Generic[T]):
            item: int = 0

        contract(Box)

    _expect_error("Methods with type parameters", on_method)
    _expect_error("Contract type parameters", on_class)


def test_rejects_plain_classes():
    class Plain:
        def f(self) -> None:
            pass

    _expect_error("must be a dataclass or a msgspec.Struct", lambda: contract(Plain))


def test_error_carries_location():
    @dataclass
    class Owner:
        pass

    @view
    @payable
    def peek(self) -> int:
        return 0

    with pytest.raises(BindgenError) as ei:
        analyze_method(peek, owner=Owner)
    assert ei.value.loc.endswith(str(peek.__code__.co_firstlineno))
    assert " @ " in str(ei.value)


def test_msgspec_struct_contract():
    @contract
    class Ledger(msgspec.Struct):
        total: int = 0

        def add(self, n: int) -> int:
            self.total += n
            return self.total

    assert [d.ident for d in analyze_contract(Ledger)] == ["add"]


def test_serializer_marker_validation():
    def build():
        @contract
        @dataclass
        class Bad:
            @serializer("xml")
            def f(self, a: int) -> None:
                pass

    _expect_error("Unsupported serializer", build)


def test_promise_error_is_callback_error_type():
    d = _desc(Escrow, "on_transfer")
    assert result_arms(d.args[0].wire_type) == (Receipt, PromiseError)
