import inspect
from dataclasses import dataclass

import msgspec
import pytest

from vm_bindgen import U128, BindgenError, CodecError, bindings_of, contract, proxy_for, view
from vm_bindgen.compiler.marshaller import ContractProxy, PendingContractTx, decode_return
from vm_bindgen.examples.counter import Counter
from vm_bindgen.examples.escrow import Escrow
from vm_bindgen.examples.status_message import StatusMessage
from vm_bindgen.serialization import SerializationFormat


@contract
@dataclass
class Wallet:
    def send(self, to: str, *, amount: U128, memo: str = "") -> None:
        pass


def test_proxy_class_shape():
    proxy_cls = bindings_of(Counter).proxy
    assert proxy_cls.__name__ == "CounterContract"
    assert issubclass(proxy_cls, ContractProxy)
    assert {"new", "get", "increment", "reset", "describe"} <= set(vars(proxy_cls))
    p = proxy_cls.with_account("counter.near")
    assert repr(p) == "CounterContract('counter.near')"


def test_marshal_signature_lists_plain_params():
    sig = inspect.signature(bindings_of(Counter).proxy.increment)
    assert list(sig.parameters) == ["self", "by"]
    assert sig.return_annotation is PendingContractTx

    sig = inspect.signature(bindings_of(Escrow).proxy.on_price)
    assert list(sig.parameters) == ["self", "memo"]


def test_json_call():
    tx = proxy_for(Counter, "counter.near").increment(5)
    assert tx.receiver_id == "counter.near"
    assert tx.method == "increment"
    assert tx.args == b'{"by":5}'
    assert tx.args_json() == {"by": 5}
    assert not tx.is_view
    assert tx.fmt is SerializationFormat.JSON

    assert proxy_for(Counter, "counter.near").increment().args == b'{"by":1}'


def test_view_call_flag_and_empty_args():
    tx = proxy_for(Counter, "counter.near").get()
    assert tx.is_view
    assert tx.args == b""
    assert tx.args_json() == {}


def test_binary_call():
    tx = proxy_for(Escrow, "escrow.near").on_price(memo="hello")
    assert tx.fmt is SerializationFormat.BINARY
    assert msgspec.msgpack.decode(tx.args) == ["hello"]
    with pytest.raises(CodecError):
        tx.args_json()


def test_values_are_coerced_to_parameter_types():
    tx = proxy_for(Escrow, "escrow.near").lock(340282366920938463463374607431768211455)
    assert tx.args_json() == {"amount": "340282366920938463463374607431768211455"}

    tx = proxy_for(Escrow, "escrow.near").lock(U128(7))
    assert tx.args == b'{"amount":"7"}'


def test_keyword_only_parameters():
    proxy = proxy_for(Wallet, "wallet.near")
    tx = proxy.send("dave.near", amount=3)
    assert tx.args_json() == {"to": "dave.near", "amount": "3", "memo": ""}
    with pytest.raises(TypeError):
        proxy.send("dave.near", 3)


def test_method_named_like_the_target_account():
    @contract
    @dataclass
    class Named:
        @view
        def account_id(self) -> str:
            return "named"

    proxy = proxy_for(Named, "named.near")
    assert repr(proxy) == "NamedContract('named.near')"
    tx = proxy.account_id()
    assert tx.receiver_id == "named.near"
    assert tx.method == "account_id"


def test_method_shadowing_proxy_member_is_rejected():
    with pytest.raises(BindgenError, match="Method with_account clashes with a ContractProxy member"):
        @contract
        @dataclass
        class Shadow:
            def with_account(self, account: str) -> None:
                pass


def test_bad_values_raise_codec_error():
    with pytest.raises(CodecError):
        proxy_for(Counter, "counter.near").increment("many")


def test_to_dict():
    tx = proxy_for(Counter, "counter.near").increment(1)
    assert tx.to_dict() == {
        "receiver_id": "counter.near",
        "method": "increment",
        "args": "0x" + b'{"by":1}'.hex(),
        "is_view": False,
        "fmt": "json",
    }


def test_decode_return():
    descs = bindings_of(StatusMessage).descriptors
    assert decode_return(descs["get_status"], b'"hi"') == "hi"
    assert decode_return(descs["get_status"], b"null") is None
    assert decode_return(descs["count"], msgspec.msgpack.encode(3)) == 3
    assert decode_return(descs["set_status"], b"") is None
    with pytest.raises(CodecError):
        decode_return(descs["count"], b"\xc1")
