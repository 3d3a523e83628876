from __future__ import annotations

import msgspec
import pytest

from vm_bindgen import U128, CodecError, HostAbort, proxy_for
from vm_bindgen.compiler.marshaller import decode_return
from vm_bindgen.examples.counter import Counter
from vm_bindgen.examples.escrow import Escrow
from vm_bindgen.examples.status_message import StatusMessage
from vm_bindgen.runtime import MockedHost, PromiseResult, VMContext
from vm_bindgen.runtime import dispatch


_CONTRACTS = {"counter.near": Counter, "status.near": StatusMessage, "escrow.near": Escrow}


def _send(host: MockedHost, tx, **ctx):
    """Deliver a client-built call to the in-memory host."""
    host.set_context(VMContext(input=tx.args or None, **ctx))
    dispatch.call(_CONTRACTS[tx.receiver_id], tx.method)
    return host.return_value


def test_counter_lifecycle(host):
    counter = proxy_for(Counter, "counter.near")
    _send(host, counter.new(10))
    assert _send(host, counter.increment(5)) == b"15"
    assert _send(host, counter.increment()) == b"16"
    assert _send(host, counter.get(), is_view=True) == b"16"
    assert _send(host, counter.describe()) == b'"counter v1"'

    with pytest.raises(HostAbort, match="^counter: only the owner can reset$"):
        _send(host, counter.reset(), predecessor_account_id="carol.near")
    _send(host, counter.reset())
    assert _send(host, counter.get()) == b"0"


def test_status_messages(host):
    status = proxy_for(StatusMessage, "status.near")
    _send(host, status.set_status("hello"), attached_deposit=1)
    _send(host, status.set_status("from carol"), predecessor_account_id="carol.near")

    desc = StatusMessage.__bindgen__.descriptors["get_status"]
    assert decode_return(desc, _send(host, status.get_status("bob.near"))) == "hello"
    assert decode_return(desc, _send(host, status.get_status("dave.near"))) is None
    assert msgspec.msgpack.decode(_send(host, status.count())) == 2

    with pytest.raises(CodecError):
        status.set_status("x" * 281)


def test_escrow_flow(host):
    escrow = proxy_for(Escrow, "escrow.near")
    assert _send(host, escrow.lock(U128(100)), attached_deposit=5) == b'"105"'
    assert _send(host, escrow.release(5)) == b"100"
    with pytest.raises(HostAbort, match="^amount must be positive$"):
        _send(host, escrow.release(0))

    self_call = {"predecessor_account_id": "escrow.near", "current_account_id": "escrow.near"}
    host.set_promise_results([PromiseResult.successful(b"3"), PromiseResult.successful(b"4")])
    assert _send(host, escrow.on_balances(), **self_call) == b"7"

    host.set_promise_results([PromiseResult.not_ready()])
    assert _send(host, escrow.on_transfer(), **self_call) == b"false"

    locked = Escrow.__bindgen__.descriptors["get_locked"]
    assert decode_return(locked, _send(host, escrow.get_locked())) == 100
