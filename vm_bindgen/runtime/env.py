"""
vm_bindgen.runtime.env — contract-facing host functions.

Entry points generated by vm_bindgen (and contract code itself) reach the
host only through this module. The module forwards to a process-wide
`HostBackend`; by default that is an in-memory MockedHost.

Public API
----------
- input() -> Optional[bytes]
- value_return(data) -> None
- attached_deposit() -> int
- current_account_id() / predecessor_account_id() / signer_account_id() -> str
- storage_read / storage_write / storage_remove / storage_has_key
- promise_results_count() -> int ; promise_result(index) -> PromiseResult
- log_str(message) -> None ; panic_str(message) -> NoReturn
- setup_panic_hook() -> None
- state_read(cls) / state_write(obj) / state_exists()

Host API
--------
- set_host(host) / reset_host() / get_host()
- testing_env(...)  context manager installing a fresh MockedHost

Contract state lives under the single storage key b"STATE", serialized with
msgpack. The contract class must be a dataclass or a msgspec Struct.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Iterable, Iterator, Mapping, NoReturn, Optional, Type, TypeVar

import msgspec

from ..serialization import SerializationFormat, decode, encode
from .context import VMContext
from .error import HostAbort, VmError
from .host import HostBackend, MockedHost
from .promise import PromiseResult

log = logging.getLogger(__name__)

STATE_KEY = b"STATE"

S = TypeVar("S")

_REQUIRED = (
    "input",
    "value_return",
    "attached_deposit",
    "current_account_id",
    "predecessor_account_id",
    "signer_account_id",
    "storage_read",
    "storage_write",
    "storage_remove",
    "storage_has_key",
    "promise_results_count",
    "promise_result",
    "log_str",
    "panic_str",
    "setup_panic_hook",
)

_host: HostBackend = MockedHost()


# ------------------------------- host API -------------------------------- #


def set_host(host: HostBackend) -> None:
    """Install a host backend (chain integration or MockedHost)."""
    global _host
    for attr in _REQUIRED:
        if not callable(getattr(host, attr, None)):
            raise VmError(f"host missing method: {attr}")
    _host = host


def reset_host() -> None:
    """Restore a fresh in-memory host (useful for tests)."""
    set_host(MockedHost())


def get_host() -> HostBackend:
    return _host


@contextlib.contextmanager
def testing_env(
    context: Optional[VMContext] = None,
    *,
    storage: Optional[Mapping[bytes, bytes]] = None,
    promise_results: Iterable[PromiseResult] = (),
    max_state_bytes: Optional[int] = None,
) -> Iterator[MockedHost]:
    """
    Install a MockedHost for the duration of the block and restore the
    previous host afterwards.

        with testing_env(VMContext(input=b'{"x": 1}')) as host:
            dispatch.call(Counter, "add")
            assert host.return_value == b"1"
    """
    global _host
    prev = _host
    host = MockedHost(
        context,
        storage=storage,
        promise_results=promise_results,
        max_state_bytes=max_state_bytes,
    )
    set_host(host)
    try:
        yield host
    finally:
        _host = prev


# ------------------------------ call data -------------------------------- #


def input() -> Optional[bytes]:  # noqa: A001 - mirrors the host function name
    return _host.input()


def value_return(data: bytes) -> None:
    _host.value_return(bytes(data))


def attached_deposit() -> int:
    return _host.attached_deposit()


def current_account_id() -> str:
    return _host.current_account_id()


def predecessor_account_id() -> str:
    return _host.predecessor_account_id()


def signer_account_id() -> str:
    return _host.signer_account_id()


# ------------------------------- storage --------------------------------- #


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise VmError("storage key must be bytes")
    return bytes(key)


def storage_read(key: bytes) -> Optional[bytes]:
    return _host.storage_read(_check_key(key))


def storage_write(key: bytes, value: bytes) -> bool:
    """Write *value*; returns True when an existing value was replaced."""
    if not isinstance(value, (bytes, bytearray)):
        raise VmError("storage value must be bytes")
    return _host.storage_write(_check_key(key), bytes(value))


def storage_remove(key: bytes) -> bool:
    return _host.storage_remove(_check_key(key))


def storage_has_key(key: bytes) -> bool:
    return _host.storage_has_key(_check_key(key))


# ------------------------------- promises -------------------------------- #


def promise_results_count() -> int:
    return _host.promise_results_count()


def promise_result(index: int) -> PromiseResult:
    return _host.promise_result(index)


# ----------------------------- diagnostics ------------------------------- #


def log_str(message: str) -> None:
    _host.log_str(str(message))


def panic_str(message: str) -> NoReturn:
    """Abort the current invocation with *message*."""
    _host.panic_str(str(message))
    # A conforming host never returns from panic_str.
    raise HostAbort(message)


def setup_panic_hook() -> None:
    _host.setup_panic_hook()


# ---------------------------- contract state ----------------------------- #


def state_exists() -> bool:
    return storage_has_key(STATE_KEY)


def state_read(cls: Type[S]) -> Optional[S]:
    """Load the contract state, or None when it was never written."""
    raw = storage_read(STATE_KEY)
    if raw is None:
        return None
    try:
        return decode(raw, cls, SerializationFormat.BINARY)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        log.debug("state decode failed for %s: %s", getattr(cls, "__name__", cls), e)
        panic_str("Cannot deserialize the contract state.")


def state_write(state: Any) -> None:
    try:
        raw = encode(state, SerializationFormat.BINARY)
    except (TypeError, msgspec.EncodeError) as e:
        log.debug("state encode failed for %s: %s", type(state).__name__, e)
        panic_str("Cannot serialize the contract state.")
    storage_write(STATE_KEY, raw)


__all__ = [
    "STATE_KEY",
    "set_host",
    "reset_host",
    "get_host",
    "testing_env",
    "input",
    "value_return",
    "attached_deposit",
    "current_account_id",
    "predecessor_account_id",
    "signer_account_id",
    "storage_read",
    "storage_write",
    "storage_remove",
    "storage_has_key",
    "promise_results_count",
    "promise_result",
    "log_str",
    "panic_str",
    "setup_panic_hook",
    "state_exists",
    "state_read",
    "state_write",
]
