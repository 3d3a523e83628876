"""
vm_bindgen.runtime.host — host backends answering the env queries.

Generated entry points talk to the host only through vm_bindgen.runtime.env,
which forwards to the installed `HostBackend`. A real chain integration
implements the protocol; `MockedHost` is the thread-safe in-memory backend
used for local runs and tests.

Backend API
-----------
- input() -> Optional[bytes]
- value_return(data: bytes) -> None
- attached_deposit() -> int
- current_account_id() / predecessor_account_id() / signer_account_id() -> str
- storage_read(key) -> Optional[bytes]; storage_write(key, value) -> bool
- storage_remove(key) -> bool; storage_has_key(key) -> bool
- promise_results_count() -> int; promise_result(index) -> PromiseResult
- log_str(message) -> None
- panic_str(message) -> NoReturn  (raises HostAbort)
- setup_panic_hook() -> None
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from ..config import load_config
from .context import VMContext
from .error import HostAbort
from .promise import PromiseResult

log = logging.getLogger(__name__)


@runtime_checkable
class HostBackend(Protocol):
    """Minimal interface the generated entry points rely on."""

    def input(self) -> Optional[bytes]: ...
    def value_return(self, data: bytes) -> None: ...
    def attached_deposit(self) -> int: ...
    def current_account_id(self) -> str: ...
    def predecessor_account_id(self) -> str: ...
    def signer_account_id(self) -> str: ...
    def storage_read(self, key: bytes) -> Optional[bytes]: ...
    def storage_write(self, key: bytes, value: bytes) -> bool: ...
    def storage_remove(self, key: bytes) -> bool: ...
    def storage_has_key(self, key: bytes) -> bool: ...
    def promise_results_count(self) -> int: ...
    def promise_result(self, index: int) -> PromiseResult: ...
    def log_str(self, message: str) -> None: ...
    def panic_str(self, message: str) -> None: ...
    def setup_panic_hook(self) -> None: ...


class MockedHost:
    """
    In-memory host for local runs and tests.

    Storage survives across calls on the same instance, so a test can run an
    init call, swap the context and run more calls against the same state.
    """

    def __init__(
        self,
        context: Optional[VMContext] = None,
        *,
        storage: Optional[Mapping[bytes, bytes]] = None,
        promise_results: Iterable[PromiseResult] = (),
        max_state_bytes: Optional[int] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._context = context or VMContext()
        self._storage: Dict[bytes, bytes] = dict(storage or {})
        self._promise_results: List[PromiseResult] = list(promise_results)
        self._max_value = max_state_bytes if max_state_bytes is not None else load_config().max_state_bytes
        self.return_value: Optional[bytes] = None
        self.logs: List[str] = []
        self.panic_hook_installed = False

    # ---- test helpers ---- #

    @property
    def context(self) -> VMContext:
        return self._context

    def set_context(self, context: VMContext) -> None:
        """Start a new call: new context, fresh return slot and logs."""
        with self._lock:
            self._context = context
            self.return_value = None
            self.logs = []
            self.panic_hook_installed = False

    def set_promise_results(self, results: Sequence[PromiseResult]) -> None:
        with self._lock:
            self._promise_results = list(results)

    @property
    def storage(self) -> Dict[bytes, bytes]:
        with self._lock:
            return dict(self._storage)

    # ---- call ---- #

    def input(self) -> Optional[bytes]:
        return self._context.input

    def value_return(self, data: bytes) -> None:
        with self._lock:
            self.return_value = bytes(data)

    def attached_deposit(self) -> int:
        return self._context.attached_deposit

    def current_account_id(self) -> str:
        return self._context.current_account_id

    def predecessor_account_id(self) -> str:
        return self._context.predecessor_account_id

    def signer_account_id(self) -> str:
        return self._context.signer_account_id

    def block_height(self) -> int:
        return self._context.block_height

    def block_timestamp(self) -> int:
        return self._context.block_timestamp

    # ---- storage ---- #

    def storage_read(self, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._storage.get(bytes(key))

    def storage_write(self, key: bytes, value: bytes) -> bool:
        if self._context.is_view:
            self.panic_str("ProhibitedInView: storage_write")
        if len(value) > self._max_value:
            self.panic_str(f"Value exceeds the maximum of {self._max_value} bytes")
        with self._lock:
            existed = bytes(key) in self._storage
            self._storage[bytes(key)] = bytes(value)
            return existed

    def storage_remove(self, key: bytes) -> bool:
        if self._context.is_view:
            self.panic_str("ProhibitedInView: storage_remove")
        with self._lock:
            return self._storage.pop(bytes(key), None) is not None

    def storage_has_key(self, key: bytes) -> bool:
        with self._lock:
            return bytes(key) in self._storage

    # ---- promises ---- #

    def promise_results_count(self) -> int:
        with self._lock:
            return len(self._promise_results)

    def promise_result(self, index: int) -> PromiseResult:
        with self._lock:
            if index < 0 or index >= len(self._promise_results):
                self.panic_str(f"Promise result index {index} is out of range")
            return self._promise_results[index]

    # ---- diagnostics ---- #

    def log_str(self, message: str) -> None:
        with self._lock:
            self.logs.append(message)
        log.debug("contract log: %s", message)

    def panic_str(self, message: str) -> None:
        raise HostAbort(message)

    def setup_panic_hook(self) -> None:
        self.panic_hook_installed = True


__all__ = ["HostBackend", "MockedHost"]
