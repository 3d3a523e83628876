from __future__ import annotations

from typing import Any, Iterator, Optional, Sequence

import msgspec
import pytest

from vm_bindgen.config import load_config
from vm_bindgen.runtime import MockedHost, PromiseResult, VMContext
from vm_bindgen.runtime import dispatch, env


@pytest.fixture
def host() -> Iterator[MockedHost]:
    with env.testing_env() as h:
        yield h


@pytest.fixture
def invoke(host: MockedHost):
    """
    Run one exported method against the shared in-memory host.

    `args` is JSON-encoded; pass `raw` for any other payload (or None for no
    input at all). Returns the bytes handed to value_return, if any.
    """

    def _invoke(
        contract: Any,
        method: str,
        args: Any = None,
        *,
        raw: Optional[bytes] = None,
        deposit: int = 0,
        predecessor: str = "bob.near",
        results: Sequence[PromiseResult] = (),
        is_view: bool = False,
    ) -> Optional[bytes]:
        data = raw if raw is not None else (None if args is None else msgspec.json.encode(args))
        host.set_context(VMContext(
            input=data,
            attached_deposit=deposit,
            predecessor_account_id=predecessor,
            is_view=is_view,
        ))
        host.set_promise_results(results)
        dispatch.call(contract, method)
        return host.return_value

    return _invoke


@pytest.fixture
def fresh_config() -> Iterator[None]:
    load_config.cache_clear()
    yield
    load_config.cache_clear()
