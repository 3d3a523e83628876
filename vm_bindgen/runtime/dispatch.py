"""
Host-side dispatch: resolve an exported method name to its entry point.

    with env.testing_env(VMContext(input=b'{"message": "hi"}')) as host:
        dispatch.call(StatusMessage, "set_status")
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from .error import HostAbort, VmError

log = logging.getLogger(__name__)


def _bindings(contract: Any) -> Any:
    b = getattr(contract, "__bindgen__", None)
    if b is None:
        raise VmError(f"{getattr(contract, '__name__', contract)!s} is not a @contract class")
    return b


def exports(contract: Any) -> Dict[str, Callable[[], None]]:
    """Exported entry points of *contract*, keyed by method name."""
    return dict(_bindings(contract).entry_points)


def exported_names(contract: Any) -> List[str]:
    return list(_bindings(contract).entry_points)


def resolve(contract: Any, method: str) -> Callable[[], None]:
    entry = _bindings(contract).entry_points.get(method)
    if entry is None:
        raise HostAbort(f"Method {method} not found", method=method)
    return entry


def call(contract: Any, method: str) -> None:
    """Run the entry point for *method* against the installed host."""
    log.debug("dispatch %s.%s", getattr(contract, "__name__", contract), method)
    resolve(contract, method)()


__all__ = ["call", "exports", "exported_names", "resolve"]
