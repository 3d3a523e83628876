"""
vm_bindgen.runtime — host façade and entry-program interpreter.

Submodules:
  - error     : VmError / HostAbort
  - context   : VMContext (per-call environment for the local host)
  - promise   : PromiseResult / PromiseStatus
  - host      : HostBackend protocol and the in-memory MockedHost
  - env       : contract-facing host functions, state helpers, testing_env
  - engine    : executes EntryProgram instruction lists
  - dispatch  : call a contract's exported entry point by name

Only the dependency-free pieces are imported here; import env/engine/dispatch
explicitly.
"""

from .context import ContextError, VMContext
from .error import HostAbort, VmError
from .host import HostBackend, MockedHost
from .promise import PromiseResult, PromiseStatus

__all__ = [
    "ContextError",
    "VMContext",
    "HostAbort",
    "VmError",
    "HostBackend",
    "MockedHost",
    "PromiseResult",
    "PromiseStatus",
]
