"""
Error types for vm_bindgen.

Three families, matching when they can occur:

* BindgenError      — class-definition time: a contract method declaration is
                      malformed or unsupported. Never degraded into a warning.
* HostAbort         — invocation time: raised inside a generated entry point
                      (access, deposit, decode, callback, init checks).
* SchemaError       — aggregation time: the OpenAPI generator refuses to merge
                      (e.g. DuplicatePathError).

The runtime classes live in vm_bindgen.runtime.error and are re-exported here.
"""

from __future__ import annotations

from typing import Any, Optional

from vm_bindgen.runtime.error import HostAbort, VmError


class BindgenError(Exception):
    """Raised for malformed or unsupported contract method declarations."""

    def __init__(self, message: str, loc: Any = None):
        self.loc = loc
        self.reason = message
        if loc is not None:
            msg = f"{message} @ {loc}"
        else:
            msg = message
        super().__init__(msg)


class SchemaError(Exception):
    """Raised when the schema document cannot be assembled."""


class DuplicatePathError(SchemaError):
    """Two methods normalize to the same OpenAPI path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"repeated path: {path}")


class CodecError(ValueError):
    """Serialization failure outside an entry program (client side, tools)."""

    def __init__(self, message: str, *, fmt: Optional[str] = None):
        self.fmt = fmt
        super().__init__(message)


__all__ = [
    "BindgenError",
    "CodecError",
    "DuplicatePathError",
    "HostAbort",
    "SchemaError",
    "VmError",
]
