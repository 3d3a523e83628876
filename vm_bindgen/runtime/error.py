from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass
class VmError(Exception):
    """
    Structured error raised by the bindgen host runtime.

    Call patterns:

        VmError("simple message")
        VmError("message", code="some_code", context={...})

    Attributes:
        code: short machine-readable code string
        message: human-readable message
        context: optional extra fields for debugging / RPC wiring
    """

    code: str
    message: str
    context: Dict[str, Any]

    def __init__(
        self,
        message: Any = "",
        *,
        code: str = "vm_error",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if isinstance(message, (bytes, bytearray)):
            message = bytes(message).decode("utf-8", errors="replace")
        super().__init__(str(message))
        object.__setattr__(self, "code", str(code))
        object.__setattr__(self, "message", str(message))
        object.__setattr__(self, "context", dict(context or {}))

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class HostAbort(VmError):
    """
    Fatal failure of one entry-point invocation.

    Raised by `env.panic_str` and by every policy/decode/callback check in an
    entry program. The message is the human-readable reason surfaced to the
    caller; there is no partial-success path.
    """

    def __init__(
        self,
        message: Any = "",
        *,
        method: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        ctx = dict(context or {})
        if method is not None:
            ctx.setdefault("method", method)
        super().__init__(message, code="HOST_ABORT", context=ctx)

    @property
    def reason(self) -> str:
        return self.message


__all__ = ["VmError", "HostAbort"]
