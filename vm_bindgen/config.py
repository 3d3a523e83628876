"""
vm_bindgen.config — defaults for the bindgen pass and the local host runtime.

This module centralizes configuration for code generation and for the
in-process host used by tests and simulations. It has NO third-party deps and
is safe to import very early.

Configuration precedence:
  1) Environment variables (VM_BINDGEN_*)
  2) Hardcoded safe defaults below

Key env vars:
  - VM_BINDGEN_DEFAULT_SERIALIZER  (json|binary)  default: json
  - VM_BINDGEN_OPENAPI_VERSION     (str)          default: 3.1.0
  - VM_BINDGEN_MAX_INPUT_BYTES     (int)          default: 4_194_304  (4 MiB)
  - VM_BINDGEN_MAX_STATE_BYTES     (int)          default: 4_194_304  (4 MiB)
  - VM_BINDGEN_LOG_LEVEL           (str)          default: WARNING

Usage:
    from vm_bindgen.config import load_config
    CFG = load_config()
    if len(data) > CFG.max_input_bytes: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict


# ----------------------------- helpers ---------------------------------------


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    val = _env_str(name, default).lower()
    return val if val in choices else default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class BindgenConfig:
    # Format used when a method carries no @serializer / @result_serializer
    default_serializer: str

    # "openapi" field of generated documents
    openapi_version: str

    # Caps enforced by the generated entry points / in-memory host
    max_input_bytes: int
    max_state_bytes: int

    log_level: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "default_serializer": self.default_serializer,
            "openapi_version": self.openapi_version,
            "max_input_bytes": self.max_input_bytes,
            "max_state_bytes": self.max_state_bytes,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def load_config() -> BindgenConfig:
    """
    Build and cache a BindgenConfig from environment + safe defaults.
    """
    return BindgenConfig(
        default_serializer=_env_choice(
            "VM_BINDGEN_DEFAULT_SERIALIZER", "json", ("json", "binary", "borsh", "msgpack")
        ),
        openapi_version=_env_str("VM_BINDGEN_OPENAPI_VERSION", "3.1.0"),
        max_input_bytes=_env_int(
            "VM_BINDGEN_MAX_INPUT_BYTES", 4_194_304, min_v=1_024, max_v=67_108_864
        ),
        max_state_bytes=_env_int(
            "VM_BINDGEN_MAX_STATE_BYTES", 4_194_304, min_v=1_024, max_v=67_108_864
        ),
        log_level=_env_str("VM_BINDGEN_LOG_LEVEL", "WARNING").upper(),
    )


__all__ = ["BindgenConfig", "load_config"]
