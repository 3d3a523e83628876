"""vm_bindgen.version — installed package version.

VM_BINDGEN_VERSION overrides the value; a source checkout that was never
installed reports BASE_VERSION + '+dev'.
"""

from __future__ import annotations

import os
from importlib import metadata as importlib_metadata

BASE_VERSION = "0.1.0"

DIST_NAME = "vm-bindgen"


def compute_version() -> str:
    val = os.getenv("VM_BINDGEN_VERSION")
    if val:
        return val
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return f"{BASE_VERSION}+dev"


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
