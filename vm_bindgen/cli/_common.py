"""Helpers shared by the vm-bindgen sub-commands."""

from __future__ import annotations

import logging
import sys
from importlib import import_module
from typing import Any, Optional

from ..config import load_config


class TargetError(Exception):
    """MODULE:CLASS could not be resolved to a @contract class."""


def setup_logging(level: Optional[str]) -> None:
    name = (level or load_config().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def load_target(spec: str) -> Any:
    """Import ``package.module:ClassName`` and return the contract class."""
    module_path, sep, attr = spec.partition(":")
    if not sep or not module_path or not attr:
        raise TargetError(f"expected MODULE:CLASS, got {spec!r}")
    try:
        module = import_module(module_path)
    except ImportError as e:
        raise TargetError(f"cannot import {module_path!r}: {e}") from e
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise TargetError(f"{module_path!r} has no attribute {attr!r}") from e
    if getattr(obj, "__bindgen__", None) is None:
        raise TargetError(f"{spec} is not a @contract class")
    return obj


def eprint(*a: Any) -> None:
    print(*a, file=sys.stderr)
