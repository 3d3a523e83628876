"""
vm_bindgen.cli
--------------

Command-line entrypoints for the bindgen tools, exposed as one console script
with sub-commands:

  - `vm-bindgen openapi MODULE:CLASS`  -> vm_bindgen.cli.openapi:main
  - `vm-bindgen inspect MODULE:CLASS`  -> vm_bindgen.cli.inspect_program:main

Sub-command modules are lazy-loaded via `resolve_entrypoint`.
"""

from __future__ import annotations

import sys
from importlib import import_module
from typing import Callable, Dict, List, Optional

ENTRYPOINTS: Dict[str, str] = {
    "openapi": "vm_bindgen.cli.openapi:main",
    "inspect": "vm_bindgen.cli.inspect_program:main",
}


def resolve_entrypoint(name: str) -> Callable[[Optional[List[str]]], int]:
    """
    Resolve a sub-command name to its `main(argv)` callable.

    Raises KeyError for unknown names and ImportError for malformed targets.
    """
    target = ENTRYPOINTS[name]
    module_path, _, attr = target.partition(":")
    if not module_path or not attr:
        raise ImportError(f"Malformed entrypoint target: {target!r}")
    module = import_module(module_path)
    main_fn = getattr(module, attr)
    if not callable(main_fn):
        raise AttributeError(f"Entrypoint {target!r} is not callable")
    return main_fn  # type: ignore[return-value]


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] in ("-h", "--help"):
        print("usage: vm-bindgen {%s} ..." % ",".join(ENTRYPOINTS))
        return 0 if args else 2
    if args[0] in ("-V", "--version"):
        from ..version import __version__

        print(__version__)
        return 0
    try:
        fn = resolve_entrypoint(args[0])
    except KeyError:
        print(f"vm-bindgen: unknown command {args[0]!r} (choose from {', '.join(ENTRYPOINTS)})",
              file=sys.stderr)
        return 2
    return fn(args[1:])


__all__ = ["ENTRYPOINTS", "main", "resolve_entrypoint"]
