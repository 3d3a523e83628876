#!/usr/bin/env python3
"""
vm-bindgen inspect

Pretty-print the entry programs generated for a @contract class.

Examples:
  vm-bindgen inspect vm_bindgen.examples.counter:Counter
  vm-bindgen inspect vm_bindgen.examples.counter:Counter --method increment --format json
  vm-bindgen inspect vm_bindgen.examples.counter:Counter --cbor > counter.vbep

Output:
  - text : one listing per entry point (op + operands)
  - json : program_to_dict() for each entry point
  - --cbor prints the canonical CBOR encoding as hex (code hash on stderr)
"""

from __future__ import annotations

import argparse
import json
import sys
from hashlib import sha3_256
from typing import List, Optional

from ..compiler.encode import encode_programs, program_to_dict
from ..compiler.ir import pretty
from ..errors import BindgenError
from ._common import TargetError, eprint, load_target, setup_logging


def parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="vm-bindgen inspect", description="Show generated entry programs.")
    p.add_argument("target", metavar="MODULE:CLASS", help="Contract class")
    p.add_argument("--method", action="append", default=[], help="Only this method (repeatable)")
    p.add_argument("--format", choices=("text", "json"), default="text", help="Output format (default: text)")
    p.add_argument("--cbor", action="store_true", help="Emit the CBOR encoding (hex) instead of a listing")
    p.add_argument("--log-level", default=None, help="Logging level (default: VM_BINDGEN_LOG_LEVEL or WARNING)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else list(argv))
    setup_logging(args.log_level)
    try:
        cls = load_target(args.target)
    except (BindgenError, TargetError) as e:
        eprint(f"[inspect] {e}")
        return 2

    programs = cls.__bindgen__.programs
    names = args.method or list(programs)
    missing = [n for n in names if n not in programs]
    if missing:
        eprint(f"[inspect] unknown method(s): {', '.join(missing)}")
        return 2
    selected = [programs[n] for n in names]

    if args.cbor:
        blob = encode_programs(selected)
        print(f"code_hash: 0x{sha3_256(blob).hexdigest()}", file=sys.stderr)
        print(blob.hex())
        return 0
    if args.format == "json":
        print(json.dumps([program_to_dict(p) for p in selected], indent=2))
        return 0
    print("\n\n".join(pretty(p) for p in selected))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(None))
