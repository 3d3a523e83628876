#!/usr/bin/env python3
"""
vm-bindgen openapi

Print (or write) the OpenAPI 3.1 document for a @contract class.

Examples:
  vm-bindgen openapi vm_bindgen.examples.status_message:StatusMessage
  vm-bindgen openapi mypkg.token:Token --tag token --format yaml --out token.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import yaml

from ..errors import BindgenError, SchemaError
from ..schema.openapi import OpenApiGenerator
from ._common import TargetError, eprint, load_target, setup_logging

log = logging.getLogger(__name__)


def parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="vm-bindgen openapi", description="Generate the OpenAPI document for contract classes.")
    p.add_argument("targets", nargs="+", metavar="MODULE:CLASS", help="Contract class(es) to document")
    p.add_argument("--tag", action="append", default=[], dest="tags", help="Operation tag (repeatable)")
    p.add_argument("--out", help="Write to this file instead of stdout")
    p.add_argument("--format", choices=("json", "yaml"), default="json", help="Output format (default: json)")
    p.add_argument("--log-level", default=None, help="Logging level (default: VM_BINDGEN_LOG_LEVEL or WARNING)")
    return p.parse_args(argv)


def render(doc: Dict[str, Any], fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)
    return json.dumps(doc, indent=2, ensure_ascii=False) + "\n"


def build_document(targets: List[str], tags: List[str]) -> Dict[str, Any]:
    gen = OpenApiGenerator()
    for spec in targets:
        gen.add_contract(load_target(spec), tags)
    if tags:
        return gen.into_openapi_with_tags(tags)
    return gen.into_openapi()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else list(argv))
    setup_logging(args.log_level)
    try:
        doc = build_document(args.targets, args.tags)
    except (BindgenError, SchemaError, TargetError) as e:
        eprint(f"[openapi] {e}")
        return 2

    text = render(doc, args.format)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text)
        log.info("wrote %s (%d paths)", args.out, len(doc.get("paths", {})))
    else:
        print(text, end="")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(None))
