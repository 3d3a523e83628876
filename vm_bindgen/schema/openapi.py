"""
vm_bindgen.schema.openapi — OpenAPI 3.1 document for contract methods.

Each exported method becomes one path ``/<method>``: view methods use the
``get`` verb, everything else ``post``. The request body is the method's
``<method>.Input`` record; the 200 response carries the return type's schema,
and methods without a return value answer 204.

Schemas are produced with ``msgspec.json.schema_components`` when the
document is assembled, so every referenced type lands once under
``components.schemas`` and operations point at it with
``#/components/schemas/{name}``.

    gen = OpenApiGenerator()
    gen.add_contract(StatusMessage, tags=["status"])
    doc = gen.into_openapi_with_tags(["status"])
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import load_config
from ..errors import DuplicatePathError, SchemaError
from ..compiler.descriptor import MethodDescriptor, MethodKind
from ..compiler.input_model import InputModelMode, synthesize_input_model
from ..serialization import schema_components, type_name

log = logging.getLogger(__name__)

REF_TEMPLATE = "#/components/schemas/{name}"
INPUT_SUFFIX = ".Input"


def normalize_operation_id(name: str) -> str:
    """``::a::b`` → ``a_b``; ``.a.b`` → ``a_b``."""
    return name.lstrip(":.").replace("::", "_").replace(".", "_")


def method_description(desc: MethodDescriptor) -> str:
    """
    Method docs, then a Markdown "#### Properties" table of derived flags,
    then a "#### Parameters" list when any parameter is documented.
    """
    text = "".join(line + "\n" for line in desc.docs.splitlines()) if desc.docs else ""

    props = desc.derived_properties()
    if props:
        rows = "".join(f"| {k} | {v} |\n" for k, v in props)
        text += "\n\n#### Properties\n\n| | |\n| -: | :- |\n" + rows

    if any(a.doc for a in desc.args):
        items = "".join(
            f"- `{a.name}` - {a.doc}\n" if a.doc else f"- `{a.name}`\n" for a in desc.args
        )
        text += "\n\n#### Parameters\n\n" + items
    return text


@dataclass
class OperationInfo:
    """One endpoint: path, contract method kind and the operation object."""

    path: str
    method: MethodKind
    operation: Dict[str, Any]
    # Types whose schemas fill requestBody / the 200 response at assembly.
    request_type: Any = None
    request_media: str = "application/json"
    response_type: Any = None
    response_media: str = "application/json"
    response_description: str = ""
    has_response: bool = False


@dataclass
class OpenApiGenerator:
    openapi_version: str = field(default_factory=lambda: load_config().openapi_version)
    operations: Dict[str, OperationInfo] = field(default_factory=dict)

    # ---------- building ---------- #

    def add_method(self, desc: MethodDescriptor, tags: Sequence[str] = ()) -> OperationInfo:
        op: Dict[str, Any] = {
            "operationId": desc.ident,
            "summary": desc.ident,
            "description": method_description(desc),
        }
        if tags:
            op["tags"] = list(tags)

        info = OperationInfo(path=f"/{desc.ident}", method=desc.kind, operation=op)
        if desc.has_input:
            info.request_type = synthesize_input_model(desc, InputModelMode.DECODE).struct
            info.request_media = desc.input_serializer.media_type
        if desc.emits_output:
            info.has_response = True
            info.response_type = type(None) if desc.output_type is None else desc.output_type
            info.response_media = desc.result_serializer.media_type
            info.response_description = type_name(desc.output_type)
        self.add_operation(info)
        return info

    def add_operation(self, info: OperationInfo) -> None:
        op_id = info.operation.get("operationId")
        if op_id is not None:
            info.operation["operationId"] = normalize_operation_id(str(op_id))
        if info.path in self.operations:
            raise DuplicatePathError(info.path)
        self.operations[info.path] = info
        log.debug("openapi: %s %s", info.method.http_verb, info.path)

    def add_contract(self, contract: Any, tags: Sequence[str] = ()) -> None:
        bindings = getattr(contract, "__bindgen__", None)
        if bindings is None:
            raise SchemaError(f"{getattr(contract, '__name__', contract)!s} is not a @contract class")
        for desc in bindings.descriptors.values():
            self.add_method(desc, tags)

    # ---------- schemas ---------- #

    def _types(self) -> List[Any]:
        seen: List[Any] = []
        for info in self.operations.values():
            for tp in (info.request_type, info.response_type):
                if tp is not None and not any(tp is s for s in seen):
                    seen.append(tp)
        return seen

    def _schemas(self) -> Tuple[Dict[int, Dict[str, Any]], Dict[str, Any]]:
        types = self._types()
        try:
            schemas, components = schema_components(types, ref_template=REF_TEMPLATE)
        except (TypeError, ValueError) as e:
            raise SchemaError(f"cannot generate schemas: {e}") from e
        return {id(t): s for t, s in zip(types, schemas)}, components

    def definitions_index(self) -> Dict[str, List[str]]:
        """Component names, split into input records and other models."""
        _, components = self._schemas()
        inputs = [n for n in components if n.endswith(INPUT_SUFFIX)]
        models = [n for n in components if not n.endswith(INPUT_SUFFIX)]
        return {"inputs": inputs, "models": models}

    # ---------- assembly ---------- #

    def _operation(self, info: OperationInfo, by_type: Dict[int, Dict[str, Any]]) -> Dict[str, Any]:
        op = copy.deepcopy(info.operation)
        if info.has_response:
            op["responses"] = {
                "200": {
                    "description": info.response_description,
                    "content": {info.response_media: {"schema": by_type[id(info.response_type)]}},
                }
            }
        else:
            op["responses"] = {"204": {"description": ""}}
        if info.request_type is not None:
            op["requestBody"] = {
                "content": {info.request_media: {"schema": by_type[id(info.request_type)]}},
                "required": True,
            }
        return op

    def into_openapi(self) -> Dict[str, Any]:
        by_type, components = self._schemas()
        paths: Dict[str, Dict[str, Any]] = {}
        for path, info in self.operations.items():
            item = paths.setdefault(path, {})
            verb = info.method.http_verb
            if verb in item:
                raise DuplicatePathError(path)
            item[verb] = self._operation(info, by_type)
        return {
            "openapi": self.openapi_version,
            "info": {"title": "", "version": ""},
            "paths": paths,
            "components": {"schemas": components},
        }

    def into_openapi_with_tags(self, tags: Iterable[str]) -> Dict[str, Any]:
        index = self.definitions_index()

        def schema_ref(name: str) -> str:
            return f'## {name}\n<SchemaDefinition schemaRef="{REF_TEMPLATE.format(name=name)}" />\n\n'

        spec = self.into_openapi()
        tag_objs: List[Dict[str, Any]] = [
            {"name": t, "x-displayName": t.upper()} for t in tags
        ]
        tag_objs.append({
            "name": "_all_models",
            "description": "{models}\n# Inputs\n\n{inputs}".format(
                models="".join(schema_ref(n) for n in index["models"]),
                inputs="".join(schema_ref(n) for n in index["inputs"]),
            ),
            "x-displayName": "Models",
        })
        spec["tags"] = tag_objs
        return spec


def contract_openapi(contract: Any, tags: Sequence[str] = (),
                     generator: Optional[OpenApiGenerator] = None) -> Dict[str, Any]:
    """Convenience: the OpenAPI document for a single @contract class."""
    gen = generator or OpenApiGenerator()
    gen.add_contract(contract, tags)
    if tags:
        return gen.into_openapi_with_tags(tags)
    return gen.into_openapi()


__all__ = [
    "INPUT_SUFFIX",
    "OpenApiGenerator",
    "OperationInfo",
    "contract_openapi",
    "method_description",
    "normalize_operation_id",
]
