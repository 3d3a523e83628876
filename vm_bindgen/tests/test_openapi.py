from dataclasses import dataclass
from typing import Annotated

import msgspec
import pytest
from jsonschema import Draft202012Validator

from vm_bindgen import DuplicatePathError, SchemaError, contract, view
from vm_bindgen.compiler import MethodKind
from vm_bindgen.examples.counter import Counter
from vm_bindgen.examples.escrow import Escrow
from vm_bindgen.examples.status_message import StatusMessage
from vm_bindgen.schema import OpenApiGenerator, contract_openapi
from vm_bindgen.schema.openapi import OperationInfo, method_description, normalize_operation_id


@dataclass
class Info:
    name: str
    decimals: int


@contract
@dataclass
class Token:
    def configure(self, a: int, b: Annotated[int, msgspec.Meta(description="bee")]) -> None:
        pass

    @view
    def info(self) -> Info:
        return Info("token", 18)


def _doc(*contracts, tags=()):
    gen = OpenApiGenerator()
    for c in contracts:
        gen.add_contract(c, tags)
    return gen.into_openapi_with_tags(tags) if tags else gen.into_openapi()


# --- paths --------------------------------------------------------------------


def test_document_skeleton():
    doc = _doc(StatusMessage)
    assert doc["openapi"] == "3.1.0"
    assert doc["info"] == {"title": "", "version": ""}
    assert set(doc["paths"]) == {"/set_status", "/get_status", "/count"}
    assert "tags" not in doc


def test_verbs_follow_method_kind():
    paths = _doc(Counter)["paths"]
    assert list(paths["/get"]) == ["get"]
    assert list(paths["/describe"]) == ["get"]
    assert list(paths["/increment"]) == ["post"]
    assert list(paths["/new"]) == ["post"]


def test_request_and_response_bodies():
    paths = _doc(StatusMessage)["paths"]

    op = paths["/set_status"]["post"]
    assert op["operationId"] == "set_status"
    assert op["summary"] == "set_status"
    assert op["requestBody"] == {
        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/set_status.Input"}}},
        "required": True,
    }
    assert op["responses"] == {"204": {"description": ""}}

    op = paths["/get_status"]["get"]
    ok = op["responses"]["200"]
    assert ok["description"] == "Optional[str]"
    assert "application/json" in ok["content"]

    op = paths["/count"]["get"]
    assert "requestBody" not in op
    assert op["responses"]["200"]["content"] == {"application/msgpack": {"schema": {"type": "integer"}}}


def test_init_answers_no_content():
    op = _doc(Counter)["paths"]["/new"]["post"]
    assert op["responses"] == {"204": {"description": ""}}
    assert "requestBody" in op


def test_binary_input_media_type():
    op = _doc(Escrow)["paths"]["/on_price"]["post"]
    assert list(op["requestBody"]["content"]) == ["application/msgpack"]


def test_components_are_valid_json_schema():
    doc = _doc(StatusMessage, Escrow, Token)
    schemas = doc["components"]["schemas"]
    assert {"set_status.Input", "lock.Input", "configure.Input", "Info"} <= set(schemas)
    for schema in schemas.values():
        Draft202012Validator.check_schema(schema)
    Draft202012Validator(schemas["set_status.Input"]).validate({"message": "hello"})
    lock = Draft202012Validator(schemas["lock.Input"])
    lock.validate({"amount": "10"})
    assert not lock.is_valid({"amount": 10})


def test_repeated_path_is_rejected():
    with pytest.raises(DuplicatePathError, match="repeated path: /reset"):
        _doc(Counter, Escrow)


def test_non_contract_is_rejected():
    with pytest.raises(SchemaError):
        OpenApiGenerator().add_contract(Info)


def test_assembly_is_repeatable():
    gen = OpenApiGenerator()
    gen.add_contract(Counter)
    assert gen.into_openapi() == gen.into_openapi()


# --- descriptions -------------------------------------------------------------


def test_description_with_properties_and_parameters():
    desc = StatusMessage.__bindgen__.descriptors["set_status"]
    assert method_description(desc) == (
        "Store a status message for the caller.\n"
        "\n\n#### Properties\n\n| | |\n| -: | :- |\n"
        "| payable | ✓ |\n"
        "\n\n#### Parameters\n\n"
        "- `message` - New status text.\n"
    )


def test_description_lists_custom_properties():
    desc = Counter.__bindgen__.descriptors["increment"]
    assert method_description(desc).endswith("| payable | ✕ |\n| category | arithmetic |\n")


def test_undocumented_parameters_are_listed_by_name():
    desc = Token.__bindgen__.descriptors["configure"]
    assert method_description(desc).endswith("#### Parameters\n\n- `a`\n- `b` - bee\n")


def test_view_without_docs_has_empty_description():
    assert method_description(Token.__bindgen__.descriptors["info"]) == ""


# --- tags ---------------------------------------------------------------------


def test_tags_and_model_index():
    doc = _doc(StatusMessage, Token, tags=["status", "token"])
    for item in doc["paths"].values():
        for op in item.values():
            assert op["tags"] == ["status", "token"]

    tags = doc["tags"]
    assert tags[:2] == [
        {"name": "status", "x-displayName": "STATUS"},
        {"name": "token", "x-displayName": "TOKEN"},
    ]
    models = tags[-1]
    assert models["name"] == "_all_models"
    assert models["x-displayName"] == "Models"
    head, inputs = models["description"].split("\n# Inputs\n\n")
    assert head == '## Info\n<SchemaDefinition schemaRef="#/components/schemas/Info" />\n\n'
    assert '## set_status.Input\n<SchemaDefinition schemaRef="#/components/schemas/set_status.Input" />\n\n' in inputs
    assert "## Info" not in inputs


def test_bindings_openapi_uses_contract_tags():
    doc = Counter.__bindgen__.openapi()
    assert doc["tags"][0] == {"name": "counter", "x-displayName": "COUNTER"}
    assert contract_openapi(Counter) == Counter.__bindgen__.openapi(tags=())


# --- operation ids ------------------------------------------------------------


@pytest.mark.parametrize(
    "raw,expected",
    [("transfer", "transfer"), ("::token::transfer", "token_transfer"), (".a.b", "a_b")],
)
def test_normalize_operation_id(raw, expected):
    assert normalize_operation_id(raw) == expected


def test_add_operation_normalizes_ids():
    gen = OpenApiGenerator()
    gen.add_operation(OperationInfo(path="/x", method=MethodKind.REGULAR, operation={"operationId": "::a::x"}))
    doc = gen.into_openapi()
    assert doc["paths"]["/x"]["post"]["operationId"] == "a_x"
    assert doc["paths"]["/x"]["post"]["responses"] == {"204": {"description": ""}}
