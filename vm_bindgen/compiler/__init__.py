"""
vm_bindgen.compiler — the bindgen pass.

Pipeline (per contract class):

    analyzer     marked methods  -> MethodDescriptor
    input_model  descriptor      -> <method>.Input record (encode / decode)
    emitter      descriptor      -> EntryProgram (ir) -> exported entry point
    marshaller   descriptor      -> client proxy method
    encode       EntryProgram    -> CBOR/msgpack bytes for tooling

The OpenAPI generator lives in vm_bindgen.schema.
"""

from .analyzer import analyze_contract, analyze_method
from .descriptor import (ArgInfo, ArgumentRole, BindingKind, MethodDescriptor,
                         MethodKind, ReceiverMode)
from .emitter import emit_entry_program, make_entry_point
from .input_model import InputModel, InputModelMode, synthesize_input_model
from .ir import EntryProgram
from .marshaller import (ContractProxy, PendingContractTx, make_contract_proxy,
                         make_marshal_method)

__all__ = [
    "ArgInfo",
    "ArgumentRole",
    "BindingKind",
    "ContractProxy",
    "EntryProgram",
    "InputModel",
    "InputModelMode",
    "MethodDescriptor",
    "MethodKind",
    "PendingContractTx",
    "ReceiverMode",
    "analyze_contract",
    "analyze_method",
    "emit_entry_program",
    "make_contract_proxy",
    "make_entry_point",
    "make_marshal_method",
    "synthesize_input_model",
]
