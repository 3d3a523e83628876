"""
vm_bindgen — entry points, client stubs and OpenAPI docs for contract classes.

    from dataclasses import dataclass
    from vm_bindgen import contract, init, view, payable

    @contract
    @dataclass
    class StatusMessage:
        records: dict = field(default_factory=dict)

        @payable
        def set_status(self, message: str) -> None: ...

        @view
        def get_status(self, account_id: str) -> Optional[str]: ...

See vm_bindgen.runtime.env for the host façade and vm_bindgen.schema for the
OpenAPI generator.
"""

from .bindgen import ContractBindings, bindings_of, contract, proxy_for
from .errors import (BindgenError, CodecError, DuplicatePathError, HostAbort,
                     SchemaError, VmError)
from .gas import Gas
from .json_types import I64, I128, U64, U128, Base58CryptoHash
from .markers import (callback, callback_result, callback_vec, handle_result, init,
                      payable, private, property_attr, result_serializer,
                      serializer, view)
from .result import Err, Ok, PromiseError, Result
from .serialization import SerializationFormat
from .version import __version__

__all__ = [
    "__version__",
    # decorator & bindings
    "contract",
    "ContractBindings",
    "bindings_of",
    "proxy_for",
    # markers
    "init",
    "view",
    "payable",
    "private",
    "handle_result",
    "serializer",
    "result_serializer",
    "property_attr",
    "callback",
    "callback_result",
    "callback_vec",
    # values
    "Ok",
    "Err",
    "Result",
    "PromiseError",
    "SerializationFormat",
    "Gas",
    "U64",
    "U128",
    "I64",
    "I128",
    "Base58CryptoHash",
    # errors
    "BindgenError",
    "CodecError",
    "DuplicatePathError",
    "HostAbort",
    "SchemaError",
    "VmError",
]
