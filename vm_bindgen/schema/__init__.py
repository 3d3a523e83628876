"""vm_bindgen.schema — OpenAPI generation for @contract classes."""

from .openapi import (OpenApiGenerator, OperationInfo, contract_openapi,
                      normalize_operation_id)

__all__ = ["OpenApiGenerator", "OperationInfo", "contract_openapi", "normalize_operation_id"]
