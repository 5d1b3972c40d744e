"""Schema model parsed from JSON ABIs.

This package provides:
- Pydantic models validating raw ABI entries (AbiParam, AbiFunction, AbiEvent)
- The closed schema model (Param, FunctionFragment, EventFragment, ContractSchema)
- `parse_abi` turning a serialized ABI into a ContractSchema
"""

from txquery.abi.models import AbiEvent, AbiFunction, AbiParam
from txquery.abi.schema import (
    ContractSchema,
    EventFragment,
    FunctionFragment,
    Param,
    canonical_type,
    parse_abi,
)

__all__ = [
    "AbiEvent",
    "AbiFunction",
    "AbiParam",
    "ContractSchema",
    "EventFragment",
    "FunctionFragment",
    "Param",
    "canonical_type",
    "parse_abi",
]
