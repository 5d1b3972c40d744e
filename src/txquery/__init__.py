from __future__ import annotations

from .abi import ContractSchema, EventFragment, FunctionFragment, Param, parse_abi
from .clients import RPC, ExplorerAbiProvider, StaticAbiProvider
from .core.config import QueryConfig
from .core.errors import (
    AbiMismatchError,
    AbiNotFoundError,
    IncompleteDeclarationError,
    MalformedAbiError,
    NoMatchingLogError,
    OutOfRangeError,
    QueryError,
    UnknownArgumentError,
    UnknownFunctionError,
)
from .core.models import FieldDescriptor, Log, Receipt, Transaction
from .encoding import BufferReader, CanonicalBuffer, QueryableField, encode
from .query import EventFieldBuilder, QueryBuilder

__version__ = "0.1.0"

__all__ = [
    "encode",
    "parse_abi",
    "QueryBuilder",
    "EventFieldBuilder",
    "QueryConfig",
    "QueryableField",
    "CanonicalBuffer",
    "BufferReader",
    "Transaction",
    "Receipt",
    "Log",
    "FieldDescriptor",
    "ContractSchema",
    "FunctionFragment",
    "EventFragment",
    "Param",
    "RPC",
    "StaticAbiProvider",
    "ExplorerAbiProvider",
    "QueryError",
    "AbiNotFoundError",
    "MalformedAbiError",
    "UnknownFunctionError",
    "UnknownArgumentError",
    "AbiMismatchError",
    "NoMatchingLogError",
    "IncompleteDeclarationError",
    "OutOfRangeError",
]
