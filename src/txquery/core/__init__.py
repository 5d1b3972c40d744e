"""Core data models, configuration, interfaces and errors.

This package provides:
- Data models (Transaction, Receipt, Log, FieldDescriptor)
- Configuration classes (QueryConfig, FetchConfig)
- Error hierarchy rooted at QueryError
"""

from txquery.core.config import FetchConfig, QueryConfig
from txquery.core.errors import (
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
from txquery.core.models import FieldDescriptor, Log, Receipt, Transaction

__all__ = [
    "FetchConfig",
    "QueryConfig",
    "AbiMismatchError",
    "AbiNotFoundError",
    "IncompleteDeclarationError",
    "MalformedAbiError",
    "NoMatchingLogError",
    "OutOfRangeError",
    "QueryError",
    "UnknownArgumentError",
    "UnknownFunctionError",
    "FieldDescriptor",
    "Log",
    "Receipt",
    "Transaction",
]
