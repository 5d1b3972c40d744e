"""Canonical encoding of a transaction and its receipt.

This package provides:
- Header schema and region layout (QueryableField, BufferLayout, compute_layout)
- `encode` producing an immutable CanonicalBuffer
- `BufferReader`, the seek/read cursor used to materialize resolved fields
"""

from txquery.encoding.encoder import CanonicalBuffer, encode
from txquery.encoding.layout import (
    CALL_BASE,
    HEADER_SIZE,
    BufferLayout,
    LogLayout,
    QueryableField,
    compute_layout,
    queryable_field,
)
from txquery.encoding.reader import BufferReader

__all__ = [
    "CALL_BASE",
    "HEADER_SIZE",
    "BufferLayout",
    "BufferReader",
    "CanonicalBuffer",
    "LogLayout",
    "QueryableField",
    "compute_layout",
    "encode",
    "queryable_field",
]
