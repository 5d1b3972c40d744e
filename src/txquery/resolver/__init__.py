"""Offset resolution for function arguments and event fields."""

from txquery.resolver.offsets import (
    head_offsets,
    resolve_event_argument,
    resolve_function_argument,
    resolve_parameter,
)

__all__ = [
    "head_offsets",
    "resolve_event_argument",
    "resolve_function_argument",
    "resolve_parameter",
]
