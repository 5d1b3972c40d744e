"""
Exceptions raised while resolving query declarations.

Every declaration call fails on its own: the error carries a label of the
declaration that raised it so the caller can decide whether to retry it
(e.g. re-fetch an ABI) or abort the whole query.
"""
from __future__ import annotations


class QueryError(Exception):
    """Base exception for txquery errors."""

    def __init__(self, message: str, declaration: str | None = None):
        self.declaration = declaration
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.declaration:
            return f"{self.declaration}: {message}"
        return message


class AbiNotFoundError(QueryError):
    """Raised when no interface description can be found for an address."""


class MalformedAbiError(QueryError):
    """Raised when an interface description cannot be parsed."""


class UnknownFunctionError(QueryError):
    """Raised when the schema has no function with the requested name."""


class UnknownArgumentError(QueryError):
    """Raised when a function or event has no parameter with the requested name."""


class AbiMismatchError(QueryError):
    """Raised when encoded bytes do not agree with the schema (selector, topics, head)."""


class NoMatchingLogError(QueryError):
    """Raised when no receipt log satisfies an event declaration."""


class IncompleteDeclarationError(QueryError):
    """Raised by `build()` while a declaration is still pending or has failed."""


class OutOfRangeError(QueryError):
    """Raised when a read or seek falls outside the canonical buffer."""
