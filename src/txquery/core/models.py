"""Core data models shared by the encoder, the resolver and the query builder.

This module defines:
- `Transaction` / `Receipt` / `Log`: read-only inputs, as fetched from a node.
- `FieldDescriptor`: the `{offset, size}` contract emitted by the query builder.

Design notes
------------
- Byte-valued attributes (hashes, topics, data) are stored as `bytes`;
  addresses stay `0x` hex strings, as returned by RPC nodes.
- `from_rpc` constructors accept raw JSON-RPC result objects (hex quantities).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from eth_utils import decode_hex, to_checksum_address  # type: ignore[attr-defined]

from txquery.constants import WORD_SIZE


def _quantity(value: Any) -> int:
    """Parse a JSON-RPC quantity (hex string or int); missing values are 0."""
    if value is None:
        return 0
    if isinstance(value, str):
        return int(value, 16) if value.lower().startswith("0x") else int(value)
    return int(value)


def _data(value: Any) -> bytes:
    """Parse a JSON-RPC data field (hex string or bytes)."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return decode_hex(value)


# === Inputs ===


@dataclass(slots=True, frozen=True)
class Transaction:
    """Transaction attributes the canonical buffer is built from."""

    hash: bytes
    sender: str
    recipient: str | None  # None for contract creation
    data: bytes = b""
    nonce: int = 0
    value: int = 0

    @property
    def is_contract_creation(self) -> bool:
        return self.recipient is None

    @property
    def selector(self) -> bytes | None:
        """Leading 4 bytes of the call data, if present."""
        return self.data[:4] if len(self.data) >= 4 else None

    @classmethod
    def from_rpc(cls, raw: Mapping[str, Any]) -> Transaction:
        """Build a Transaction from an `eth_getTransactionByHash` result."""
        to = raw.get("to")
        return cls(
            hash=_data(raw.get("hash")),
            sender=to_checksum_address(raw["from"]),
            recipient=to_checksum_address(to) if to else None,
            data=_data(raw.get("input", raw.get("data"))),
            nonce=_quantity(raw.get("nonce")),
            value=_quantity(raw.get("value")),
        )


@dataclass(slots=True, frozen=True)
class Log:
    """One receipt log: emitter, topic words and verbatim data."""

    address: str
    topics: tuple[bytes, ...]
    data: bytes = b""
    log_index: int = 0

    def __post_init__(self) -> None:
        for topic in self.topics:
            if len(topic) != WORD_SIZE:
                raise ValueError(f"topic must be {WORD_SIZE} bytes, got {len(topic)}")

    @classmethod
    def from_rpc(cls, raw: Mapping[str, Any]) -> Log:
        return cls(
            address=to_checksum_address(raw["address"]),
            topics=tuple(_data(t) for t in raw.get("topics", [])),
            data=_data(raw.get("data")),
            log_index=_quantity(raw.get("logIndex")),
        )


@dataclass(slots=True, frozen=True)
class Receipt:
    """Execution receipt: status flag plus ordered logs."""

    status: int
    logs: tuple[Log, ...] = field(default_factory=tuple)
    gas_used: int = 0
    block_number: int = 0
    transaction_hash: bytes = b""

    @classmethod
    def from_rpc(cls, raw: Mapping[str, Any]) -> Receipt:
        """Build a Receipt from an `eth_getTransactionReceipt` result."""
        return cls(
            status=_quantity(raw.get("status")),
            logs=tuple(Log.from_rpc(rl) for rl in raw.get("logs", [])),
            gas_used=_quantity(raw.get("gasUsed")),
            block_number=_quantity(raw.get("blockNumber")),
            transaction_hash=_data(raw.get("transactionHash")),
        )


# === Output ===


@dataclass(slots=True, frozen=True)
class FieldDescriptor:
    """Position of one declared value inside the canonical buffer."""

    offset: int
    size: int

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if self.size <= 0:
            raise ValueError(f"size must be positive, got {self.size}")

    @property
    def end(self) -> int:
        return self.offset + self.size
