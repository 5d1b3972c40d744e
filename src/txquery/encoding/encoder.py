"""Canonical encoder: one deterministic byte buffer per (transaction, receipt).

The buffer is produced once and never updated in place; any change to the
inputs means encoding again from scratch. See `txquery.encoding.layout` for
the region structure.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from txquery.constants import HEADER_VERSION
from txquery.core.models import Receipt, Transaction
from txquery.decoding.utils import address_word, bytes32_word, pad_right, uint_word
from txquery.encoding.layout import BufferLayout, QueryableField, compute_layout
from txquery.encoding.reader import BufferReader

HeaderSlot = Callable[[Transaction, Receipt], bytes]

_HEADER: dict[QueryableField, HeaderSlot] = {
    QueryableField.VERSION: lambda tx, rx: uint_word(HEADER_VERSION),
    QueryableField.TX_HASH: lambda tx, rx: bytes32_word(tx.hash),
    QueryableField.TX_FROM: lambda tx, rx: address_word(tx.sender),
    QueryableField.TX_TO: lambda tx, rx: address_word(tx.recipient),
    QueryableField.TX_NONCE: lambda tx, rx: uint_word(tx.nonce),
    QueryableField.TX_VALUE: lambda tx, rx: uint_word(tx.value),
    QueryableField.RX_STATUS: lambda tx, rx: uint_word(int(rx.status)),
    QueryableField.RX_GAS_USED: lambda tx, rx: uint_word(rx.gas_used),
    QueryableField.RX_BLOCK_NUMBER: lambda tx, rx: uint_word(rx.block_number),
    QueryableField.CALL_DATA_SIZE: lambda tx, rx: uint_word(len(tx.data)),
    QueryableField.LOG_COUNT: lambda tx, rx: uint_word(len(rx.logs)),
}


@dataclass(frozen=True, slots=True)
class CanonicalBuffer:
    """Immutable encoded buffer plus the layout it was built with."""

    data: bytes
    layout: BufferLayout

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return self.data

    def hex(self) -> str:
        return "0x" + self.data.hex()

    def reader(self) -> BufferReader:
        """Return a fresh cursor; cursors must not be shared across callers."""
        return BufferReader(self.data)


def encode_header(transaction: Transaction, receipt: Receipt) -> bytes:
    return b"".join(_HEADER[f](transaction, receipt) for f in QueryableField)


def encode(transaction: Transaction, receipt: Receipt) -> CanonicalBuffer:
    """Encode `transaction` and `receipt` into a CanonicalBuffer."""
    layout = compute_layout(transaction, receipt)

    parts = [encode_header(transaction, receipt), pad_right(transaction.data)]
    for log in receipt.logs:
        parts.append(address_word(log.address))
        parts.extend(log.topics)
        parts.append(pad_right(log.data))

    data = b"".join(parts)
    if len(data) != layout.size:
        raise RuntimeError(f"encoded {len(data)} bytes but layout expects {layout.size}")
    return CanonicalBuffer(data=data, layout=layout)
