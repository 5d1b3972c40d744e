"""Canonical buffer layout (header schema v1).

The buffer is three regions in fixed order:

    header  | one word per `QueryableField` slot, fixed positions
    call    | transaction call data verbatim, zero-padded to a word boundary
    logs    | per log: address word, topic words, data (zero-padded)

Every boundary here is computed from structural facts only (call data
length, topic count and data length of each log), never from the values
being encoded, so offsets can be predicted without encoding anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from txquery.constants import WORD_SIZE
from txquery.core.models import Receipt, Transaction
from txquery.decoding.utils import padded_size


class QueryableField(IntEnum):
    """Header slots; the value is the slot index."""

    VERSION = 0
    TX_HASH = 1
    TX_FROM = 2
    TX_TO = 3
    TX_NONCE = 4
    TX_VALUE = 5
    RX_STATUS = 6
    RX_GAS_USED = 7
    RX_BLOCK_NUMBER = 8
    CALL_DATA_SIZE = 9
    LOG_COUNT = 10

    @property
    def offset(self) -> int:
        return self.value * WORD_SIZE


_ALIASES = {
    "status": QueryableField.RX_STATUS,
    "sender": QueryableField.TX_FROM,
    "from": QueryableField.TX_FROM,
    "recipient": QueryableField.TX_TO,
    "to": QueryableField.TX_TO,
    "hash": QueryableField.TX_HASH,
}


def queryable_field(name: QueryableField | str) -> QueryableField:
    """Resolve a header field by enum member, member name or common alias."""
    if isinstance(name, QueryableField):
        return name
    key = name.strip()
    if key.lower() in _ALIASES:
        return _ALIASES[key.lower()]
    try:
        return QueryableField[key.upper()]
    except KeyError:
        known = ", ".join(f.name for f in QueryableField)
        raise ValueError(f"unknown static field {name!r} (known: {known})") from None


HEADER_SIZE = len(QueryableField) * WORD_SIZE
CALL_BASE = HEADER_SIZE


@dataclass(frozen=True, slots=True)
class LogLayout:
    """Absolute positions of one log's pieces inside the logs region."""

    offset: int  # address word
    topic_count: int
    data_size: int  # unpadded

    @property
    def address_offset(self) -> int:
        return self.offset

    @property
    def topics_offset(self) -> int:
        return self.offset + WORD_SIZE

    def topic_offset(self, index: int) -> int:
        if not 0 <= index < self.topic_count:
            raise IndexError(f"topic {index} out of range ({self.topic_count} topics)")
        return self.topics_offset + index * WORD_SIZE

    @property
    def data_offset(self) -> int:
        return self.topics_offset + self.topic_count * WORD_SIZE

    @property
    def end(self) -> int:
        return self.data_offset + padded_size(self.data_size)


@dataclass(frozen=True, slots=True)
class BufferLayout:
    """Region boundaries of one canonical buffer."""

    call_base: int
    call_size: int  # unpadded
    logs_base: int
    logs: tuple[LogLayout, ...]

    @property
    def size(self) -> int:
        return self.logs[-1].end if self.logs else self.logs_base


def compute_layout(transaction: Transaction, receipt: Receipt) -> BufferLayout:
    """Lay out the regions for a (transaction, receipt) pair."""
    call_size = len(transaction.data)
    logs_base = CALL_BASE + padded_size(call_size)

    logs: list[LogLayout] = []
    cursor = logs_base
    for log in receipt.logs:
        entry = LogLayout(offset=cursor, topic_count=len(log.topics), data_size=len(log.data))
        logs.append(entry)
        cursor = entry.end

    return BufferLayout(
        call_base=CALL_BASE,
        call_size=call_size,
        logs_base=logs_base,
        logs=tuple(logs),
    )
