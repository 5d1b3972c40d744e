"""Decoding utilities: ABI word access and word padding."""

from __future__ import annotations

from eth_utils import decode_hex

from txquery.constants import ADDRESS_SIZE, WORD_SIZE


def word_at(data: bytes, offset: int) -> bytes | None:
    """Return the 32-byte word starting at byte `offset`, or None if truncated."""
    end = offset + WORD_SIZE
    if offset < 0 or end > len(data):
        return None
    return data[offset:end]


def uint_at(data: bytes, offset: int) -> int | None:
    """Read the word at `offset` as a big-endian unsigned integer."""
    w = word_at(data, offset)
    return None if w is None else int.from_bytes(w, "big")


def padded_size(n: int) -> int:
    """Round `n` bytes up to a whole number of words."""
    return -(-n // WORD_SIZE) * WORD_SIZE


def pad_right(data: bytes) -> bytes:
    """Zero-pad `data` on the right to a word boundary."""
    return data + b"\x00" * (padded_size(len(data)) - len(data))


def uint_word(value: int) -> bytes:
    """Encode a non-negative integer as one big-endian word."""
    if value < 0:
        raise ValueError(f"cannot encode negative value {value} as uint256")
    return value.to_bytes(WORD_SIZE, "big")


def address_word(address: str | None) -> bytes:
    """Left-pad a 20-byte address to one word (zero word for None)."""
    if address is None:
        return b"\x00" * WORD_SIZE
    raw = decode_hex(address)
    if len(raw) != ADDRESS_SIZE:
        raise ValueError(f"address must be {ADDRESS_SIZE} bytes: {address}")
    return raw.rjust(WORD_SIZE, b"\x00")


def bytes32_word(value: bytes) -> bytes:
    """Left-pad a hash (or empty value) to one word."""
    if len(value) > WORD_SIZE:
        raise ValueError(f"value longer than {WORD_SIZE} bytes")
    return value.rjust(WORD_SIZE, b"\x00")
