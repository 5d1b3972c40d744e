"""Log decoding and ABI word helpers.

This package provides:
- `decode_log`: decode a receipt log against an event fragment
- Word access / padding helpers shared by the encoder, resolver and reader
"""

from txquery.decoding.decoder import DecodedLog, decode_log
from txquery.decoding.utils import pad_right, padded_size, uint_at, word_at

__all__ = [
    "DecodedLog",
    "decode_log",
    "pad_right",
    "padded_size",
    "uint_at",
    "word_at",
]
