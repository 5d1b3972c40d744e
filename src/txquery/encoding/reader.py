from __future__ import annotations

from txquery.constants import WORD_SIZE
from txquery.core.errors import OutOfRangeError
from txquery.core.models import FieldDescriptor


class BufferReader:
    """Seekable cursor over a canonical buffer.

    The underlying bytes are shared read-only; the cursor position is not,
    so each concurrent consumer needs its own reader.
    """

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def __len__(self) -> int:
        return len(self._data)

    def jump_to(self, offset: int) -> BufferReader:
        """Move the cursor to absolute `offset` (end of buffer allowed)."""
        if not 0 <= offset <= len(self._data):
            raise OutOfRangeError(f"seek to {offset} outside buffer of {len(self._data)} bytes")
        self._pos = offset
        return self

    def read_bytes(self, size: int) -> bytes:
        """Read `size` bytes at the cursor and advance."""
        end = self._pos + size
        if size < 0 or end > len(self._data):
            raise OutOfRangeError(
                f"read of {size} bytes at {self._pos} outside buffer of {len(self._data)} bytes"
            )
        out = self._data[self._pos:end]
        self._pos = end
        return out

    def read_word(self) -> bytes:
        return self.read_bytes(WORD_SIZE)

    def read_uint(self) -> int:
        return int.from_bytes(self.read_word(), "big")

    def read_field(self, descriptor: FieldDescriptor) -> bytes:
        """Materialize the bytes a resolved field points at."""
        return self.jump_to(descriptor.offset).read_bytes(descriptor.size)
