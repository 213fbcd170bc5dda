"""Bounds-checked binary access over a shared, mutable byte region."""

import struct
from enum import Enum
from typing import Union


class ByteOrder(Enum):
    """Byte order enum for struct packing/unpacking.

    Save data is little-endian throughout; BIG_ENDIAN stays available for
    views over other formats.
    """
    BIG_ENDIAN = ">"
    LITTLE_ENDIAN = "<"


class OutOfRangeError(IndexError):
    """Raised when an access falls outside the view."""

    def __init__(self, offset: int, width: int, length: int):
        super().__init__(
            f"access of {width} byte(s) at offset {offset} outside view of length {length}"
        )
        self.offset = offset
        self.width = width
        self.length = length


BytesLike = Union[bytes, bytearray, memoryview]


class ByteView:
    """Random-access integer reader/writer over a bytearray.

    Unlike a stream reader, a ByteView has no position: every access names
    its offset. Views created with ``slice`` share storage with their parent,
    so a write through either is visible through both.
    """

    def __init__(self, data: Union[bytearray, memoryview],
                 byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN):
        if isinstance(data, bytes):
            raise TypeError("ByteView needs mutable storage, got bytes")
        self._mem = memoryview(data)
        if self._mem.readonly:
            raise TypeError("ByteView needs mutable storage")
        self.byte_order = byte_order

    @classmethod
    def from_bytes(cls, data: BytesLike,
                   byte_order: ByteOrder = ByteOrder.LITTLE_ENDIAN) -> 'ByteView':
        """Create over a private, mutable copy of data."""
        return cls(bytearray(data), byte_order)

    def __len__(self) -> int:
        return len(self._mem)

    def _check(self, offset: int, width: int):
        if offset < 0 or offset + width > len(self._mem):
            raise OutOfRangeError(offset, width, len(self._mem))

    def _unpack(self, code: str, width: int, offset: int) -> int:
        self._check(offset, width)
        return struct.unpack_from(f"{self.byte_order.value}{code}", self._mem, offset)[0]

    def _pack(self, code: str, width: int, offset: int, value: int):
        self._check(offset, width)
        try:
            struct.pack_into(f"{self.byte_order.value}{code}", self._mem, offset, value)
        except struct.error as e:
            raise ValueError(f"{value} does not fit in field '{code}' at {offset}: {e}") from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_u8(self, offset: int) -> int:
        """Read unsigned 8-bit integer."""
        return self._unpack('B', 1, offset)

    def read_i8(self, offset: int) -> int:
        """Read signed 8-bit integer."""
        return self._unpack('b', 1, offset)

    def read_u16(self, offset: int) -> int:
        """Read unsigned 16-bit integer."""
        return self._unpack('H', 2, offset)

    def read_i16(self, offset: int) -> int:
        """Read signed 16-bit integer."""
        return self._unpack('h', 2, offset)

    def read_u32(self, offset: int) -> int:
        """Read unsigned 32-bit integer."""
        return self._unpack('I', 4, offset)

    def read_i32(self, offset: int) -> int:
        """Read signed 32-bit integer."""
        return self._unpack('i', 4, offset)

    def read_bytes(self, offset: int, count: int) -> bytes:
        """Copy out count raw bytes."""
        self._check(offset, count)
        return self._mem[offset:offset + count].tobytes()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write_u8(self, offset: int, value: int):
        self._pack('B', 1, offset, value)

    def write_i8(self, offset: int, value: int):
        self._pack('b', 1, offset, value)

    def write_u16(self, offset: int, value: int):
        self._pack('H', 2, offset, value)

    def write_i16(self, offset: int, value: int):
        self._pack('h', 2, offset, value)

    def write_u32(self, offset: int, value: int):
        self._pack('I', 4, offset, value)

    def write_i32(self, offset: int, value: int):
        self._pack('i', 4, offset, value)

    def write_bytes(self, offset: int, data: BytesLike):
        """Overwrite raw bytes in place."""
        self._check(offset, len(data))
        self._mem[offset:offset + len(data)] = data

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def slice(self, start: int, end: int) -> 'ByteView':
        """Return a view over [start, end) sharing this view's storage."""
        if start < 0 or end < start or end > len(self._mem):
            raise OutOfRangeError(start, max(end - start, 0), len(self._mem))
        return ByteView(self._mem[start:end], self.byte_order)

    def tobytes(self) -> bytes:
        """Copy the whole view out as immutable bytes."""
        return self._mem.tobytes()
