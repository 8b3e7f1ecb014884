"""
Bounds-checked cursor over a payload buffer.

All fixed-width fields are little-endian. Every read names the field it
is decoding so failures report where they happened:

    reader = PayloadReader(payload)
    count = reader.u16('count')
    price = reader.varint('price')
"""

import struct
from typing import Optional

from ..core.errors import PayloadTruncated, TdxError
from .varint import decode_varint
from .volume import decode_packed_float, PACKED_FLOAT_SIZE


_U8 = struct.Struct('<B')
_I8 = struct.Struct('<b')
_U16 = struct.Struct('<H')
_I16 = struct.Struct('<h')
_U32 = struct.Struct('<I')
_F32 = struct.Struct('<f')


class PayloadReader:
    """Sequential reader over an immutable payload."""

    __slots__ = ('_buffer', '_offset')

    def __init__(self, buffer: bytes, offset: int = 0):
        # wraps, never copies: decode_bar opens one reader per bar
        if not isinstance(buffer, memoryview):
            buffer = memoryview(buffer)
        self._buffer = buffer
        self._offset = offset

    @property
    def buffer(self) -> memoryview:
        return self._buffer

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._buffer) - self._offset

    def require(self, size: int, field: str) -> None:
        """Fail with PayloadTruncated unless ``size`` more bytes exist."""
        if size > self.remaining:
            raise PayloadTruncated(
                field,
                {'field': field, 'offset': self._offset, 'needed': size,
                 'available': self.remaining},
            )

    def _unpack(self, fmt: struct.Struct, field: str):
        self.require(fmt.size, field)
        (value,) = fmt.unpack_from(self._buffer, self._offset)
        self._offset += fmt.size
        return value

    def u8(self, field: str) -> int:
        return self._unpack(_U8, field)

    def i8(self, field: str) -> int:
        return self._unpack(_I8, field)

    def u16(self, field: str) -> int:
        return self._unpack(_U16, field)

    def i16(self, field: str) -> int:
        return self._unpack(_I16, field)

    def u32(self, field: str) -> int:
        return self._unpack(_U32, field)

    def f32(self, field: str) -> float:
        return self._unpack(_F32, field)

    def raw(self, size: int, field: str) -> bytes:
        self.require(size, field)
        start = self._offset
        self._offset += size
        return bytes(self._buffer[start:self._offset])

    def skip(self, size: int, field: Optional[str] = None) -> None:
        self.require(size, field or 'reserved')
        self._offset += size

    def varint(self, field: str) -> int:
        try:
            value, consumed = decode_varint(self._buffer, self._offset)
        except TdxError as e:
            raise e.with_context(field=field, offset=self._offset)
        self._offset += consumed
        return value

    def packed_float(self, field: str) -> float:
        self.require(PACKED_FLOAT_SIZE, field)
        value = decode_packed_float(self._buffer, self._offset)
        self._offset += PACKED_FLOAT_SIZE
        return value

    def rest(self) -> bytes:
        """Return all unread bytes and move to the end."""
        start = self._offset
        self._offset = len(self._buffer)
        return bytes(self._buffer[start:])
