"""
Variable-length integers used for prices, volumes and counts.

The protocol uses a sign-magnitude layout rather than zig-zag:

    First byte:      C S D D D D D D
    Following bytes: C D D D D D D D

    C = 0x80  another byte follows
    S = 0x40  value is negative (first byte only)
    D         data bits, least-significant group first

So the first byte holds 6 data bits and every following byte 7 more:

    0x05        ->    5
    0x45        ->   -5
    0x81 0x01   ->   65   (1 + (1 << 6))
    0xC1 0x01   ->  -65

Magnitudes up to 64 bits are accepted. Zero is never written with the
sign bit, but a negative zero on the wire still decodes to 0.
"""

from typing import Tuple

from ..core.errors import FieldOutOfRange, TruncatedInput


CONTINUE_BIT = 0x80
SIGN_BIT = 0x40
FIRST_DATA_MASK = 0x3F
DATA_MASK = 0x7F

FIRST_DATA_BITS = 6
DATA_BITS = 7

MAX_MAGNITUDE = (1 << 64) - 1

# 6 + 9 * 7 = 69 bits is enough for any 64-bit magnitude
MAX_VARINT_BYTES = 10


def decode_varint(buffer: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode one varint starting at ``offset``.

    Returns:
        (value, bytes_consumed)

    Raises:
        TruncatedInput: buffer ends while a continuation bit is set
        FieldOutOfRange: magnitude does not fit in 64 bits
    """
    end = len(buffer)
    if offset >= end:
        raise TruncatedInput("empty varint", {'offset': offset})

    first = buffer[offset]
    magnitude = first & FIRST_DATA_MASK
    negative = bool(first & SIGN_BIT)
    consumed = 1
    shift = FIRST_DATA_BITS
    byte = first

    while byte & CONTINUE_BIT:
        if consumed >= MAX_VARINT_BYTES:
            raise FieldOutOfRange("varint longer than 64 bits", {'offset': offset})
        pos = offset + consumed
        if pos >= end:
            raise TruncatedInput(
                "varint not terminated",
                {'offset': offset, 'consumed': consumed},
            )
        byte = buffer[pos]
        magnitude |= (byte & DATA_MASK) << shift
        shift += DATA_BITS
        consumed += 1

    if magnitude > MAX_MAGNITUDE:
        raise FieldOutOfRange("varint magnitude exceeds 64 bits", {'offset': offset})

    return (-magnitude if negative else magnitude), consumed


def encode_varint(value: int) -> bytes:
    """Encode ``value`` in the sign-magnitude varint layout."""
    magnitude = abs(value)
    if magnitude > MAX_MAGNITUDE:
        raise FieldOutOfRange("varint magnitude exceeds 64 bits", {'value': value})

    first = magnitude & FIRST_DATA_MASK
    magnitude >>= FIRST_DATA_BITS
    if value < 0:
        first |= SIGN_BIT
    if magnitude:
        first |= CONTINUE_BIT

    out = bytearray([first])
    while magnitude:
        byte = magnitude & DATA_MASK
        magnitude >>= DATA_BITS
        if magnitude:
            byte |= CONTINUE_BIT
        out.append(byte)

    return bytes(out)


def varint_size(value: int) -> int:
    """Number of bytes ``encode_varint(value)`` produces."""
    magnitude = abs(value) >> FIRST_DATA_BITS
    size = 1
    while magnitude:
        magnitude >>= DATA_BITS
        size += 1
    return size
