"""
Packed 4-byte floats used for volumes, amounts and share capital.

Layout (u32, little-endian on the wire):
    Bits 24-31: exponent byte  E      value scale is 2 ** (2E - 127)
    Bits 16-23: high byte      H      bit 7 doubles the scale of the mantissa
    Bits 8-15:  middle byte    M
    Bits 0-7:   low byte       L

    base = 2 ** (2E - 127)
    H < 0x80:  value = base * (1 + H/128 + M/32768 + L/8388608)
    H >= 0x80: value = base * (2 + (H & 0x7F)/64 + 2M/32768 + 2L/8388608)

Each exponent step covers two octaves, with the high bit of H selecting
the upper octave. There is no exact zero; an all-zero word decodes to a
value far below 1, which integer callers truncate to 0.
"""

import math
import struct

from ..core.errors import FieldOutOfRange, PayloadTruncated


PACKED_FLOAT_SIZE = 4

_MANTISSA_BITS = 23
_MANTISSA_ONE = 1 << _MANTISSA_BITS   # 8388608


def decode_packed_float(buffer: bytes, offset: int = 0) -> float:
    """Decode the packed float stored at ``buffer[offset:offset + 4]``."""
    if offset + PACKED_FLOAT_SIZE > len(buffer):
        raise PayloadTruncated(
            "packed float",
            {'offset': offset, 'available': len(buffer) - offset},
        )

    (raw,) = struct.unpack_from('<I', buffer, offset)
    exponent = raw >> 24
    high = (raw >> 16) & 0xFF
    middle = (raw >> 8) & 0xFF
    low = raw & 0xFF

    base = math.ldexp(1.0, exponent * 2 - 0x7F)

    if high > 0x80:
        upper = base * (64.0 + (high & 0x7F)) / 64.0
    else:
        upper = base * high / 128.0

    scale = 2.0 if high & 0x80 else 1.0
    mid = base * middle / 32768.0 * scale
    tail = base * low / 8388608.0 * scale

    return base + upper + mid + tail


def encode_packed_float(value: float) -> bytes:
    """
    Encode a non-negative value as a packed float.

    Zero encodes to four zero bytes. Values keep 23 bits of mantissa.
    """
    if value < 0 or math.isnan(value) or math.isinf(value):
        raise FieldOutOfRange("packed float must be finite and >= 0", {'value': value})
    if value == 0:
        return b'\x00' * PACKED_FLOAT_SIZE

    # 2E - 127 is always odd: pick the odd e with 2**e <= value < 2**(e+2)
    e = math.floor(math.log2(value))
    if e % 2 == 0:
        e -= 1
    while math.ldexp(1.0, e + 2) <= value:
        e += 2
    while math.ldexp(1.0, e) > value:
        e -= 2

    exponent = (e + 127) // 2
    if not 0 <= exponent <= 0xFF:
        raise FieldOutOfRange("packed float exponent out of range", {'value': value})

    ratio = value / math.ldexp(1.0, e)
    if ratio < 2.0:
        mantissa = round((ratio - 1.0) * _MANTISSA_ONE)
        top_flag = 0
    else:
        mantissa = round((ratio - 2.0) / 2.0 * _MANTISSA_ONE)
        top_flag = 0x80
    mantissa = min(mantissa, _MANTISSA_ONE - 1)

    high = top_flag | (mantissa >> 16)
    middle = (mantissa >> 8) & 0xFF
    low = mantissa & 0xFF

    return struct.pack('<I', (exponent << 24) | (high << 16) | (middle << 8) | low)
