"""
Corporate action (gbbq) payloads.

Response: 9 reserved bytes, count u16, then 29-byte records:
    Byte 0:      exchange   u8
    Bytes 1-6:   code       6 ASCII
    Byte 7:      reserved
    Bytes 8-11:  date       u32 YYYYMMDD
    Byte 12:     category   u8
    Bytes 13-28: c1..c4     four 4-byte fields, decoded by category

Category 1 (ex-rights/ex-dividend) stores four f32. Categories 11/12
store the ratio in c3 and 13/14 store c1 and c3, all f32. Every other
category stores share counts as packed floats in units of 10 000 shares.
"""

import struct

from ..codec.reader import PayloadReader
from ..codec.volume import decode_packed_float
from ..core.errors import FieldOutOfRange
from ..formats.message_types import Exchange
from .base import (
    DEFAULT_CONTEXT,
    DecodeContext,
    code_bytes,
    decode_records,
    parse_yyyymmdd,
)
from .records import Gbbq, ListResponse


GBBQ_RECORD_SIZE = 29
GBBQ_HEADER_SIZE = 9

SHARE_UNIT = 1e4

_FLOATS = struct.Struct('<4f')


def encode_gbbq_request(code: str) -> bytes:
    return b'\x01\x00' + code_bytes(code)


def _decode_fields(category: int, raw: bytes):
    if category == 1:
        return _FLOATS.unpack(raw)
    if category in (11, 12):
        _, _, c3, _ = _FLOATS.unpack(raw)
        return 0.0, 0.0, c3, 0.0
    if category in (13, 14):
        c1, _, c3, _ = _FLOATS.unpack(raw)
        return c1, 0.0, c3, 0.0
    return tuple(decode_packed_float(raw, i * 4) * SHARE_UNIT for i in range(4))


def _decode_one(reader: PayloadReader, index: int) -> Gbbq:
    exchange_value = reader.u8('exchange')
    try:
        exchange = Exchange(exchange_value)
    except ValueError:
        raise FieldOutOfRange(
            'exchange', {'field': 'exchange', 'value': exchange_value},
        ) from None

    number = reader.raw(6, 'code').decode('ascii', errors='replace')
    reader.skip(1)
    date = parse_yyyymmdd(reader.u32('date'))
    category = reader.u8('category')
    c1, c2, c3, c4 = _decode_fields(category, reader.raw(16, 'fields'))

    return Gbbq(
        code=f'{exchange.prefix}{number}',
        date=date,
        category=category,
        c1=float(c1),
        c2=float(c2),
        c3=float(c3),
        c4=float(c4),
    )


def decode_gbbq(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    reader = PayloadReader(payload)
    reader.skip(GBBQ_HEADER_SIZE)
    count = reader.u16('count')
    reader.require(count * GBBQ_RECORD_SIZE, 'records')
    return ListResponse(count=count, items=tuple(decode_records(reader, count, _decode_one)))
