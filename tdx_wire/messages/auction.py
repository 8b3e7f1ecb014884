"""
Pre-open call auction payloads.

Response: count u16, then 16-byte records:
    Bytes 0-1:   minute-of-day   u16
    Bytes 2-5:   price           f32
    Bytes 6-9:   matched         u32
    Bytes 10-11: unmatched       i16, negative when the surplus is on the ask side
    Bytes 12-14: reserved
    Byte 15:     second          u8
"""

import datetime
import math

from ..codec.reader import PayloadReader
from ..core.errors import FieldOutOfRange
from .base import DEFAULT_CONTEXT, DecodeContext, code_bytes, decode_records
from .records import CallAuction, ListResponse, PRICE_SCALE


AUCTION_RECORD_SIZE = 16

_AUCTION_REQUEST_TAIL = bytes.fromhex(
    '00000000' '03000000' '00000000' '00000000' 'f4010000'
)


def encode_call_auction_request(code: str) -> bytes:
    raw = code_bytes(code)
    return raw[:1] + b'\x00' + raw[1:] + _AUCTION_REQUEST_TAIL


def _decode_one(reader: PayloadReader, index: int) -> CallAuction:
    minute_of_day = reader.u16('time')
    price = reader.f32('price')
    matched = reader.u32('matched')
    unmatched = reader.i16('unmatched')
    reader.skip(3)
    second = reader.u8('second')

    try:
        time = datetime.time(minute_of_day // 60, minute_of_day % 60, second)
    except ValueError as e:
        raise FieldOutOfRange(
            str(e), {'field': 'time', 'minute': minute_of_day, 'second': second},
        ) from e

    if not math.isfinite(price):
        raise FieldOutOfRange('price', {'field': 'price', 'value': price})

    scaled = round(price * PRICE_SCALE)
    if scaled < 0:
        raise FieldOutOfRange('price', {'field': 'price', 'value': scaled})

    return CallAuction(
        time=time,
        price=scaled,
        matched=matched,
        unmatched=abs(unmatched),
        flag=-1 if unmatched < 0 else 1,
    )


def decode_call_auction(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    reader = PayloadReader(payload)
    count = reader.u16('count')
    reader.require(count * AUCTION_RECORD_SIZE, 'records')
    return ListResponse(count=count, items=tuple(decode_records(reader, count, _decode_one)))
