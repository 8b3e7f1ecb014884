"""
Intraday price curve payloads: Minute (today) and HistoryMinute.

Both responses share one layout: count u16, 4 reserved bytes, then per
point a price delta varint (running sum, in hundredths), a reserved
varint and a volume varint.

Points carry no timestamp. The first point is 09:31 and each following
point one minute later; after 120 points (the morning session ends at
11:30) the clock jumps to 13:01.
"""

from ..codec.reader import PayloadReader
from ..core.errors import FieldOutOfRange
from .base import (
    DEFAULT_CONTEXT,
    DecodeContext,
    PRICE_WIRE_FACTOR,
    code_bytes,
    decode_records,
    pack_date,
)
from .records import ListResponse, MinutePoint


MORNING_POINTS = 120
MORNING_OPEN = 9 * 60 + 30
AFTERNOON_BASE = 11 * 60


def point_minute(index: int) -> int:
    """Minute of day of the point at ``index``."""
    if index < MORNING_POINTS:
        return MORNING_OPEN + index + 1
    return AFTERNOON_BASE + index + 1


def encode_minute_request(code: str) -> bytes:
    raw = code_bytes(code)
    return raw[:1] + b'\x00' + raw[1:] + b'\x00' * 4


def encode_history_minute_request(code: str, date) -> bytes:
    """``date`` is a ``datetime.date`` or a YYYYMMDD int."""
    return pack_date(date) + code_bytes(code)


def decode_minute(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    reader = PayloadReader(payload)
    count = reader.u16('count')
    reader.skip(4)

    running = 0

    def decode_one(r: PayloadReader, index: int) -> MinutePoint:
        nonlocal running
        running += r.varint('price')
        r.varint('reserved')
        volume = r.varint('volume')
        price = running * PRICE_WIRE_FACTOR
        if price < 0:
            raise FieldOutOfRange('price', {'field': 'price', 'value': price})
        return MinutePoint(minute_of_day=point_minute(index), price=price, volume=volume)

    return ListResponse(count=count, items=tuple(decode_records(reader, count, decode_one)))


# Same layout; the date only matters to the request
decode_history_minute = decode_minute
