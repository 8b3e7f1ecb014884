"""
K-line (OHLC bar) payloads.

Request:
    exchange u8, 00, code 6 ASCII, type u8, 00, 01 00,
    start u16, count u16, 10 zero bytes

Response: count u16, then per bar:
    time      4 bytes   intraday: date u16 + minute-of-day u16
                        otherwise: YYYYMMDD u32 (bar stamped 15:00)
    open      varint    delta from the previous bar's close
    close     varint    delta from open
    high      varint    delta from open
    low       varint    delta from open
    volume    packed float
    amount    packed float
    up, down  u16 x2    index instruments only

The intraday date packs ``(year - 2004) << 11 | month * 100 + day``.
Bars are chronological, and the first bar's open is absolute because the
running close starts at zero.
"""

import datetime
from typing import List, Tuple

from ..codec.reader import PayloadReader
from ..core.errors import FieldOutOfRange, InvalidParameter, TdxError
from ..formats.message_types import KlineType
from .base import (
    DEFAULT_CONTEXT,
    DecodeContext,
    code_bytes,
    pack_u16,
    parse_yyyymmdd,
)
from .records import KlineBar, KlineCache, ListResponse


KLINE_PAGE_SIZE = 800

INTRADAY_BASE_YEAR = 2004
INTRADAY_VOLUME_DIVISOR = 100
INDEX_VOLUME_FACTOR = 100
AMOUNT_SCALE = 1000

DAILY_BAR_TIME = datetime.time(15, 0)


def _kline_type(value) -> KlineType:
    try:
        return KlineType(value)
    except ValueError:
        raise InvalidParameter(
            'kline_type', {'param': 'kline_type', 'value': value},
        ) from None


def encode_kline_request(code: str, kline_type, start: int = 0, count: int = KLINE_PAGE_SIZE) -> bytes:
    kline_type = _kline_type(kline_type)
    if not 0 <= count <= KLINE_PAGE_SIZE:
        raise InvalidParameter(
            'count', {'param': 'count', 'value': count, 'max': KLINE_PAGE_SIZE},
        )

    raw = code_bytes(code)
    return (
        raw[:1] + b'\x00' + raw[1:]
        + bytes([int(kline_type), 0x00])
        + b'\x01\x00'
        + pack_u16('start', start)
        + pack_u16('count', count)
        + b'\x00' * 10
    )


def pack_intraday_date(day: datetime.date) -> int:
    """Inverse of the intraday date field."""
    return ((day.year - INTRADAY_BASE_YEAR) << 11) | (day.month * 100 + day.day)


def _decode_time(reader: PayloadReader, kline_type: KlineType) -> datetime.datetime:
    if kline_type.is_intraday:
        packed = reader.u16('date')
        minute_of_day = reader.u16('minute')
        year = (packed >> 11) + INTRADAY_BASE_YEAR
        month = (packed % 2048) // 100
        day = (packed % 2048) % 100
        try:
            return datetime.datetime(year, month, day, minute_of_day // 60, minute_of_day % 60)
        except ValueError as e:
            raise FieldOutOfRange(
                str(e), {'field': 'time', 'date': packed, 'minute': minute_of_day},
            ) from e

    day = parse_yyyymmdd(reader.u32('date'), 'time')
    return datetime.datetime.combine(day, DAILY_BAR_TIME)


def _check_price(value: int, field: str) -> int:
    if value < 0:
        raise FieldOutOfRange(field, {'field': field, 'value': value})
    return value


def decode_bar(
    buffer: bytes,
    offset: int,
    cache: KlineCache,
) -> Tuple[KlineBar, int, KlineCache]:
    """
    Decode one bar starting at ``offset``.

    Returns:
        (bar, offset after the bar, cache to pass to the next bar)
    """
    reader = PayloadReader(buffer, offset)

    time = _decode_time(reader, cache.kline_type)

    open_ = _check_price(cache.previous_close + reader.varint('open'), 'open')
    close = _check_price(open_ + reader.varint('close'), 'close')
    high = _check_price(open_ + reader.varint('high'), 'high')
    low = _check_price(open_ + reader.varint('low'), 'low')

    volume = int(reader.packed_float('volume'))
    if cache.kline_type.is_intraday:
        volume //= INTRADAY_VOLUME_DIVISOR
    amount = int(reader.packed_float('amount') * AMOUNT_SCALE)

    up_count = down_count = 0
    if cache.is_index:
        volume *= INDEX_VOLUME_FACTOR
        up_count = reader.u16('up_count')
        down_count = reader.u16('down_count')

    bar = KlineBar(
        time=time,
        last=cache.previous_close,
        open=open_,
        high=high,
        low=low,
        close=close,
        volume=volume,
        amount=amount,
        up_count=up_count,
        down_count=down_count,
    )
    return bar, reader.offset, cache.advance(close)


def decode_kline(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    """Decode a Kline response. ``context`` supplies the bar period and index flag."""
    reader = PayloadReader(payload)
    count = reader.u16('count')
    offset = reader.offset

    cache = KlineCache(kline_type=_kline_type(context.kline_type), is_index=context.is_index)
    bars: List[KlineBar] = []
    for index in range(count):
        try:
            bar, offset, cache = decode_bar(reader.buffer, offset, cache)
        except TdxError as e:
            raise e.with_context(record_index=index, record_offset=offset)
        bars.append(bar)

    return ListResponse(count=count, items=tuple(bars))
