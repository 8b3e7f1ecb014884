"""
Tick-by-tick trade payloads: Trade (today) and HistoryTrade.

Trade response: count u16, then per tick
    minute-of-day u16, price delta varint (running sum, hundredths),
    volume varint, number varint, status varint, reserved varint

HistoryTrade response: count u16, 4 reserved bytes, then the same ticks
without the ``number`` field.

Ticks only carry the minute of day; the trading date comes from the
decode context.
"""

from ..codec.reader import PayloadReader
from ..core.errors import FieldOutOfRange
from .base import (
    DEFAULT_CONTEXT,
    DecodeContext,
    PRICE_WIRE_FACTOR,
    code_bytes,
    decode_records,
    minute_time,
    pack_date,
    pack_u16,
)
from .records import ListResponse, Trade, TradeStatus


TRADE_PAGE_SIZE = 1800
HISTORY_TRADE_PAGE_SIZE = 2000


def encode_trade_request(code: str, start: int = 0, count: int = TRADE_PAGE_SIZE) -> bytes:
    raw = code_bytes(code)
    return raw[:1] + b'\x00' + raw[1:] + pack_u16('start', start) + pack_u16('count', count)


def encode_history_trade_request(
    code: str,
    date,
    start: int = 0,
    count: int = HISTORY_TRADE_PAGE_SIZE,
) -> bytes:
    raw = code_bytes(code)
    return (
        pack_date(date)
        + raw[:1] + b'\x00' + raw[1:]
        + pack_u16('start', start)
        + pack_u16('count', count)
    )


def _decode_ticks(reader: PayloadReader, count: int, context: DecodeContext, with_number: bool):
    day = context.date()
    running = 0

    def decode_one(r: PayloadReader, index: int) -> Trade:
        nonlocal running
        time = minute_time(day, r.u16('time'))
        running += r.varint('price') * PRICE_WIRE_FACTOR
        if running < 0:
            raise FieldOutOfRange('price', {'field': 'price', 'value': running})
        volume = r.varint('volume')
        number = r.varint('number') if with_number else 0
        status = TradeStatus.from_wire(r.varint('status'))
        r.varint('reserved')
        return Trade(time=time, price=running, volume=volume, status=status, number=number)

    return decode_records(reader, count, decode_one)


def decode_trade(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    reader = PayloadReader(payload)
    count = reader.u16('count')
    return ListResponse(count=count, items=tuple(_decode_ticks(reader, count, context, True)))


def decode_history_trade(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    reader = PayloadReader(payload)
    count = reader.u16('count')
    reader.skip(4)
    return ListResponse(count=count, items=tuple(_decode_ticks(reader, count, context, False)))
