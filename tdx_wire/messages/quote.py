"""
Five-level quote payloads.

Request:
    05 00 00 00 00 00 00 00 | n u16 | n x (exchange u8, code 6 ASCII)

Response: 2 reserved bytes, count u16, then one variable-length record
per instrument:

    exchange u8, code 6 ASCII, active1 u16
    close                 varint   absolute, in hundredths
    last, open, high, low varint   deltas from close
    server_time, reserved varint
    total_hand, intuition varint
    amount                packed float
    inside_dish, outer_disc, reserved x2   varint
    5 x (bid delta, ask delta, bid volume, ask volume)   varint
    reserved 2 bytes, reserved x4 varint
    rate u16 (hundredths of a percent), active2 u16

Every price is scaled by 10 into thousandths. Depth prices are deltas
from close.
"""

from typing import Sequence

from ..codec.reader import PayloadReader
from ..codec.text import decode_text
from ..core.errors import FieldOutOfRange, InvalidParameter
from ..formats.message_types import Exchange
from .base import (
    DEFAULT_CONTEXT,
    DecodeContext,
    PRICE_WIRE_FACTOR,
    code_bytes,
    decode_records,
    pack_u16,
    scaled_price,
)
from .records import ListResponse, PriceLevel, Quote, QuoteK


DEPTH_LEVELS = 5

_QUOTE_REQUEST_HEADER = b'\x05\x00\x00\x00\x00\x00\x00\x00'


def encode_quote_request(codes: Sequence[str]) -> bytes:
    """Codes carry their exchange prefix, e.g. ``['sz000001', 'sh600000']``."""
    if isinstance(codes, str):
        codes = [codes]
    if not codes:
        raise InvalidParameter('codes', {'param': 'codes', 'reason': 'empty'})
    body = b''.join(code_bytes(code) for code in codes)
    return _QUOTE_REQUEST_HEADER + pack_u16('count', len(codes)) + body


def _relative(base: int, delta: int, field: str) -> int:
    price = base + delta * PRICE_WIRE_FACTOR
    if price < 0:
        raise FieldOutOfRange(field, {'field': field, 'value': price})
    return price


def _decode_k(reader: PayloadReader) -> QuoteK:
    close = scaled_price(reader.varint('close'), 'close')
    last = _relative(close, reader.varint('last'), 'last')
    open_ = _relative(close, reader.varint('open'), 'open')
    high = _relative(close, reader.varint('high'), 'high')
    low = _relative(close, reader.varint('low'), 'low')
    return QuoteK(last=last, open=open_, high=high, low=low, close=close)


def _decode_quote(reader: PayloadReader, context: DecodeContext) -> Quote:
    exchange_value = reader.u8('exchange')
    try:
        exchange = Exchange(exchange_value)
    except ValueError:
        raise FieldOutOfRange(
            'exchange', {'field': 'exchange', 'value': exchange_value},
        ) from None

    code = decode_text(reader.raw(6, 'code'), context.text_errors)
    active1 = reader.u16('active1')
    k = _decode_k(reader)

    server_time = str(reader.varint('server_time'))
    reader.varint('reserved')
    total_hand = reader.varint('total_hand')
    intuition = reader.varint('intuition')
    amount = reader.packed_float('amount')
    inside_dish = reader.varint('inside_dish')
    outer_disc = reader.varint('outer_disc')
    reader.varint('reserved')
    reader.varint('reserved')

    bids = []
    asks = []
    for level in range(DEPTH_LEVELS):
        bid_price = _relative(k.close, reader.varint(f'bid{level + 1}'), f'bid{level + 1}')
        ask_price = _relative(k.close, reader.varint(f'ask{level + 1}'), f'ask{level + 1}')
        bid_volume = reader.varint(f'bid{level + 1}_volume')
        ask_volume = reader.varint(f'ask{level + 1}_volume')
        bids.append(PriceLevel(price=bid_price, volume=bid_volume))
        asks.append(PriceLevel(price=ask_price, volume=ask_volume))

    reader.skip(2)
    for _ in range(4):
        reader.varint('reserved')

    rate = reader.u16('rate') / 100.0
    active2 = reader.u16('active2')

    return Quote(
        exchange=exchange,
        code=code,
        active1=active1,
        k=k,
        server_time=server_time,
        total_hand=total_hand,
        intuition=intuition,
        amount=amount,
        inside_dish=inside_dish,
        outer_disc=outer_disc,
        bids=tuple(bids),
        asks=tuple(asks),
        rate=rate,
        active2=active2,
    )


def decode_quote(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    reader = PayloadReader(payload)
    reader.skip(2)
    count = reader.u16('count')
    items = decode_records(reader, count, lambda r, _: _decode_quote(r, context))
    return ListResponse(count=count, items=tuple(items))
