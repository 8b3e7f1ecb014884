"""
Shared pieces of the payload codecs.

DecodeContext carries what a decoder cannot learn from the payload
itself: the bar period of a Kline request, whether the instrument is an
index, and the trading date of tick data. Decoders that need none of it
ignore it.
"""

import datetime
import struct
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from ..codec.reader import PayloadReader
from ..codes import split_code
from ..core.errors import FieldOutOfRange, InvalidParameter, TdxError
from ..formats.message_types import KlineType


T = TypeVar('T')

# Prices on the wire are in hundredths; records hold thousandths
PRICE_WIRE_FACTOR = 10

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class DecodeContext:
    """
    Request-side facts a response decoder needs.

    Attributes:
        kline_type: Bar period of the Kline request
        is_index: Instrument is an index (Kline bars carry up/down counts)
        trade_date: Trading day to stamp on tick times
        text_errors: 'replace' or 'strict' for GBK fields
    """
    kline_type: KlineType = KlineType.DAY
    is_index: bool = False
    trade_date: Optional[datetime.date] = None
    text_errors: str = 'replace'

    def date(self) -> datetime.date:
        return self.trade_date or datetime.date.today()


DEFAULT_CONTEXT = DecodeContext()


def decode_records(
    reader: PayloadReader,
    count: int,
    decode_one: Callable[[PayloadReader, int], T],
) -> List[T]:
    """
    Decode ``count`` records, tagging failures with the record index.

    ``decode_one`` receives the reader and the record index.
    """
    items = []
    for index in range(count):
        start = reader.offset
        try:
            items.append(decode_one(reader, index))
        except TdxError as e:
            raise e.with_context(record_index=index, record_offset=start)
    return items


def code_bytes(code: str) -> bytes:
    """``sz000001`` -> exchange byte, then the six ASCII digits."""
    exchange, number = split_code(code)
    return bytes([int(exchange)]) + number.encode('ascii')


def scaled_price(value: int, field: str) -> int:
    """Wire price (hundredths) to record price (thousandths)."""
    price = value * PRICE_WIRE_FACTOR
    if price < 0:
        raise FieldOutOfRange(field, {'field': field, 'value': price})
    return price


def check_u16(name: str, value: int) -> int:
    if not 0 <= value <= _U16_MAX:
        raise InvalidParameter(name, {'param': name, 'value': value, 'max': _U16_MAX})
    return value


def pack_u16(name: str, value: int) -> bytes:
    return struct.pack('<H', check_u16(name, value))


def pack_date(value) -> bytes:
    """Pack a date (or a YYYYMMDD int) as u32."""
    if isinstance(value, (datetime.date, datetime.datetime)):
        number = value.year * 10000 + value.month * 100 + value.day
    else:
        number = int(value)
    if not 0 <= number <= _U32_MAX:
        raise InvalidParameter('date', {'param': 'date', 'value': value})
    return struct.pack('<I', number)


def parse_yyyymmdd(value: int, field: str = 'date') -> datetime.date:
    try:
        return datetime.date(value // 10000, value % 10000 // 100, value % 100)
    except ValueError as e:
        raise FieldOutOfRange(str(e), {'field': field, 'value': value}) from e


def minute_time(day: datetime.date, minute_of_day: int, field: str = 'time') -> datetime.datetime:
    if not 0 <= minute_of_day < 24 * 60:
        raise FieldOutOfRange(field, {'field': field, 'value': minute_of_day})
    return datetime.datetime.combine(day, datetime.time(minute_of_day // 60, minute_of_day % 60))
