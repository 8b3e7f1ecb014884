"""
Instrument universe payloads: Count and CodeList.

CodeList record (29 bytes):
    Bytes 0-5:   code         6 ASCII digits
    Bytes 6-7:   multiple     u16
    Bytes 8-15:  name         8 bytes GBK, NUL padded
    Bytes 16-19: reserved
    Byte 20:     decimal      i8
    Bytes 21-24: last_price   packed float
    Bytes 25-28: reserved

A CodeList response carries at most one page (1000 records). Paging is
the caller's job; the decoder only sees one payload.
"""

from ..codec.reader import PayloadReader
from ..codec.text import decode_text
from ..formats.message_types import Exchange
from .base import DEFAULT_CONTEXT, DecodeContext, decode_records, pack_u16
from .records import ListResponse, StockCode


CODE_RECORD_SIZE = 29
CODE_PAGE_SIZE = 1000

# Fixed tail of every Count request
_COUNT_TAIL = b'\x75\xC7\x33\x01'


def encode_count_request(exchange: Exchange) -> bytes:
    return bytes([int(Exchange(exchange)), 0x00]) + _COUNT_TAIL


def decode_count(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> int:
    return PayloadReader(payload).u16('count')


def encode_code_list_request(exchange: Exchange, start: int = 0) -> bytes:
    return bytes([int(Exchange(exchange)), 0x00]) + pack_u16('start', start)


def decode_code_list(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ListResponse:
    reader = PayloadReader(payload)
    count = reader.u16('count')
    reader.require(count * CODE_RECORD_SIZE, 'records')

    def decode_one(r: PayloadReader, index: int) -> StockCode:
        code = decode_text(r.raw(6, 'code'), context.text_errors)
        multiple = r.u16('multiple')
        name = decode_text(r.raw(8, 'name'), context.text_errors)
        r.skip(4)
        decimal = r.i8('decimal')
        last_price = r.packed_float('last_price')
        r.skip(4)
        return StockCode(
            code=code,
            name=name,
            multiple=multiple,
            decimal=decimal,
            last_price=last_price,
        )

    return ListResponse(count=count, items=tuple(decode_records(reader, count, decode_one)))
