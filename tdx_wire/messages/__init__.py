"""Payload records, per-type encoders/decoders and the type registry."""

from .records import (
    PRICE_SCALE,
    to_float,
    record_to_dict,
    ConnectInfo,
    StockCode,
    PriceLevel,
    QuoteK,
    Quote,
    KlineCache,
    KlineBar,
    MinutePoint,
    TradeStatus,
    Trade,
    CallAuction,
    Gbbq,
    GBBQ_CATEGORIES,
    ListResponse,
)
from .base import DecodeContext, DEFAULT_CONTEXT
from .kline import decode_bar
from .registry import (
    PayloadCodec,
    codec_for,
    decoder_for,
    encoder_for,
    try_decoder_for,
    registered_types,
)

__all__ = [
    # Records
    'PRICE_SCALE',
    'to_float',
    'record_to_dict',
    'ConnectInfo',
    'StockCode',
    'PriceLevel',
    'QuoteK',
    'Quote',
    'KlineCache',
    'KlineBar',
    'MinutePoint',
    'TradeStatus',
    'Trade',
    'CallAuction',
    'Gbbq',
    'GBBQ_CATEGORIES',
    'ListResponse',
    # Decoding
    'DecodeContext',
    'DEFAULT_CONTEXT',
    'decode_bar',
    # Registry
    'PayloadCodec',
    'codec_for',
    'decoder_for',
    'encoder_for',
    'try_decoder_for',
    'registered_types',
]
