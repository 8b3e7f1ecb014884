"""
Message type registry.

Maps each 16-bit type code to its payload encoder and decoder. The table
is built once at import time and never changes.

Encoders take keyword parameters and return the request payload.
Decoders take ``(payload, context)`` and return records.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ..core.errors import UnknownMessageType
from ..formats.message_types import MessageType
from . import auction, gbbq, handshake, kline, listing, minute, quote, trade

logger = logging.getLogger(__name__)


PayloadEncoder = Callable[..., bytes]
PayloadDecoder = Callable[..., Any]


@dataclass(frozen=True)
class PayloadCodec:
    """
    Encoder/decoder pair for one message type.

    Attributes:
        msg_type: Type code carried in frame headers
        encode: Builds the request payload from keyword parameters
        decode: Turns a decompressed response payload into records
        params: Names of the encoder's parameters, in request order
    """
    msg_type: MessageType
    encode: PayloadEncoder
    decode: PayloadDecoder
    params: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.msg_type.name


_REGISTRY: Dict[int, PayloadCodec] = {
    codec.msg_type: codec
    for codec in (
        PayloadCodec(MessageType.CONNECT, handshake.encode_connect_request,
                     handshake.decode_connect),
        PayloadCodec(MessageType.HEARTBEAT, handshake.encode_heartbeat_request,
                     handshake.decode_heartbeat),
        PayloadCodec(MessageType.COUNT, listing.encode_count_request,
                     listing.decode_count, ('exchange',)),
        PayloadCodec(MessageType.CODE_LIST, listing.encode_code_list_request,
                     listing.decode_code_list, ('exchange', 'start')),
        PayloadCodec(MessageType.QUOTE, quote.encode_quote_request,
                     quote.decode_quote, ('codes',)),
        PayloadCodec(MessageType.KLINE, kline.encode_kline_request,
                     kline.decode_kline, ('code', 'kline_type', 'start', 'count')),
        PayloadCodec(MessageType.MINUTE, minute.encode_minute_request,
                     minute.decode_minute, ('code',)),
        PayloadCodec(MessageType.HISTORY_MINUTE, minute.encode_history_minute_request,
                     minute.decode_history_minute, ('code', 'date')),
        PayloadCodec(MessageType.TRADE, trade.encode_trade_request,
                     trade.decode_trade, ('code', 'start', 'count')),
        PayloadCodec(MessageType.HISTORY_TRADE, trade.encode_history_trade_request,
                     trade.decode_history_trade, ('code', 'date', 'start', 'count')),
        PayloadCodec(MessageType.CALL_AUCTION, auction.encode_call_auction_request,
                     auction.decode_call_auction, ('code',)),
        PayloadCodec(MessageType.GBBQ, gbbq.encode_gbbq_request,
                     gbbq.decode_gbbq, ('code',)),
    )
}


def codec_for(msg_type: int) -> PayloadCodec:
    """
    Get the codec pair for a type code.

    Raises:
        UnknownMessageType: no codec is registered for ``msg_type``
    """
    try:
        return _REGISTRY[int(msg_type)]
    except KeyError:
        raise UnknownMessageType(int(msg_type)) from None


def decoder_for(msg_type: int) -> PayloadDecoder:
    return codec_for(msg_type).decode


def encoder_for(msg_type: int) -> PayloadEncoder:
    return codec_for(msg_type).encode


def try_decoder_for(msg_type: int) -> Optional[PayloadDecoder]:
    """Like ``decoder_for`` but returns None for unknown types."""
    codec = _REGISTRY.get(int(msg_type))
    if codec is None:
        logger.debug("no decoder for %s", MessageType.label(int(msg_type)))
        return None
    return codec.decode


def registered_types() -> Tuple[MessageType, ...]:
    return tuple(codec.msg_type for codec in _REGISTRY.values())
