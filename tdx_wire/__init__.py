"""
tdx-wire: codec for the TDX market-data wire protocol.

Builds request frames, parses and decompresses response frames, and
decodes the typed payloads into immutable records. No sockets; bring
your own transport.
"""

__version__ = "0.3.0"

from .core.errors import TdxError, UnknownMessageType
from .formats.message_types import MessageType, Exchange, KlineType
from .formats.frame import (
    RequestFrame,
    ResponseFrame,
    build_request,
    parse_request,
    build_response,
    parse_response,
    split_frames,
)
from .formats.compression import reverse
from .codec.varint import decode_varint, encode_varint
from .codec.text import decode_text
from .codec.facade import TdxCodec, DecodedResponse
from .messages.registry import decoder_for, encoder_for, try_decoder_for
from .messages.kline import decode_bar
from .messages.records import KlineCache, to_float, PRICE_SCALE
from .streaming.sequence import MessageIdSequencer
from .client.session import Session
from .config.schema import TdxConfig, load_config

__all__ = [
    '__version__',
    'TdxError',
    'UnknownMessageType',
    'MessageType',
    'Exchange',
    'KlineType',
    'RequestFrame',
    'ResponseFrame',
    'build_request',
    'parse_request',
    'build_response',
    'parse_response',
    'split_frames',
    'reverse',
    'decode_varint',
    'encode_varint',
    'decode_text',
    'TdxCodec',
    'DecodedResponse',
    'decoder_for',
    'encoder_for',
    'try_decoder_for',
    'decode_bar',
    'KlineCache',
    'to_float',
    'PRICE_SCALE',
    'MessageIdSequencer',
    'Session',
    'TdxConfig',
    'load_config',
]
