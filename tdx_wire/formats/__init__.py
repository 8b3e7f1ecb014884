"""Frame layouts, message type table and compression."""

from .message_types import (
    MessageType,
    Exchange,
    KlineType,
    REQUEST_PREFIX,
    RESPONSE_PREFIX,
    RESPONSE_PREFIX_LE,
    CONTROL_REQUEST,
    CONTROL_SUCCESS,
    CONTROL_ERROR,
)
from .compression import reverse, compress
from .frame import (
    RequestFrame,
    ResponseFrame,
    REQUEST_HEADER_SIZE,
    RESPONSE_HEADER_SIZE,
    build_request,
    parse_request,
    build_response,
    parse_response,
    split_frames,
)

__all__ = [
    'MessageType',
    'Exchange',
    'KlineType',
    'REQUEST_PREFIX',
    'RESPONSE_PREFIX',
    'RESPONSE_PREFIX_LE',
    'CONTROL_REQUEST',
    'CONTROL_SUCCESS',
    'CONTROL_ERROR',
    'reverse',
    'compress',
    'RequestFrame',
    'ResponseFrame',
    'REQUEST_HEADER_SIZE',
    'RESPONSE_HEADER_SIZE',
    'build_request',
    'parse_request',
    'build_response',
    'parse_response',
    'split_frames',
]
