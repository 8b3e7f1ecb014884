"""
Connect and Heartbeat payloads.

Connect opens a session; the server answers with 68 bytes of opaque
session data followed by a GBK banner. Heartbeat has no payload in
either direction.
"""

from typing import Optional

from ..codec.reader import PayloadReader
from ..codec.text import decode_text
from .base import DEFAULT_CONTEXT, DecodeContext
from .records import ConnectInfo


CONNECT_HEADER_SIZE = 68


def encode_connect_request() -> bytes:
    return b'\x01'


def decode_connect(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> ConnectInfo:
    reader = PayloadReader(payload)
    reader.skip(CONNECT_HEADER_SIZE, 'session_header')
    return ConnectInfo(info=decode_text(reader.rest(), context.text_errors))


def encode_heartbeat_request() -> bytes:
    return b''


def decode_heartbeat(payload: bytes, context: DecodeContext = DEFAULT_CONTEXT) -> Optional[ConnectInfo]:
    """Nothing to decode; any payload is accepted."""
    return None
