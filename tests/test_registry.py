"""
Tests for the message type registry.

CRITICAL TESTS:
1. test_every_type_registered - each MessageType has an encoder and a decoder
2. test_unknown_type - 0x9999 raises UnknownMessageType, frame header still parses
"""

import pytest

from tdx_wire.core.errors import ErrorCode, UnknownMessageType
from tdx_wire.formats.frame import build_response, parse_response
from tdx_wire.formats.message_types import MessageType
from tdx_wire.messages.kline import decode_kline
from tdx_wire.messages.registry import (
    codec_for,
    decoder_for,
    encoder_for,
    registered_types,
    try_decoder_for,
)


class TestRegistry:
    """Fixed dispatch table."""

    def test_every_type_registered(self):
        assert set(registered_types()) == set(MessageType)
        for msg_type in MessageType:
            codec = codec_for(msg_type)
            assert codec.msg_type is msg_type
            assert codec.name == msg_type.name
            assert callable(codec.encode)
            assert callable(codec.decode)

    def test_lookup_by_int(self):
        assert decoder_for(0x052D) is decode_kline
        assert decoder_for(MessageType.KLINE) is decode_kline

    def test_params(self):
        assert codec_for(MessageType.KLINE).params == ('code', 'kline_type', 'start', 'count')
        assert codec_for(MessageType.CONNECT).params == ()

    def test_encoders_build_payloads(self):
        assert encoder_for(MessageType.CONNECT)() == b'\x01'
        assert encoder_for(MessageType.GBBQ)(code='sz000001') == b'\x01\x00\x00000001'

    def test_unknown_type(self):
        frame = parse_response(build_response(0x9999, b'\xAA', msg_id=4))
        assert frame.msg_id == 4
        assert frame.zip_length == frame.raw_length == 1

        with pytest.raises(UnknownMessageType) as exc:
            decoder_for(frame.msg_type)
        assert exc.value.msg_type == 0x9999
        assert exc.value.code is ErrorCode.E3001_UNKNOWN_MESSAGE_TYPE
        assert '0x9999' in str(exc.value)

        with pytest.raises(UnknownMessageType):
            encoder_for(0x9999)

    def test_try_decoder_for(self):
        assert try_decoder_for(0x9999) is None
        assert try_decoder_for(MessageType.KLINE) is decode_kline
