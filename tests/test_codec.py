"""
Tests for the TdxCodec facade and end-to-end request/response flows.

CRITICAL TESTS:
1. test_connect_flow - request starts 0C with type 0x000D, response control 0x1C
2. test_count_flow - payload E8 03 00 00 decodes to 1000
3. test_compressed_quote_length_mismatch - wrong raw_len raises DecompressionLengthMismatch
4. test_unknown_type_raise_and_skip - 0x9999 is reported, header still parsed
"""

import datetime
import logging
import struct

import pytest

from tdx_wire.codec.facade import DecodedResponse, TdxCodec, resolve_kind
from tdx_wire.config.schema import CodecConfig, TdxConfig
from tdx_wire.core.errors import (
    DecompressionLengthMismatch,
    FieldOutOfRange,
    InvalidParameter,
    PayloadTruncated,
    UnknownMessageType,
)
from tdx_wire.formats.compression import compress
from tdx_wire.formats.frame import RESPONSE_HEADER_SIZE, build_response, parse_request
from tdx_wire.formats.message_types import (
    CONTROL_SUCCESS,
    Exchange,
    KlineType,
    MessageType,
)
from tdx_wire.messages.base import DecodeContext
from tdx_wire.messages.records import KlineBar, StockCode, Trade, TradeStatus
from tdx_wire.streaming.sequence import MessageIdSequencer
from tdx_wire.testing import (
    build_code_list_payload,
    build_connect_payload,
    build_kline_payload,
    build_trade_payload,
)


class TestResolveKind:
    """Message kinds by name, code or enum."""

    def test_names(self):
        assert resolve_kind('kline') == MessageType.KLINE
        assert resolve_kind('history-trade') == MessageType.HISTORY_TRADE
        assert resolve_kind('CALL_AUCTION') == MessageType.CALL_AUCTION

    def test_codes(self):
        assert resolve_kind(0x053E) == MessageType.QUOTE
        assert resolve_kind(MessageType.GBBQ) == 0x000F

    def test_unknown_name(self):
        with pytest.raises(InvalidParameter):
            resolve_kind('orderbook')


class TestEncodeRequest:
    """Request building through the facade."""

    def test_ids_from_sequencer(self, codec):
        first = codec.encode_request(MessageType.HEARTBEAT)
        second = codec.encode_request(MessageType.HEARTBEAT)
        assert (first.msg_id, second.msg_id) == (1, 2)

    def test_explicit_msg_id(self, codec):
        frame = codec.encode_request('connect', msg_id=77)
        assert frame.msg_id == 77
        assert codec.sequencer.peek() == 1

    def test_params_reach_encoder(self, codec):
        data = codec.build_request('kline', code='sz000001', kline_type=KlineType.DAY,
                                   start=0, count=10)
        frame = parse_request(data)
        assert frame.msg_type == MessageType.KLINE
        assert frame.payload[:8] == b'\x00\x00000001'
        assert struct.unpack_from('<HH', frame.payload, 12) == (0, 10)

    def test_raw_payload(self, codec):
        frame = codec.encode_request(MessageType.COUNT, payload=b'\x01\x00\x75\xC7\x33\x01')
        assert frame.payload == b'\x01\x00\x75\xC7\x33\x01'

    def test_payload_and_params_exclusive(self, codec):
        with pytest.raises(InvalidParameter):
            codec.encode_request(MessageType.COUNT, payload=b'', exchange=Exchange.SH)

    def test_unknown_kind(self, codec):
        with pytest.raises(UnknownMessageType):
            codec.encode_request(0x9999)

    def test_initial_id_from_config(self):
        codec = TdxCodec(TdxConfig(codec=CodecConfig(initial_msg_id=500)))
        assert codec.encode_request(MessageType.HEARTBEAT).msg_id == 500

    def test_shared_sequencer(self):
        sequencer = MessageIdSequencer(start=10)
        a = TdxCodec(sequencer=sequencer)
        b = TdxCodec(sequencer=sequencer)
        assert a.encode_request('heartbeat').msg_id == 10
        assert b.encode_request('heartbeat').msg_id == 11


class TestScenarios:
    """End-to-end flows over canned responses."""

    def test_connect_flow(self, codec):
        request = codec.build_request(MessageType.CONNECT)
        assert request[0] == 0x0C
        assert struct.unpack_from('<H', request, 10)[0] == 0x000D

        response = build_response(
            MessageType.CONNECT,
            build_connect_payload('深圳双线主站'),
            msg_id=parse_request(request).msg_id,
        )
        result = codec.decode_response(response)
        assert result.frame.control == CONTROL_SUCCESS == 0x1C
        assert result.records.info == '深圳双线主站'
        assert result.msg_id == 1

    def test_count_flow(self, codec):
        response = build_response(MessageType.COUNT, bytes.fromhex('E8 03 00 00'), msg_id=2)
        result = codec.decode_response(response)
        assert result.kind is MessageType.COUNT
        assert result.records == 1000

    def test_compressed_quote(self, codec):
        codes = [StockCode(f'{i:06d}', f'S{i}', 100, 2, float(i)) for i in range(50)]
        payload = build_code_list_payload(codes)
        response = build_response(MessageType.CODE_LIST, payload, msg_id=3, compress=True)

        result = codec.decode_response(response)
        assert result.frame.is_compressed
        assert len(result.payload) == result.frame.raw_length
        assert list(result.records) == codes

    def test_compressed_quote_length_mismatch(self, codec):
        payload = b'\x00\x00\x00\x00' + b'\x00' * 400
        packed = compress(payload)
        header = struct.pack('<4sBIBHHH', b'\xB1\xCB\x74\x00', 0x1C, 3, 0,
                             MessageType.QUOTE, len(packed), len(payload) + 5)
        with pytest.raises(DecompressionLengthMismatch):
            codec.decode_response(header + packed)

    def test_unknown_type_raise_and_skip(self, codec, caplog):
        response = build_response(0x9999, b'\x01\x02\x03', msg_id=8)

        with pytest.raises(UnknownMessageType) as exc:
            codec.decode_response(response)
        assert exc.value.msg_type == 0x9999
        assert exc.value.context['msg_id'] == 8

        with caplog.at_level(logging.WARNING, logger='tdx_wire.codec.facade'):
            result = codec.decode_response(response, on_unknown='skip')
        assert isinstance(result, DecodedResponse)
        assert not result.known
        assert result.records is None
        assert result.frame.msg_type == 0x9999
        assert result.frame.msg_id == 8
        assert result.payload == b'\x01\x02\x03'
        assert 'UNKNOWN(0x9999)' in caplog.text

    def test_skip_policy_from_config(self):
        codec = TdxCodec(TdxConfig(codec=CodecConfig(on_unknown_type='skip')))
        result = codec.decode_response(build_response(0x9999, b'', msg_id=1))
        assert not result.known

    def test_bad_policy(self, codec):
        with pytest.raises(InvalidParameter):
            codec.decode_response(build_response(MessageType.COUNT, b'\x01\x00', msg_id=1),
                                  on_unknown='ignore')


class TestDecodeResponse:
    """Context handling and error tagging."""

    def test_kline_overrides(self, codec):
        bars = [KlineBar(datetime.datetime(2024, 3, 15, 9, 35), 0, 1000, 1010, 990, 1005,
                         200, 1000000)]
        response = build_response(MessageType.KLINE,
                                  build_kline_payload(bars, KlineType.MINUTE5), msg_id=4)
        result = codec.decode_response(response, kline_type=KlineType.MINUTE5)
        assert list(result.records) == bars

    def test_context_object(self, codec, trade_date):
        ticks = [Trade(datetime.datetime(2024, 3, 15, 10, 1), 5000, 10, TradeStatus.BUY, 1)]
        response = build_response(MessageType.TRADE, build_trade_payload(ticks), msg_id=5)
        result = codec.decode_response(response, DecodeContext(trade_date=trade_date))
        assert list(result.records) == ticks

    def test_none_overrides_ignored(self, codec):
        context = codec.make_context(kline_type=None, trade_date=None)
        assert context == DecodeContext()

    def test_text_policy_from_config(self):
        codec = TdxCodec(TdxConfig(codec=CodecConfig(text_errors='strict')))
        assert codec.make_context().text_errors == 'strict'

    def test_errors_carry_frame_context(self, codec):
        response = build_response(MessageType.KLINE, b'\x01\x00\x00', msg_id=6)
        with pytest.raises(PayloadTruncated) as exc:
            codec.decode_response(response)
        assert exc.value.context['msg_type'] == 'KLINE'
        assert exc.value.context['msg_id'] == 6
        assert exc.value.context['record_index'] == 0
        assert exc.value.to_dict()['code'] == 'E4001'

    def test_out_of_range_context(self, codec):
        payload = struct.pack('<H', 1) + struct.pack('<HH', 24 * 60, 1) + b'\x00' * 6
        response = build_response(MessageType.TRADE, payload, msg_id=7)
        with pytest.raises(FieldOutOfRange) as exc:
            codec.decode_response(response)
        assert exc.value.context['msg_type'] == 'TRADE'

    def test_parsed_frame_accepted(self, codec):
        frame = codec.parse_response(build_response(MessageType.COUNT, b'\x10\x00', msg_id=1))
        assert codec.decode_response(frame).records == 16

    def test_decode_payload(self, codec):
        assert codec.decode_payload(MessageType.COUNT, b'\x05\x00') == 5
        with pytest.raises(UnknownMessageType):
            codec.decode_payload(0x9999, b'')

    def test_idempotent(self, codec):
        """Decoding the same bytes twice gives equal, independent results."""
        codes = [StockCode('000001', '平安银行', 100, 2, 10.5)]
        response = build_response(MessageType.CODE_LIST, build_code_list_payload(codes),
                                  msg_id=9, compress=True)
        first = codec.decode_response(response)
        second = codec.decode_response(response)
        assert first.records == second.records
        assert first.records is not second.records

    def test_header_size(self, codec):
        response = build_response(MessageType.HEARTBEAT, b'', msg_id=1)
        assert len(response) == RESPONSE_HEADER_SIZE
        result = codec.decode_response(response)
        assert result.records is None
        assert result.known
