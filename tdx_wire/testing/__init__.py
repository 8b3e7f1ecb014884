"""Fixture interchange format and response builders for stub transports."""

from .fixtures import FixtureRecord, decode_hex, load_fixtures
from .builders import (
    build_connect_payload,
    build_count_payload,
    build_code_list_payload,
    build_quote_payload,
    build_kline_payload,
    build_minute_payload,
    build_trade_payload,
    build_call_auction_payload,
    build_gbbq_payload,
)

__all__ = [
    'FixtureRecord',
    'decode_hex',
    'load_fixtures',
    'build_connect_payload',
    'build_count_payload',
    'build_code_list_payload',
    'build_quote_payload',
    'build_kline_payload',
    'build_minute_payload',
    'build_trade_payload',
    'build_call_auction_payload',
    'build_gbbq_payload',
]
