"""Pytest fixtures shared by the tdx-wire tests."""

import datetime
import random
from typing import Callable, Dict, List

import pytest

from tdx_wire.codec.facade import TdxCodec
from tdx_wire.formats.frame import RequestFrame, build_response, parse_request
from tdx_wire.formats.message_types import CONTROL_SUCCESS, MessageType


TRADE_DATE = datetime.date(2024, 3, 15)


class StubServer:
    """
    In-memory transport: answers each request with a canned payload.

    Handlers map a MessageType to ``handler(request) -> payload``. The
    response echoes the request id unless ``msg_id_offset`` is set.
    """

    def __init__(self, handlers: Dict[MessageType, Callable[[RequestFrame], bytes]]):
        self.handlers = handlers
        self.requests: List[RequestFrame] = []
        self.msg_id_offset = 0
        self.control = CONTROL_SUCCESS
        self.compress = False

    def __call__(self, data: bytes) -> bytes:
        request = parse_request(data)
        self.requests.append(request)
        payload = self.handlers[MessageType(request.msg_type)](request)
        return build_response(
            request.msg_type,
            payload,
            msg_id=request.msg_id + self.msg_id_offset,
            compress=self.compress,
            control=self.control,
        )


@pytest.fixture
def codec():
    return TdxCodec()


@pytest.fixture
def rng():
    """Seeded RNG so property-style tests are reproducible."""
    return random.Random(20240315)


@pytest.fixture
def trade_date():
    return TRADE_DATE


@pytest.fixture
def stub_server():
    def make(handlers):
        return StubServer(handlers)
    return make
