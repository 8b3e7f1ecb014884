"""
Codec facade: request building and response decoding in one place.

TdxCodec owns the message id sequencer and applies the configured
policies (text errors, unknown types). It performs no I/O.

Usage:
    codec = TdxCodec()
    request = codec.build_request(MessageType.KLINE, code='sz000001',
                                  kline_type=KlineType.DAY, count=10)
    result = codec.decode_response(response_bytes, kline_type=KlineType.DAY)
    for bar in result.records:
        ...
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Union

from ..config.schema import TdxConfig, UNKNOWN_TYPE_POLICIES
from ..core.errors import InvalidParameter, TdxError, UnknownMessageType
from ..formats.frame import RequestFrame, ResponseFrame, parse_response
from ..formats.message_types import MessageType
from ..messages.base import DecodeContext
from ..messages.registry import codec_for, try_decoder_for
from ..streaming.sequence import MessageIdSequencer

logger = logging.getLogger(__name__)


Kind = Union[MessageType, int, str]


def resolve_kind(kind: Kind) -> int:
    """Accept a MessageType, a raw type code or a name like 'kline' / 'HISTORY_TRADE'."""
    if isinstance(kind, str):
        key = kind.strip().upper().replace('-', '_')
        try:
            return MessageType[key]
        except KeyError:
            raise InvalidParameter(kind, {'param': 'kind', 'value': kind}) from None
    return int(kind)


@dataclass(frozen=True)
class DecodedResponse:
    """
    Result of decoding one response frame.

    ``known`` is False when the type has no registered decoder and the
    codec was told to skip; ``records`` is then None and ``payload``
    still holds the decompressed bytes.
    """
    frame: ResponseFrame
    payload: bytes
    records: Any
    known: bool = True

    @property
    def kind(self) -> Optional[MessageType]:
        return self.frame.kind

    @property
    def msg_id(self) -> int:
        return self.frame.msg_id


class TdxCodec:
    """
    Stateless apart from the message id sequencer.

    Safe to share between threads; every call works on its own buffers.
    """

    def __init__(
        self,
        config: Optional[TdxConfig] = None,
        sequencer: Optional[MessageIdSequencer] = None,
    ):
        self.config = config or TdxConfig()
        self.sequencer = sequencer or MessageIdSequencer(self.config.codec.initial_msg_id)

    # =========================================================================
    # Requests
    # =========================================================================

    def encode_request(
        self,
        kind: Kind,
        payload: Optional[bytes] = None,
        msg_id: Optional[int] = None,
        **params,
    ) -> RequestFrame:
        """
        Build a request frame object.

        Either pass a ready ``payload`` or the type's keyword parameters
        (see ``PayloadCodec.params``). A fresh id is drawn from the
        sequencer unless ``msg_id`` is given.
        """
        msg_type = resolve_kind(kind)
        if payload is None:
            payload = codec_for(msg_type).encode(**params)
        elif params:
            raise InvalidParameter(
                "payload and parameters are exclusive",
                {'params': sorted(params)},
            )

        if msg_id is None:
            msg_id = self.sequencer.next()

        return RequestFrame(msg_id=msg_id, msg_type=msg_type, payload=bytes(payload))

    def build_request(
        self,
        kind: Kind,
        payload: Optional[bytes] = None,
        msg_id: Optional[int] = None,
        **params,
    ) -> bytes:
        """Build request frame bytes. See ``encode_request``."""
        return self.encode_request(kind, payload, msg_id, **params).encode()

    # =========================================================================
    # Responses
    # =========================================================================

    def parse_response(self, data: bytes) -> ResponseFrame:
        return parse_response(data)

    def make_context(self, context: Optional[DecodeContext] = None, **overrides) -> DecodeContext:
        base = context or DecodeContext(text_errors=self.config.codec.text_errors)
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(base, **overrides) if overrides else base

    def decode_payload(self, msg_type: int, payload: bytes, context: Optional[DecodeContext] = None, **overrides) -> Any:
        """
        Decode an already decompressed payload.

        Raises:
            UnknownMessageType: no decoder for ``msg_type``
        """
        return codec_for(msg_type).decode(payload, self.make_context(context, **overrides))

    def decode_response(
        self,
        data: Union[bytes, ResponseFrame],
        context: Optional[DecodeContext] = None,
        on_unknown: Optional[str] = None,
        **overrides,
    ) -> DecodedResponse:
        """
        Parse, decompress and decode one response frame.

        Args:
            data: Complete frame bytes, or an already parsed frame
            context: Request-side facts (kline type, index flag, trade date)
            on_unknown: 'raise' or 'skip'; defaults to config.codec.on_unknown_type
            **overrides: DecodeContext fields, e.g. ``kline_type=KlineType.DAY``

        Raises:
            FrameError, CompressionError, PayloadError: response is unusable
            UnknownMessageType: unknown type and policy is 'raise'
        """
        policy = on_unknown or self.config.codec.on_unknown_type
        if policy not in UNKNOWN_TYPE_POLICIES:
            raise InvalidParameter(policy, {'param': 'on_unknown', 'value': policy})

        frame = data if isinstance(data, ResponseFrame) else parse_response(data)
        payload = frame.data()

        decoder = try_decoder_for(frame.msg_type)
        if decoder is None:
            if policy == 'raise':
                raise UnknownMessageType(frame.msg_type, {'msg_id': frame.msg_id})
            logger.warning(
                "skipping response with unknown type %s (id=%d, %d bytes)",
                MessageType.label(frame.msg_type), frame.msg_id, len(payload),
            )
            return DecodedResponse(frame=frame, payload=payload, records=None, known=False)

        try:
            records = decoder(payload, self.make_context(context, **overrides))
        except TdxError as e:
            raise e.with_context(msg_type=MessageType.label(frame.msg_type), msg_id=frame.msg_id)

        return DecodedResponse(frame=frame, payload=payload, records=records)
