"""
Request/response session over a caller-supplied transport.

The transport is any callable taking request frame bytes and returning
one complete response frame. Session opens no sockets, keeps no timers
and never retries; wrap the transport for that.

Usage:
    session = Session(send_and_receive)
    session.connect()
    bars = session.get_kline_all('sz000001', KlineType.DAY)
"""

import datetime
import logging
from typing import Callable, List, Optional, Sequence

from ..codec.facade import DecodedResponse, TdxCodec
from ..codes import add_prefix, is_index as code_is_index
from ..core.errors import ResponseError, ResponseMismatch
from ..formats.message_types import Exchange, KlineType, MessageType
from ..messages.base import DecodeContext
from ..messages.listing import CODE_PAGE_SIZE
from ..messages.records import ConnectInfo, ListResponse
from ..streaming.sequence import u32_distance

logger = logging.getLogger(__name__)


Transport = Callable[[bytes], bytes]

_U16_LIMIT = 0x10000


class Session:
    """
    Drives TdxCodec over a transport and pages through long responses.

    Multi-page results are merged the way the server pages them: page 0
    holds the newest records, so each later (older) page is prepended to
    keep the merged list chronological.
    """

    def __init__(self, transport: Transport, codec: Optional[TdxCodec] = None):
        self.transport = transport
        self.codec = codec or TdxCodec()
        self.config = self.codec.config.session

        self.requests_sent = 0

    def call(
        self,
        kind: MessageType,
        context: Optional[DecodeContext] = None,
        **params,
    ) -> DecodedResponse:
        """
        Send one request and decode its response.

        Raises:
            ResponseMismatch: response answers a different request
            ResponseError: server set the error control byte
        """
        request = self.codec.encode_request(kind, **params)
        raw = self.transport(request.encode())
        self.requests_sent += 1

        frame = self.codec.parse_response(raw)

        if self.config.check_msg_id and frame.msg_id != request.msg_id:
            # negative distance: answer to an earlier request arriving late
            distance = u32_distance(request.msg_id, frame.msg_id)
            raise ResponseMismatch(
                context={
                    'expected': request.msg_id,
                    'actual': frame.msg_id,
                    'distance': distance,
                    'late': distance < 0,
                },
            )
        if frame.msg_type != request.msg_type:
            raise ResponseMismatch(
                context={
                    'expected_type': MessageType.label(request.msg_type),
                    'actual_type': MessageType.label(frame.msg_type),
                },
            )
        if not frame.is_success:
            raise ResponseError(
                context={'msg_id': frame.msg_id, 'control': f'0x{frame.control:02X}'},
            )

        return self.codec.decode_response(frame, context)

    def _page(self, fetch: Callable[[int, int], ListResponse], page_size: int, start: int,
              newest_first: bool) -> ListResponse:
        """Request pages until one comes back short."""
        items: List = []
        total = 0

        while True:
            page = fetch(start, page_size)
            total += page.count
            if newest_first:
                items = list(page.items) + items
            else:
                items.extend(page.items)

            logger.debug("page start=%d got %d (total %d)", start, page.count, total)

            if page.count < page_size:
                break
            start += page_size
            if start >= _U16_LIMIT:
                logger.warning("stopping at start=%d, offset no longer fits u16", start)
                break

        return ListResponse(count=total, items=tuple(items))

    # =========================================================================
    # Session
    # =========================================================================

    def connect(self) -> ConnectInfo:
        info = self.call(MessageType.CONNECT).records
        logger.info("connected: %s", info.info)
        return info

    def heartbeat(self) -> None:
        self.call(MessageType.HEARTBEAT)

    # =========================================================================
    # Instruments
    # =========================================================================

    def get_count(self, exchange: Exchange) -> int:
        return self.call(MessageType.COUNT, exchange=exchange).records

    def get_codes(self, exchange: Exchange, start: int = 0) -> ListResponse:
        return self.call(MessageType.CODE_LIST, exchange=exchange, start=start).records

    def get_codes_all(self, exchange: Exchange, start: int = 0) -> ListResponse:
        return self._page(
            lambda s, _: self.get_codes(exchange, s),
            CODE_PAGE_SIZE,
            start,
            newest_first=False,
        )

    def get_quote(self, codes: Sequence[str]) -> ListResponse:
        if isinstance(codes, str):
            codes = [codes]
        return self.call(MessageType.QUOTE, codes=[add_prefix(c) for c in codes]).records

    # =========================================================================
    # Bars
    # =========================================================================

    def get_kline(self, code: str, kline_type: KlineType, start: int = 0,
                  count: Optional[int] = None,
                  is_index: Optional[bool] = None) -> ListResponse:
        """
        Fetch one page of bars.

        ``is_index`` forces the index bar layout; by default it follows
        the code prefix rules.
        """
        code = add_prefix(code)
        kline_type = KlineType(kline_type)
        if is_index is None:
            is_index = code_is_index(code)
        context = self.codec.make_context(kline_type=kline_type, is_index=is_index)
        if count is None:
            count = self.config.kline_page_size
        return self.call(
            MessageType.KLINE, context,
            code=code, kline_type=kline_type, start=start, count=count,
        ).records

    def get_kline_all(self, code: str, kline_type: KlineType, start: int = 0,
                      is_index: Optional[bool] = None) -> ListResponse:
        return self._page(
            lambda s, n: self.get_kline(code, kline_type, s, n, is_index),
            self.config.kline_page_size,
            start,
            newest_first=True,
        )

    def get_minute(self, code: str) -> ListResponse:
        return self.call(MessageType.MINUTE, code=add_prefix(code)).records

    def get_history_minute(self, code: str, date) -> ListResponse:
        return self.call(MessageType.HISTORY_MINUTE, code=add_prefix(code), date=date).records

    # =========================================================================
    # Ticks
    # =========================================================================

    def get_trade(self, code: str, start: int = 0, count: Optional[int] = None,
                  trade_date: Optional[datetime.date] = None) -> ListResponse:
        context = self.codec.make_context(trade_date=trade_date or datetime.date.today())
        if count is None:
            count = self.config.trade_page_size
        return self.call(
            MessageType.TRADE, context,
            code=add_prefix(code), start=start, count=count,
        ).records

    def get_trade_all(self, code: str, start: int = 0,
                      trade_date: Optional[datetime.date] = None) -> ListResponse:
        return self._page(
            lambda s, n: self.get_trade(code, s, n, trade_date),
            self.config.trade_page_size,
            start,
            newest_first=True,
        )

    def get_history_trade(self, code: str, date: datetime.date, start: int = 0,
                          count: Optional[int] = None) -> ListResponse:
        context = self.codec.make_context(trade_date=_as_date(date))
        if count is None:
            count = self.config.history_trade_page_size
        return self.call(
            MessageType.HISTORY_TRADE, context,
            code=add_prefix(code), date=date, start=start, count=count,
        ).records

    def get_history_trade_all(self, code: str, date: datetime.date, start: int = 0) -> ListResponse:
        return self._page(
            lambda s, n: self.get_history_trade(code, date, s, n),
            self.config.history_trade_page_size,
            start,
            newest_first=True,
        )

    # =========================================================================
    # Other
    # =========================================================================

    def get_call_auction(self, code: str) -> ListResponse:
        return self.call(MessageType.CALL_AUCTION, code=add_prefix(code)).records

    def get_gbbq(self, code: str) -> ListResponse:
        return self.call(MessageType.GBBQ, code=add_prefix(code)).records


def _as_date(value) -> datetime.date:
    """Accept a date or a YYYYMMDD int/str."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.datetime.strptime(str(value), '%Y%m%d').date()
