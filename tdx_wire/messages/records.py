"""
Decoded payload records.

Records are immutable and owned by the caller. Prices are scaled
fixed-point integers in thousandths (``PRICE_SCALE``); use ``to_float``
to display them.
"""

import datetime
from dataclasses import dataclass, fields, is_dataclass, replace
from enum import Enum, IntEnum
from typing import Any, Iterator, Tuple

from ..formats.message_types import Exchange, KlineType


PRICE_SCALE = 1000


def to_float(price: int) -> float:
    """Convert a scaled price to a float in currency units."""
    return price / PRICE_SCALE


@dataclass(frozen=True)
class ConnectInfo:
    """Server banner returned by the handshake."""
    info: str


@dataclass(frozen=True)
class StockCode:
    """
    One entry of the instrument list.

    Attributes:
        code: Six-digit instrument number
        name: Display name (decoded from GBK)
        multiple: Lot multiple, normally 100
        decimal: Decimal places of the price, normally 2
        last_price: Previous close in currency units (meaningful for indices)
    """
    code: str
    name: str
    multiple: int
    decimal: int
    last_price: float


@dataclass(frozen=True)
class PriceLevel:
    """One depth slot. A zero slot means no quote at that depth."""
    price: int
    volume: int

    @property
    def is_empty(self) -> bool:
        return self.price == 0 and self.volume == 0


@dataclass(frozen=True)
class QuoteK:
    """Daily OHLC carried inside a quote."""
    last: int
    open: int
    high: int
    low: int
    close: int


@dataclass(frozen=True)
class Quote:
    """
    Five-level snapshot for one instrument.

    Attributes:
        exchange: Market the instrument trades on
        code: Six-digit instrument number
        k: Previous close and today's OHLC
        server_time: Server timestamp as sent (opaque digits)
        total_hand: Cumulative volume in lots
        intuition: Volume of the latest trade
        amount: Cumulative turnover in currency units
        inside_dish / outer_disc: Volume traded at bid / at ask
        bids / asks: Five depth levels each, best first
        rate: Price change speed in percent
    """
    exchange: Exchange
    code: str
    active1: int
    k: QuoteK
    server_time: str
    total_hand: int
    intuition: int
    amount: float
    inside_dish: int
    outer_disc: int
    bids: Tuple[PriceLevel, ...]
    asks: Tuple[PriceLevel, ...]
    rate: float
    active2: int

    @property
    def symbol(self) -> str:
        return f'{self.exchange.prefix}{self.code}'

    @property
    def price(self) -> int:
        return self.k.close

    @property
    def change(self) -> int:
        return self.k.close - self.k.last


@dataclass(frozen=True)
class KlineCache:
    """
    Decoder state threaded from bar to bar.

    Each bar's open is a delta from the previous bar's close, so the
    close has to be carried forward. A fresh cache starts from zero.
    """
    kline_type: KlineType
    is_index: bool = False
    previous_close: int = 0

    def advance(self, close: int) -> 'KlineCache':
        return replace(self, previous_close=close)


@dataclass(frozen=True)
class KlineBar:
    """
    One OHLC bar.

    Attributes:
        time: Bar time (15:00 for daily and longer bars)
        last: Close of the previous bar in this response
        volume: Shares (intraday bars are reported in lots and scaled)
        amount: Turnover, scaled like prices
        up_count / down_count: Advancers and decliners (index bars only)
    """
    time: datetime.datetime
    last: int
    open: int
    high: int
    low: int
    close: int
    volume: int
    amount: int
    up_count: int = 0
    down_count: int = 0


@dataclass(frozen=True)
class MinutePoint:
    """One point of the intraday price curve."""
    minute_of_day: int
    price: int
    volume: int

    @property
    def time(self) -> str:
        return f'{self.minute_of_day // 60:02d}:{self.minute_of_day % 60:02d}'


class TradeStatus(IntEnum):
    BUY = 0
    SELL = 1
    NEUTRAL = 2

    @classmethod
    def from_wire(cls, value: int) -> 'TradeStatus':
        if value == 0:
            return cls.BUY
        if value == 1:
            return cls.SELL
        return cls.NEUTRAL


@dataclass(frozen=True)
class Trade:
    """One tick. ``number`` (order count) is 0 for historical ticks."""
    time: datetime.datetime
    price: int
    volume: int
    status: TradeStatus
    number: int = 0


@dataclass(frozen=True)
class CallAuction:
    """
    One pre-open auction snapshot.

    ``flag`` is +1 when the unmatched volume sits on the bid side and -1
    when it sits on the ask side.
    """
    time: datetime.time
    price: int
    matched: int
    unmatched: int
    flag: int


GBBQ_CATEGORIES = {
    1: 'ex-rights/ex-dividend',
    2: 'bonus/rights shares listed',
    3: 'non-tradable shares listed',
    4: 'unknown capital change',
    5: 'share capital change',
    6: 'new share issue',
    7: 'share buyback',
    8: 'new issue listed',
    9: 'transferred rights shares listed',
    10: 'convertible bond listed',
    11: 'share split/consolidation',
    12: 'non-tradable share consolidation',
    13: 'call warrants granted',
    14: 'put warrants granted',
}


@dataclass(frozen=True)
class Gbbq:
    """
    Corporate action record.

    Field meaning depends on the category:
        1:       c1 dividend per 10 shares, c2 rights issue price,
                 c3 bonus shares per 10, c4 rights shares per 10
        11, 12:  c3 split/consolidation ratio
        13, 14:  c1 strike price, c3 warrants per 10 shares
        others:  c1/c2 tradable/total shares before,
                 c3/c4 tradable/total shares after
    """
    code: str
    date: datetime.date
    category: int
    c1: float
    c2: float
    c3: float
    c4: float

    @property
    def category_name(self) -> str:
        return GBBQ_CATEGORIES.get(self.category, 'unknown')

    @property
    def is_xrxd(self) -> bool:
        return self.category == 1

    @property
    def is_equity(self) -> bool:
        return self.category in (2, 3, 5, 7, 8, 9, 10)


@dataclass(frozen=True)
class ListResponse:
    """Records from one response, with the count field as sent."""
    count: int
    items: Tuple[Any, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]


def record_to_dict(value: Any) -> Any:
    """Convert records to JSON-ready structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: record_to_dict(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [record_to_dict(v) for v in value]
    if isinstance(value, bytes):
        return value.hex()
    return value
