"""
Protocol constants.

Message types are the 16-bit codes carried in every frame header:
- CONNECT / HEARTBEAT: session handshake and liveness
- COUNT / CODE_LIST: instrument universe
- QUOTE: five-level snapshot quotes
- KLINE / MINUTE / HISTORY_MINUTE: bars and intraday curves
- TRADE / HISTORY_TRADE: tick-by-tick trades
- CALL_AUCTION: pre-open auction
- GBBQ: corporate actions (ex-rights / ex-dividend and share capital)
"""

from enum import IntEnum
from typing import Optional


class MessageType(IntEnum):
    """Message type codes."""

    CONNECT = 0x000D
    HEARTBEAT = 0x0004
    COUNT = 0x044E
    CODE_LIST = 0x0450
    QUOTE = 0x053E
    KLINE = 0x052D
    MINUTE = 0x051D
    TRADE = 0x0FC5
    HISTORY_MINUTE = 0x0FB4
    HISTORY_TRADE = 0x0FB5
    CALL_AUCTION = 0x056A
    GBBQ = 0x000F

    @classmethod
    def lookup(cls, type_value: int) -> Optional['MessageType']:
        """Return the member for ``type_value`` or None if unknown."""
        try:
            return cls(type_value)
        except ValueError:
            return None

    @classmethod
    def label(cls, type_value: int) -> str:
        """Get human-readable name for a type code."""
        member = cls.lookup(type_value)
        if member is None:
            return f'UNKNOWN(0x{type_value:04X})'
        return member.name

    @classmethod
    def is_valid(cls, type_value: int) -> bool:
        """Check if type value is known."""
        return cls.lookup(type_value) is not None


class Exchange(IntEnum):
    """Market identifiers."""

    SZ = 0
    SH = 1
    BJ = 2

    @property
    def prefix(self) -> str:
        return self.name.lower()

    @classmethod
    def from_prefix(cls, prefix: str) -> Optional['Exchange']:
        return {'sz': cls.SZ, 'sh': cls.SH, 'bj': cls.BJ}.get(prefix.lower())


class KlineType(IntEnum):
    """Bar periods accepted by the KLINE request."""

    MINUTE5 = 0
    MINUTE15 = 1
    MINUTE30 = 2
    MINUTE60 = 3
    DAY2 = 4
    WEEK = 5
    MONTH = 6
    MINUTE = 7
    MINUTE2 = 8
    DAY = 9
    QUARTER = 10
    YEAR = 11

    @property
    def is_intraday(self) -> bool:
        """Intraday bars pack date + minute-of-day and scale volume by 1/100."""
        return self in _INTRADAY_KLINES


_INTRADAY_KLINES = frozenset({
    KlineType.MINUTE5,
    KlineType.MINUTE15,
    KlineType.MINUTE30,
    KlineType.MINUTE60,
    KlineType.DAY2,
    KlineType.MINUTE,
    KlineType.MINUTE2,
})


# Frame constants
REQUEST_PREFIX = 0x0C
RESPONSE_PREFIX = b'\xB1\xCB\x74\x00'
RESPONSE_PREFIX_LE = 0x0074CBB1   # RESPONSE_PREFIX read as u32 little-endian

CONTROL_REQUEST = 0x01
CONTROL_SUCCESS = 0x1C
CONTROL_ERROR = 0x0C
CONTROL_SUCCESS_BIT = 0x10
