"""
Instrument code helpers.

Codes are written as an exchange prefix plus six digits, e.g. ``sz000001``.
Bare six-digit codes get a prefix guessed from their leading digit.
"""

from typing import Tuple

from .core.errors import InvalidCode
from .formats.message_types import Exchange


CODE_WIDTH = 6


def add_prefix(code: str) -> str:
    """Return ``code`` with an exchange prefix, guessing one if missing."""
    code = code.strip().lower()
    if code[:2] in ('sh', 'sz', 'bj'):
        return code
    if code.startswith(('6', '9')):
        return f'sh{code}'
    if code.startswith(('0', '2', '3')):
        return f'sz{code}'
    if code.startswith(('4', '8')):
        return f'bj{code}'
    return f'sz{code}'


def split_code(code: str) -> Tuple[Exchange, str]:
    """
    Split ``sh600000`` into (Exchange.SH, '600000').

    Raises:
        InvalidCode: unknown prefix or number not six ASCII characters
    """
    normalized = code.strip().lower()
    exchange = Exchange.from_prefix(normalized[:2])
    if exchange is None:
        raise InvalidCode(code, {'reason': 'unknown exchange prefix'})

    number = normalized[2:]
    if len(number) != CODE_WIDTH or not number.isascii():
        raise InvalidCode(code, {'reason': f'expected {CODE_WIDTH} characters'})

    return exchange, number


def join_code(exchange: Exchange, number: str) -> str:
    return f'{Exchange(exchange).prefix}{number}'


def is_stock(code: str) -> bool:
    code = add_prefix(code)
    if len(code) < 8:
        return False
    prefix, number = code[:2], code[2:]
    if prefix == 'sh':
        return number.startswith('6')
    if prefix == 'sz':
        return number.startswith(('0', '3'))
    if prefix == 'bj':
        return number.startswith(('4', '8'))
    return False


def is_etf(code: str) -> bool:
    code = add_prefix(code)
    if len(code) < 8:
        return False
    prefix, number = code[:2], code[2:]
    if prefix == 'sh':
        return number.startswith(('51', '56', '58'))
    if prefix == 'sz':
        return number.startswith(('15', '16'))
    return False


def is_index(code: str) -> bool:
    """Index bars carry up/down counts, so Kline decoding depends on this."""
    code = add_prefix(code)
    if len(code) < 8:
        return False
    prefix, number = code[:2], code[2:]
    if prefix == 'sh':
        return number.startswith(('000', '880'))
    if prefix == 'sz':
        return number.startswith('399')
    if prefix == 'bj':
        return number.startswith('899')
    return False
