"""
Request id sequencing with proper u32 wrap handling.

CRITICAL: Python integers don't wrap! We must explicitly mask to u32.

This module provides:
- u32(): Constrain value to u32 range
- u32_distance(): Signed distance in u32 space (handles wrap)
- MessageIdSequencer: Thread-safe source of request ids

Example:
    >>> seq = MessageIdSequencer(start=0xFFFFFFFF)
    >>> seq.next(), seq.next()
    (4294967295, 0)
"""

import threading
from typing import Optional


# u32 constants
U32_MAX = 0xFFFFFFFF           # 4,294,967,295
U32_HALF = 0x80000000          # 2,147,483,648 (for signed interpretation)
U32_MODULUS = U32_MAX + 1      # 2^32


def u32(val: int) -> int:
    """
    Constrain value to u32 range [0, 2^32-1].

    Examples:
        u32(0xFFFFFFFF) = 0xFFFFFFFF
        u32(0x100000000) = 0          # Wrapped!
        u32(-1) = 0xFFFFFFFF
    """
    return val & U32_MAX


def u32_add(a: int, b: int) -> int:
    """Add two values in u32 space with wrap."""
    return (a + b) & U32_MAX


def u32_distance(from_id: int, to_id: int) -> int:
    """
    Signed distance from from_id to to_id in u32 space.

    Returns:
        Positive: to_id is ahead
        Zero: same id
        Negative: to_id is behind (e.g. a late answer to an older request)

    Examples:
        u32_distance(5, 10) = 5
        u32_distance(10, 5) = -5
        u32_distance(0xFFFFFFFE, 1) = 3  # Wrap
    """
    diff = u32(u32(to_id) - u32(from_id))
    if diff >= U32_HALF:
        return diff - U32_MODULUS
    return diff


class MessageIdSequencer:
    """
    Process-wide request id counter.

    Ids are unique within a session, not globally. The counter wraps at
    the u32 boundary and is safe to share between threads.

    Usage:
        seq = MessageIdSequencer(start=1)
        msg_id = seq.next()
    """

    def __init__(self, start: int = 1):
        self._next = u32(start)
        self._issued = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return a fresh id and advance."""
        with self._lock:
            value = self._next
            self._next = u32_add(value, 1)
            self._issued += 1
            return value

    def peek(self) -> int:
        """Id the next call will return."""
        with self._lock:
            return self._next

    def reset(self, start: Optional[int] = None) -> None:
        """Restart the counter (new connection)."""
        with self._lock:
            if start is not None:
                self._next = u32(start)
            self._issued = 0

    @property
    def issued(self) -> int:
        """Ids handed out since construction or the last reset."""
        return self._issued

    def __repr__(self) -> str:
        return f"MessageIdSequencer(next={self._next}, issued={self._issued})"
