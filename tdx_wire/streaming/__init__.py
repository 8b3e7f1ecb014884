"""Request id sequencing."""

from .sequence import MessageIdSequencer, u32, u32_add, u32_distance

__all__ = [
    'MessageIdSequencer',
    'u32',
    'u32_add',
    'u32_distance',
]
